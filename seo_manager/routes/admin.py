"""Admin routes: login, site-wide SEO settings and per-content overrides."""

from datetime import datetime
from functools import wraps
from urllib.parse import urlparse

from flask import Blueprint, current_app, flash, redirect, render_template, request, url_for
from flask_login import current_user, login_user, logout_user
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from seo_manager.extensions import db, limiter
from seo_manager.forms import ContentSeoForm, LoginForm, SettingsForm
from seo_manager.models import ContentItem, ContentSeoOverride, User
from seo_manager.settings_store import get_settings_store

admin_bp = Blueprint('admin', __name__)


def admin_required(f):
    """Decorator to require admin privileges"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated or current_user.role != User.ROLE_ADMIN:
            flash('Administrator login required.', 'warning')
            return redirect(url_for('admin.admin_login', next=request.url))
        return f(*args, **kwargs)
    return decorated_function


def _login_rate_limit():
    return current_app.config.get('LOGIN_RATE_LIMIT', '10 per minute')


@admin_bp.route('/login', methods=['GET', 'POST'])
@limiter.limit(_login_rate_limit, methods=['POST'])
def admin_login():
    """Administrator login endpoint."""

    if current_user.is_authenticated and current_user.role == User.ROLE_ADMIN:
        return redirect(url_for('admin.settings'))

    form = LoginForm()
    if form.validate_on_submit():
        username = (form.username.data or '').strip()
        try:
            user = User.query.filter(
                or_(User.username == username, User.email == username)
            ).first()
        except SQLAlchemyError as exc:
            db.session.rollback()
            current_app.logger.error('Admin login query failed: %s', exc, exc_info=True)
            flash('Database temporarily unavailable. Please try again shortly.', 'danger')
            return render_template('admin/login.html', form=form)

        if not user or user.role != User.ROLE_ADMIN or not user.check_password(form.password.data):
            flash('Invalid credentials.', 'danger')
            return render_template('admin/login.html', form=form)

        if not user.is_active:
            flash('This administrator account is disabled.', 'danger')
            return render_template('admin/login.html', form=form)

        login_user(user, remember=True)
        try:
            user.last_login = datetime.utcnow()
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            current_app.logger.exception('Failed to record last login for %s', user.username)

        next_page = request.args.get('next')
        if not next_page or urlparse(next_page).netloc:
            next_page = url_for('admin.settings')
        return redirect(next_page)

    return render_template('admin/login.html', form=form)


@admin_bp.route('/logout')
def admin_logout():
    logout_user()
    flash('You have been logged out.', 'info')
    return redirect(url_for('admin.admin_login'))


@admin_bp.route('/')
@admin_required
def admin_index():
    return redirect(url_for('admin.settings'))


def _known_content_types(settings):
    try:
        rows = db.session.query(ContentItem.content_type).distinct().all()
        types = [row[0] for row in rows]
    except SQLAlchemyError:
        db.session.rollback()
        types = []
    return types + list(settings.get('sitemap_post_types') or [])


@admin_bp.route('/settings', methods=['GET', 'POST'])
@admin_required
def settings():
    """Edit every site-wide SEO setting."""

    store = get_settings_store()
    current = store.get_all()
    form = SettingsForm(content_types=_known_content_types(current))

    if request.method == 'GET':
        form.populate(current)
        form.active_tab.data = request.args.get('tab', 'opengraph')

    if form.validate_on_submit():
        if store.save_many(form.to_settings()):
            flash('Settings saved successfully.', 'success')
        else:
            flash('Settings could not be saved. Please try again.', 'danger')
        return redirect(url_for('admin.settings', tab=form.tab, **{'settings-updated': 'true'}))

    return render_template('admin/settings.html', form=form, active_tab=form.tab)


@admin_bp.route('/content')
@admin_required
def content_list():
    items = ContentItem.query.order_by(ContentItem.updated_at.desc()).all()
    return render_template('admin/content_list.html', items=items)


@admin_bp.route('/content/<int:content_id>/seo', methods=['GET', 'POST'])
@admin_required
def content_seo(content_id):
    """Edit the Open Graph / SEO overrides of one content item."""

    item = db.session.get(ContentItem, content_id)
    if item is None:
        flash('Content not found.', 'warning')
        return redirect(url_for('admin.content_list'))

    form = ContentSeoForm()
    if request.method == 'GET':
        form.populate(item.seo_override)

    if form.validate_on_submit():
        values = form.to_overrides()
        override = item.seo_override
        try:
            if not any(values.values()):
                if override is not None:
                    db.session.delete(override)
            else:
                if override is None:
                    override = ContentSeoOverride(content_id=item.id)
                    db.session.add(override)
                for field, value in values.items():
                    setattr(override, field, value)
            db.session.commit()
            flash('SEO overrides saved.', 'success')
        except SQLAlchemyError as exc:
            db.session.rollback()
            current_app.logger.error('Saving SEO overrides for %s failed: %s', item.id, exc)
            flash('SEO overrides could not be saved.', 'danger')
        return redirect(url_for('admin.content_seo', content_id=item.id))

    return render_template('admin/content_seo.html', form=form, item=item)
