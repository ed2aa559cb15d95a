"""
Flask Application Factory

This module implements the application factory pattern for creating
Flask application instances with different configurations.
"""

import os

from flask import Flask, render_template
from sqlalchemy.exc import SQLAlchemyError

from seo_manager.config import config
from seo_manager.extensions import db, limiter, login_manager, migrate
from seo_manager.utils.log import safe_log


def _startup_settings(app) -> None:
    """Lazy schema creation for the settings table (non-fatal).

    Only the settings table is created here; everything else is owned by
    migrations.
    """
    if os.environ.get('SKIP_STARTUP_DB_TASKS') == '1':
        app.logger.warning('Skipping startup DB tasks due to SKIP_STARTUP_DB_TASKS=1')
        return

    from seo_manager.services.lifecycle import activate
    from seo_manager.settings_store import get_settings_store

    with app.app_context():
        try:
            activate(get_settings_store())
        except SQLAlchemyError as exc:
            db.session.rollback()
            app.logger.error('Settings initialization failed (continuing): %s', exc, exc_info=True)


def create_app(config_name='default', overrides=None):
    """
    Application factory function

    Args:
        config_name (str): Configuration name ('development', 'production', 'testing')
        overrides (dict): Extra config values applied last (used by tests)

    Returns:
        Flask: Configured Flask application instance
    """

    config_name = (config_name or 'default').lower()

    app = Flask(__name__)

    # Instantiate the config object so @property values (like
    # ProductionConfig.SQLALCHEMY_DATABASE_URI) are evaluated.
    cfg = config.get(config_name) or config['default']
    cfg_obj = cfg() if isinstance(cfg, type) else cfg
    app.config.from_object(cfg_obj)
    if overrides:
        app.config.update(overrides)

    if config_name == 'production':
        if not app.config.get('SECRET_KEY'):
            app.logger.error('Production requires SECRET_KEY to be set via environment variable')
            raise RuntimeError('Missing SECRET_KEY in production')
        db_uri = app.config.get('SQLALCHEMY_DATABASE_URI')
        if not db_uri:
            app.logger.error('Production requires DATABASE_URL (SQLALCHEMY_DATABASE_URI) to be set')
            raise RuntimeError('Missing DATABASE_URL in production')
    elif not app.config.get('SECRET_KEY'):
        app.config['SECRET_KEY'] = os.urandom(32)
        app.logger.warning('SECRET_KEY was missing; generated an ephemeral key for this process.')

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    limiter.init_app(app)

    # Importing models registers them with the metadata.
    from seo_manager import models  # noqa: F401

    # Production schema changes go through `flask db upgrade`.
    enable_startup_db_tasks = os.environ.get('ENABLE_STARTUP_DB_TASKS') == '1'
    if (config_name not in ('production', 'testing')) or enable_startup_db_tasks:
        _startup_settings(app)

    register_blueprints(app)
    register_error_handlers(app)
    register_template_processors(app)
    register_shell_context(app)
    register_cli_commands(app)

    @app.after_request
    def _apply_security_headers(response):
        """Apply safe security headers without affecting app logic."""
        response.headers.setdefault('X-Frame-Options', 'DENY')
        response.headers.setdefault('X-Content-Type-Options', 'nosniff')
        response.headers.setdefault('Referrer-Policy', 'strict-origin-when-cross-origin')
        return response

    @app.teardown_appcontext
    def _cleanup_appcontext(exc):
        """Ensure scoped sessions are removed when the app context ends."""
        try:
            db.session.remove()
        except Exception as remove_exc:
            safe_log('error', 'Session remove during appcontext teardown failed: %s', remove_exc)
        return None

    @app.route('/favicon.ico')
    def favicon_placeholder():  # pragma: no cover - trivial route
        return ('', 204)

    return app


def register_blueprints(app):
    """Register Flask blueprints"""

    from seo_manager.routes.main import main_bp
    from seo_manager.routes.admin import admin_bp
    from seo_manager.routes.health import health_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(admin_bp, url_prefix='/admin')
    app.register_blueprint(health_bp)


def register_error_handlers(app):
    """Register error handlers for common HTTP errors"""

    @app.errorhandler(404)
    def not_found_error(error):
        return render_template('errors/404.html', error=error), 404

    @app.errorhandler(500)
    def internal_error(error):
        app.logger.exception('Unhandled exception (500): %s', error)
        db.session.rollback()
        return render_template('errors/500.html'), 500

    @app.errorhandler(503)
    def unavailable_error(error):
        db.session.rollback()
        return render_template('errors/503.html', error=error), 503


def register_template_processors(app):
    """Register context processors for templates"""

    @app.context_processor
    def inject_site_config():
        """Inject site identity and the SEO head block into all templates.

        ``seo_head`` is a callable so pages that never reach <head>
        (redirects, fragments) do not pay for metadata resolution.
        """
        from seo_manager.routes.main import seo_head

        return {
            'site_name': app.config['SITE_NAME'],
            'site_description': app.config['SITE_DESCRIPTION'],
            'site_url': app.config['SITE_URL'],
            'site_locale': app.config.get('SITE_LOCALE', 'en_US'),
            'seo_head': seo_head,
        }


def register_shell_context(app):
    """Register shell context for Flask CLI"""

    @app.shell_context_processor
    def make_shell_context():
        from seo_manager.models import ContentItem, ContentSeoOverride, Setting, User
        from seo_manager.settings_store import get_settings_store

        return {
            'db': db,
            'User': User,
            'Setting': Setting,
            'ContentItem': ContentItem,
            'ContentSeoOverride': ContentSeoOverride,
            'get_settings_store': get_settings_store,
        }


def register_cli_commands(app):
    """Register custom Flask CLI commands"""

    from seo_manager.cli import create_admin_command, seed_demo_content_command, seo_cli

    app.cli.add_command(seo_cli)
    app.cli.add_command(create_admin_command)
    app.cli.add_command(seed_demo_content_command)
