"""
Database Models for the SEO & Open Graph Manager

This module defines all database models using SQLAlchemy ORM.
Models include User, Setting, ContentItem and ContentSeoOverride.
"""

from datetime import datetime

from flask_login import UserMixin
from slugify import slugify
from werkzeug.security import generate_password_hash, check_password_hash

from seo_manager.extensions import db, login_manager


@login_manager.user_loader
def load_user(user_id):
    """Load user by ID for Flask-Login"""
    try:
        if user_id is None:
            return None
        return db.session.get(User, int(user_id))
    except Exception:
        try:
            db.session.rollback()
        except Exception:
            pass
        return None


class User(UserMixin, db.Model):
    """Site user: administrators and content authors"""

    __tablename__ = 'users'

    ROLE_ADMIN = 'superadmin'
    ROLE_AUTHOR = 'author'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False, index=True)
    email = db.Column(db.String(255), unique=True, index=True)
    display_name = db.Column(db.String(150))
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(50), nullable=False, default=ROLE_AUTHOR)
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    last_login = db.Column(db.DateTime)

    content_items = db.relationship('ContentItem', backref='author', lazy='dynamic')

    def set_password(self, password):
        """Hash and set user password."""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        """Verify password against stored hash."""
        if not self.password_hash:
            return False
        try:
            return check_password_hash(self.password_hash, password)
        except Exception:
            return False

    @property
    def is_admin(self):
        return self.role == self.ROLE_ADMIN

    @property
    def public_name(self):
        """Name shown as the author of content."""
        return (self.display_name or '').strip() or self.username

    def __repr__(self):
        return f'<User {self.username}>'


class Setting(db.Model):
    """Key/value plugin setting. Values are JSON-encoded text."""

    __tablename__ = 'seoog_settings'

    id = db.Column(db.Integer, primary_key=True)
    setting_key = db.Column(db.String(191), unique=True, nullable=False)
    setting_value = db.Column(db.Text)

    def __repr__(self):
        return f'<Setting {self.setting_key}>'


class ContentItem(db.Model):
    """A published or draft document (post, page or any other type)."""

    __tablename__ = 'content_items'

    STATUS_DRAFT = 'draft'
    STATUS_PUBLISHED = 'published'

    TYPE_POST = 'post'
    TYPE_PAGE = 'page'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    slug = db.Column(db.String(200), nullable=False, index=True)
    content = db.Column(db.Text, nullable=False, default='')
    excerpt = db.Column(db.Text)
    content_type = db.Column(db.String(40), nullable=False, default=TYPE_POST, index=True)
    status = db.Column(db.String(20), nullable=False, default=STATUS_DRAFT, index=True)
    featured_image = db.Column(db.String(600))
    author_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='SET NULL'), index=True)
    published_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, index=True)

    seo_override = db.relationship(
        'ContentSeoOverride',
        backref='content_item',
        uselist=False,
        cascade='all, delete-orphan',
        lazy='joined',
    )

    __table_args__ = (
        db.UniqueConstraint('content_type', 'slug', name='uq_content_items_type_slug'),
    )

    def __init__(self, **kwargs):
        super(ContentItem, self).__init__(**kwargs)
        if not self.slug and self.title:
            self.slug = slugify(self.title, max_length=100)

    @property
    def is_published(self):
        return self.status == self.STATUS_PUBLISHED

    @property
    def path(self):
        """Site-relative permalink path."""
        if self.content_type == self.TYPE_PAGE:
            return f'/{self.slug}'
        return f'/{self.content_type}/{self.slug}'

    def __repr__(self):
        return f'<ContentItem {self.content_type}:{self.slug}>'


class ContentSeoOverride(db.Model):
    """Per-content Open Graph / SEO overrides. Every field is optional."""

    __tablename__ = 'content_seo_overrides'

    FIELDS = ('og_title', 'og_description', 'og_image', 'og_type', 'seo_description')

    id = db.Column(db.Integer, primary_key=True)
    content_id = db.Column(
        db.Integer,
        db.ForeignKey('content_items.id', ondelete='CASCADE'),
        unique=True,
        nullable=False,
    )
    og_title = db.Column(db.String(300))
    og_description = db.Column(db.Text)
    og_image = db.Column(db.String(600))
    og_type = db.Column(db.String(20))
    seo_description = db.Column(db.Text)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def as_dict(self):
        return {field: getattr(self, field) for field in self.FIELDS}

    @property
    def is_empty(self):
        return not any((value or '').strip() for value in self.as_dict().values())

    def __repr__(self):
        return f'<ContentSeoOverride content={self.content_id}>'
