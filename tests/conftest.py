"""Test configuration and fixtures."""

import os
import tempfile
from pathlib import Path

import pytest

from seo_manager import create_app
from seo_manager.extensions import db as _db
from seo_manager.models import ContentItem, User


ADMIN_USERNAME = 'admin'
ADMIN_PASSWORD = 'correct-horse'


@pytest.fixture
def app():
    """Create application for testing."""
    db_fd, db_path = tempfile.mkstemp(suffix='.db')

    app = create_app('testing', {
        'SQLALCHEMY_DATABASE_URI': f'sqlite:///{db_path}',
        'SECRET_KEY': 'test-secret-key',
        'SERVER_NAME': 'localhost',
        'SITE_NAME': 'Test Site',
        'SITE_DESCRIPTION': 'A site used in tests.',
        'SITE_URL': 'http://localhost',
        'SITE_LOCALE': 'en_US',
    })

    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()

    os.close(db_fd)
    Path(db_path).unlink(missing_ok=True)


@pytest.fixture
def client(app):
    """Test client for making requests."""
    return app.test_client()


@pytest.fixture
def runner(app):
    """CLI test runner."""
    return app.test_cli_runner()


@pytest.fixture
def db(app):
    """Database fixture."""
    return _db


@pytest.fixture
def author(db):
    user = User(username='jane', display_name='Jane Writer', role=User.ROLE_AUTHOR)
    user.set_password('secret')
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def make_item(db, author):
    """Factory for published content items."""

    def _make(title, content_type=ContentItem.TYPE_POST, updated_at=None, **kwargs):
        kwargs.setdefault('status', ContentItem.STATUS_PUBLISHED)
        kwargs.setdefault('content', '<p>Body text.</p>')
        item = ContentItem(title=title, content_type=content_type, author_id=author.id, **kwargs)
        if updated_at is not None:
            item.updated_at = updated_at
            item.published_at = kwargs.get('published_at') or updated_at
        db.session.add(item)
        db.session.commit()
        return item

    return _make


@pytest.fixture
def admin_client(client, db):
    """Test client logged in as an administrator."""
    admin = User(username=ADMIN_USERNAME, email='admin@example.com', role=User.ROLE_ADMIN)
    admin.set_password(ADMIN_PASSWORD)
    db.session.add(admin)
    db.session.commit()

    resp = client.post('/admin/login', data={
        'username': ADMIN_USERNAME,
        'password': ADMIN_PASSWORD,
    })
    assert resp.status_code == 302
    return client
