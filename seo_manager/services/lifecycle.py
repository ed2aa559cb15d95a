"""Activation, deactivation and uninstall of the SEO settings."""

from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

from seo_manager.domain.metadata import is_enabled
from seo_manager.extensions import db
from seo_manager.models import ContentSeoOverride
from seo_manager.settings_store import SettingsStore
from seo_manager.utils.log import safe_log


def activate(store: SettingsStore) -> None:
    """Create the settings table and fill in defaults. Safe to repeat."""
    store.ensure_initialized()
    safe_log('info', 'SEO settings activated')


def deactivate(store: SettingsStore) -> None:
    store.clear_cache()
    safe_log('info', 'SEO settings deactivated')


def uninstall(store: SettingsStore) -> bool:
    """Remove all persisted SEO data when ``cleanup_on_uninstall`` is "1".

    Returns True when the cleanup ran. Stored data is left untouched
    otherwise.
    """
    if not is_enabled(store.get('cleanup_on_uninstall')):
        safe_log('info', 'Uninstall: cleanup_on_uninstall is off, keeping SEO data')
        return False

    try:
        removed = db.session.query(ContentSeoOverride).delete()
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        safe_log('error', 'Uninstall: could not delete content overrides: %s', exc)
        return False

    if not store.drop():
        return False
    store.clear_cache()
    safe_log('warning', 'Uninstall: dropped settings table and %d content overrides', removed)
    return True
