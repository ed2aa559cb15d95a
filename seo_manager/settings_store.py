"""Key/value settings persistence.

Settings live in the ``seoog_settings`` table, one row per key, with values
JSON-encoded so strings, "1"/"0" flags and lists round-trip unchanged.

A store instance keeps a read-through cache of the whole table. Use
:func:`get_settings_store` inside a request: it binds one store to
``flask.g`` so the cache lives exactly as long as the request.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Mapping, Optional

from flask import current_app, g
from sqlalchemy import inspect
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from seo_manager.extensions import db
from seo_manager.models import Setting
from seo_manager.utils.log import safe_log
from seo_manager.utils.media import join_site_url


SETTING_KEYS = (
    'og_site_name',
    'og_default_image',
    'og_default_type',
    'og_twitter_card',
    'og_twitter_site',
    'seo_default_description',
    'seo_enable_jsonld',
    'sitemap_enable',
    'sitemap_post_types',
    'sitemap_exclude_ids',
    'robots_txt',
    'cleanup_on_uninstall',
)

OG_TYPES = ('article', 'website')
TWITTER_CARDS = ('summary', 'summary_large_image')

_MISSING = object()


def default_robots_txt(site_url: str) -> str:
    return (
        "User-agent: *\n"
        "Disallow: /admin/\n"
        "\n"
        f"Sitemap: {join_site_url(site_url, '/sitemap.xml')}"
    )


def default_settings(site_name: str = '', site_description: str = '', site_url: str = '') -> Dict[str, Any]:
    """Full default set; site-derived values come from the host site."""
    return {
        'og_site_name': site_name,
        'og_default_image': '',
        'og_default_type': 'article',
        'og_twitter_card': 'summary_large_image',
        'og_twitter_site': '',
        'seo_default_description': site_description,
        'seo_enable_jsonld': '1',
        'sitemap_enable': '1',
        'sitemap_post_types': ['post', 'page'],
        'sitemap_exclude_ids': [],
        'robots_txt': default_robots_txt(site_url),
        'cleanup_on_uninstall': '0',
    }


def default_settings_for_app(app) -> Dict[str, Any]:
    return default_settings(
        site_name=app.config.get('SITE_NAME', ''),
        site_description=app.config.get('SITE_DESCRIPTION', ''),
        site_url=app.config.get('SITE_URL', ''),
    )


def _encode(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


def _decode(raw: Optional[str]) -> Any:
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        # Rows written by hand (e.g. plain robots text) are kept as strings.
        return raw


class SettingsStore:
    """Settings persistence with a read-through cache.

    Reads never raise: a failing query is logged and the defaults are used.
    Writes return ``False`` on failure and always invalidate the cache.
    """

    def __init__(self, defaults: Optional[Mapping[str, Any]] = None, session=None):
        self._defaults: Dict[str, Any] = dict(defaults if defaults is not None else default_settings())
        self._session = session
        self._cache: Optional[Dict[str, Any]] = None

    @property
    def session(self):
        return self._session if self._session is not None else db.session

    @property
    def defaults(self) -> Dict[str, Any]:
        return dict(self._defaults)

    def clear_cache(self) -> None:
        self._cache = None

    def _stored(self) -> Dict[str, Any]:
        """Raw stored values, cached until the next write."""
        if self._cache is None:
            try:
                rows = self.session.query(Setting.setting_key, Setting.setting_value).all()
            except SQLAlchemyError as exc:
                self.session.rollback()
                safe_log('error', 'Settings read failed, using defaults: %s', exc)
                return {}
            self._cache = {key: _decode(value) for key, value in rows}
        return self._cache

    def get_all(self) -> Dict[str, Any]:
        """Defaults overlaid with every stored value."""
        merged = dict(self._defaults)
        merged.update(self._stored())
        return merged

    def get(self, key: str, default: Any = _MISSING) -> Any:
        stored = self._stored()
        if key in stored:
            return stored[key]
        if default is not _MISSING:
            return default
        return self._defaults.get(key)

    def _upsert(self, key: str, value: Any) -> None:
        row = self.session.query(Setting).filter_by(setting_key=key).first()
        if row is None:
            self.session.add(Setting(setting_key=key, setting_value=_encode(value)))
        else:
            row.setting_value = _encode(value)

    def save(self, key: str, value: Any) -> bool:
        return self.save_many({key: value})

    def save_many(self, values: Mapping[str, Any]) -> bool:
        """Upsert several keys in one transaction."""
        try:
            for key, value in values.items():
                self._upsert(key, value)
            self.session.commit()
        except IntegrityError:
            # Another request inserted the same key first; last writer wins.
            self.session.rollback()
            try:
                for key, value in values.items():
                    self._upsert(key, value)
                self.session.commit()
            except SQLAlchemyError as exc:
                self.session.rollback()
                safe_log('error', 'Settings save failed: %s', exc)
                return False
        except SQLAlchemyError as exc:
            self.session.rollback()
            safe_log('error', 'Settings save failed: %s', exc)
            return False
        finally:
            self.clear_cache()
        return True

    def delete(self, key: str) -> bool:
        try:
            self.session.query(Setting).filter_by(setting_key=key).delete()
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            safe_log('error', 'Settings delete failed for %s: %s', key, exc)
            return False
        finally:
            self.clear_cache()
        return True

    def ensure_initialized(self) -> None:
        """Create the table if needed and store defaults for absent keys.

        Idempotent: existing values are never overwritten.
        """
        engine = self.session.get_bind()
        Setting.__table__.create(bind=engine, checkfirst=True)
        existing = set(key for (key,) in self.session.query(Setting.setting_key).all())
        missing = {key: value for key, value in self._defaults.items() if key not in existing}
        if missing:
            for key, value in missing.items():
                self.session.add(Setting(setting_key=key, setting_value=_encode(value)))
            self.session.commit()
            safe_log('info', 'Initialized %d default settings', len(missing))
        self.clear_cache()

    def table_exists(self) -> bool:
        try:
            return inspect(self.session.get_bind()).has_table(Setting.__tablename__)
        except SQLAlchemyError:
            return False

    def drop(self) -> bool:
        """Drop the settings table. Used only by uninstall."""
        try:
            self.session.commit()
            Setting.__table__.drop(bind=self.session.get_bind(), checkfirst=True)
        except SQLAlchemyError as exc:
            self.session.rollback()
            safe_log('error', 'Dropping settings table failed: %s', exc)
            return False
        finally:
            self.clear_cache()
        return True


def get_settings_store() -> SettingsStore:
    """Request-scoped store bound to ``flask.g``."""
    store = g.get('seo_settings_store')
    if store is None:
        store = SettingsStore(defaults=default_settings_for_app(current_app))
        g.seo_settings_store = store
    return store
