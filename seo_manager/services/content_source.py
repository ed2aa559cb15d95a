"""Read-only access to the site's content for the SEO engines.

The metadata resolver and the sitemap generator never touch the ORM
directly; they receive plain values built here.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from seo_manager.domain.metadata import ContentOverrides, ContentView, SiteInfo
from seo_manager.extensions import db
from seo_manager.models import ContentItem
from seo_manager.utils.media import featured_image_url, join_site_url, site_url


class ContentSourceError(RuntimeError):
    """The content repository could not be read."""


@dataclass(frozen=True)
class SitemapRecord:
    id: int
    loc: str
    modified_at: Optional[datetime]


class SqlContentSource:
    """Content source backed by the ``content_items`` table."""

    def __init__(self, base_url: str, session=None):
        self.base_url = (base_url or '').rstrip('/')
        self._session = session

    @property
    def session(self):
        return self._session if self._session is not None else db.session

    def last_modified(self) -> Optional[datetime]:
        """Most recent modification across all published content."""
        try:
            return (
                self.session.query(func.max(ContentItem.updated_at))
                .filter(ContentItem.status == ContentItem.STATUS_PUBLISHED)
                .scalar()
            )
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise ContentSourceError(f'Could not read last modification time: {exc}') from exc

    def published_items(self, content_type: str, exclude_ids: Iterable[int] = ()) -> List[SitemapRecord]:
        """Published items of one type, newest modification first.

        Only the columns needed for a sitemap entry are selected.
        """
        query = (
            self.session.query(
                ContentItem.id,
                ContentItem.slug,
                ContentItem.content_type,
                ContentItem.updated_at,
            )
            .filter(ContentItem.status == ContentItem.STATUS_PUBLISHED)
            .filter(ContentItem.content_type == content_type)
        )
        excluded = list(exclude_ids or ())
        if excluded:
            query = query.filter(ContentItem.id.notin_(excluded))
        query = query.order_by(ContentItem.updated_at.desc(), ContentItem.id.desc())

        try:
            rows = query.all()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise ContentSourceError(f'Could not list {content_type} items: {exc}') from exc

        return [
            SitemapRecord(
                id=row.id,
                loc=join_site_url(self.base_url, _permalink_path(row.content_type, row.slug)),
                modified_at=row.updated_at,
            )
            for row in rows
        ]


def _permalink_path(content_type: str, slug: str) -> str:
    if content_type == ContentItem.TYPE_PAGE:
        return f'/{slug}'
    return f'/{content_type}/{slug}'


def current_site_info() -> SiteInfo:
    cfg = current_app.config
    return SiteInfo(
        name=cfg.get('SITE_NAME', ''),
        description=cfg.get('SITE_DESCRIPTION', ''),
        url=site_url(),
        locale=cfg.get('SITE_LOCALE') or 'en_US',
    )


def permalink(item: ContentItem) -> str:
    return join_site_url(site_url(), item.path)


def build_content_view(item: ContentItem) -> ContentView:
    """Snapshot of one content item, with its overrides, for the resolver."""
    override = item.seo_override
    author = item.author
    return ContentView(
        id=item.id,
        title=item.title or '',
        body=item.content or '',
        permalink=permalink(item),
        content_type=item.content_type,
        excerpt=item.excerpt,
        published_at=item.published_at,
        modified_at=item.updated_at,
        author_name=author.public_name if author is not None else None,
        featured_image_url=featured_image_url(item.featured_image, size='large'),
        overrides=ContentOverrides.from_mapping(override.as_dict() if override is not None else None),
    )
