from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from seo_manager.utils.text import first_present, is_blank, trim_words


TYPE_ARTICLE = 'article'
TYPE_WEBSITE = 'website'
DEFAULT_TWITTER_CARD = 'summary_large_image'
DESCRIPTION_WORDS = 30
DESCRIPTION_MORE = '...'
DEFAULT_JSONLD = '1'


@dataclass(frozen=True)
class SiteInfo:
    """Values reported by the host site."""

    name: str
    description: str
    url: str
    locale: str = 'en_US'


@dataclass(frozen=True)
class ContentOverrides:
    og_title: Optional[str] = None
    og_description: Optional[str] = None
    og_image: Optional[str] = None
    og_type: Optional[str] = None
    seo_description: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> 'ContentOverrides':
        if not data:
            return cls()
        return cls(
            og_title=data.get('og_title'),
            og_description=data.get('og_description'),
            og_image=data.get('og_image'),
            og_type=data.get('og_type'),
            seo_description=data.get('seo_description'),
        )


@dataclass(frozen=True)
class ContentView:
    """Everything the resolver needs to know about one content item."""

    id: int
    title: str
    body: str
    permalink: str
    content_type: str = 'post'
    excerpt: Optional[str] = None
    published_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None
    author_name: Optional[str] = None
    featured_image_url: Optional[str] = None
    overrides: ContentOverrides = field(default_factory=ContentOverrides)


@dataclass(frozen=True)
class RenderContext:
    settings: Mapping[str, Any]
    site: SiteInfo
    item: Optional[ContentView] = None

    @property
    def is_single(self) -> bool:
        return self.item is not None


@dataclass(frozen=True)
class ResolvedMetadata:
    og_site_name: str
    og_locale: str
    og_type: str
    og_title: Optional[str]
    og_description: Optional[str]
    og_url: str
    og_image: Optional[str]
    twitter_card: str
    twitter_site: Optional[str]
    seo_description: Optional[str]
    canonical_url: str
    article_published_time: Optional[str] = None
    article_modified_time: Optional[str] = None
    article_author: Optional[str] = None
    seo_author: Optional[str] = None
    structured_data: Optional[dict] = None

    @property
    def is_article(self) -> bool:
        return self.og_type == TYPE_ARTICLE


def isoformat(value: Optional[datetime]) -> Optional[str]:
    """ISO 8601 with offset; naive datetimes are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.replace(microsecond=0).isoformat()


def is_enabled(value: Any) -> bool:
    """Settings flags are stored as "1"/"0" strings."""
    return str(value).strip() == '1' if value is not None else False


def _computed_description(item: ContentView) -> Optional[str]:
    excerpt = first_present(item.excerpt)
    if excerpt:
        return excerpt
    if is_blank(item.body):
        return None
    return first_present(trim_words(item.body, DESCRIPTION_WORDS, DESCRIPTION_MORE))


def _site_name(context: RenderContext) -> str:
    return first_present(context.settings.get('og_site_name'), context.site.name) or ''


def _default_description(context: RenderContext) -> Optional[str]:
    return first_present(context.settings.get('seo_default_description'), context.site.description)


def _twitter(context: RenderContext) -> tuple[str, Optional[str]]:
    card = first_present(context.settings.get('og_twitter_card')) or DEFAULT_TWITTER_CARD
    return card, first_present(context.settings.get('og_twitter_site'))


def build_structured_data(item: ContentView) -> dict:
    """schema.org Article record.

    ``description`` comes from the excerpt only, never from the body.
    Keys without a value are left out.
    """
    data = {
        '@context': 'https://schema.org',
        '@type': 'Article',
        'headline': item.title,
    }
    published = isoformat(item.published_at)
    if published:
        data['datePublished'] = published
    modified = isoformat(item.modified_at)
    if modified:
        data['dateModified'] = modified
    if not is_blank(item.author_name):
        data['author'] = {'@type': 'Person', 'name': item.author_name.strip()}
    if not is_blank(item.featured_image_url):
        data['image'] = item.featured_image_url
    if not is_blank(item.excerpt):
        data['description'] = item.excerpt.strip()
    return data


def _resolve_home(context: RenderContext) -> ResolvedMetadata:
    site_name = _site_name(context)
    description = _default_description(context)
    card, handle = _twitter(context)
    root = context.site.url
    return ResolvedMetadata(
        og_site_name=site_name,
        og_locale=context.site.locale,
        og_type=TYPE_WEBSITE,
        og_title=first_present(site_name),
        og_description=description,
        og_url=root,
        og_image=first_present(context.settings.get('og_default_image')),
        twitter_card=card,
        twitter_site=handle,
        seo_description=description,
        canonical_url=root,
    )


def _resolve_item(context: RenderContext, item: ContentView) -> ResolvedMetadata:
    settings = context.settings
    overrides = item.overrides

    og_type = first_present(overrides.og_type, settings.get('og_default_type')) or TYPE_ARTICLE
    computed = _computed_description(item)
    fallback = _default_description(context)
    card, handle = _twitter(context)

    published = modified = author = None
    if og_type == TYPE_ARTICLE:
        published = isoformat(item.published_at)
        modified = isoformat(item.modified_at)
        author = first_present(item.author_name)

    structured = None
    if is_enabled(settings.get('seo_enable_jsonld', DEFAULT_JSONLD)):
        structured = build_structured_data(item)

    return ResolvedMetadata(
        og_site_name=_site_name(context),
        og_locale=context.site.locale,
        og_type=og_type,
        og_title=first_present(overrides.og_title, item.title),
        og_description=first_present(overrides.og_description, computed, fallback),
        og_url=item.permalink,
        og_image=first_present(overrides.og_image, item.featured_image_url, settings.get('og_default_image')),
        twitter_card=card,
        twitter_site=handle,
        seo_description=first_present(overrides.seo_description, computed, fallback),
        canonical_url=item.permalink,
        article_published_time=published,
        article_modified_time=modified,
        article_author=author,
        seo_author=first_present(item.author_name),
        structured_data=structured,
    )


def resolve(context: RenderContext) -> ResolvedMetadata:
    """Pick the final value of every tag for one page render.

    Each field takes the first non-blank source: per-item override, then
    site-wide setting, then a value computed from the content. Pages that
    are not a single content item use the home values.
    """
    if context.item is None:
        return _resolve_home(context)
    return _resolve_item(context, context.item)
