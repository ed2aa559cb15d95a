"""sitemap.xml generation."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, List, Mapping, Optional, Sequence

from markupsafe import escape

from seo_manager.domain.metadata import is_enabled, isoformat
from seo_manager.utils.media import esc_url
from seo_manager.utils.text import parse_id_list

SITEMAP_NS = 'http://www.sitemaps.org/schemas/sitemap/0.9'

PAGE_TYPE = 'page'
DEFAULT_POST_TYPES = ('post', 'page')
DEFAULT_ENABLE = '1'

HOME_PRIORITY = ('1.0', 'daily')
PAGE_PRIORITY = ('0.8', 'monthly')
OTHER_PRIORITY = ('0.6', 'weekly')


class SitemapDisabledError(Exception):
    """The sitemap is switched off in settings."""


@dataclass(frozen=True)
class SitemapEntry:
    loc: str
    lastmod: Optional[datetime]
    priority: str
    changefreq: str


def priority_for(content_type: str) -> tuple:
    """(priority, changefreq) for a content type: pages versus everything else."""
    return PAGE_PRIORITY if content_type == PAGE_TYPE else OTHER_PRIORITY


def configured_post_types(settings: Mapping[str, Any]) -> List[str]:
    raw = settings.get('sitemap_post_types')
    if raw is None:
        raw = list(DEFAULT_POST_TYPES)
    elif isinstance(raw, str):
        raw = [raw]
    types: List[str] = []
    for value in raw:
        name = str(value).strip()
        if name and name not in types:
            types.append(name)
    return types


def collect_entries(settings: Mapping[str, Any], source, site_url: str) -> List[SitemapEntry]:
    """Every entry of the sitemap, in document order.

    Raises SitemapDisabledError when the sitemap is off. Errors from
    ``source`` propagate unchanged.
    """
    if not is_enabled(settings.get('sitemap_enable', DEFAULT_ENABLE)):
        raise SitemapDisabledError('Sitemap is disabled')

    priority, changefreq = HOME_PRIORITY
    entries = [
        SitemapEntry(
            loc=site_url.rstrip('/') + '/',
            lastmod=source.last_modified(),
            priority=priority,
            changefreq=changefreq,
        )
    ]

    exclude_ids = parse_id_list(settings.get('sitemap_exclude_ids'))
    for content_type in configured_post_types(settings):
        priority, changefreq = priority_for(content_type)
        for record in source.published_items(content_type, exclude_ids):
            if record.id in exclude_ids:
                continue
            entries.append(
                SitemapEntry(
                    loc=record.loc,
                    lastmod=record.modified_at,
                    priority=priority,
                    changefreq=changefreq,
                )
            )
    return entries


def _url_element(entry: SitemapEntry) -> str:
    lines = ['  <url>', f'    <loc>{escape(esc_url(entry.loc))}</loc>']
    lastmod = isoformat(entry.lastmod)
    if lastmod:
        lines.append(f'    <lastmod>{escape(lastmod)}</lastmod>')
    lines.append(f'    <changefreq>{escape(entry.changefreq)}</changefreq>')
    lines.append(f'    <priority>{escape(entry.priority)}</priority>')
    lines.append('  </url>')
    return '\n'.join(lines)


def render_sitemap(entries: Sequence[SitemapEntry]) -> str:
    xml_lines = ['<?xml version="1.0" encoding="UTF-8"?>']
    xml_lines.append(f'<urlset xmlns="{SITEMAP_NS}">')
    for entry in entries:
        xml_lines.append(_url_element(entry))
    xml_lines.append('</urlset>')
    return '\n'.join(xml_lines) + '\n'


def generate_sitemap(settings: Mapping[str, Any], source, site_url: str) -> str:
    """Complete sitemap document.

    All entries are collected before serialization starts, so a failing
    source never yields a truncated document.
    """
    return render_sitemap(collect_entries(settings, source, site_url))
