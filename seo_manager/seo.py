"""
SEO Rendering Module

Turns resolved page metadata into the text that ends up in responses:
- Open Graph / Twitter Card / SEO meta tag block
- JSON-LD structured data script block
- robots.txt body
"""

from typing import Optional

from jinja2.utils import htmlsafe_json_dumps
from markupsafe import Markup, escape

from seo_manager.domain.metadata import RenderContext, ResolvedMetadata, resolve
from seo_manager.utils.log import safe_log
from seo_manager.utils.media import esc_url


def _meta_property(name: str, value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    return f'<meta property="{escape(name)}" content="{escape(value)}">'


def _meta_name(name: str, value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    return f'<meta name="{escape(name)}" content="{escape(value)}">'


def _meta_property_url(name: str, value: Optional[str]) -> Optional[str]:
    return _meta_property(name, esc_url(value))


def open_graph_lines(meta: ResolvedMetadata) -> list:
    """Open Graph and Twitter lines in their fixed order.

    Site name and locale are always present; any other empty field is left out.
    """

    lines = [
        f'<meta property="og:site_name" content="{escape(meta.og_site_name or "")}">',
        f'<meta property="og:locale" content="{escape(meta.og_locale or "")}">',
        _meta_property('og:type', meta.og_type),
        _meta_property('og:title', meta.og_title),
        _meta_property('og:description', meta.og_description),
        _meta_property_url('og:url', meta.og_url),
        _meta_property_url('og:image', meta.og_image),
    ]
    if meta.is_article:
        lines.extend([
            _meta_property('article:published_time', meta.article_published_time),
            _meta_property('article:modified_time', meta.article_modified_time),
            _meta_property('article:author', meta.article_author),
        ])
    lines.extend([
        _meta_name('twitter:card', meta.twitter_card),
        _meta_name('twitter:site', meta.twitter_site),
    ])
    return [line for line in lines if line]


def seo_lines(meta: ResolvedMetadata) -> list:
    canonical = esc_url(meta.canonical_url)
    lines = [
        _meta_name('description', meta.seo_description),
        _meta_name('author', meta.seo_author),
        f'<link rel="canonical" href="{escape(canonical)}">' if canonical else None,
    ]
    return [line for line in lines if line]


def render_meta_tags(meta: ResolvedMetadata) -> Markup:
    """HTML block of meta tags, one per line."""

    parts = ['<!-- Open Graph -->']
    parts.extend(open_graph_lines(meta))
    parts.append('<!-- SEO -->')
    parts.extend(seo_lines(meta))
    return Markup('\n'.join(parts) + '\n')


def render_jsonld(meta: ResolvedMetadata) -> Markup:
    """JSON-LD script block, or empty markup when there is no record.

    Non-ASCII text and forward slashes are written literally; only the
    characters that could break out of the script element are escaped.
    """

    if not meta.structured_data:
        return Markup('')
    payload = htmlsafe_json_dumps(meta.structured_data, ensure_ascii=False)
    return Markup(f'<script type="application/ld+json">{payload}</script>\n')


def _site_only_block(context: RenderContext) -> Markup:
    """og:site_name and og:locale straight from the host site."""
    try:
        site = context.site
        return Markup('\n'.join([
            '<!-- Open Graph -->',
            f'<meta property="og:site_name" content="{escape(site.name or "")}">',
            f'<meta property="og:locale" content="{escape(site.locale or "")}">',
        ]) + '\n')
    except Exception:
        safe_log('exception', 'Site tag rendering failed')
        return Markup('')


def render_head(context: RenderContext) -> Markup:
    """Everything injected at the top of <head> for one page render.

    Never raises: a failure is logged and the affected block is left out.
    """

    try:
        meta = resolve(context)
    except Exception:
        safe_log('exception', 'Metadata resolution failed; emitting site tags only')
        return _site_only_block(context)

    blocks = []
    try:
        blocks.append(render_meta_tags(meta))
    except Exception:
        safe_log('exception', 'Meta tag rendering failed')
    try:
        if context.is_single:
            blocks.append(render_jsonld(meta))
    except Exception:
        safe_log('exception', 'JSON-LD rendering failed')
    return Markup('').join(blocks)


def filter_robots_txt(upstream: str, settings) -> str:
    """robots.txt body: the configured text verbatim, else ``upstream`` untouched."""

    configured = settings.get('robots_txt') if settings else None
    if configured:
        return str(configured)
    return upstream
