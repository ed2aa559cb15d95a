"""Public routes: home, content pages, sitemap.xml and robots.txt."""

from flask import Blueprint, Response, abort, current_app, g, render_template

from seo_manager.domain.metadata import RenderContext
from seo_manager.models import ContentItem
from seo_manager.seo import filter_robots_txt, render_head
from seo_manager.services.content_source import (
    ContentSourceError,
    SqlContentSource,
    build_content_view,
    current_site_info,
)
from seo_manager.services.sitemap import SitemapDisabledError, generate_sitemap
from seo_manager.settings_store import get_settings_store
from seo_manager.utils.media import site_url

main_bp = Blueprint('main', __name__)

HOME_POSTS_LIMIT = 10

_REQUEST_STATE = ('seo_item', 'seo_head_markup', 'seo_settings_store')


@main_bp.before_app_request
def _reset_seo_state():
    """Each request starts with no item, no cached head and fresh settings."""
    for name in _REQUEST_STATE:
        g.pop(name, None)


def upstream_robots_txt() -> str:
    """robots.txt the site serves when no custom text is configured."""
    return "User-agent: *\nDisallow: /admin/\n"


def current_render_context() -> RenderContext:
    """Render context for the page being rendered.

    Views that show a single item put its ContentView on ``g.seo_item``;
    everything else renders with the home values.
    """
    return RenderContext(
        settings=get_settings_store().get_all(),
        site=current_site_info(),
        item=g.get('seo_item'),
    )


def seo_head():
    """Head block for the current request, computed once per request."""
    cached = g.get('seo_head_markup')
    if cached is None:
        cached = render_head(current_render_context())
        g.seo_head_markup = cached
    return cached


def _published(content_type):
    return ContentItem.query.filter_by(content_type=content_type, status=ContentItem.STATUS_PUBLISHED)


def _render_item(item):
    g.seo_item = build_content_view(item)
    return render_template('content.html', item=item, view=g.seo_item)


@main_bp.route('/')
def index():
    posts = (
        _published(ContentItem.TYPE_POST)
        .order_by(ContentItem.published_at.desc())
        .limit(HOME_POSTS_LIMIT)
        .all()
    )
    return render_template('index.html', posts=posts)


@main_bp.route('/<slug>')
def page_detail(slug):
    item = _published(ContentItem.TYPE_PAGE).filter_by(slug=slug).first_or_404()
    return _render_item(item)


@main_bp.route('/<content_type>/<slug>')
def content_detail(content_type, slug):
    if content_type == ContentItem.TYPE_PAGE:
        abort(404)
    item = _published(content_type).filter_by(slug=slug).first_or_404()
    return _render_item(item)


@main_bp.route('/sitemap.xml')
def sitemap():
    """Generate XML sitemap for SEO"""

    base_url = site_url()
    settings = get_settings_store().get_all()
    try:
        sitemap_xml = generate_sitemap(settings, SqlContentSource(base_url), base_url)
    except SitemapDisabledError:
        abort(404, description='Sitemap is disabled')
    except ContentSourceError as exc:
        current_app.logger.error('Sitemap generation failed: %s', exc)
        abort(503, description='Sitemap temporarily unavailable')

    return Response(sitemap_xml, content_type='application/xml; charset=utf-8')


@main_bp.route('/robots.txt')
def robots():
    """Serve robots.txt, replaced by the configured text when set."""

    content = filter_robots_txt(upstream_robots_txt(), get_settings_store().get_all())
    return Response(content, content_type='text/plain; charset=utf-8')
