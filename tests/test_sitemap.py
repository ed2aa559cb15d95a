"""Sitemap generation against an in-memory content source."""

from datetime import datetime

import pytest

from seo_manager.services.content_source import ContentSourceError, SitemapRecord
from seo_manager.services.sitemap import (
    SitemapDisabledError,
    collect_entries,
    configured_post_types,
    generate_sitemap,
)


class FakeSource:
    """Content source holding (id, type, modified_at) tuples."""

    def __init__(self, items=(), fail=False):
        self.items = list(items)
        self.fail = fail
        self.calls = []

    def last_modified(self):
        if self.fail:
            raise ContentSourceError('database is down')
        dates = [modified for _, _, modified in self.items if modified is not None]
        return max(dates) if dates else None

    def published_items(self, content_type, exclude_ids=()):
        self.calls.append(content_type)
        if self.fail:
            raise ContentSourceError('database is down')
        rows = [
            (item_id, modified)
            for item_id, item_type, modified in self.items
            if item_type == content_type and item_id not in exclude_ids
        ]
        rows.sort(key=lambda row: (row[1], row[0]), reverse=True)
        return [
            SitemapRecord(id=item_id, loc=f'http://example.test/{content_type}/item-{item_id}', modified_at=modified)
            for item_id, modified in rows
        ]


def _settings(**overrides):
    settings = {
        'sitemap_enable': '1',
        'sitemap_post_types': ['post', 'page'],
        'sitemap_exclude_ids': [],
    }
    settings.update(overrides)
    return settings


def test_disabled_sitemap_raises():
    with pytest.raises(SitemapDisabledError):
        generate_sitemap(_settings(sitemap_enable='0'), FakeSource(), 'http://example.test')


def test_empty_site_has_only_the_home_entry():
    xml = generate_sitemap(_settings(), FakeSource(), 'http://example.test')

    assert xml.startswith('<?xml version="1.0" encoding="UTF-8"?>\n')
    assert '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">' in xml
    assert xml.count('<url>') == 1
    assert '<loc>http://example.test/</loc>' in xml
    assert '<lastmod>' not in xml
    assert '<priority>1.0</priority>' in xml
    assert '<changefreq>daily</changefreq>' in xml


def test_excluded_ids_are_left_out_and_newest_comes_first():
    source = FakeSource([
        (1, 'post', datetime(2024, 1, 3)),
        (2, 'post', datetime(2024, 1, 2)),
        (5, 'post', datetime(2024, 1, 4)),
        (9, 'page', datetime(2024, 1, 5)),
    ])
    entries = collect_entries(
        _settings(sitemap_post_types=['post'], sitemap_exclude_ids=[5]),
        source,
        'http://example.test',
    )

    assert [entry.loc for entry in entries] == [
        'http://example.test/',
        'http://example.test/post/item-1',
        'http://example.test/post/item-2',
    ]
    assert entries[0].lastmod == datetime(2024, 1, 5)
    assert source.calls == ['post']


def test_exclusions_hold_even_if_source_ignores_them():
    class LeakySource(FakeSource):
        def published_items(self, content_type, exclude_ids=()):
            return super().published_items(content_type, ())

    source = LeakySource([(3, 'post', datetime(2024, 1, 1))])
    entries = collect_entries(_settings(sitemap_exclude_ids='3'), source, 'http://example.test')
    assert len(entries) == 1


def test_priorities_by_content_type():
    source = FakeSource([
        (1, 'page', datetime(2024, 1, 1)),
        (2, 'post', datetime(2024, 1, 1)),
        (3, 'recipe', datetime(2024, 1, 1)),
    ])
    entries = collect_entries(
        _settings(sitemap_post_types=['page', 'post', 'recipe']),
        source,
        'http://example.test',
    )
    by_loc = {entry.loc: (entry.priority, entry.changefreq) for entry in entries}

    assert by_loc['http://example.test/page/item-1'] == ('0.8', 'monthly')
    assert by_loc['http://example.test/post/item-2'] == ('0.6', 'weekly')
    assert by_loc['http://example.test/recipe/item-3'] == ('0.6', 'weekly')


def test_url_elements_have_children_in_order():
    source = FakeSource([(1, 'post', datetime(2024, 2, 1, 8, 30))])
    xml = generate_sitemap(_settings(sitemap_post_types=['post']), source, 'http://example.test')

    block = xml.split('<url>')[2]
    assert block.index('<loc>') < block.index('<lastmod>') < block.index('<changefreq>') < block.index('<priority>')
    assert '<lastmod>2024-02-01T08:30:00+00:00</lastmod>' in block


def test_loc_is_escaped():
    class AmpSource(FakeSource):
        def published_items(self, content_type, exclude_ids=()):
            return [SitemapRecord(id=1, loc='http://example.test/post/a?x=1&y=2', modified_at=None)]

    xml = generate_sitemap(_settings(sitemap_post_types=['post']), AmpSource(), 'http://example.test')
    assert '<loc>http://example.test/post/a?x=1&amp;y=2</loc>' in xml


def test_source_failure_propagates():
    with pytest.raises(ContentSourceError):
        generate_sitemap(_settings(), FakeSource(fail=True), 'http://example.test')


def test_configured_post_types_are_deduplicated():
    assert configured_post_types({'sitemap_post_types': ['post', 'page', 'post', '']}) == ['post', 'page']
    assert configured_post_types({'sitemap_post_types': 'post'}) == ['post']
    assert configured_post_types({}) == ['post', 'page']


def test_missing_enable_key_means_enabled():
    source = FakeSource([
        (1, 'post', datetime(2024, 1, 3)),
        (2, 'post', datetime(2024, 1, 2)),
        (5, 'post', datetime(2024, 1, 4)),
    ])
    xml = generate_sitemap(
        {'sitemap_post_types': ['post'], 'sitemap_exclude_ids': [5]},
        source,
        'http://example.test',
    )

    locs = [part.split('</loc>')[0] for part in xml.split('<loc>')[1:]]
    assert locs == [
        'http://example.test/',
        'http://example.test/post/item-1',
        'http://example.test/post/item-2',
    ]


def test_empty_settings_use_defaults():
    xml = generate_sitemap({}, FakeSource([(4, 'page', datetime(2024, 1, 1))]), 'http://example.test')
    assert '<loc>http://example.test/page/item-4</loc>' in xml
    assert '<priority>0.8</priority>' in xml
