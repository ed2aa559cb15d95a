"""Metadata resolution: fallback chains, overrides and structured data."""

from datetime import datetime, timedelta, timezone

from seo_manager.domain.metadata import (
    ContentOverrides,
    ContentView,
    RenderContext,
    SiteInfo,
    isoformat,
    resolve,
)
from seo_manager.settings_store import default_settings


SITE = SiteInfo(name='Test Site', description='Site tagline', url='http://example.test', locale='fr_FR')


def _settings(**overrides):
    settings = default_settings('Test Site', 'Site tagline', 'http://example.test')
    settings.update(overrides)
    return settings


def _item(**kwargs):
    data = {
        'id': 7,
        'title': 'Hello world',
        'body': '<p>Some <strong>body</strong> text.</p>',
        'permalink': 'http://example.test/post/hello-world',
        'published_at': datetime(2024, 3, 1, 9, 30, 15, 123456),
        'modified_at': datetime(2024, 3, 2, 10, 0, 0),
        'author_name': 'Jane Writer',
    }
    data.update(kwargs)
    return ContentView(**data)


def test_home_uses_site_values():
    meta = resolve(RenderContext(settings=_settings(), site=SITE))

    assert meta.og_type == 'website'
    assert meta.og_title == 'Test Site'
    assert meta.og_site_name == 'Test Site'
    assert meta.og_locale == 'fr_FR'
    assert meta.og_url == 'http://example.test'
    assert meta.canonical_url == 'http://example.test'
    assert meta.og_description == 'Site tagline'
    assert meta.seo_description == 'Site tagline'
    assert meta.structured_data is None
    assert meta.seo_author is None


def test_home_ignores_default_type_setting():
    meta = resolve(RenderContext(settings=_settings(og_default_type='article'), site=SITE))
    assert meta.og_type == 'website'
    assert meta.article_published_time is None


def test_site_name_setting_wins_over_site_title():
    meta = resolve(RenderContext(settings=_settings(og_site_name='Brand'), site=SITE))
    assert meta.og_site_name == 'Brand'


def test_blank_site_name_setting_falls_back_to_site_title():
    meta = resolve(RenderContext(settings=_settings(og_site_name='   '), site=SITE))
    assert meta.og_site_name == 'Test Site'


def test_override_title_wins():
    item = _item(overrides=ContentOverrides(og_title='Custom'))
    meta = resolve(RenderContext(settings=_settings(), site=SITE, item=item))
    assert meta.og_title == 'Custom'


def test_every_override_wins_over_computed_values():
    overrides = ContentOverrides(
        og_title='T',
        og_description='OG desc',
        og_image='https://cdn.example.test/override.png',
        og_type='website',
        seo_description='SEO desc',
    )
    item = _item(
        excerpt='An excerpt',
        featured_image_url='https://cdn.example.test/featured.png',
        overrides=overrides,
    )
    meta = resolve(RenderContext(settings=_settings(og_default_image='https://cdn.example.test/d.png'), site=SITE, item=item))

    assert meta.og_title == 'T'
    assert meta.og_description == 'OG desc'
    assert meta.og_image == 'https://cdn.example.test/override.png'
    assert meta.og_type == 'website'
    assert meta.seo_description == 'SEO desc'


def test_whitespace_override_is_treated_as_absent():
    item = _item(overrides=ContentOverrides(og_title='   ', og_description=''))
    meta = resolve(RenderContext(settings=_settings(), site=SITE, item=item))
    assert meta.og_title == 'Hello world'
    assert meta.og_description == 'Some body text.'


def test_excerpt_is_preferred_over_body():
    item = _item(excerpt='Hand written summary')
    meta = resolve(RenderContext(settings=_settings(), site=SITE, item=item))
    assert meta.og_description == 'Hand written summary'
    assert meta.seo_description == 'Hand written summary'


def test_body_is_trimmed_to_thirty_words():
    words = [f'word{i}' for i in range(40)]
    item = _item(body='<p>' + ' '.join(words) + '</p>')
    meta = resolve(RenderContext(settings=_settings(), site=SITE, item=item))

    assert meta.og_description == ' '.join(words[:30]) + '...'


def test_short_body_is_not_marked_as_truncated():
    item = _item(body='Exactly   three\nwords')
    meta = resolve(RenderContext(settings=_settings(), site=SITE, item=item))
    assert meta.og_description == 'Exactly three words'


def test_empty_body_falls_back_to_default_description():
    item = _item(body='<p>  </p>')
    meta = resolve(RenderContext(settings=_settings(seo_default_description='Default text'), site=SITE, item=item))
    assert meta.og_description == 'Default text'
    assert meta.seo_description == 'Default text'


def test_empty_default_description_falls_back_to_site_description():
    item = _item(body='')
    meta = resolve(RenderContext(settings=_settings(seo_default_description=''), site=SITE, item=item))
    assert meta.og_description == 'Site tagline'


def test_image_chain():
    settings = _settings(og_default_image='https://cdn.example.test/default.png')

    featured = resolve(RenderContext(settings=settings, site=SITE, item=_item(featured_image_url='https://cdn.example.test/f.png')))
    assert featured.og_image == 'https://cdn.example.test/f.png'

    fallback = resolve(RenderContext(settings=settings, site=SITE, item=_item()))
    assert fallback.og_image == 'https://cdn.example.test/default.png'

    nothing = resolve(RenderContext(settings=_settings(og_default_image=''), site=SITE, item=_item()))
    assert nothing.og_image is None


def test_article_fields_present_for_articles():
    meta = resolve(RenderContext(settings=_settings(), site=SITE, item=_item()))

    assert meta.og_type == 'article'
    assert meta.article_published_time == '2024-03-01T09:30:15+00:00'
    assert meta.article_modified_time == '2024-03-02T10:00:00+00:00'
    assert meta.article_author == 'Jane Writer'
    assert meta.seo_author == 'Jane Writer'


def test_non_article_has_no_article_fields():
    meta = resolve(RenderContext(settings=_settings(og_default_type='website'), site=SITE, item=_item()))

    assert meta.og_type == 'website'
    assert meta.article_published_time is None
    assert meta.article_modified_time is None
    assert meta.article_author is None
    assert meta.seo_author == 'Jane Writer'


def test_twitter_values():
    meta = resolve(RenderContext(settings=_settings(og_twitter_card='', og_twitter_site='@site'), site=SITE))
    assert meta.twitter_card == 'summary_large_image'
    assert meta.twitter_site == '@site'

    meta = resolve(RenderContext(settings=_settings(og_twitter_card='summary'), site=SITE))
    assert meta.twitter_card == 'summary'
    assert meta.twitter_site is None


def test_structured_data_for_single_item():
    item = _item(excerpt='Short summary', featured_image_url='https://cdn.example.test/f.png')
    meta = resolve(RenderContext(settings=_settings(), site=SITE, item=item))

    assert meta.structured_data == {
        '@context': 'https://schema.org',
        '@type': 'Article',
        'headline': 'Hello world',
        'datePublished': '2024-03-01T09:30:15+00:00',
        'dateModified': '2024-03-02T10:00:00+00:00',
        'author': {'@type': 'Person', 'name': 'Jane Writer'},
        'image': 'https://cdn.example.test/f.png',
        'description': 'Short summary',
    }


def test_structured_data_description_comes_only_from_excerpt():
    meta = resolve(RenderContext(settings=_settings(), site=SITE, item=_item(excerpt='')))

    assert 'description' not in meta.structured_data
    assert 'image' not in meta.structured_data
    assert meta.og_description == 'Some body text.'


def test_structured_data_disabled():
    meta = resolve(RenderContext(settings=_settings(seo_enable_jsonld='0'), site=SITE, item=_item()))
    assert meta.structured_data is None


def test_isoformat_keeps_offsets():
    aware = datetime(2024, 1, 1, 12, 0, tzinfo=timezone(timedelta(hours=2)))
    assert isoformat(aware) == '2024-01-01T12:00:00+02:00'
    assert isoformat(None) is None


def test_missing_jsonld_key_means_enabled():
    meta = resolve(RenderContext(settings={}, site=SITE, item=_item()))

    assert meta.structured_data is not None
    assert meta.structured_data['headline'] == 'Hello world'
    assert meta.og_type == 'article'
    assert meta.twitter_card == 'summary_large_image'


def test_structured_data_without_dates_or_author():
    item = _item(published_at=None, modified_at=None, author_name=None)
    meta = resolve(RenderContext(settings=_settings(), site=SITE, item=item))

    assert meta.structured_data == {
        '@context': 'https://schema.org',
        '@type': 'Article',
        'headline': 'Hello world',
    }
