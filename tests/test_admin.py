"""Admin settings and per-content override screens."""

from seo_manager.models import ContentSeoOverride, User
from seo_manager.settings_store import SettingsStore, default_settings_for_app


def _stored(app):
    return SettingsStore(defaults=default_settings_for_app(app)).get_all()


def _settings_form(**overrides):
    data = {
        'active_tab': 'sitemap',
        'og_site_name': 'Brand <b>Co</b>',
        'og_default_image': 'https://cdn.example.test/default.png',
        'og_default_type': 'website',
        'og_twitter_card': 'summary',
        'og_twitter_site': '@brand',
        'seo_default_description': 'Line one\r\nLine <em>two</em>',
        'seo_enable_jsonld': 'y',
        'sitemap_enable': 'y',
        'sitemap_post_types': ['post'],
        'sitemap_exclude_ids': '3, x, 7, 3',
        'robots_txt': 'User-agent: *\r\nDisallow: /tmp/',
    }
    data.update(overrides)
    return data


def test_settings_require_admin(client):
    resp = client.get('/admin/settings')
    assert resp.status_code == 302
    assert '/admin/login' in resp.headers['Location']


def test_author_cannot_log_in(client, author):
    resp = client.post('/admin/login', data={'username': 'jane', 'password': 'secret'})
    assert resp.status_code == 200
    assert 'Invalid credentials.' in resp.get_data(as_text=True)


def test_wrong_password_is_rejected(client, db):
    admin = User(username='boss', role=User.ROLE_ADMIN)
    admin.set_password('right')
    db.session.add(admin)
    db.session.commit()

    resp = client.post('/admin/login', data={'username': 'boss', 'password': 'wrong'})
    assert resp.status_code == 200
    assert 'Invalid credentials.' in resp.get_data(as_text=True)


def test_settings_page_renders_every_tab(admin_client):
    resp = admin_client.get('/admin/settings?tab=robots')
    assert resp.status_code == 200
    body = resp.get_data(as_text=True)
    for fieldset in ('id="opengraph"', 'id="seo"', 'id="sitemap"', 'id="robots"', 'id="advanced"'):
        assert fieldset in body
    assert 'name="active_tab" type="hidden" value="robots"' in body


def test_settings_are_sanitized_and_saved(app, admin_client):
    resp = admin_client.post('/admin/settings', data=_settings_form())

    assert resp.status_code == 302
    assert 'tab=sitemap' in resp.headers['Location']
    assert 'settings-updated=true' in resp.headers['Location']

    stored = _stored(app)
    assert stored['og_site_name'] == 'Brand Co'
    assert stored['og_default_type'] == 'website'
    assert stored['og_twitter_card'] == 'summary'
    assert stored['seo_default_description'] == 'Line one\nLine two'
    assert stored['seo_enable_jsonld'] == '1'
    assert stored['sitemap_enable'] == '1'
    assert stored['sitemap_post_types'] == ['post']
    assert stored['sitemap_exclude_ids'] == [3, 7]
    assert stored['robots_txt'] == 'User-agent: *\nDisallow: /tmp/'
    assert stored['cleanup_on_uninstall'] == '0'


def test_unchecked_boxes_are_saved_as_zero(app, admin_client):
    data = _settings_form()
    del data['seo_enable_jsonld']
    del data['sitemap_enable']
    admin_client.post('/admin/settings', data=data)

    stored = _stored(app)
    assert stored['seo_enable_jsonld'] == '0'
    assert stored['sitemap_enable'] == '0'


def test_unsafe_default_image_is_rejected(app, admin_client):
    resp = admin_client.post('/admin/settings', data=_settings_form(og_default_image='javascript:alert(1)'))

    assert resp.status_code == 200
    assert 'Only http(s) URLs are allowed.' in resp.get_data(as_text=True)
    assert _stored(app)['og_site_name'] == 'Test Site'


def test_unknown_tab_falls_back_to_opengraph(admin_client):
    resp = admin_client.post('/admin/settings', data=_settings_form(active_tab='nope'))
    assert 'tab=opengraph' in resp.headers['Location']


def test_content_overrides_are_created_and_cleared(admin_client, make_item):
    item = make_item('Hello World')
    url = f'/admin/content/{item.id}/seo'

    assert admin_client.get(url).status_code == 200

    resp = admin_client.post(url, data={
        'og_title': 'Custom <i>title</i>',
        'og_description': '',
        'og_image': '',
        'og_type': 'website',
        'seo_description': '   ',
    })
    assert resp.status_code == 302

    override = ContentSeoOverride.query.filter_by(content_id=item.id).one()
    assert override.og_title == 'Custom title'
    assert override.og_type == 'website'
    assert override.og_description is None
    assert override.seo_description is None

    page = admin_client.get(item.path).get_data(as_text=True)
    assert '<meta property="og:title" content="Custom title">' in page

    admin_client.post(url, data={
        'og_title': '',
        'og_description': '',
        'og_image': '',
        'og_type': '',
        'seo_description': '',
    })
    assert ContentSeoOverride.query.count() == 0


def test_content_list_links_to_override_screen(admin_client, make_item):
    item = make_item('Listed item')
    body = admin_client.get('/admin/content').get_data(as_text=True)
    assert f'/admin/content/{item.id}/seo' in body


def test_missing_content_redirects(admin_client):
    resp = admin_client.get('/admin/content/999/seo')
    assert resp.status_code == 302
    assert '/admin/content' in resp.headers['Location']
