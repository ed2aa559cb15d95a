"""
WTForms Form Classes for the SEO & Open Graph Manager

This module defines the admin forms: login, the site-wide settings
form and the per-content override form.
"""

from flask_wtf import FlaskForm
from wtforms import (
    BooleanField,
    HiddenField,
    PasswordField,
    SelectField,
    SelectMultipleField,
    StringField,
    SubmitField,
    TextAreaField,
)
from wtforms.validators import DataRequired, Length, Optional, ValidationError

from seo_manager.settings_store import OG_TYPES, TWITTER_CARDS
from seo_manager.utils.media import esc_url
from seo_manager.utils.text import (
    parse_id_list,
    sanitize_text_field,
    sanitize_textarea_field,
)

SETTINGS_TABS = ('opengraph', 'seo', 'sitemap', 'robots', 'advanced')


def _flag(value) -> str:
    return '1' if value else '0'


def _validate_url_field(field):
    if field.data and field.data.strip() and not esc_url(field.data):
        raise ValidationError('Only http(s) URLs are allowed.')


class LoginForm(FlaskForm):
    """Admin login form"""

    username = StringField('Username or email', validators=[
        DataRequired(message='Username or email is required'),
        Length(max=255, message='Must be 255 characters or less')
    ])
    password = PasswordField('Password', validators=[
        DataRequired(message='Password is required')
    ])
    submit = SubmitField('Log In')


class SettingsForm(FlaskForm):
    """Site-wide Open Graph, SEO, sitemap and robots.txt settings.

    Every key is saved on each submit, so all tabs live in one form.
    """

    active_tab = HiddenField(default='opengraph')

    # Open Graph
    og_site_name = StringField('Site Name', validators=[Optional(), Length(max=200)])
    og_default_image = StringField('Default Image', validators=[Optional(), Length(max=600)])
    og_default_type = SelectField(
        'Default Type',
        choices=[(value, value.title()) for value in OG_TYPES],
        default='article',
    )
    og_twitter_card = SelectField(
        'Twitter Card Type',
        choices=[('summary', 'Summary'), ('summary_large_image', 'Summary Large Image')],
        default='summary_large_image',
    )
    og_twitter_site = StringField('Twitter Site Handle', validators=[Optional(), Length(max=100)])

    # SEO
    seo_default_description = TextAreaField('Default Description', validators=[Optional(), Length(max=500)])
    seo_enable_jsonld = BooleanField('Enable JSON-LD structured data')

    # Sitemap
    sitemap_enable = BooleanField('Enable sitemap.xml')
    sitemap_post_types = SelectMultipleField('Content types in sitemap', choices=[])
    sitemap_exclude_ids = StringField('Exclude IDs (comma separated)', validators=[Optional(), Length(max=2000)])

    # Robots
    robots_txt = TextAreaField('robots.txt', validators=[Optional(), Length(max=10000)])

    # Advanced
    cleanup_on_uninstall = BooleanField('Delete all data on uninstall')

    submit = SubmitField('Save Changes')

    def __init__(self, *args, content_types=None, **kwargs):
        super().__init__(*args, **kwargs)
        types = []
        for name in ['post', 'page'] + list(content_types or []):
            if name and name not in types:
                types.append(name)
        self.sitemap_post_types.choices = [(name, name.title()) for name in types]

    def validate_og_default_image(self, field):
        _validate_url_field(field)

    def validate_og_twitter_card(self, field):
        if field.data not in TWITTER_CARDS:
            raise ValidationError('Unknown Twitter card type.')

    def populate(self, settings):
        """Fill the form from stored settings (GET)."""
        self.og_site_name.data = settings.get('og_site_name') or ''
        self.og_default_image.data = settings.get('og_default_image') or ''
        self.og_default_type.data = settings.get('og_default_type') or 'article'
        self.og_twitter_card.data = settings.get('og_twitter_card') or 'summary_large_image'
        self.og_twitter_site.data = settings.get('og_twitter_site') or ''
        self.seo_default_description.data = settings.get('seo_default_description') or ''
        self.seo_enable_jsonld.data = settings.get('seo_enable_jsonld') == '1'
        self.sitemap_enable.data = settings.get('sitemap_enable') == '1'
        self.sitemap_post_types.data = list(settings.get('sitemap_post_types') or [])
        self.sitemap_exclude_ids.data = ', '.join(str(i) for i in settings.get('sitemap_exclude_ids') or [])
        self.robots_txt.data = settings.get('robots_txt') or ''
        self.cleanup_on_uninstall.data = settings.get('cleanup_on_uninstall') == '1'

    def to_settings(self):
        """Sanitized values for every settings key."""
        return {
            'og_site_name': sanitize_text_field(self.og_site_name.data),
            'og_default_image': esc_url(self.og_default_image.data),
            'og_default_type': sanitize_text_field(self.og_default_type.data) or 'article',
            'og_twitter_card': sanitize_text_field(self.og_twitter_card.data) or 'summary_large_image',
            'og_twitter_site': sanitize_text_field(self.og_twitter_site.data),
            'seo_default_description': sanitize_textarea_field(self.seo_default_description.data),
            'seo_enable_jsonld': _flag(self.seo_enable_jsonld.data),
            'sitemap_enable': _flag(self.sitemap_enable.data),
            'sitemap_post_types': [sanitize_text_field(v) for v in (self.sitemap_post_types.data or []) if sanitize_text_field(v)],
            'sitemap_exclude_ids': parse_id_list(self.sitemap_exclude_ids.data),
            'robots_txt': sanitize_textarea_field(self.robots_txt.data),
            'cleanup_on_uninstall': _flag(self.cleanup_on_uninstall.data),
        }

    @property
    def tab(self):
        value = sanitize_text_field(self.active_tab.data)
        return value if value in SETTINGS_TABS else 'opengraph'


class ContentSeoForm(FlaskForm):
    """Per-content overrides. Leave a field empty to use the defaults."""

    og_title = StringField('Open Graph Title', validators=[Optional(), Length(max=300)])
    og_description = TextAreaField('Open Graph Description', validators=[Optional(), Length(max=1000)])
    og_image = StringField('Open Graph Image', validators=[Optional(), Length(max=600)])
    og_type = SelectField(
        'Open Graph Type',
        choices=[('', 'Use default')] + [(value, value.title()) for value in OG_TYPES],
        default='',
        validators=[Optional()],
    )
    seo_description = TextAreaField('Meta Description', validators=[Optional(), Length(max=1000)])
    submit = SubmitField('Save SEO')

    def validate_og_image(self, field):
        _validate_url_field(field)

    def populate(self, override):
        if override is None:
            return
        self.og_title.data = override.og_title or ''
        self.og_description.data = override.og_description or ''
        self.og_image.data = override.og_image or ''
        self.og_type.data = override.og_type or ''
        self.seo_description.data = override.seo_description or ''

    def to_overrides(self):
        """Sanitized override values; empty input becomes None."""
        values = {
            'og_title': sanitize_text_field(self.og_title.data),
            'og_description': sanitize_text_field(self.og_description.data),
            'og_image': esc_url(self.og_image.data),
            'og_type': sanitize_text_field(self.og_type.data),
            'seo_description': sanitize_text_field(self.seo_description.data),
        }
        return {key: (value or None) for key, value in values.items()}
