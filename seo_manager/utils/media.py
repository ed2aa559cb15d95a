"""URL and media helpers.

Featured images may be stored either as:
- a path relative to the uploads folder (static/uploads)
- a full https URL (cloud storage)

These helpers normalize that for the metadata resolver and the renderer.
"""

from __future__ import annotations

import os
from pathlib import PurePosixPath
from urllib.parse import quote, urlparse

from flask import current_app

ALLOWED_URL_SCHEMES = frozenset({'http', 'https'})

# Width of each named image size; variants are generated ahead of time.
IMAGE_SIZES = {
    'thumbnail': 150,
    'medium': 300,
    'large': 1024,
}

_URL_SAFE_CHARS = "/:?#[]@!$&'()*+,;=%-._~"


def is_absolute_url(value: str | None) -> bool:
    if not value:
        return False
    try:
        parsed = urlparse(value)
    except Exception:
        return False
    return parsed.scheme in ALLOWED_URL_SCHEMES and bool(parsed.netloc)


def esc_url(value: str | None) -> str:
    """Return a URL safe to place in an attribute, or '' when it is rejected.

    Only http(s) and site-relative URLs are accepted. Scheme-less host names
    get an ``http://`` prefix. Characters outside the URL-safe set are
    percent-encoded; existing escapes are kept.
    """
    if value is None:
        return ''
    url = ''.join(ch for ch in str(value).strip() if ch >= ' ' and ch != '\x7f')
    if not url:
        return ''
    try:
        parsed = urlparse(url)
    except ValueError:
        return ''
    if parsed.scheme:
        if parsed.scheme.lower() not in ALLOWED_URL_SCHEMES:
            return ''
    elif not url.startswith(('/', '#', '?')):
        url = 'http://' + url
    return quote(url, safe=_URL_SAFE_CHARS)


def join_site_url(site_url: str, path_or_url: str | None) -> str:
    if not path_or_url:
        return site_url.rstrip('/') if site_url else ''
    if isinstance(path_or_url, str) and path_or_url.startswith(('http://', 'https://')):
        return path_or_url
    base = (site_url or '').rstrip('/')
    path = str(path_or_url)
    if not path.startswith('/'):
        path = '/' + path
    if not base:
        return path
    return base + path


def site_url() -> str:
    return (current_app.config.get('SITE_URL') or '').strip().rstrip('/')


def variant_relpath(original_rel: str, size: str) -> str:
    """Path of a pre-generated size variant, relative to the uploads folder."""
    width = IMAGE_SIZES[size]
    p = PurePosixPath(original_rel.replace('\\', '/').lstrip('/'))
    return str(p.parent / 'variants' / f"{p.stem}__w{width}{p.suffix}")


def featured_image_url(value: str | None, size: str = 'large') -> str | None:
    """Absolute URL for a featured image at the named size.

    Absolute URLs are returned as-is. For uploads, the size variant is used
    when it exists on disk, otherwise the original upload.
    """
    if not value or not str(value).strip():
        return None
    value = str(value).strip()
    if is_absolute_url(value):
        return value

    rel = value.replace('\\', '/').lstrip('/')
    if rel.lower().startswith('static/uploads/'):
        rel = rel[len('static/uploads/'):]

    prefix = current_app.config.get('UPLOAD_URL_PREFIX', '/static/uploads').rstrip('/')
    chosen = rel
    if size in IMAGE_SIZES:
        candidate = variant_relpath(rel, size)
        static_folder = current_app.static_folder
        if static_folder and os.path.isfile(os.path.join(static_folder, 'uploads', candidate)):
            chosen = candidate

    return join_site_url(site_url(), f"{prefix}/{chosen}")
