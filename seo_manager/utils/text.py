"""Plain-text helpers for descriptions and form input."""

from __future__ import annotations

import re
from html import unescape

_SCRIPT_STYLE_RE = re.compile(r'<(script|style)[^>]*?>.*?</\1>', re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r'<[^>]*>')
_WS_RE = re.compile(r'\s+')
_INLINE_WS_RE = re.compile(r'[ \t\r\f\v]+')

DEFAULT_WORD_LIMIT = 30
DEFAULT_MORE = '...'


def strip_tags(value: str | None) -> str:
    """Remove HTML tags, including the bodies of script/style elements."""
    if not value:
        return ''
    text = _SCRIPT_STYLE_RE.sub('', str(value))
    return _TAG_RE.sub('', text)


def trim_words(text: str | None, num_words: int = DEFAULT_WORD_LIMIT, more: str = DEFAULT_MORE) -> str:
    """Return the first ``num_words`` words of ``text`` with markup removed.

    ``more`` is appended only when words were actually dropped. Whitespace is
    collapsed to single spaces either way.
    """
    plain = unescape(strip_tags(text))
    words = plain.split()
    if len(words) > num_words:
        return ' '.join(words[:num_words]) + more
    return ' '.join(words)


def is_blank(value) -> bool:
    """True for None, empty and whitespace-only strings."""
    if value is None:
        return True
    return not str(value).strip()


def first_present(*values) -> str | None:
    """Return the first value that is not blank, stripped."""
    for value in values:
        if not is_blank(value):
            return str(value).strip()
    return None


def sanitize_text_field(value) -> str:
    """Single-line form input: no tags, no line breaks, collapsed whitespace."""
    if value is None:
        return ''
    return _WS_RE.sub(' ', strip_tags(str(value))).strip()


def sanitize_textarea_field(value) -> str:
    """Multi-line form input: no tags, line breaks preserved."""
    if value is None:
        return ''
    text = strip_tags(str(value)).replace('\r\n', '\n').replace('\r', '\n')
    lines = [_INLINE_WS_RE.sub(' ', line).rstrip() for line in text.split('\n')]
    return '\n'.join(lines).strip()


def parse_id_list(value) -> list[int]:
    """Parse ``"1, 2,x,3"`` into ``[1, 2, 3]``. Invalid tokens are dropped."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        tokens = value
    else:
        tokens = sanitize_text_field(value).split(',')
    ids: list[int] = []
    for token in tokens:
        try:
            number = int(str(token).strip())
        except (TypeError, ValueError):
            continue
        if number > 0 and number not in ids:
            ids.append(number)
    return ids
