"""
Inline marker handling.

Content can wrap spans in two HTML-like markers:

``<exclude-from-llm-txt>``
    shown on the site, never copied into the digest markdown.
``<only-in-llm-txt>``
    removed from the site, kept in the digest markdown.

Matching is case-insensitive, spans lines and allows attributes on the opening
tag. A span without a closing marker is never removed as a whole.
"""

import re
from functools import lru_cache

EXCLUDE_FROM_DIGEST = 'exclude-from-llm-txt'
ONLY_IN_DIGEST = 'only-in-llm-txt'


@lru_cache(maxsize=None)
def _span_pattern(tag):
    return re.compile(r'<{0}[^>]*?>.*?</{0}>'.format(re.escape(tag)), re.IGNORECASE | re.DOTALL)


@lru_cache(maxsize=None)
def _marker_patterns(tag):
    escaped = re.escape(tag)
    return (
        re.compile(r'<{0}[^>]*?>'.format(escaped), re.IGNORECASE),
        re.compile(r'</{0}>'.format(escaped), re.IGNORECASE),
    )


# Marker names are fixed; warm the cache at import.
for _tag in (EXCLUDE_FROM_DIGEST, ONLY_IN_DIGEST):
    _span_pattern(_tag)
    _marker_patterns(_tag)


def remove_tag_and_contents(text, tag):
    """Delete every ``<tag ...>...</tag>`` span, markers included."""
    return _span_pattern(tag).sub('', text)


def remove_tag_only(text, tag):
    """Delete the ``<tag ...>`` and ``</tag>`` markers, keeping what they wrap."""
    opening, closing = _marker_patterns(tag)
    return closing.sub('', opening.sub('', text))


def filter_for_html(text):
    """Prepare raw markdown for the site: keep excluded-from-digest content, drop digest-only content."""
    text = remove_tag_only(text, EXCLUDE_FROM_DIGEST)
    return remove_tag_and_contents(text, ONLY_IN_DIGEST)


def strip_digest_only(html):
    """Second pass over a rendered page; templates can bring marker text back in."""
    return remove_tag_and_contents(html, ONLY_IN_DIGEST)


def filter_for_digest(text):
    """Prepare raw markdown for the digest copy."""
    text = remove_tag_and_contents(text, EXCLUDE_FROM_DIGEST)
    return remove_tag_only(text, ONLY_IN_DIGEST)
