from __future__ import annotations

import html.entities
import re

_SCRIPT_STYLE_RE = re.compile(r"<(script|style)[^>]*?>.*?</\1>", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]*>")
_LONE_LT_RE = re.compile(r"<(?![a-zA-Z/!?])")
_OCTET_RE = re.compile(r"%[a-fA-F0-9]{2}")
_WHITESPACE_RE = re.compile(r"[\r\n\t ]+")


def sanitize_text_field(value: object) -> str:
    """
    Clean user supplied text the way WordPress's ``sanitize_text_field`` does.

    Strips tags (and the contents of ``<script>``/``<style>``), encodes a
    stray ``<`` that does not open a tag, removes percent-encoded octets,
    collapses line breaks, tabs and runs of spaces, and trims the result.
    Non-string input sanitizes to an empty string.
    """
    if not isinstance(value, str):
        return ""

    text = _SCRIPT_STYLE_RE.sub("", value)
    text = _LONE_LT_RE.sub("&lt;", text)
    text = _TAG_RE.sub("", text)

    # Removing one octet can expose another (e.g. "%%4141").
    while True:
        stripped = _OCTET_RE.sub("", text)
        if stripped == text:
            break
        text = stripped

    return _WHITESPACE_RE.sub(" ", text).strip()


_AMP_RE = re.compile(r"&(?!#[0-9]+;|#[xX][0-9a-fA-F]+;)([a-zA-Z][a-zA-Z0-9]*;)?")


def _escape_amp(match: re.Match) -> str:
    entity = match.group(1)
    if entity and entity in html.entities.html5:
        return match.group(0)
    return "&amp;" + (entity or "")


def esc_html(value: str) -> str:
    """
    Escape text for HTML output without re-encoding existing entities.

    ``&`` is left alone when it starts a numeric or known named entity, so
    text that ``sanitize_text_field`` already encoded (``&lt;``) stays as is.
    """
    text = _AMP_RE.sub(_escape_amp, value)
    return (
        text.replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#039;")
    )
