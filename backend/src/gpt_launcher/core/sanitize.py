"""Idempotent sanitizers applied before persistence and before substitution.

Each function satisfies ``f(f(x)) == f(x)``. They are applied to individual
values, never to a rendered prompt: cleaning the composed string afterwards
could rewrite text that happens to look like a ``{key}`` token.
"""

from __future__ import annotations

import re
from typing import Any
from urllib.parse import urlsplit


_TAG_RE = re.compile(r"<[^>]*>")
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_LINE_WS_RE = re.compile(r"\s+")
_INLINE_WS_RE = re.compile(r"[ \t]+")


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def strip_tags(value: Any) -> str:
    # Repeat until stable so fragments like "<<b>b>" cannot reassemble a tag.
    text = _as_text(value)
    while True:
        stripped = _TAG_RE.sub("", text)
        if stripped == text:
            return stripped
        text = stripped


def sanitize_text(value: Any) -> str:
    """Single-line text: no markup, no control chars, whitespace collapsed."""
    text = strip_tags(value)
    text = _CONTROL_RE.sub("", text)
    return _LINE_WS_RE.sub(" ", text).strip()


def sanitize_textarea(value: Any) -> str:
    """Multi-line text: like ``sanitize_text`` but line breaks survive."""
    text = strip_tags(value).replace("\r\n", "\n").replace("\r", "\n")
    text = _CONTROL_RE.sub("", text)
    lines = [_INLINE_WS_RE.sub(" ", line).strip() for line in text.split("\n")]
    return "\n".join(lines).strip()


def sanitize_value(value: Any) -> str:
    """Submitted form value: control chars removed, markup and braces untouched."""
    text = _as_text(value).replace("\r\n", "\n").replace("\r", "\n")
    return _CONTROL_RE.sub("", text).strip()


def sanitize_url(value: Any) -> str:
    text = _as_text(value).strip()
    if not text or any(ch.isspace() for ch in text):
        return ""
    parts = urlsplit(text)
    if parts.scheme.lower() not in {"http", "https"} or not parts.netloc:
        return ""
    return text
