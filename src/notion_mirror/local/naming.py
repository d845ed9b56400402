"""Utilities for mapping Notion page titles to filesystem-friendly names."""

from __future__ import annotations

import re


_RESERVED_RE = re.compile(r'[<>:"/\\|?*\x00-\x1f\x7f]')
_WHITESPACE_RE = re.compile(r"\s+")
_HYPHENS_RE = re.compile(r"-{2,}")
# Leaves room for the extension within the usual 255-byte name limit.
MAX_NAME_BYTES = 240


def sanitize_filename(title: str, *, fallback: str = "page") -> str:
    """Return a filesystem-safe name derived from ``title``.

    Case and non-ASCII letters are preserved. Path separators and characters
    reserved on Windows become hyphens, runs of whitespace collapse to one
    space, and leading/trailing dots, spaces and hyphens are trimmed so the
    result can never be ``.``, ``..`` or a hidden file. ``fallback`` is
    returned when nothing usable is left.
    """

    value = _WHITESPACE_RE.sub(" ", title)
    value = _RESERVED_RE.sub("-", value)
    value = _HYPHENS_RE.sub("-", value)
    value = value.strip(" .-")
    value = truncate_utf8(value, MAX_NAME_BYTES).rstrip(" .-")
    return value or fallback


def truncate_utf8(value: str, max_bytes: int) -> str:
    """Cut ``value`` to at most ``max_bytes`` of UTF-8 without splitting a character."""

    return value.encode("utf-8")[:max_bytes].decode("utf-8", errors="ignore")
