"""Sanitize platform object names for filesystem paths and identifiers.

Two flavours share one pipeline:
  - filenames:    case preserved, [A-Za-z0-9._-] kept, '_' replacement
  - identifiers:  lowercased, [a-z0-9_-] kept, '-' replacement

Examples:
  sanitize_filename("My API Spec.json")   -> "My_API_Spec.json"
  sanitize_filename("Café & Bar!")        -> "Cafe_Bar"
  sanitize_filename("list-items v2")      -> "list-items_v2"
  sanitize_identifier("User Management")  -> "user-management"
  sanitize_identifier("Shop")             -> "shop"
"""

from __future__ import annotations

import re
import unicodedata

_COMBINING_MARKS = re.compile("[\u0300-\u036f]")


def sanitize_string(
    value: str,
    *,
    allowed: str = r"a-zA-Z0-9\-",
    replacement: str = "-",
    lowercase: bool = True,
    normalize_unicode: bool = True,
    strip_diacritics: bool = True,
    collapse_repeats: bool = True,
    trim_replacement: bool = True,
) -> str:
    """Sanitize a string with configurable rules.

    ``allowed`` is the body of a regex character class; anything outside it
    becomes ``replacement``.
    """
    s = value
    if normalize_unicode:
        s = unicodedata.normalize("NFKD", s)
    if strip_diacritics:
        s = _COMBINING_MARKS.sub("", s)

    # Whitespace folds into the replacement char; identifiers also fold "_"
    if replacement == "-":
        s = re.sub(r"[\s_]+", "-", s)
    elif replacement == "_":
        s = re.sub(r"\s+", "_", s)

    s = re.sub(f"[^{allowed}]", replacement, s)

    escaped = re.escape(replacement)
    if collapse_repeats:
        s = re.sub(f"{escaped}+", replacement, s)
    if trim_replacement:
        s = re.sub(f"^{escaped}+|{escaped}+$", "", s)
    if lowercase:
        s = s.lower()
    return s


def sanitize_filename(name: str) -> str:
    """Filesystem-safe name, case preserved, extensions allowed."""
    return sanitize_string(
        name,
        allowed=r"a-zA-Z0-9._\-",
        replacement="_",
        lowercase=False,
    )


def sanitize_identifier(name: str) -> str:
    """Lowercase slug used for app (API group) directories."""
    return sanitize_string(
        name.lower(),
        allowed=r"a-z0-9_\-",
        replacement="-",
        lowercase=True,
    )


def join_path(*segments: str | None) -> str:
    """Join path segments with '/', dropping empty ones and stray slashes."""
    parts = [str(seg).strip("/") for seg in segments if seg]
    return "/".join(p for p in parts if p)
