"""
URL helpers for listing pages.

Canonical property paths look like::

    /projects/{project_slug}/{type}/{title-slug}-{id}

The numeric id at the end is the real lookup key; the readable part in front
of it is decoration and is thrown away when a path is parsed.
"""

import re
from typing import Optional

from flask import current_app, request

FALLBACK_SLUG = "room"

# Accented Latin characters and their plain ASCII spelling.
# Anything not listed here (Thai script included) is left alone.
LATIN_CHAR_MAP = {
    "à": "a",
    "á": "a",
    "â": "a",
    "ä": "a",
    "æ": "ae",
    "å": "a",
    "ã": "a",
    "ā": "a",
    "è": "e",
    "é": "e",
    "ê": "e",
    "ë": "e",
    "ē": "e",
    "ì": "i",
    "í": "i",
    "î": "i",
    "ï": "i",
    "ī": "i",
    "ò": "o",
    "ó": "o",
    "ô": "o",
    "ö": "o",
    "ø": "o",
    "ō": "o",
    "õ": "o",
    "ù": "u",
    "ú": "u",
    "û": "u",
    "ü": "u",
    "ū": "u",
    "ñ": "n",
    "ç": "c",
    "ß": "ss",
    "ý": "y",
    "ỳ": "y",
    "ÿ": "y",
}

_QUOTES_RE = re.compile(r"['`]")
_NON_SLUG_RE = re.compile(r"[^a-z0-9]+")
_HYPHENS_RE = re.compile(r"-{2,}")
_ROOM_ID_RE = re.compile(r"(?:^|-)(\d+)$")


def replace_accents(value: str) -> str:
    return "".join(LATIN_CHAR_MAP.get(char, char) for char in value)


def slugify(value: Optional[str]) -> str:
    """
    Turn display text into a lowercase, hyphen-delimited URL token.

    Returns an empty string when nothing URL-safe is left (e.g. pure Thai
    text). Callers decide what to fall back to.
    """
    if not value:
        return ""

    normalized = replace_accents(value).lower()
    normalized = _QUOTES_RE.sub("", normalized)
    normalized = normalized.replace("&", " and ")
    normalized = _NON_SLUG_RE.sub("-", normalized)

    return _HYPHENS_RE.sub("-", normalized).strip("-")


def _field(record, name: str):
    """Read a field from either a mapping row or a model object."""
    if isinstance(record, dict):
        return record.get(name)
    return getattr(record, name, None)


def build_property_slug(record) -> str:
    """`{slug}-{id}` segment for a property."""
    base = (
        _field(record, "slug_en")
        or _field(record, "title_en")
        or _field(record, "title_th")
        or FALLBACK_SLUG
    )
    slug = slugify(base) or FALLBACK_SLUG
    return f"{slug}-{_field(record, 'id')}"


def build_property_path(record) -> str:
    """Canonical path of a property page."""
    property_type = _field(record, "type")
    # PropertyType enum or the raw column value
    property_type = getattr(property_type, "value", property_type)
    return (
        f"/projects/{_field(record, 'project_slug')}/{property_type}/"
        f"{build_property_slug(record)}"
    )


def parse_room_slug_id(segment: Optional[str]) -> Optional[int]:
    """Pull the trailing numeric id out of a `{slug}-{id}` segment."""
    if not segment:
        return None
    match = _ROOM_ID_RE.search(segment)
    if match is None:
        return None
    return int(match.group(1))


def build_project_path(project_slug: str, tab: Optional[str] = None) -> str:
    path = f"/projects/{project_slug}"
    if tab and tab != "all":
        path = f"{path}/{tab}"
    return path


def canonical_url(path: str, origin: str) -> str:
    """Absolute URL for a `<link rel="canonical">` tag."""
    if path.startswith("http"):
        return path
    return f"{origin.rstrip('/')}{path}"


def site_origin() -> str:
    """Public origin: SITE_ORIGIN when configured, else the request's host."""
    return current_app.config.get("SITE_ORIGIN") or request.url_root.rstrip("/")
