"""Slug rules for public widget URLs."""

from __future__ import annotations

import re
from typing import Optional

SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")
SLUG_MIN_LENGTH = 3
SLUG_MAX_LENGTH = 50

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")


def validate_slug(slug: str) -> Optional[str]:
    """Return an error message for an unusable slug, or None if it is fine."""
    if not slug or not slug.strip():
        return "Widget slug is required"
    if not SLUG_PATTERN.match(slug):
        return "Slug can only contain lowercase letters, numbers, and hyphens"
    if len(slug) < SLUG_MIN_LENGTH:
        return f"Slug must be at least {SLUG_MIN_LENGTH} characters"
    if len(slug) > SLUG_MAX_LENGTH:
        return f"Slug must be less than {SLUG_MAX_LENGTH} characters"
    return None


def slugify(name: str) -> str:
    """Derive a URL-safe slug from a display name."""
    slug = _NON_SLUG_CHARS.sub("-", name.lower()).strip("-")
    return slug[:SLUG_MAX_LENGTH].rstrip("-")
