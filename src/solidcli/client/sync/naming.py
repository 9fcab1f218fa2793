"""Local filename derivation for pulled resources."""

from __future__ import annotations

import re

MAX_NAME_LENGTH = 60

_NON_SLUG_RE = re.compile(r"[^a-z0-9]+")
_UNSAFE_RE = re.compile(r"[^A-Za-z0-9._-]+")


def slugify(text: str) -> str:
    """Lowercase, hyphen-separated, at most 60 characters.

    Example:
        >>> slugify("About Us & Team!")
        'about-us-team'
    """
    return _NON_SLUG_RE.sub("-", text.lower()).strip("-")[:MAX_NAME_LENGTH]


def safe_filename(slug: str) -> str:
    """Make a server slug usable as a filename stem.

    Filesystem-unsafe characters (including path separators) collapse to a
    single hyphen; leading/trailing dots and hyphens are dropped.
    """
    return _UNSAFE_RE.sub("-", slug).strip(".-")[:MAX_NAME_LENGTH]


def derive_filename(
    *,
    slug: str | None,
    label: str | None,
    fallback: str,
    extension: str,
    used: set[str],
    resource_id: int,
) -> str:
    """Pick the local filename for a pulled resource.

    Order of preference: the server slug, a slug of the title/name, then
    ``fallback`` (e.g. ``page-12``). A name already taken in this pull gets
    ``-<id>`` appended, then a counter until the name is free. The chosen
    name is added to ``used``.

    Args:
        slug: Server-provided slug, if any.
        label: Title or name to slugify when there is no slug.
        fallback: Stem used when neither yields anything.
        extension: File extension including the dot.
        used: Filenames already assigned in this pull (mutated).
        resource_id: Remote id, used to break collisions.

    Returns:
        Basename including extension.
    """
    stem = (slug and safe_filename(slug)) or (label and slugify(label)) or fallback
    filename = f"{stem}{extension}"
    if filename in used:
        stem = f"{stem}-{resource_id}"
        filename = f"{stem}{extension}"
        counter = 2
        while filename in used:
            filename = f"{stem}-{counter}{extension}"
            counter += 1
    used.add(filename)
    return filename
