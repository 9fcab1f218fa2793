"""Markdown-with-frontmatter framing for knowledge-base entries.

A KB file looks like:

    ---
    id: 7
    title: "Welcome"
    category: general
    ---

    Body text.

The header is a line-oriented subset of YAML: ``key: value`` pairs with
optionally quoted values. Only ``id``, ``title`` and ``category`` are
recognized; other keys are ignored. Values are split on the first colon
only, so an unquoted title may itself contain colons.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

DEFAULT_TITLE = "Untitled"
DEFAULT_CATEGORY = "general"

_FRONTMATTER_RE = re.compile(r"^---\n(.*?)\n---\n(.*)$", re.DOTALL)
_LEADING_INT_RE = re.compile(r"^[+-]?\d+")


@dataclass(frozen=True)
class KbDocument:
    """Parsed KB markdown file."""

    title: str
    category: str
    content: str
    id: int | None = None

    def to_fields(self) -> dict[str, str]:
        """Fields sent to the KB create/update endpoints."""
        return {"title": self.title, "category": self.category, "content": self.content}


def _strip_quotes(value: str) -> str:
    double_quoted = len(value) >= 2 and value[0] == '"' and value[-1] == '"'
    if value[:1] in ("'", '"'):
        value = value[1:]
    if value[-1:] in ("'", '"'):
        value = value[:-1]
    if double_quoted:
        value = value.replace('\\"', '"')
    return value


def parse_kb_markdown(text: str) -> KbDocument:
    """Parse a KB markdown file.

    Args:
        text: File contents.

    Returns:
        KbDocument; without a header block the whole trimmed text is the
        body, with title "Untitled" and category "general".
    """
    text = text.replace("\r\n", "\n")
    match = _FRONTMATTER_RE.match(text)
    if not match:
        return KbDocument(
            title=DEFAULT_TITLE, category=DEFAULT_CATEGORY, content=text.strip()
        )

    header, body = match.groups()
    entry_id: int | None = None
    title = DEFAULT_TITLE
    category = DEFAULT_CATEGORY

    for line in header.split("\n"):
        key, _, value = line.partition(":")
        key = key.strip()
        value = value.strip()
        if key == "id":
            number = _LEADING_INT_RE.match(value)
            entry_id = int(number.group()) if number else None
        elif key == "title":
            title = _strip_quotes(value)
        elif key == "category":
            category = value or DEFAULT_CATEGORY

    return KbDocument(title=title, category=category, content=body.strip(), id=entry_id)


def render_kb_markdown(
    entry_id: int, title: str | None, category: str | None, content: str | None
) -> str:
    """Render a KB entry in the framing parse_kb_markdown reads."""
    escaped = (title or "").replace('"', '\\"')
    lines = [
        "---",
        f"id: {entry_id}",
        f'title: "{escaped}"',
        f"category: {category or DEFAULT_CATEGORY}",
        "---",
        "",
        content or "",
        "",
    ]
    return "\n".join(lines)
