"""Split a creative-label report into titled sections of ordered items.

Reports follow the layout the analysis prompt asks for::

    **VISUAL COMPOSITION:**
    1. Bedroom setting visual.
    2. Single speaker presence.

A line wrapped in ``**`` opens a section. Lines that follow become items of that
section: numbered lines lose their ``N.`` prefix, bullets lose their ``- ``
prefix, and anything else is kept verbatim. Text before the first header is
dropped and sections without items are never returned.

Parsing is best-effort: malformed text yields an empty or partial mapping and
never raises.
"""

from __future__ import annotations

import re
from typing import Dict, Iterator, List, Optional, Tuple

BOLD_MARKER = "**"
BULLET_PREFIX = "- "

_NUMBERED_RE = re.compile(r"^\d+\.")
_NUMBERED_PREFIX_RE = re.compile(r"^\d+\.\s*")


def is_section_header(line: str) -> bool:
    """Return True when a stripped line is wrapped in bold markers."""
    return (
        len(line) >= 2 * len(BOLD_MARKER)
        and line.startswith(BOLD_MARKER)
        and line.endswith(BOLD_MARKER)
    )


def section_title(header: str) -> str:
    """Normalise a header line into its section title."""
    title = header.replace(BOLD_MARKER, "")
    if title.endswith(":"):
        title = title[:-1]
    return title.strip()


def classify_item(line: str) -> str:
    """Return the item text carried by a stripped, non-header line."""
    if _NUMBERED_RE.match(line):
        return _NUMBERED_PREFIX_RE.sub("", line, count=1)
    if line.startswith(BULLET_PREFIX):
        return line[len(BULLET_PREFIX):]
    return line


def iter_sections(raw_text: Optional[str]) -> Iterator[Tuple[str, List[str]]]:
    """Yield ``(title, items)`` for every non-empty section, in document order.

    A title may be yielded more than once when the report repeats a header;
    :func:`parse_report` merges those.
    """
    current: Optional[str] = None
    items: List[str] = []

    for line in (raw_text or "").split("\n"):
        stripped = line.strip()
        if not stripped:
            continue

        if is_section_header(stripped):
            if current is not None and items:
                yield current, items
            current = section_title(stripped)
            items = []
        elif current is not None:
            items.append(classify_item(stripped))

    if current is not None and items:
        yield current, items


def parse_report(raw_text: Optional[str]) -> Dict[str, List[str]]:
    """Parse report text into an insertion-ordered ``{title: items}`` mapping.

    Items of a repeated header are appended to the first section with that
    title, so every title appears once and keeps its first position.
    """
    sections: Dict[str, List[str]] = {}
    for title, items in iter_sections(raw_text):
        sections.setdefault(title, []).extend(items)
    return sections


__all__ = [
    "BOLD_MARKER",
    "classify_item",
    "is_section_header",
    "iter_sections",
    "parse_report",
    "section_title",
]
