"""Best-effort reorganisation of reports for human display.

Nothing here is used by the CSV export. Callers opt in when they want
something readable out of text that does not follow the header convention.
"""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Optional, Tuple

from .parser import BOLD_MARKER, is_section_header, parse_report

INTRODUCTION = "Introduction"
OTHER_ELEMENTS = "Other Elements"

# Checked in order; the first bucket with a matching keyword wins.
CONTENT_BUCKETS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    (
        "Visual Elements",
        (
            "visual", "camera", "shot", "composition", "lighting", "color", "scene",
            "setting", "background", "transition", "effect", "animation", "footage", "image",
        ),
    ),
    (
        "Audio Elements",
        ("audio", "voice", "music", "sound", "narration", "speech", "tone", "accent", "voiceover"),
    ),
    (
        "Text & Messaging",
        (
            "text", "overlay", "typography", "font", "message", "copy", "headline",
            "subtitle", "caption", "brand", "logo",
        ),
    ),
    (
        "Temporal Structure",
        (
            "temporal", "structure", "timing", "sequence", "flow", "pacing", "rhythm",
            "timeline", "chronological", "order", "progression", "development",
        ),
    ),
    (
        "Performance & Context",
        (
            "performance", "engagement", "conversion", "hook", "call-to-action", "cta",
            "narrative", "story", "duration", "format", "platform", "vertical", "context",
        ),
    ),
)

SECTION_ORDER: Tuple[str, ...] = (
    INTRODUCTION,
    "BASE LAYER",
    "Visual Composition",
    "Visual Elements",
    "Audio Elements",
    "Text Overlays",
    "Text & Messaging",
    "Temporal Structure",
    "Performance Indicators",
    "Performance & Context",
    "MIDDLE LAYER",
    "Vertical Context",
    "Platform Context",
    "TOP LAYER",
    OTHER_ELEMENTS,
    "Analysis Results",
)

_SECTION_ICONS: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("visual", "composition"), "🎨"),
    (("audio", "sound"), "🎵"),
    (("text", "overlay", "messaging"), "📝"),
    (("temporal", "structure"), "⏱️"),
    (("performance", "indicator"), "📊"),
    (("vertical",), "🎯"),
    (("platform",), "📱"),
    (("context",), "📊"),
    (("base layer", "foundation"), "🏗️"),
    (("middle layer",), "🔗"),
    (("top layer", "dynamic"), "⭐"),
    (("introduction",), "📖"),
    (("other elements",), "🔍"),
)
_DEFAULT_ICON = "📋"

_NUMBER_PREFIX_RE = re.compile(r"^\d+\.\s*")


def _preamble(raw_text: str) -> List[str]:
    lines: List[str] = []
    for line in raw_text.split("\n"):
        stripped = line.strip()
        if not stripped:
            continue
        if is_section_header(stripped):
            break
        lines.append(stripped)
    return lines


def categorize_by_content(lines: Iterable[str]) -> Dict[str, List[str]]:
    """Bucket loose lines by keyword, dropping buckets that stay empty."""
    buckets: Dict[str, List[str]] = {name: [] for name, _ in CONTENT_BUCKETS}
    buckets[OTHER_ELEMENTS] = []

    for line in lines:
        stripped = line.strip()
        if not stripped or stripped.startswith(BOLD_MARKER):
            continue
        lowered = stripped.lower()
        item = _NUMBER_PREFIX_RE.sub("", stripped, count=1)
        target = next(
            (name for name, keywords in CONTENT_BUCKETS if any(k in lowered for k in keywords)),
            OTHER_ELEMENTS,
        )
        buckets[target].append(item)

    return {name: items for name, items in buckets.items() if items}


def organize_for_display(raw_text: Optional[str]) -> Dict[str, List[str]]:
    """Strict parse plus an Introduction bucket, or keyword buckets as a fallback."""
    text = raw_text or ""
    sections = parse_report(text)
    if not sections:
        return categorize_by_content(text.split("\n"))

    intro = _preamble(text)
    if not intro:
        return sections
    organized: Dict[str, List[str]] = {INTRODUCTION: intro}
    for title, items in sections.items():
        organized.setdefault(title, []).extend(items)
    return organized


def _rank(title: str) -> Optional[int]:
    lowered = title.lower()
    for index, name in enumerate(SECTION_ORDER):
        if name.lower() in lowered:
            return index
    return None


def sort_sections(sections: Dict[str, List[str]]) -> List[Tuple[str, List[str]]]:
    """Order sections for display; unknown titles go last, alphabetically."""

    def key(entry: Tuple[str, List[str]]) -> Tuple[int, int, str]:
        rank = _rank(entry[0])
        if rank is None:
            return (1, 0, entry[0].lower())
        return (0, rank, "")

    return sorted(sections.items(), key=key)


def section_icon(title: str) -> str:
    lowered = title.lower()
    for keywords, icon in _SECTION_ICONS:
        if any(keyword in lowered for keyword in keywords):
            return icon
    return _DEFAULT_ICON


__all__ = [
    "CONTENT_BUCKETS",
    "INTRODUCTION",
    "OTHER_ELEMENTS",
    "SECTION_ORDER",
    "categorize_by_content",
    "organize_for_display",
    "section_icon",
    "sort_sections",
]
