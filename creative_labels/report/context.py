"""Pull the detected vertical and platform out of a report's context block."""

from __future__ import annotations

import re
from typing import Optional

from .models import UNKNOWN, ReportContext

# Whitespace after the label is consumed within the line only.
_VERTICAL_RE = re.compile(r"Detected Vertical:[ \t]*([^\r\n]+)")
_PLATFORM_RE = re.compile(r"Detected Platform:[ \t]*([^\r\n]+)")


def _first_value(pattern: re.Pattern[str], text: str) -> str:
    for match in pattern.finditer(text):
        value = match.group(1).strip()
        if value:
            return value
    return UNKNOWN


def extract_context(raw_text: Optional[str]) -> ReportContext:
    """Return the first ``Detected Vertical:``/``Detected Platform:`` values found."""
    text = raw_text or ""
    return ReportContext(
        vertical=_first_value(_VERTICAL_RE, text),
        platform=_first_value(_PLATFORM_RE, text),
    )


__all__ = ["extract_context"]
