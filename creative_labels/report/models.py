"""Records flowing through the report parsing and export pipeline."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

UNKNOWN = "Unknown"


class Report(BaseModel):
    """One creative-analysis report for one video."""

    model_config = ConfigDict(frozen=True)

    source_label: str
    raw_text: str = ""
    error: Optional[str] = None  # set when upstream analysis failed

    @property
    def failed(self) -> bool:
        return self.error is not None


class ReportContext(BaseModel):
    vertical: str = UNKNOWN
    platform: str = UNKNOWN


class ExportRow(BaseModel):
    source_label: str
    section_title: str
    item_index: int = Field(..., ge=1)
    item_content: str
    detected_vertical: str = UNKNOWN
    detected_platform: str = UNKNOWN

    def as_csv_fields(self) -> list[str]:
        return [
            self.source_label,
            self.section_title,
            str(self.item_index),
            self.item_content,
            self.detected_vertical,
            self.detected_platform,
        ]


__all__ = ["ExportRow", "Report", "ReportContext", "UNKNOWN"]
