"""Flatten parsed reports into one CSV table."""

from __future__ import annotations

import csv
import io
from collections.abc import Mapping, Sequence
from datetime import date
from typing import Any, List, Optional

from ..analysis.results import LabelledVideo
from ..errors import InvalidInputShape
from ..util.logging import emit_event, get_logger
from .context import extract_context
from .models import UNKNOWN, ExportRow, Report
from .parser import parse_report

logger = get_logger(__name__)

CSV_MIME_TYPE = "text/csv"
EXPORT_COLUMNS = (
    "Video Filename",
    "Section",
    "Item Number",
    "Content",
    "Detected Vertical",
    "Detected Platform",
)

_LABEL_KEYS = ("label", "source_label", "sourceLabel")
_TEXT_KEYS = ("rawText", "raw_text")


def _pick(entry: Mapping, keys: tuple[str, ...]) -> Any:
    for key in keys:
        if key in entry:
            return entry[key]
    raise InvalidInputShape(f"Report entry is missing one of {', '.join(keys)}")


def _coerce_report(entry: Any, position: int) -> Report:
    if isinstance(entry, Report):
        return entry
    if isinstance(entry, (tuple, list)):
        if len(entry) != 2:
            raise InvalidInputShape(
                f"Report #{position} must be a (label, text) pair, got {len(entry)} items"
            )
        label, text = entry
    elif isinstance(entry, Mapping):
        label, text = _pick(entry, _LABEL_KEYS), _pick(entry, _TEXT_KEYS)
    else:
        raise InvalidInputShape(f"Report #{position} has unsupported type {type(entry).__name__}")

    if not isinstance(label, str) or not isinstance(text, str):
        raise InvalidInputShape(f"Report #{position} label and text must both be strings")
    return Report(source_label=label, raw_text=text)


def validate_reports(reports: Any) -> List[Report]:
    """Check the whole batch up front and return it as ``Report`` objects."""
    if isinstance(reports, (str, bytes, Mapping)) or not isinstance(reports, Sequence):
        raise InvalidInputShape(
            f"Expected an ordered sequence of reports, got {type(reports).__name__}"
        )
    return [_coerce_report(entry, position) for position, entry in enumerate(reports, start=1)]


def report_rows(report: Report) -> List[ExportRow]:
    """Flatten one report. Failed reports yield no rows."""
    if report.failed:
        logger.warning(
            "Skipping failed analysis for %s: %s",
            report.source_label,
            report.error,
            extra={"event": "export.skip", "label": report.source_label},
        )
        return []

    context = extract_context(report.raw_text)
    rows: List[ExportRow] = []
    for title, items in parse_report(report.raw_text).items():
        for index, item in enumerate(items, start=1):
            rows.append(
                ExportRow(
                    source_label=report.source_label,
                    section_title=title,
                    item_index=index,
                    item_content=item,
                    detected_vertical=context.vertical,
                    detected_platform=context.platform,
                )
            )
    if not rows:
        logger.debug("No sections parsed for %s", report.source_label)
    return rows


def build_rows(reports: Any) -> List[ExportRow]:
    """Return export rows for every report, in input order."""
    rows: List[ExportRow] = []
    for report in validate_reports(reports):
        rows.extend(report_rows(report))
    return rows


def write_csv(rows: Sequence[ExportRow]) -> str:
    buffer = io.StringIO()
    buffer.write(",".join(EXPORT_COLUMNS) + "\n")
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for row in rows:
        writer.writerow(row.as_csv_fields())
    return buffer.getvalue()


def export_csv(reports: Any) -> str:
    """Render reports as CSV text: a header line plus one quoted line per item."""
    validated = validate_reports(reports)
    rows: List[ExportRow] = []
    skipped = 0
    for report in validated:
        if report.failed:
            skipped += 1
        rows.extend(report_rows(report))
    emit_event(logger, "export.complete", reports=len(validated), rows=len(rows), skipped=skipped)
    return write_csv(rows)


def rows_from_results(results: Sequence[LabelledVideo]) -> List[Report]:
    """Turn analysis-results entries into reports, marking failures as such."""
    reports: List[Report] = []
    for entry in results:
        label = entry.video_info.filename or UNKNOWN
        text = entry.report_text
        if entry.status == "failed" or text is None:
            reports.append(
                Report(source_label=label, error=entry.error or "analysis unavailable")
            )
        else:
            reports.append(Report(source_label=label, raw_text=text))
    return reports


def export_filename(today: Optional[date] = None) -> str:
    return f"video-analysis-{(today or date.today()).isoformat()}.csv"


__all__ = [
    "CSV_MIME_TYPE",
    "EXPORT_COLUMNS",
    "build_rows",
    "export_csv",
    "export_filename",
    "report_rows",
    "rows_from_results",
    "validate_reports",
    "write_csv",
]
