from __future__ import annotations

import csv
import io
from collections import defaultdict
from datetime import date

import pytest

from creative_labels.analysis.results import AnalysisResult, LabelledVideo, VideoInfo
from creative_labels.errors import InvalidInputShape
from creative_labels.report.export import (
    build_rows,
    export_csv,
    export_filename,
    rows_from_results,
    write_csv,
)
from creative_labels.report.models import ExportRow, Report

HEADER = "Video Filename,Section,Item Number,Content,Detected Vertical,Detected Platform"

REPORT = (
    "**CONTEXT DETECTION:**\n"
    "- Detected Vertical: Beauty (0.9)\n"
    "- Detected Platform: TikTok (0.8)\n"
    "**VISUAL COMPOSITION:**\n"
    "1. Close-up shots\n"
    "2. Bright palette\n"
    "**AUDIO ELEMENTS:**\n"
    "1. Upbeat music\n"
)


def _parse(text: str) -> list[list[str]]:
    return list(csv.reader(io.StringIO(text)))


def test_empty_batch_is_header_only() -> None:
    assert export_csv([]) == HEADER + "\n"


def test_malformed_report_contributes_no_rows() -> None:
    output = export_csv(
        [
            ("broken.mp4", "just some text\nmore text\n"),
            ("good.mp4", "**Visual Elements:**\n1. Bright colors\n2. Fast cuts\n"),
        ]
    )

    lines = output.splitlines()
    assert len(lines) == 3
    assert lines[0] == HEADER
    assert lines[1] == '"good.mp4","Visual Elements","1","Bright colors","Unknown","Unknown"'
    assert lines[2] == '"good.mp4","Visual Elements","2","Fast cuts","Unknown","Unknown"'
    assert output.endswith("\n")


def test_embedded_quotes_are_doubled() -> None:
    output = export_csv([("clip.mp4", '**Quotes:**\n1. He said "hi"')])

    assert '"He said ""hi"""' in output
    assert _parse(output)[1][3] == 'He said "hi"'


def test_embedded_newline_stays_inside_quoted_field() -> None:
    row = ExportRow(
        source_label="a.mp4",
        section_title="S",
        item_index=1,
        item_content="line one\nline two",
    )

    output = write_csv([row])

    assert '"line one\nline two"' in output
    assert _parse(output)[1][3] == "line one\nline two"


def test_context_is_copied_onto_every_row() -> None:
    rows = build_rows([Report(source_label="ad.mp4", raw_text=REPORT)])

    assert [row.section_title for row in rows] == [
        "CONTEXT DETECTION",
        "CONTEXT DETECTION",
        "VISUAL COMPOSITION",
        "VISUAL COMPOSITION",
        "AUDIO ELEMENTS",
    ]
    assert {row.detected_vertical for row in rows} == {"Beauty (0.9)"}
    assert {row.detected_platform for row in rows} == {"TikTok (0.8)"}


def test_item_numbers_are_contiguous_per_section() -> None:
    text = REPORT + "**VISUAL COMPOSITION:**\n1. Late addition\n"
    output = export_csv([{"label": "a.mp4", "rawText": text}, {"label": "b.mp4", "rawText": REPORT}])

    indices: dict[tuple[str, str], list[int]] = defaultdict(list)
    for label, section, index, *_ in _parse(output)[1:]:
        indices[(label, section)].append(int(index))

    for values in indices.values():
        assert values == list(range(1, len(values) + 1))
    assert indices[("a.mp4", "VISUAL COMPOSITION")] == [1, 2, 3]


def test_rows_follow_input_order() -> None:
    rows = build_rows([("z.mp4", REPORT), ("a.mp4", REPORT)])

    labels = [row.source_label for row in rows]
    assert labels == ["z.mp4"] * 5 + ["a.mp4"] * 5


def test_failed_report_is_skipped() -> None:
    output = export_csv(
        [
            Report(source_label="failed.mp4", error="Content blocked: SAFETY"),
            Report(source_label="ok.mp4", raw_text="**S:**\n1. item"),
        ]
    )

    assert "failed.mp4" not in output
    assert len(output.splitlines()) == 2


@pytest.mark.parametrize(
    "batch",
    [
        None,
        "label,text",
        b"bytes",
        {"label": "a", "rawText": "b"},
        (pair for pair in [("a", "b")]),
        [("only-label",)],
        [("a", "b", "c")],
        [42],
        [("a", None)],
        [{"label": "a"}],
        [{"rawText": "text"}],
    ],
)
def test_invalid_batch_shapes_raise(batch) -> None:
    with pytest.raises(InvalidInputShape):
        export_csv(batch)


def test_invalid_entry_fails_whole_batch() -> None:
    with pytest.raises(TypeError):
        build_rows([("good.mp4", REPORT), 7])


def test_rows_from_results_marks_failures() -> None:
    results = [
        LabelledVideo(video_info=VideoInfo(filename="ok.mp4"), analysis=AnalysisResult(analysis=REPORT)),
        LabelledVideo(video_info=VideoInfo(filename="bad.mp4"), error="upload failed", status="failed"),
        LabelledVideo.model_validate({"videoInfo": {}, "analysis": "**S:**\n1. raw"}),
    ]

    reports = rows_from_results(results)

    assert [report.source_label for report in reports] == ["ok.mp4", "bad.mp4", "Unknown"]
    assert reports[1].failed and reports[1].error == "upload failed"
    assert reports[2].raw_text == "**S:**\n1. raw"
    assert len(build_rows(reports)) == 6


def test_export_filename() -> None:
    assert export_filename(date(2024, 5, 1)) == "video-analysis-2024-05-01.csv"
