from __future__ import annotations

from creative_labels.report.display import (
    categorize_by_content,
    organize_for_display,
    section_icon,
    sort_sections,
)


def test_preamble_becomes_introduction() -> None:
    text = "Overview of the ad.\n- Short and punchy\n**Audio Elements:**\n1. Voiceover"

    sections = organize_for_display(text)

    assert list(sections) == ["Introduction", "Audio Elements"]
    assert sections["Introduction"] == ["Overview of the ad.", "- Short and punchy"]


def test_structured_report_is_unchanged_without_preamble() -> None:
    text = "**A:**\n1. x\n**B:**\n1. y"

    assert organize_for_display(text) == {"A": ["x"], "B": ["y"]}


def test_unstructured_text_falls_back_to_keyword_buckets() -> None:
    text = "1. Bright camera work\nUpbeat music\nBold brand logo\nFast pacing\nJust some words\n**Lonely**"

    sections = organize_for_display(text)

    assert sections == {
        "Visual Elements": ["Bright camera work"],
        "Audio Elements": ["Upbeat music"],
        "Text & Messaging": ["Bold brand logo"],
        "Temporal Structure": ["Fast pacing"],
        "Other Elements": ["Just some words"],
    }


def test_first_matching_bucket_wins() -> None:
    # "scene" is a visual keyword and "music" an audio one; visual is checked first.
    assert categorize_by_content(["Scene with music"]) == {"Visual Elements": ["Scene with music"]}


def test_empty_buckets_are_dropped() -> None:
    assert categorize_by_content(["", "   ", "**Header**"]) == {}


def test_sort_sections_uses_canonical_order() -> None:
    sections = {
        "Zeta": ["z"],
        "AUDIO ELEMENTS": ["a"],
        "alpha": ["x"],
        "Visual Composition": ["v"],
        "Introduction": ["i"],
    }

    ordered = [title for title, _ in sort_sections(sections)]

    assert ordered == ["Introduction", "Visual Composition", "AUDIO ELEMENTS", "alpha", "Zeta"]


def test_section_icon() -> None:
    assert section_icon("AUDIO ELEMENTS") == "🎵"
    assert section_icon("VISUAL COMPOSITION") == "🎨"
    assert section_icon("Introduction") == "📖"
    assert section_icon("Misc") == "📋"
