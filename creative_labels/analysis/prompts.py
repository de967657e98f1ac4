"""Prompt text sent to Gemini alongside each uploaded video."""

from __future__ import annotations

REPORT_SECTIONS = (
    "CONTEXT DETECTION",
    "VISUAL COMPOSITION",
    "AUDIO ELEMENTS",
    "TEXT OVERLAYS",
    "TEMPORAL STRUCTURE",
    "PERFORMANCE INDICATORS",
    "VERTICAL CONTEXT",
    "PLATFORM CONTEXT",
)

_SECTION_BLOCKS = "\n\n".join(
    f"**{name}:**\n1. [concise {name.lower()} label]\n2. [concise {name.lower()} label]"
    for name in REPORT_SECTIONS[1:]
)

CREATIVE_LABEL_PROMPT = (
    "You are a video content analyst reviewing a short-form video ad. "
    "Produce creative labels for it, organised into the sections below.\n\n"
    "## ANALYSIS FORMAT\n\n"
    "**CONTEXT DETECTION:**\n"
    "- Detected Vertical: [primary vertical with confidence]\n"
    "- Detected Platform: [primary platform with confidence]\n"
    "- Multi-Vertical: [yes/no]\n"
    "- Platform Optimization: [key platform-specific features]\n\n"
    f"{_SECTION_BLOCKS}\n\n"
    "## FORMAT REFERENCE EXAMPLE\n\n"
    "**CONTEXT DETECTION:**\n"
    "- Detected Vertical: Home Goods / Sleep Health (0.95)\n"
    "- Detected Platform: Short-Form Video / Social Media (0.90)\n"
    "- Multi-Vertical: No\n"
    "- Platform Optimization: Vertical video format, mobile-optimized, fast-paced editing\n\n"
    "**VISUAL COMPOSITION:**\n"
    "1. Bedroom setting visual.\n"
    "2. Single speaker presence.\n"
    "3. Product packaging display.\n\n"
    "**AUDIO ELEMENTS:**\n"
    "1. Female voiceover narration.\n"
    "2. Upbeat background music.\n\n"
    "**TEXT OVERLAYS:**\n"
    "1. Brand name display.\n"
    "2. Call-to-action text overlay.\n\n"
    "**TEMPORAL STRUCTURE:**\n"
    "1. Strong opening hook.\n"
    "2. Problem-solution narrative flow.\n\n"
    "**PERFORMANCE INDICATORS:**\n"
    "1. Direct response advertising.\n\n"
    "**VERTICAL CONTEXT:**\n"
    "1. Bedding product category.\n\n"
    "**PLATFORM CONTEXT:**\n"
    "1. Vertical video format (9:16 aspect ratio).\n\n"
    "## GUIDELINES\n\n"
    "- Keep every label short, specific and literal (e.g. \"Bedroom setting visual\").\n"
    "- Describe what is present in the video, not an essay about it.\n\n"
    "## CRITICAL REQUIREMENTS\n\n"
    "1. Use the exact section headers shown above, wrapped in ** and ending with a colon.\n"
    "2. Number items sequentially within each section.\n"
    "3. Focus on the elements most relevant to the detected vertical and platform.\n"
    "4. Output only the sections; no preamble and no closing remarks.\n"
)

__all__ = ["CREATIVE_LABEL_PROMPT", "REPORT_SECTIONS"]
