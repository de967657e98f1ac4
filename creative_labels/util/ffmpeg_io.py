"""Utilities for interacting with ffprobe."""

from __future__ import annotations

import json
import subprocess
from pathlib import Path
from typing import Any, Dict, Optional

from .logging import get_logger

logger = get_logger(__name__)


class FFmpegError(RuntimeError):
    """Raised when ffprobe fails."""


def ffprobe(path: Path) -> Dict[str, Any]:
    """Return ffprobe metadata parsed as JSON."""
    args = [
        "ffprobe",
        "-v",
        "error",
        "-print_format",
        "json",
        "-show_format",
        "-show_streams",
        str(path),
    ]
    logger.debug("probing video", extra={"event": "ffmpeg.probe", "path": str(path)})
    try:
        result = subprocess.run(args, capture_output=True, text=True)
    except FileNotFoundError as exc:
        raise FFmpegError("ffprobe is not installed") from exc
    if result.returncode != 0:
        raise FFmpegError(f"ffprobe failed: {result.stderr}")
    return json.loads(result.stdout)


def duration_seconds(path: Path) -> Optional[float]:
    """Return the container duration, or None when ffprobe cannot tell."""
    try:
        meta = ffprobe(path)
    except FFmpegError as exc:
        logger.debug("duration unavailable for %s: %s", path, exc)
        return None
    duration = meta.get("format", {}).get("duration")
    if duration is None:
        video_stream = next(
            (s for s in meta.get("streams", []) if s.get("codec_type") == "video"), {}
        )
        duration = video_stream.get("duration")
    try:
        return float(duration) if duration is not None else None
    except (TypeError, ValueError):
        return None
