"""Result records produced by video analysis and stored in results files."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AnalysisResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    analysis: str
    format: Literal["text"] = "text"
    timestamp: datetime = Field(default_factory=_utcnow)
    file_size_mb: Optional[float] = Field(default=None, alias="fileSizeMb")


class VideoInfo(BaseModel):
    filename: str = "Unknown"
    url: Optional[str] = None
    size: Optional[int] = None
    mimetype: Optional[str] = None


class LabelledVideo(BaseModel):
    """One entry of a results file: a video and its analysis, or the failure."""

    model_config = ConfigDict(populate_by_name=True)

    video_info: VideoInfo = Field(default_factory=VideoInfo, alias="videoInfo")
    # Results exported by the dashboard may carry the raw text directly.
    analysis: Union[AnalysisResult, str, None] = None
    error: Optional[str] = None
    status: Literal["completed", "failed"] = "completed"

    @property
    def report_text(self) -> Optional[str]:
        if isinstance(self.analysis, AnalysisResult):
            return self.analysis.analysis
        return self.analysis


class BatchResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_videos: int = Field(0, alias="totalVideos")
    completed: int = 0
    failed: int = 0
    results: List[LabelledVideo] = Field(default_factory=list)

    @classmethod
    def from_entries(cls, entries: List[LabelledVideo]) -> "BatchResult":
        completed = sum(1 for entry in entries if entry.status == "completed")
        return cls(
            total_videos=len(entries),
            completed=completed,
            failed=len(entries) - completed,
            results=entries,
        )


def load_results(path: Path) -> List[LabelledVideo]:
    """Load a results file.

    Accepts a batch object, a bare list of entries, or the dashboard's export
    request body (``{"analysisResults": [...]}``).
    """
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    if isinstance(payload, dict):
        if "analysisResults" in payload:
            payload = payload["analysisResults"]
        else:
            return BatchResult.model_validate(payload).results
    if not isinstance(payload, list):
        raise ValueError(f"Unsupported results file layout in {path}")
    return [LabelledVideo.model_validate(entry) for entry in payload]


def save_results(batch: BatchResult, path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(batch.model_dump_json(by_alias=True, indent=2), encoding="utf-8")
    return path


__all__ = [
    "AnalysisResult",
    "BatchResult",
    "LabelledVideo",
    "VideoInfo",
    "load_results",
    "save_results",
]
