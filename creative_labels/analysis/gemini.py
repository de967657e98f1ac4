"""Gemini video-understanding client producing creative-label reports."""

from __future__ import annotations

import math
import os
import tempfile
import time
from pathlib import Path
from typing import Any, Iterable, Optional
from urllib.parse import urlparse

import requests

from ..errors import AnalysisError, ContentBlockedError, FileProcessingError, UploadError
from ..util.logging import emit_event, get_logger
from .prompts import CREATIVE_LABEL_PROMPT
from .results import AnalysisResult, BatchResult, LabelledVideo, VideoInfo

logger = get_logger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"
VIDEO_MIME_TYPE = "video/mp4"

GENERATION_CONFIG = {
    "temperature": 0.1,
    "topP": 0.8,
    "topK": 40,
    "maxOutputTokens": 8192,
}
SAFETY_SETTINGS = [
    {"category": category, "threshold": "BLOCK_MEDIUM_AND_ABOVE"}
    for category in (
        "HARM_CATEGORY_HARASSMENT",
        "HARM_CATEGORY_HATE_SPEECH",
        "HARM_CATEGORY_SEXUALLY_EXPLICIT",
        "HARM_CATEGORY_DANGEROUS_CONTENT",
    )
]

# (upper bound in minutes, estimated seconds)
_ESTIMATE_STEPS = ((8, 60), (16, 120), (24, 180), (32, 240), (40, 300), (60, 450))


def estimate_analysis_seconds(duration_minutes: float) -> int:
    """Rough wall-clock time Gemini needs for a video of the given length."""
    for limit, seconds in _ESTIMATE_STEPS:
        if duration_minutes <= limit:
            return seconds
    return math.ceil(duration_minutes * 7.5)


def extract_text(payload: dict) -> str:
    """Concatenate the text parts of the first candidate."""
    candidates = payload.get("candidates") or []
    if not candidates:
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "\n".join(p.get("text", "") for p in parts if "text" in p).strip()


class GeminiClient:
    """Thin wrapper around the Gemini REST API: upload, poll, generate."""

    api_root = "https://generativelanguage.googleapis.com/v1beta"
    upload_endpoint = "https://generativelanguage.googleapis.com/upload/v1beta/files"

    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_MODEL,
        *,
        poll_interval_s: float = 5.0,
        max_poll_attempts: int = 60,
        max_retries: int = 3,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not api_key:
            raise ValueError("GEMINI_API_KEY is required for video analysis.")
        self.api_key = api_key
        self.model = model
        self.poll_interval_s = poll_interval_s
        self.max_poll_attempts = max_poll_attempts
        self.max_retries = max_retries
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Any, session: Optional[requests.Session] = None) -> "GeminiClient":
        return cls(
            settings.gemini_api_key,
            settings.gemini_model,
            poll_interval_s=settings.gemini_poll_interval_s,
            max_poll_attempts=settings.gemini_max_poll_attempts,
            max_retries=settings.gemini_max_retries,
            session=session,
        )

    @property
    def generate_endpoint(self) -> str:
        return f"{self.api_root}/models/{self.model}:generateContent"

    def _params(self) -> dict[str, str]:
        return {"key": self.api_key}

    # ---------- file upload & polling ----------

    def upload_video(self, video_path: Path, mime_type: str = VIDEO_MIME_TYPE) -> dict[str, Any]:
        """Upload a video with the resumable protocol and return the file resource."""
        video_path = Path(video_path)
        num_bytes = video_path.stat().st_size
        emit_event(
            logger,
            "gemini.upload.start",
            file=video_path.name,
            size_mb=round(num_bytes / 1024 / 1024, 2),
        )

        headers = {
            "X-Goog-Upload-Protocol": "resumable",
            "X-Goog-Upload-Command": "start",
            "X-Goog-Upload-Header-Content-Length": str(num_bytes),
            "X-Goog-Upload-Header-Content-Type": mime_type,
            "Content-Type": "application/json",
        }
        payload = {"file": {"display_name": video_path.name}}

        try:
            init_response = self.session.post(
                self.upload_endpoint,
                params=self._params(),
                headers=headers,
                json=payload,
                timeout=30,
            )
        except requests.RequestException as exc:
            raise UploadError(f"File upload failed: {exc}") from exc
        if not init_response.ok:
            raise UploadError(
                f"Failed to initiate upload: {init_response.status_code} {init_response.text}"
            )

        upload_url = init_response.headers.get("X-Goog-Upload-URL")
        if not upload_url:
            raise UploadError("No upload URL returned from Gemini API")

        upload_headers = {
            "Content-Length": str(num_bytes),
            "X-Goog-Upload-Offset": "0",
            "X-Goog-Upload-Command": "upload, finalize",
        }
        try:
            with video_path.open("rb") as video_file:
                upload_response = self.session.post(
                    upload_url,
                    headers=upload_headers,
                    data=video_file,
                    timeout=300,
                )
        except requests.RequestException as exc:
            raise UploadError(f"File upload failed: {exc}") from exc
        if not upload_response.ok:
            raise UploadError(
                f"Failed to upload video data: {upload_response.status_code} {upload_response.text}"
            )

        file_info = upload_response.json().get("file", {})
        if not file_info.get("name"):
            raise UploadError("No file name returned from upload")
        logger.info(
            "Video uploaded",
            extra={"event": "gemini.upload.complete", "file": file_info.get("name")},
        )
        return file_info

    def wait_for_file_ready(self, file_name: str) -> dict[str, Any]:
        """Poll file status until it is ACTIVE."""
        # file_name already has the "files/xxxx" form
        url = f"{self.api_root}/{file_name}"
        last_error: Optional[Exception] = None

        for attempt in range(1, self.max_poll_attempts + 1):
            try:
                response = self.session.get(url, params=self._params(), timeout=30)
                if not response.ok:
                    raise FileProcessingError(
                        f"Failed to check file status: {response.status_code} {response.text}"
                    )
                file_info = response.json()
            except (requests.RequestException, FileProcessingError) as exc:
                last_error = exc
                logger.warning(
                    "Error checking file status (attempt %d/%d): %s",
                    attempt,
                    self.max_poll_attempts,
                    exc,
                )
            else:
                state = file_info.get("state", "STATE_UNSPECIFIED")
                logger.debug(
                    "File state: %s",
                    state,
                    extra={"event": "gemini.poll", "file": file_name, "attempt": attempt},
                )
                if state == "ACTIVE":
                    logger.info("File is ready", extra={"event": "gemini.processing.complete"})
                    return file_info
                if state == "FAILED":
                    raise FileProcessingError(
                        f"File processing failed: {file_info.get('error', 'Unknown error')}"
                    )

            if attempt < self.max_poll_attempts:
                time.sleep(self.poll_interval_s)

        message = f"File {file_name} never became ready after {self.max_poll_attempts} attempts"
        if last_error is not None:
            message += f". Last error: {last_error}"
        raise FileProcessingError(message) from last_error

    # ---------- generation ----------

    def _generate_once(self, file_uri: str, mime_type: str) -> str:
        payload = {
            "contents": [
                {
                    "parts": [
                        {"file_data": {"mime_type": mime_type, "file_uri": file_uri}},
                        {"text": CREATIVE_LABEL_PROMPT},
                    ]
                }
            ],
            "generationConfig": GENERATION_CONFIG,
            "safetySettings": SAFETY_SETTINGS,
        }
        response = self.session.post(
            self.generate_endpoint,
            params=self._params(),
            headers={"Content-Type": "application/json"},
            json=payload,
            timeout=120,
        )
        if not response.ok:
            raise AnalysisError(f"Gemini API error: {response.status_code} {response.text}")

        body = response.json()
        block_reason = (body.get("promptFeedback") or {}).get("blockReason")
        if block_reason:
            raise ContentBlockedError(block_reason)

        text = extract_text(body)
        if not text:
            raise AnalysisError("No analysis text received from Gemini API")
        return text

    def generate_labels(self, file_uri: str, mime_type: str = VIDEO_MIME_TYPE) -> str:
        """Ask Gemini for the creative-label report, retrying transient failures."""
        for attempt in range(1, self.max_retries + 1):
            try:
                text = self._generate_once(file_uri, mime_type)
            except ContentBlockedError:
                raise
            except (requests.RequestException, AnalysisError, ValueError) as exc:
                logger.warning("Attempt %d/%d failed: %s", attempt, self.max_retries, exc)
                if attempt == self.max_retries:
                    raise AnalysisError(
                        f"All {self.max_retries} attempts failed. Last error: {exc}"
                    ) from exc
                time.sleep(2**attempt)
            else:
                emit_event(logger, "gemini.generate.complete", attempt=attempt, chars=len(text))
                return text
        raise AnalysisError("max_retries must be at least 1")

    # ---------- analysis ----------

    def analyze_video(self, video_path: Path) -> AnalysisResult:
        """Upload a local video, wait for it, and return its creative-label report."""
        video_path = Path(video_path)
        size_mb = round(video_path.stat().st_size / 1024 / 1024, 2)
        logger.info("Starting analysis", extra={"event": "analysis.start", "path": str(video_path)})

        uploaded = self.upload_video(video_path)
        ready = self.wait_for_file_ready(str(uploaded["name"]))
        file_uri = ready.get("uri") or uploaded.get("uri")
        if not file_uri:
            raise UploadError("No URI returned for processed video")
        mime_type = ready.get("mimeType") or uploaded.get("mimeType") or VIDEO_MIME_TYPE

        text = self.generate_labels(str(file_uri), str(mime_type))
        logger.info("Analysis complete", extra={"event": "analysis.complete"})
        return AnalysisResult(analysis=text, file_size_mb=size_mb)

    def _download(self, url: str, destination: Path) -> None:
        logger.info("Downloading video", extra={"event": "gemini.download", "url": url})
        with self.session.get(url, stream=True, timeout=180) as response:
            if response.status_code != 200:
                raise AnalysisError(f"Failed to download video: {response.status_code}")
            with destination.open("wb") as handle:
                for chunk in response.iter_content(chunk_size=8192):
                    if chunk:
                        handle.write(chunk)

    def analyze_video_url(self, video_url: str) -> AnalysisResult:
        """Download a remote video to a temporary file and analyse it."""
        handle, temp_name = tempfile.mkstemp(prefix="creative_labels_", suffix=".mp4")
        os.close(handle)
        temp_path = Path(temp_name)
        try:
            self._download(video_url, temp_path)
            return self.analyze_video(temp_path)
        finally:
            temp_path.unlink(missing_ok=True)

    def analyze_batch(self, video_paths: Iterable[Path]) -> BatchResult:
        """Analyse videos one after another; a failed video does not stop the batch."""
        entries: list[LabelledVideo] = []
        for video_path in map(Path, video_paths):
            info = VideoInfo(filename=video_path.name, mimetype=VIDEO_MIME_TYPE)
            try:
                info.size = video_path.stat().st_size
                result = self.analyze_video(video_path)
            except Exception as exc:  # noqa: BLE001
                logger.error("Error analyzing %s: %s", video_path.name, exc)
                entries.append(LabelledVideo(video_info=info, error=str(exc), status="failed"))
            else:
                entries.append(LabelledVideo(video_info=info, analysis=result))

        batch = BatchResult.from_entries(entries)
        emit_event(
            logger,
            "analysis.batch.complete",
            total=batch.total_videos,
            completed=batch.completed,
            failed=batch.failed,
        )
        return batch


def filename_from_url(video_url: str, default: str = "video.mp4") -> str:
    name = Path(urlparse(video_url).path).name
    return name or default


__all__ = [
    "GeminiClient",
    "estimate_analysis_seconds",
    "extract_text",
    "filename_from_url",
]
