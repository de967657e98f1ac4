"""Exception types raised by creative_labels."""

from __future__ import annotations


class CreativeLabelsError(RuntimeError):
    """Base class for errors raised by this package."""


class InvalidInputShape(CreativeLabelsError, TypeError):
    """Raised when an export batch is not an ordered sequence of label/text pairs."""


class AnalysisError(CreativeLabelsError):
    """Raised when the upstream video analysis did not produce a report."""


class UploadError(AnalysisError):
    """Raised when a video could not be uploaded to Gemini."""


class FileProcessingError(AnalysisError):
    """Raised when an uploaded file never reaches the ACTIVE state."""


class ContentBlockedError(AnalysisError):
    """Raised when Gemini refuses to analyse the content."""

    def __init__(self, block_reason: str) -> None:
        super().__init__(
            f"Content blocked: {block_reason}. This may be due to content policy violations."
        )
        self.block_reason = block_reason


__all__ = [
    "AnalysisError",
    "ContentBlockedError",
    "CreativeLabelsError",
    "FileProcessingError",
    "InvalidInputShape",
    "UploadError",
]
