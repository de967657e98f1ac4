"""Application settings loaded from environment variables."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()


class Settings(BaseModel):
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.5-flash"
    gemini_poll_interval_s: float = 5.0
    gemini_max_poll_attempts: int = 60
    gemini_max_retries: int = 3
    mongodb_uri: Optional[str] = None
    mongodb_db_name: str = "instad"
    target_brand_id: Optional[str] = None
    video_clips_collection: str = "video_clips"
    creative_labels_log_level: Optional[str] = None

    @classmethod
    def from_env(cls) -> "Settings":
        # Unset variables fall back to the field defaults.
        values = {
            "gemini_api_key": os.getenv("GEMINI_API_KEY"),
            "gemini_model": os.getenv("GEMINI_MODEL"),
            "gemini_poll_interval_s": os.getenv("GEMINI_POLL_INTERVAL_S"),
            "gemini_max_poll_attempts": os.getenv("GEMINI_MAX_POLL_ATTEMPTS"),
            "gemini_max_retries": os.getenv("GEMINI_MAX_RETRIES"),
            "mongodb_uri": os.getenv("MONGODB_URI"),
            "mongodb_db_name": os.getenv("MONGODB_DB_NAME"),
            "target_brand_id": os.getenv("TARGET_BRAND_ID"),
            "video_clips_collection": os.getenv("VIDEO_CLIPS_COLLECTION"),
            "creative_labels_log_level": os.getenv("CREATIVE_LABELS_LOG_LEVEL"),
        }
        return cls(**{key: value for key, value in values.items() if value is not None})


@lru_cache()
def get_settings() -> Settings:
    """Return cached Settings instance."""
    return Settings.from_env()
