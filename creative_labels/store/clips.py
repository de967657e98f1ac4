"""MongoDB access for per-clip analysis metadata.

Clips belong to a whole video (``videoInfo.url``). A whole video's ad type is
the dominant one across its clips: the most frequent non-empty
``analysis.adType``, ties going to the lexicographically smallest value.
"""

from __future__ import annotations

from collections import Counter
from typing import Any, Dict, Iterable, List, Optional, Union

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pymongo import MongoClient
from pymongo.collection import Collection

from ..report.models import UNKNOWN
from ..util.logging import get_logger

logger = get_logger(__name__)


def dominant_ad_type(ad_types: Iterable[Optional[str]]) -> Optional[str]:
    """Return the most frequent non-empty ad type, breaking ties alphabetically."""
    counts = Counter(ad_type for ad_type in ad_types if ad_type)
    if not counts:
        return None
    return min(counts.items(), key=lambda item: (-item[1], item[0]))[0]


class Clip(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(default=None, alias="_id")
    sno: Optional[int] = None
    audio_text: Optional[str] = Field(default=None, alias="audioText")
    url: Optional[str] = None
    video_info_url: Optional[str] = Field(default=None, alias="videoInfoUrl")
    ad_type: Optional[str] = Field(default=None, alias="adType")
    content_category: Optional[str] = Field(default=None, alias="contentCategory")
    visual_description: Optional[str] = Field(default=None, alias="visualDescription")
    duration: Union[float, str, None] = None
    start: Union[float, str, None] = None
    end: Union[float, str, None] = None
    confidence: Optional[float] = None
    tags: List[str] = Field(default_factory=list)
    emotions: List[str] = Field(default_factory=list)
    objects: List[str] = Field(default_factory=list)
    scenes: List[Any] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        return str(value) if isinstance(value, ObjectId) else value

    @field_validator("tags", "emotions", "objects", "scenes", mode="before")
    @classmethod
    def _none_to_list(cls, value: Any) -> Any:
        return [] if value is None else value

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Clip":
        """Build a clip from a raw ``video_clips`` document."""
        analysis = doc.get("analysis") or {}
        return cls(
            _id=doc.get("_id"),
            sno=doc.get("sno"),
            audioText=doc.get("audioText"),
            url=doc.get("url"),
            videoInfoUrl=(doc.get("videoInfo") or {}).get("url"),
            adType=analysis.get("adType"),
            contentCategory=analysis.get("contentCategory"),
            visualDescription=analysis.get("visualDescription"),
            duration=doc.get("duration"),
            start=doc.get("start"),
            end=doc.get("end"),
            confidence=analysis.get("confidence"),
            tags=analysis.get("tags"),
            emotions=analysis.get("emotions"),
            objects=analysis.get("objects"),
            scenes=analysis.get("scenes"),
        )


class VideoGroup(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    whole_video_url: str = Field(alias="wholeVideoUrl")
    clips: List[Clip] = Field(default_factory=list)
    total_clips: int = Field(0, alias="totalClips")
    ad_type: str = Field(UNKNOWN, alias="adType")

    @field_validator("ad_type", mode="before")
    @classmethod
    def _default_ad_type(cls, value: Any) -> Any:
        return value or UNKNOWN

    @classmethod
    def from_clips(cls, url: str, clips: List[Clip]) -> "VideoGroup":
        return cls(
            whole_video_url=url,
            clips=clips,
            total_clips=len(clips),
            ad_type=dominant_ad_type(clip.ad_type for clip in clips),
        )


class AdFormat(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    format: str
    video_count: int = Field(alias="videoCount")


_CLIP_FIELDS = {
    "_id": "$$clip._id",
    "sno": "$$clip.sno",
    "audioText": "$$clip.audioText",
    "url": "$$clip.url",
    "videoInfoUrl": "$$clip.videoInfo.url",
    "adType": "$$clip.analysis.adType",
    "contentCategory": "$$clip.analysis.contentCategory",
    "visualDescription": "$$clip.analysis.visualDescription",
    "duration": "$$clip.duration",
    "start": "$$clip.start",
    "end": "$$clip.end",
    "confidence": "$$clip.analysis.confidence",
    "tags": "$$clip.analysis.tags",
    "emotions": "$$clip.analysis.emotions",
    "objects": "$$clip.analysis.objects",
    "scenes": "$$clip.analysis.scenes",
}

_LIST_PROJECTION = {"_id": 1, "sno": 1, "audioText": 1, "url": 1, "videoInfo.url": 1, "analysis.adType": 1}


def dominant_ad_type_stages() -> List[Dict[str, Any]]:
    """Stages grouping clips by whole video and adding ``dominantAdType``."""
    return [
        {
            "$group": {
                "_id": "$videoInfo.url",
                "clips": {"$push": "$$ROOT"},
                "adTypes": {"$addToSet": "$analysis.adType"},
            }
        },
        {
            "$addFields": {
                "adTypeCounts": {
                    "$map": {
                        "input": {
                            "$filter": {
                                "input": "$adTypes",
                                "as": "adType",
                                "cond": {
                                    "$and": [
                                        {"$ne": ["$$adType", None]},
                                        {"$ne": ["$$adType", ""]},
                                    ]
                                },
                            }
                        },
                        "as": "adType",
                        "in": {
                            "adType": "$$adType",
                            "count": {
                                "$size": {
                                    "$filter": {
                                        "input": "$clips",
                                        "as": "clip",
                                        "cond": {"$eq": ["$$clip.analysis.adType", "$$adType"]},
                                    }
                                }
                            },
                        },
                    }
                }
            }
        },
        {
            "$addFields": {
                "dominantAdType": {
                    "$ifNull": [
                        {
                            "$arrayElemAt": [
                                {
                                    "$sortArray": {
                                        "input": "$adTypeCounts",
                                        "sortBy": {"count": -1, "adType": 1},
                                    }
                                },
                                0,
                            ]
                        },
                        {"adType": None, "count": 0},
                    ]
                }
            }
        },
    ]


def _video_projection() -> Dict[str, Any]:
    return {
        "$project": {
            "wholeVideoUrl": "$_id",
            "clips": {"$map": {"input": "$clips", "as": "clip", "in": _CLIP_FIELDS}},
            "totalClips": {"$size": "$clips"},
            "adType": "$dominantAdType.adType",
        }
    }


class ClipStore:
    """Queries over the ``video_clips`` collection for one brand."""

    def __init__(self, collection: Collection, brand_id: Union[ObjectId, str]) -> None:
        self.collection = collection
        self.brand_id = ObjectId(brand_id) if isinstance(brand_id, str) else brand_id

    @classmethod
    def from_settings(cls, settings: Any) -> "ClipStore":
        if not settings.mongodb_uri:
            raise ValueError("MONGODB_URI is required for clip queries.")
        if not settings.target_brand_id:
            raise ValueError("TARGET_BRAND_ID is required for clip queries.")
        client: MongoClient = MongoClient(settings.mongodb_uri)
        collection = client[settings.mongodb_db_name][settings.video_clips_collection]
        logger.info(
            "Connected to MongoDB",
            extra={"event": "mongo.connect", "collection": settings.video_clips_collection},
        )
        return cls(collection, settings.target_brand_id)

    def _aggregate(self, pipeline: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        logger.debug("aggregate", extra={"event": "mongo.aggregate", "stages": len(pipeline)})
        return list(self.collection.aggregate(pipeline))

    def list_formats(self) -> List[AdFormat]:
        """Ad formats with the number of whole videos whose dominant type they are."""
        pipeline = [
            {"$match": {"brandId": self.brand_id}},
            *dominant_ad_type_stages(),
            {"$group": {"_id": "$dominantAdType.adType", "videoCount": {"$sum": 1}}},
            {"$sort": {"videoCount": -1, "_id": 1}},
        ]
        groups = [doc for doc in self._aggregate(pipeline) if doc.get("_id")]
        return [
            AdFormat(id=index, format=doc["_id"], video_count=doc["videoCount"])
            for index, doc in enumerate(groups, start=1)
        ]

    def videos_for_format(self, ad_format: str) -> List[VideoGroup]:
        pipeline = [
            {"$match": {"brandId": self.brand_id}},
            *dominant_ad_type_stages(),
            {"$match": {"dominantAdType.adType": ad_format}},
            _video_projection(),
        ]
        return [VideoGroup.model_validate(doc) for doc in self._aggregate(pipeline)]

    def whole_video(self, video_url: str) -> Optional[VideoGroup]:
        pipeline = [
            {"$match": {"brandId": self.brand_id, "videoInfo.url": video_url}},
            *dominant_ad_type_stages(),
            _video_projection(),
        ]
        docs = self._aggregate(pipeline)
        if not docs:
            return None
        return VideoGroup.model_validate(docs[0])

    def list_clips(self) -> List[Clip]:
        cursor = self.collection.find({"brandId": self.brand_id}, _LIST_PROJECTION).sort("sno", 1)
        return [Clip.from_document(doc) for doc in cursor]

    def get_clip(self, clip_id: str) -> Optional[Clip]:
        try:
            object_id = ObjectId(clip_id)
        except (InvalidId, TypeError) as exc:
            raise ValueError(f"Invalid clip id: {clip_id}") from exc
        doc = self.collection.find_one({"_id": object_id, "brandId": self.brand_id}, _LIST_PROJECTION)
        return Clip.from_document(doc) if doc else None


__all__ = [
    "AdFormat",
    "Clip",
    "ClipStore",
    "VideoGroup",
    "dominant_ad_type",
    "dominant_ad_type_stages",
]
