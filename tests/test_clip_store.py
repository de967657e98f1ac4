from __future__ import annotations

from typing import Any

import pytest
from bson import ObjectId

from creative_labels.store.clips import Clip, ClipStore, VideoGroup, dominant_ad_type

BRAND_ID = "64b7f0c2a1b2c3d4e5f60718"


class FakeCursor(list):
    def sort(self, key: str, direction: int) -> "FakeCursor":
        return FakeCursor(sorted(self, key=lambda doc: doc.get(key) or 0, reverse=direction < 0))


class FakeCollection:
    def __init__(self, aggregate_docs: list[dict] | None = None, docs: list[dict] | None = None) -> None:
        self.aggregate_docs = aggregate_docs or []
        self.docs = docs or []
        self.pipelines: list[list[dict]] = []
        self.queries: list[tuple[dict, Any]] = []

    def aggregate(self, pipeline: list[dict]) -> list[dict]:
        self.pipelines.append(pipeline)
        return list(self.aggregate_docs)

    def find(self, query: dict, projection: Any = None) -> FakeCursor:
        self.queries.append((query, projection))
        return FakeCursor(self.docs)

    def find_one(self, query: dict, projection: Any = None) -> dict | None:
        self.queries.append((query, projection))
        return next((doc for doc in self.docs if doc["_id"] == query["_id"]), None)


@pytest.mark.parametrize(
    ("ad_types", "expected"),
    [
        (["UGC", "Demo", "UGC"], "UGC"),
        (["b", "a", "b", "a"], "a"),
        (["Testimonial", None, "", None], "Testimonial"),
        ([None, ""], None),
        ([], None),
    ],
)
def test_dominant_ad_type(ad_types: list, expected: str | None) -> None:
    assert dominant_ad_type(ad_types) == expected


def test_list_formats_drops_empty_types_and_ranks() -> None:
    collection = FakeCollection(
        aggregate_docs=[
            {"_id": "UGC", "videoCount": 3},
            {"_id": None, "videoCount": 2},
            {"_id": "Demo", "videoCount": 1},
        ]
    )
    store = ClipStore(collection, BRAND_ID)  # type: ignore[arg-type]

    formats = store.list_formats()

    assert [(f.id, f.format, f.video_count) for f in formats] == [(1, "UGC", 3), (2, "Demo", 1)]
    pipeline = collection.pipelines[0]
    assert pipeline[0] == {"$match": {"brandId": ObjectId(BRAND_ID)}}
    assert pipeline[1]["$group"]["_id"] == "$videoInfo.url"
    assert any("dominantAdType" in stage.get("$addFields", {}) for stage in pipeline)


def test_whole_video_defaults_ad_type_to_unknown() -> None:
    clip_id = ObjectId()
    collection = FakeCollection(
        aggregate_docs=[
            {
                "_id": "https://cdn/v.mp4",
                "wholeVideoUrl": "https://cdn/v.mp4",
                "clips": [{"_id": clip_id, "sno": 1, "adType": None, "tags": None}],
                "totalClips": 1,
                "adType": None,
            }
        ]
    )
    store = ClipStore(collection, ObjectId(BRAND_ID))  # type: ignore[arg-type]

    group = store.whole_video("https://cdn/v.mp4")

    assert group is not None
    assert group.ad_type == "Unknown"
    assert group.clips[0].id == str(clip_id)
    assert group.clips[0].tags == []
    assert collection.pipelines[0][0]["$match"]["videoInfo.url"] == "https://cdn/v.mp4"


def test_whole_video_missing() -> None:
    store = ClipStore(FakeCollection(), BRAND_ID)  # type: ignore[arg-type]

    assert store.whole_video("https://cdn/none.mp4") is None


def test_videos_for_format_filters_on_dominant_type() -> None:
    collection = FakeCollection(aggregate_docs=[{"wholeVideoUrl": "u1", "clips": [], "totalClips": 0, "adType": "UGC"}])
    store = ClipStore(collection, BRAND_ID)  # type: ignore[arg-type]

    groups = store.videos_for_format("UGC")

    assert [g.whole_video_url for g in groups] == ["u1"]
    assert {"$match": {"dominantAdType.adType": "UGC"}} in collection.pipelines[0]


def test_list_clips_flattens_documents() -> None:
    docs = [
        {"_id": ObjectId(), "sno": 2, "url": "c2", "videoInfo": {"url": "v"}, "analysis": {"adType": "Demo"}},
        {"_id": ObjectId(), "sno": 1, "url": "c1", "videoInfo": {"url": "v"}, "analysis": {"adType": "UGC"}},
    ]
    store = ClipStore(FakeCollection(docs=docs), BRAND_ID)  # type: ignore[arg-type]

    clips = store.list_clips()

    assert [(c.sno, c.ad_type, c.video_info_url) for c in clips] == [(1, "UGC", "v"), (2, "Demo", "v")]


def test_get_clip() -> None:
    clip_id = ObjectId()
    store = ClipStore(FakeCollection(docs=[{"_id": clip_id, "sno": 5}]), BRAND_ID)  # type: ignore[arg-type]

    assert store.get_clip(str(clip_id)).sno == 5  # type: ignore[union-attr]
    assert store.get_clip(str(ObjectId())) is None
    with pytest.raises(ValueError):
        store.get_clip("not-an-id")


def test_video_group_from_clips() -> None:
    clips = [Clip(ad_type="Demo"), Clip(ad_type="UGC"), Clip(ad_type="UGC"), Clip()]

    group = VideoGroup.from_clips("https://cdn/v.mp4", clips)

    assert group.total_clips == 4
    assert group.ad_type == "UGC"
