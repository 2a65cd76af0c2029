"""
Tests for the Firestore repositories against a mocked client.

Run with: pytest tests/test_repositories.py -v
"""

from unittest.mock import MagicMock, patch

import pytest
from google.api_core.exceptions import AlreadyExists

from conftest import make_clip, make_video
from vidclips.core.repositories.clips import ClipRepository
from vidclips.core.repositories.exceptions import (
    ClipRepositoryError,
    ConflictError,
    NotFoundError,
)
from vidclips.core.repositories.models import Clip, ClipTiming
from vidclips.core.repositories.videos import VideoRepository


def snapshot(data, exists=True, doc_id=None):
    doc = MagicMock()
    doc.exists = exists
    doc.to_dict.return_value = data
    doc.id = doc_id or (data or {}).get("id")
    return doc


class TestModels:
    def test_clip_requires_ordered_range(self):
        with pytest.raises(ValueError):
            make_clip(start_time=50, end_time=40)

    def test_clip_status_validated(self):
        with pytest.raises(ValueError):
            make_clip(status="finished")

    def test_timing_requires_ordered_range(self):
        with pytest.raises(ValueError):
            ClipTiming(id="a", start_time=10, end_time=10)

    def test_round_trip_through_dict(self):
        clip = make_clip()
        assert Clip.from_dict(clip.to_dict()) == clip


class TestClipRepository:
    def test_get_clip(self):
        db = MagicMock()
        clip = make_clip()
        db.collection.return_value.document.return_value.get.return_value = snapshot(clip.to_dict())
        assert ClipRepository(db).get_clip("clip-1") == clip
        db.collection.assert_called_with("clips")

    def test_get_missing_clip(self):
        db = MagicMock()
        db.collection.return_value.document.return_value.get.return_value = snapshot(None, exists=False)
        assert ClipRepository(db).get_clip("nope") is None

    def test_create_batch_commits(self):
        db = MagicMock()
        repo = ClipRepository(db)
        repo.create_clips_batch([make_clip("a"), make_clip("b")])
        batch = db.batch.return_value
        assert batch.set.call_count == 2
        batch.commit.assert_called_once()

    def test_update_clip_sets_updated_at(self):
        db = MagicMock()
        ClipRepository(db).update_clip("a", status="produced")
        fields = db.collection.return_value.document.return_value.update.call_args.args[0]
        assert fields["status"] == "produced"
        assert "updated_at" in fields

    def test_update_failure_wrapped(self):
        db = MagicMock()
        db.collection.return_value.document.return_value.update.side_effect = RuntimeError("offline")
        with pytest.raises(ClipRepositoryError):
            ClipRepository(db).update_clip("a", status="produced")

    @patch("vidclips.core.repositories.clips.firestore.transactional", side_effect=lambda fn: fn)
    def test_update_timings_missing_clip(self, mock_transactional):
        db = MagicMock()
        db.collection.return_value.document.return_value.get.return_value = snapshot(None, exists=False)
        with pytest.raises(NotFoundError):
            ClipRepository(db).update_timings([ClipTiming(id="ghost", start_time=0, end_time=40)])

    @patch("vidclips.core.repositories.clips.firestore.transactional", side_effect=lambda fn: fn)
    def test_update_timings_writes_in_transaction(self, mock_transactional):
        db = MagicMock()
        db.collection.return_value.document.return_value.get.return_value = snapshot(make_clip("a").to_dict())

        clips = ClipRepository(db).update_timings([ClipTiming(id="a", start_time=5, end_time=50)])

        transaction = db.transaction.return_value
        assert transaction.update.call_count == 1
        assert (clips[0].start_time, clips[0].end_time) == (5, 50)

    def test_delete_missing_clip(self):
        db = MagicMock()
        db.collection.return_value.document.return_value.get.return_value = snapshot(None, exists=False)
        assert ClipRepository(db).delete_clip("nope") is False

    def test_delete_clips_for_video(self):
        db = MagicMock()
        docs = [snapshot({"id": "a"}), snapshot({"id": "b"})]
        db.collection.return_value.where.return_value.stream.return_value = docs
        assert ClipRepository(db).delete_clips_for_video("vid") == ["a", "b"]
        assert db.batch.return_value.delete.call_count == 2


class TestVideoRepository:
    def test_create_conflict(self):
        db = MagicMock()
        db.collection.return_value.document.return_value.create.side_effect = AlreadyExists("exists")
        with pytest.raises(ConflictError):
            VideoRepository(db).create_video(make_video())

    def test_get_video(self):
        db = MagicMock()
        video = make_video()
        db.collection.return_value.document.return_value.get.return_value = snapshot(video.to_dict())
        assert VideoRepository(db).get_video("kOyIjt6FUrw") == video
        db.collection.assert_called_with("videos")

    def test_set_status(self):
        db = MagicMock()
        VideoRepository(db).set_status("vid", "error", "boom")
        fields = db.collection.return_value.document.return_value.update.call_args.args[0]
        assert fields["status"] == "error"
        assert fields["error_message"] == "boom"

    def test_delete_cascades(self):
        db = MagicMock()
        clips = MagicMock()
        clips.delete_clips_for_video.return_value = ["a"]
        assert VideoRepository(db).delete_video("vid", clips) == ["a"]
        db.collection.return_value.document.return_value.delete.assert_called_once()
