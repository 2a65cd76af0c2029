"""
Clip repository for Firestore.

Clips live in a top-level ``clips`` collection keyed by clip id and carry the
owning ``video_id`` so a video's clips can be queried and cascade-deleted.
"""

import logging
from datetime import datetime, timezone
from typing import Any, List, Optional

from google.cloud import firestore

from vidclips.core.firebase_client import get_firestore_client
from vidclips.core.repositories.exceptions import (
    ClipRepositoryError,
    NotFoundError,
)
from vidclips.core.repositories.models import Clip, ClipTiming

logger = logging.getLogger(__name__)

# Firestore batch limit
MAX_BATCH_SIZE = 500


class ClipRepository:
    """Repository for clip entities in Firestore."""

    def __init__(self, db: Optional[firestore.Client] = None):
        self.db = db or get_firestore_client()
        self.clips_collection = self.db.collection("clips")

    def create_clips_batch(self, clips: List[Clip]) -> List[Clip]:
        """
        Create multiple clips in batch writes.

        Raises:
            ClipRepositoryError: If batch creation fails
        """
        if not clips:
            return []

        try:
            for offset in range(0, len(clips), MAX_BATCH_SIZE):
                batch = self.db.batch()
                for clip in clips[offset:offset + MAX_BATCH_SIZE]:
                    batch.set(self.clips_collection.document(clip.id), clip.to_dict())
                batch.commit()

            logger.info(f"Created {len(clips)} clips for video {clips[0].video_id}")
            return clips

        except Exception as e:
            logger.error(f"Failed to create clips batch: {e}", exc_info=True)
            raise ClipRepositoryError(f"Failed to create clips batch: {e}") from e

    def get_clip(self, clip_id: str) -> Optional[Clip]:
        try:
            doc = self.clips_collection.document(clip_id).get()
            if doc.exists:
                data = doc.to_dict()
                if data:
                    return Clip.from_dict(data)
            return None
        except Exception as e:
            logger.error(f"Failed to get clip {clip_id}: {e}", exc_info=True)
            raise ClipRepositoryError(f"Failed to get clip: {e}") from e

    def list_clips(
        self,
        video_id: Optional[str] = None,
        status: Optional[str] = None,
        order_by: str = "created_at",
        descending: bool = True,
    ) -> List[Clip]:
        """
        List clips with optional filtering.

        Args:
            video_id: Only clips of this video
            status: Only clips with this status
            order_by: "created_at" or "updated_at"
            descending: Newest first when True
        """
        try:
            query = self.clips_collection
            if video_id:
                query = query.where("video_id", "==", video_id)
            if status:
                query = query.where("status", "==", status)

            field = "updated_at" if order_by == "updated_at" else "created_at"
            direction = firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
            query = query.order_by(field, direction=direction)

            clips = []
            for doc in query.stream():
                data = doc.to_dict()
                if data:
                    try:
                        clips.append(Clip.from_dict(data))
                    except Exception as e:
                        logger.warning(f"Failed to parse clip {doc.id}: {e}")
                        continue
            return clips

        except Exception as e:
            logger.error(f"Failed to list clips: {e}", exc_info=True)
            raise ClipRepositoryError(f"Failed to list clips: {e}") from e

    def update_clip(self, clip_id: str, **fields: Any) -> None:
        """Update individual clip fields; ``updated_at`` is always refreshed."""
        try:
            fields["updated_at"] = datetime.now(timezone.utc)
            self.clips_collection.document(clip_id).update(fields)
            logger.debug(f"Updated clip {clip_id}: {sorted(fields)}")
        except Exception as e:
            logger.error(f"Failed to update clip {clip_id}: {e}", exc_info=True)
            raise ClipRepositoryError(f"Failed to update clip: {e}") from e

    def update_timings(self, timings: List[ClipTiming]) -> List[Clip]:
        """
        Apply new start/end times to several clips in one transaction.

        Returns:
            The updated clips, in the order of ``timings``.

        Raises:
            NotFoundError: If any clip does not exist (nothing is written)
        """
        if not timings:
            return []

        @firestore.transactional
        def _apply(transaction: firestore.Transaction) -> List[Clip]:
            refs = [self.clips_collection.document(t.id) for t in timings]
            snapshots = [ref.get(transaction=transaction) for ref in refs]

            missing = [t.id for t, snap in zip(timings, snapshots) if not snap.exists]
            if missing:
                raise NotFoundError(f"Clips not found: {', '.join(missing)}")

            now = datetime.now(timezone.utc)
            updated = []
            for ref, snap, timing in zip(refs, snapshots, timings):
                changes = {
                    "start_time": timing.start_time,
                    "end_time": timing.end_time,
                    "updated_at": now,
                }
                transaction.update(ref, changes)
                updated.append(Clip.from_dict({**snap.to_dict(), **changes}))
            return updated

        try:
            return _apply(self.db.transaction())
        except NotFoundError:
            raise
        except Exception as e:
            logger.error(f"Failed to update clip timings: {e}", exc_info=True)
            raise ClipRepositoryError(f"Failed to update clip timings: {e}") from e

    def delete_clip(self, clip_id: str) -> bool:
        """Delete a clip document; returns False if it did not exist."""
        try:
            doc_ref = self.clips_collection.document(clip_id)
            if not doc_ref.get().exists:
                return False
            doc_ref.delete()
            logger.debug(f"Deleted clip: {clip_id}")
            return True
        except Exception as e:
            logger.error(f"Failed to delete clip {clip_id}: {e}", exc_info=True)
            raise ClipRepositoryError(f"Failed to delete clip: {e}") from e

    def delete_clips_for_video(self, video_id: str) -> List[str]:
        """Delete every clip of a video with batch writes and return the deleted ids."""
        try:
            deleted: List[str] = []
            batch = self.db.batch()
            batch_size = 0

            for doc in self.clips_collection.where("video_id", "==", video_id).stream():
                batch.delete(doc.reference)
                deleted.append(doc.id)
                batch_size += 1

                if batch_size >= MAX_BATCH_SIZE:
                    batch.commit()
                    batch = self.db.batch()
                    batch_size = 0

            if batch_size > 0:
                batch.commit()

            logger.info(f"Deleted {len(deleted)} clips for video {video_id}")
            return deleted

        except Exception as e:
            logger.error(f"Failed to delete clips for video {video_id}: {e}", exc_info=True)
            raise ClipRepositoryError(f"Failed to delete clips: {e}") from e
