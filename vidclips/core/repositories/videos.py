"""
Video repository for Firestore.

Documents in the ``videos`` collection are keyed by the source video id.
"""

import logging
from datetime import datetime, timezone
from typing import Any, List, Optional

from google.api_core.exceptions import AlreadyExists
from google.cloud import firestore

from vidclips.core.firebase_client import get_firestore_client
from vidclips.core.repositories.clips import ClipRepository
from vidclips.core.repositories.exceptions import ConflictError, VideoRepositoryError
from vidclips.core.repositories.models import Video, VideoStatus

logger = logging.getLogger(__name__)


class VideoRepository:
    """Repository for video entities in Firestore."""

    def __init__(self, db: Optional[firestore.Client] = None):
        self.db = db or get_firestore_client()
        self.videos_collection = self.db.collection("videos")

    def get_video(self, video_id: str) -> Optional[Video]:
        try:
            doc = self.videos_collection.document(video_id).get()
            if doc.exists:
                data = doc.to_dict()
                if data:
                    return Video.from_dict(data)
            return None
        except Exception as e:
            logger.error(f"Failed to get video {video_id}: {e}", exc_info=True)
            raise VideoRepositoryError(f"Failed to get video: {e}") from e

    def create_video(self, video: Video) -> Video:
        """
        Insert a new video.

        Raises:
            ConflictError: If the video already exists
            VideoRepositoryError: If creation fails
        """
        try:
            self.videos_collection.document(video.video_id).create(video.to_dict())
            logger.debug(f"Created video: {video.video_id}")
            return video
        except AlreadyExists as e:
            raise ConflictError(f"Video {video.video_id} already exists") from e
        except Exception as e:
            logger.error(f"Failed to create video {video.video_id}: {e}", exc_info=True)
            raise VideoRepositoryError(f"Failed to create video: {e}") from e

    def update_video(self, video_id: str, **fields: Any) -> None:
        """Update individual video fields; ``updated_at`` is always refreshed."""
        try:
            fields["updated_at"] = datetime.now(timezone.utc)
            self.videos_collection.document(video_id).update(fields)
            logger.debug(f"Updated video {video_id}: {sorted(fields)}")
        except Exception as e:
            logger.error(f"Failed to update video {video_id}: {e}", exc_info=True)
            raise VideoRepositoryError(f"Failed to update video: {e}") from e

    def set_status(
        self,
        video_id: str,
        status: VideoStatus,
        error_message: Optional[str] = None,
    ) -> None:
        self.update_video(video_id, status=status, error_message=error_message)

    def delete_video(self, video_id: str, clips: Optional[ClipRepository] = None) -> List[str]:
        """
        Delete a video and cascade to its clips.

        Returns:
            Ids of the deleted clips, so the caller can remove their media files.
        """
        clips = clips or ClipRepository(self.db)
        deleted_clips = clips.delete_clips_for_video(video_id)
        try:
            self.videos_collection.document(video_id).delete()
        except Exception as e:
            logger.error(f"Failed to delete video {video_id}: {e}", exc_info=True)
            raise VideoRepositoryError(f"Failed to delete video: {e}") from e
        logger.info(f"Deleted video {video_id} and {len(deleted_clips)} clips")
        return deleted_clips
