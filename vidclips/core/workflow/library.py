"""
Read and delete operations over stored videos and clips.

Deleting removes the clip media from disk as well as the documents.
"""

import logging
from typing import Any, Dict, List

from vidclips.core.repositories.exceptions import NotFoundError
from vidclips.core.workflow.context import PipelineContext

logger = logging.getLogger(__name__)


def remove_clip_files(ctx: PipelineContext, clip_id: str) -> None:
    for path in (ctx.clip_path(clip_id), ctx.clip_audio_path(clip_id), ctx.clip_srt_path(clip_id)):
        if path.exists():
            path.unlink()
            logger.debug(f"Removed {path}")


def delete_clip(ctx: PipelineContext, clip_id: str) -> None:
    if not ctx.clips.delete_clip(clip_id):
        raise NotFoundError(f"Clip {clip_id} not found")
    remove_clip_files(ctx, clip_id)
    logger.info(f"Deleted clip {clip_id}")


def delete_video(ctx: PipelineContext, video_id: str) -> List[str]:
    """
    Delete a video, its clips and their media files.

    Returns:
        Ids of the deleted clips
    """
    if ctx.videos.get_video(video_id) is None:
        raise NotFoundError(f"Video {video_id} not found")

    deleted = ctx.videos.delete_video(video_id, ctx.clips)
    for clip_id in deleted:
        remove_clip_files(ctx, clip_id)
    ctx.video_audio_path(video_id).unlink(missing_ok=True)
    ctx.progress.clear(video_id)
    return deleted


def video_status(ctx: PipelineContext, video_id: str) -> Dict[str, Any]:
    """Status of a video plus the ids of its produced clips."""
    video = ctx.videos.get_video(video_id)
    if video is None:
        raise NotFoundError(f"Video {video_id} not found")

    produced = [clip.id for clip in ctx.clips.list_clips(video_id=video_id, status="produced")]
    return {
        "video_id": video_id,
        "status": video.status,
        "error_message": video.error_message,
        "clips": produced,
    }
