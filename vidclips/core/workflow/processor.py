"""
Video lifecycle orchestration.

Sequences transcription, analysis and production for one video, reporting
each phase to the progress hub, and exposes the bulk entry points used by
the HTTP layer (submission, batch production and manual analysis).
"""

import asyncio
import logging
from collections import defaultdict
from typing import Dict, List, Optional

from vidclips.config import PROGRESS_COMPLETE, PROGRESS_SUBMITTED
from vidclips.core import media
from vidclips.core.exceptions import InputValidationError
from vidclips.core.progress import ClipProgress
from vidclips.core.repositories.models import Clip, ClipTiming, ExistingClip, Video
from vidclips.core.workflow.analysis import analyze
from vidclips.core.workflow.clip_processor import produce_clip
from vidclips.core.workflow.context import BatchResult, PipelineContext
from vidclips.core.workflow.transcription import ensure_transcript

logger = logging.getLogger(__name__)


async def process_video(ctx: PipelineContext, video_id: str) -> List[Clip]:
    """
    Run the whole pipeline for one video.

    Steps:
    1. Transcribe (skipped when already transcribed)
    2. Ask the model for clips, avoiding ranges already stored
    3. Produce each new clip in order; one clip failing does not stop the rest
    4. Report completion

    The video's progress entry is always cleared when the run ends.

    Returns:
        The clips created by this run.
    """
    try:
        logger.info(f"Starting pipeline for {video_id}")
        await ensure_transcript(ctx, video_id)

        ctx.progress.update(video_id, stage="analysis", progress=0, message="Analyzing transcript...")
        existing = [ExistingClip.from_clip(c) for c in ctx.clips.list_clips(video_id=video_id)]
        new_clips = await analyze(ctx, video_id, existing_clips=existing)

        clip_ids = [clip.id for clip in new_clips]
        ctx.progress.update(
            video_id,
            stage="analysis",
            progress=PROGRESS_COMPLETE,
            message=f"Found {len(new_clips)} clips",
            clip_ids=clip_ids,
            clips=[ClipProgress(clip_id=clip_id) for clip_id in clip_ids],
        )

        total = len(new_clips)
        for i, clip in enumerate(new_clips):
            ctx.progress.update(
                video_id,
                stage="production",
                progress=int(i / total * 100),
                message=f"Producing clip {i + 1} of {total}",
            )
            try:
                await produce_clip(ctx, clip)
            except Exception as e:
                logger.error(f"Clip {clip.id} of {video_id} failed, continuing: {e}")
            ctx.progress.update(
                video_id,
                stage="production",
                progress=int((i + 1) / total * 100),
                message=f"Processed clip {i + 1} of {total}",
            )

        ctx.progress.update(video_id, stage="complete", progress=PROGRESS_COMPLETE, message="Complete")
        logger.info(f"Pipeline complete for {video_id}: {total} clips")
        return new_clips

    except Exception as e:
        logger.error(f"Pipeline failed for {video_id}: {e}", exc_info=True)
        if ctx.videos.get_video(video_id) is not None:
            ctx.videos.set_status(video_id, "error", str(e))
        raise

    finally:
        ctx.progress.clear(video_id)


async def submit_video(ctx: PipelineContext, video_id: str) -> Video:
    """
    Register a video for processing.

    A known video is reset to ``pending``; an unknown one is created from its
    metadata.

    Raises:
        InputValidationError: If the metadata has no channel name
    """
    ctx.progress.update(
        video_id,
        stage="download",
        progress=PROGRESS_SUBMITTED,
        message="Fetching video details...",
    )
    try:
        details = await asyncio.to_thread(media.fetch_video_metadata, video_id)
        if not details.channel_name:
            raise InputValidationError("Channel name is required")
    except Exception:
        ctx.progress.clear(video_id)
        raise

    existing = ctx.videos.get_video(video_id)
    if existing is not None:
        ctx.videos.set_status(video_id, "pending")
        logger.info(f"Resubmitted video {video_id}")
        return existing.model_copy(update={"status": "pending", "error_message": None})

    video = Video(
        video_id=video_id,
        title=details.title,
        channel_name=details.channel_name,
        youtube_channel_id=details.channel_id or "",
        published_at=details.published_at,
        context=details.description,
        status="pending",
    )
    ctx.videos.create_video(video)
    logger.info(f"Submitted video {video_id}: {details.title}")
    return video


async def produce_clips(ctx: PipelineContext, timings: List[ClipTiming]) -> BatchResult:
    """
    Apply new boundaries to clips and produce all of them concurrently.

    The boundaries are written in one transaction before any production
    starts. Every production runs to completion; failures are collected in
    the result instead of cancelling the others. A clip listed more than once
    is produced once, with the boundaries of its last entry.
    """
    unique: Dict[str, ClipTiming] = {}
    for timing in timings:
        unique.pop(timing.id, None)
        unique[timing.id] = timing
    if len(unique) < len(timings):
        logger.warning(f"Ignoring {len(timings) - len(unique)} duplicate clip ids in batch")

    clips = ctx.clips.update_timings(list(unique.values()))

    by_video: Dict[str, List[str]] = defaultdict(list)
    for clip in clips:
        by_video[clip.video_id].append(clip.id)
    for video_id, clip_ids in by_video.items():
        ctx.progress.update(
            video_id,
            stage="production",
            progress=0,
            message=f"Producing {len(clip_ids)} clips",
            clip_ids=clip_ids,
            clips=[ClipProgress(clip_id=clip_id) for clip_id in clip_ids],
        )

    logger.info(f"Producing {len(clips)} clips concurrently")
    try:
        results = await asyncio.gather(
            *(produce_clip(ctx, clip) for clip in clips),
            return_exceptions=True,
        )
    finally:
        for video_id in by_video:
            ctx.progress.clear(video_id)

    batch = BatchResult()
    for clip, result in zip(clips, results):
        if isinstance(result, BaseException):
            batch.failed.append((clip.id, str(result)))
        else:
            batch.succeeded.append(result)

    logger.info(f"Batch production finished: {batch.success_count} succeeded, {batch.failure_count} failed")
    return batch


async def manual_analyze(
    ctx: PipelineContext,
    video_id: str,
    prompt_type: str = "default",
    custom_criteria: str = "",
    existing_clips: Optional[List[ExistingClip]] = None,
) -> List[Clip]:
    """Transcribe if needed, then run one analysis pass with caller-chosen criteria."""
    try:
        await ensure_transcript(ctx, video_id)
        return await analyze(ctx, video_id, prompt_type, custom_criteria, existing_clips)
    finally:
        ctx.progress.clear(video_id)
