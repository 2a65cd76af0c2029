"""
Clip summary regeneration and editing.
"""

import asyncio
import logging

from vidclips.config import SUMMARY_MAX_CHARS
from vidclips.core.exceptions import InputValidationError, ModelResponseError
from vidclips.core.repositories.exceptions import NotFoundError
from vidclips.core.workflow.context import PipelineContext
from vidclips.core.workflow.prompt import build_summary_prompt

logger = logging.getLogger(__name__)


async def regenerate_summary(ctx: PipelineContext, clip_id: str) -> str:
    """
    Ask the model for a fresh summary of a clip and store it.

    Only the transcript around the clip is sent. The same model fallback as
    clip discovery applies.
    """
    clip = ctx.clips.get_clip(clip_id)
    if clip is None:
        raise NotFoundError(f"Clip {clip_id} not found")

    video = ctx.videos.get_video(clip.video_id)
    if video is None or not video.transcript:
        raise InputValidationError("Video transcript not found")

    prompt = build_summary_prompt(
        video.transcript,
        clip.start_time,
        clip.end_time,
        clip.proposed_title,
        clip.summary,
    )
    summary = (await asyncio.to_thread(ctx.gemini.generate_with_fallback, prompt)).strip()
    if not summary:
        raise ModelResponseError("Model returned an empty summary")
    if len(summary) > SUMMARY_MAX_CHARS:
        logger.warning(f"Regenerated summary for {clip_id} is {len(summary)} chars, over {SUMMARY_MAX_CHARS}")

    ctx.clips.update_clip(clip_id, summary=summary)
    logger.info(f"Regenerated summary for clip {clip_id}")
    return summary


def update_summary(ctx: PipelineContext, clip_id: str, summary: str) -> str:
    summary = summary.strip()
    if not summary:
        raise InputValidationError("Summary cannot be empty")
    if ctx.clips.get_clip(clip_id) is None:
        raise NotFoundError(f"Clip {clip_id} not found")

    ctx.clips.update_clip(clip_id, summary=summary)
    return summary
