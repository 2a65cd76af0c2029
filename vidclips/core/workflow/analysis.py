"""
Analysis stage: ask the model for clip ranges and store them as pending clips.
"""

import asyncio
import logging
import uuid
from typing import List, Optional

from vidclips.core.exceptions import InputValidationError
from vidclips.core.repositories.models import Clip, ExistingClip
from vidclips.core.workflow.context import PipelineContext
from vidclips.core.workflow.data_processor import parse_clip_proposals, proposal_to_fields
from vidclips.core.workflow.prompt import build_clip_prompt, resolve_criteria

logger = logging.getLogger(__name__)


async def analyze(
    ctx: PipelineContext,
    video_id: str,
    prompt_type: str = "default",
    custom_criteria: str = "",
    existing_clips: Optional[List[ExistingClip]] = None,
) -> List[Clip]:
    """
    Find interesting clips in a transcribed video.

    Args:
        ctx: Pipeline context
        video_id: Video to analyze
        prompt_type: "default", "funny", "educational" or "custom"
        custom_criteria: Free-text criteria used when prompt_type is "custom"
        existing_clips: Ranges the model must not propose again

    Returns:
        The newly created pending clips; empty when the model found none.

    Raises:
        InputValidationError: If the video is unknown or not transcribed
        ModelResponseError: If the model output cannot be parsed
    """
    existing_clips = existing_clips or []
    try:
        video = ctx.videos.get_video(video_id)
        if video is None:
            raise InputValidationError("Video not found")
        if not video.transcript:
            raise InputValidationError("No transcript found")

        logger.info(
            f"Analyzing {video_id}"
            + (f" with {len(existing_clips)} existing clips to avoid" if existing_clips else "")
        )

        prompt = build_clip_prompt(
            video.transcript,
            resolve_criteria(prompt_type, custom_criteria),
            video.context,
            existing_clips,
        )
        response_text = await asyncio.to_thread(ctx.gemini.generate_with_fallback, prompt)

        proposals = parse_clip_proposals(response_text, existing_clips)
        if not proposals:
            logger.warning(f"No valid clips found in AI response for {video_id}")

        new_clips = [
            Clip(id=str(uuid.uuid4()), video_id=video_id, status="pending", **proposal_to_fields(p))
            for p in proposals
        ]
        ctx.clips.create_clips_batch(new_clips)
        ctx.videos.set_status(video_id, "transcribed")

        logger.info(f"Analyzed video: {video_id}, found {len(new_clips)} clips")
        return new_clips

    except Exception as e:
        logger.error(f"Failed to analyze {video_id}: {e}")
        raise
