"""
Clip production: turn a pending clip into a captioned mp4.
"""

import asyncio
import json
import logging

from vidclips.config import (
    PROGRESS_CLIP_AUDIO_EXTRACTED,
    PROGRESS_CLIP_DOWNLOADED,
    PROGRESS_CLIP_TRANSCRIBED,
    PROGRESS_COMPLETE,
)
from vidclips.core import media
from vidclips.core.repositories.models import Clip
from vidclips.core.workflow.captions import build_srt
from vidclips.core.workflow.context import PipelineContext

logger = logging.getLogger(__name__)


async def produce_clip(ctx: PipelineContext, clip: Clip) -> str:
    """
    Produce one clip end to end.

    Steps:
    1. Download the clip's range of the source video
    2. Extract its audio
    3. Transcribe it and keep the raw response on the clip
    4. Build captions and burn them in

    A clip whose output file already exists is left untouched.

    Returns:
        The clip id.
    """
    video_path = ctx.clip_path(clip.id)
    if video_path.exists():
        logger.info(f"Clip {clip.id} already exists at {video_path}, skipping")
        return clip.id

    audio_path = ctx.clip_audio_path(clip.id)
    try:
        await asyncio.to_thread(
            media.download_clip_range, clip.video_id, clip.start_time, clip.end_time, video_path
        )
        ctx.progress.update_clip(clip.video_id, clip.id, PROGRESS_CLIP_DOWNLOADED)

        await asyncio.to_thread(media.extract_audio, video_path, audio_path)
        ctx.progress.update_clip(clip.video_id, clip.id, PROGRESS_CLIP_AUDIO_EXTRACTED)

        response = await ctx.deepgram.transcribe_file(audio_path)
        ctx.clips.update_clip(clip.id, deepgram_response=json.dumps(response))
        ctx.progress.update_clip(clip.video_id, clip.id, PROGRESS_CLIP_TRANSCRIBED)

        srt = build_srt(response)
        if srt:
            ctx.clips.update_clip(clip.id, srt=srt)
            srt_path = ctx.clip_srt_path(clip.id)
            srt_path.write_text(srt, encoding="utf-8")
            await asyncio.to_thread(media.burn_subtitles, video_path, srt_path)
        else:
            logger.warning(f"No captions generated for clip {clip.id}, skipping burn-in")

        ctx.clips.update_clip(clip.id, status="produced", error_message=None)
        ctx.progress.update_clip(clip.video_id, clip.id, PROGRESS_COMPLETE)
        logger.info(f"Produced clip {clip.id}: {video_path}")
        return clip.id

    except Exception as e:
        logger.error(f"Error producing clip {clip.id}: {e}", exc_info=True)
        video_path.unlink(missing_ok=True)
        ctx.clips.update_clip(clip.id, status="error", error_message=str(e))
        raise

    finally:
        audio_path.unlink(missing_ok=True)
