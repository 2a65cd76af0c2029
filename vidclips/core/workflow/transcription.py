"""
Transcription stage: make sure a video has a transcript.
"""

import asyncio
import logging

from vidclips.config import PROGRESS_COMPLETE, PROGRESS_TRANSCRIPTION_STARTED
from vidclips.core import media
from vidclips.core.repositories.models import TranscriptSegment, Video
from vidclips.core.workflow.context import PipelineContext

logger = logging.getLogger(__name__)


async def ensure_transcript(ctx: PipelineContext, video_id: str) -> Video:
    """
    Transcribe a video with the local Whisper model unless it already is.

    A video the store has never seen is created from its metadata with status
    ``transcribed``. The downloaded audio is kept until transcription has
    succeeded, so a retry reuses it.
    """
    video = ctx.videos.get_video(video_id)
    if video is not None and video.status == "transcribed":
        logger.info(f"Video {video_id} already transcribed, skipping")
        return video

    try:
        ctx.progress.update(
            video_id,
            stage="transcription",
            progress=PROGRESS_TRANSCRIPTION_STARTED,
            message="Transcribing video...",
        )

        audio_path = ctx.video_audio_path(video_id)
        if audio_path.exists():
            logger.info(f"Reusing cached audio for {video_id}: {audio_path}")
        else:
            await asyncio.to_thread(media.download_audio, video_id, audio_path)

        def _report(percent: float) -> None:
            span = PROGRESS_COMPLETE - PROGRESS_TRANSCRIPTION_STARTED
            ctx.progress.update(
                video_id,
                stage="transcription",
                progress=PROGRESS_TRANSCRIPTION_STARTED + int(percent * span / 100),
                message=f"Transcribing video... {percent:.0f}%",
            )

        segments = await asyncio.to_thread(ctx.whisper.transcribe, audio_path, _report)
        transcript = [TranscriptSegment(**segment) for segment in segments]
        logger.info(f"Transcribed {video_id}: {len(transcript)} segments")

        if video is None:
            details = await asyncio.to_thread(media.fetch_video_metadata, video_id)
            video = Video(
                video_id=video_id,
                title=details.title,
                channel_name=details.channel_name or "Unknown channel",
                youtube_channel_id=details.channel_id or "",
                published_at=details.published_at,
                context=details.description,
                transcript=transcript,
                status="transcribed",
            )
            ctx.videos.create_video(video)
        else:
            ctx.videos.update_video(
                video_id,
                transcript=[segment.model_dump() for segment in transcript],
                status="transcribed",
                error_message=None,
            )
            video = video.model_copy(update={"transcript": transcript, "status": "transcribed", "error_message": None})

        audio_path.unlink(missing_ok=True)
        return video

    except Exception as e:
        logger.error(f"Error transcribing {video_id}: {e}", exc_info=True)
        if video is not None:
            ctx.videos.set_status(video_id, "error", str(e))
        raise
