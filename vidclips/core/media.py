import json
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from vidclips.config import CAPTION_FORCE_STYLE, FFMPEG_PATH, YT_DLP_PATH
from vidclips.core.exceptions import InputValidationError, ProcessError
from vidclips.core.utils.process import run_process

logger = logging.getLogger(__name__)

# https formats first: ffmpeg cannot cut the m3u8 manifests served for long videos.
FORMAT_SORT = "proto:https"
FORMAT_SELECTOR = "bestvideo[ext=mp4]+bestaudio[ext=m4a]/best[ext=mp4]/best"


@dataclass
class VideoDetails:
    """Source video metadata as reported by yt-dlp."""

    video_id: str
    title: str
    channel_name: Optional[str]
    channel_id: Optional[str]
    description: str
    duration: Optional[float]
    published_at: Optional[datetime]


def video_url(video_id: str) -> str:
    return f"https://www.youtube.com/watch?v={video_id}"


def _parse_upload_date(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.strptime(value, "%Y%m%d").replace(tzinfo=timezone.utc)
    except ValueError:
        logger.warning(f"Unrecognised upload date from yt-dlp: {value}")
        return None


def fetch_video_metadata(video_id: str) -> VideoDetails:
    """Fetch title, channel and description for a video without downloading it."""
    logger.info(f"Fetching metadata for {video_id}")
    result = run_process([YT_DLP_PATH, "-J", "--no-warnings", video_url(video_id)])
    try:
        data = json.loads(result.stdout)
    except json.JSONDecodeError as e:
        raise InputValidationError(f"Could not read metadata for {video_id}") from e

    if data.get("_type", "video") != "video":
        raise InputValidationError("Provided id is not a video.")

    return VideoDetails(
        video_id=data.get("id") or video_id,
        title=data.get("title") or f"Video {video_id}",
        channel_name=data.get("channel") or data.get("uploader"),
        channel_id=data.get("channel_id"),
        description=data.get("description") or "",
        duration=data.get("duration"),
        published_at=_parse_upload_date(data.get("upload_date")),
    )


def download_audio(video_id: str, audio_path: Path) -> Path:
    """Download the whole audio track of a video as wav."""
    audio_path.parent.mkdir(parents=True, exist_ok=True)
    logger.info(f"Downloading audio for video {video_id} to {audio_path}")
    run_process(
        [
            YT_DLP_PATH,
            "--extract-audio",
            "--audio-format", "wav",
            "--audio-quality", "8",
            "-o", str(audio_path.with_suffix("")) + ".%(ext)s",
            video_url(video_id),
        ]
    )
    if not audio_path.exists():
        raise FileNotFoundError(f"Audio file not found for {video_id} after download attempt.")
    return audio_path


def download_clip_range(video_id: str, start: float, end: float, out_path: Path) -> Path:
    """Download exactly ``[start, end]`` seconds of a video into one mp4."""
    out_path.parent.mkdir(parents=True, exist_ok=True)
    logger.info(f"Downloading and clipping: {video_id} from {start}s to {end}s")
    run_process(
        [
            YT_DLP_PATH,
            "-S", FORMAT_SORT,
            "-f", FORMAT_SELECTOR,
            "--force-keyframes-at-cuts",
            "--download-sections", f"*{start}-{end}",
            "--merge-output-format", "mp4",
            "-o", str(out_path),
            video_url(video_id),
        ]
    )
    logger.info(f"Downloaded clip: {out_path}")
    return out_path


def extract_audio(video_path: Path, audio_path: Path) -> Path:
    """Extract mono 16 kHz PCM audio from a clip."""
    run_process(
        [
            FFMPEG_PATH,
            "-y",
            "-i", str(video_path),
            "-vn",
            "-acodec", "pcm_s16le",
            "-ar", "16000",
            "-ac", "1",
            str(audio_path),
        ],
        log_level="error",
    )
    logger.info(f"Extracted audio: {audio_path}")
    return audio_path


def burn_subtitles(video_path: Path, srt_path: Path) -> Path:
    """
    Burn an SRT file into a clip and replace the clip in place.

    The captioned render goes to a sibling file first; the original is only
    replaced once FFmpeg succeeded. The SRT file is removed in both cases.
    """
    captioned_path = video_path.with_name(f"{video_path.stem}_with_subs{video_path.suffix}")
    try:
        run_process(
            [
                FFMPEG_PATH,
                "-y",
                "-i", str(video_path),
                "-vf", f"subtitles={srt_path}:force_style='{CAPTION_FORCE_STYLE}'",
                "-movflags", "+faststart",
                "-c:a", "copy",
                str(captioned_path),
            ],
            log_level="error",
        )
        os.replace(captioned_path, video_path)
    except ProcessError:
        captioned_path.unlink(missing_ok=True)
        raise
    finally:
        srt_path.unlink(missing_ok=True)

    logger.info(f"Subtitles added: {video_path}")
    return video_path
