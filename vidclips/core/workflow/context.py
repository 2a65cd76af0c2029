"""
Data structures for the clip pipeline.

Contains the injectable context shared by every stage and the batch result
returned by bulk production.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Tuple

from vidclips.config import AUDIO_DIR, CLIPS_DIR
from vidclips.core.deepgram import DeepgramClient
from vidclips.core.gemini import GeminiClient
from vidclips.core.progress import ProgressHub
from vidclips.core.repositories.clips import ClipRepository
from vidclips.core.repositories.videos import VideoRepository
from vidclips.core.whisper import WhisperTranscriber


@dataclass
class PipelineContext:
    """Collaborators and working directories for one pipeline instance."""

    videos: VideoRepository
    clips: ClipRepository
    progress: ProgressHub
    gemini: GeminiClient
    deepgram: DeepgramClient
    whisper: WhisperTranscriber
    clips_dir: Path = CLIPS_DIR
    audio_dir: Path = AUDIO_DIR

    def clip_path(self, clip_id: str) -> Path:
        return self.clips_dir / f"{clip_id}.mp4"

    def clip_audio_path(self, clip_id: str) -> Path:
        return self.clips_dir / f"{clip_id}.wav"

    def clip_srt_path(self, clip_id: str) -> Path:
        return self.clips_dir / f"{clip_id}.srt"

    def video_audio_path(self, video_id: str) -> Path:
        return self.audio_dir / f"{video_id}.wav"


@dataclass
class BatchResult:
    """Outcome of producing several clips concurrently."""

    succeeded: List[str] = field(default_factory=list)
    failed: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return len(self.succeeded)

    @property
    def failure_count(self) -> int:
        return len(self.failed)
