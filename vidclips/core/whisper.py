"""
Local Whisper speech-to-text for whole-video transcripts.

Runs faster-whisper on the downloaded audio. The model is fetched into
``WHISPER_MODELS_DIR`` the first time it is loaded and kept in memory for
later videos. Clips are transcribed again with Deepgram for captions.
"""

import logging
import threading
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from vidclips.config import (
    WHISPER_COMPUTE_TYPE,
    WHISPER_DEVICE,
    WHISPER_LANGUAGE,
    WHISPER_MODEL,
    WHISPER_MODELS_DIR,
)
from vidclips.core.utils.timecodes import format_transcript_timestamp

logger = logging.getLogger(__name__)

# Receives the share of the audio decoded so far, 0-100
TranscriptionProgress = Callable[[float], None]

GPU_DEVICES = {"cuda", "gpu"}


class WhisperTranscriber:
    """Blocking faster-whisper transcriber; call through ``asyncio.to_thread``."""

    def __init__(
        self,
        model_name: str = WHISPER_MODEL,
        device: str = WHISPER_DEVICE,
        compute_type: str = WHISPER_COMPUTE_TYPE,
        language: Optional[str] = WHISPER_LANGUAGE,
        download_root: Path = WHISPER_MODELS_DIR,
    ):
        self.model_name = model_name
        self.device = device
        self.compute_type = compute_type
        self.language = language
        self.download_root = Path(download_root)
        self._model: Any = None
        self._lock = threading.Lock()

    def _create_model(self, device: str, compute_type: str) -> Any:
        from faster_whisper import WhisperModel

        return WhisperModel(
            self.model_name,
            device=device,
            compute_type=compute_type,
            download_root=str(self.download_root),
        )

    def _load_model(self) -> Any:
        with self._lock:
            if self._model is not None:
                return self._model

            logger.info(f"Loading Whisper model {self.model_name} ({self.device})")
            if self.device in GPU_DEVICES:
                try:
                    self._model = self._create_model("cuda", "float16")
                except Exception as e:
                    logger.warning(f"Whisper GPU init failed, falling back to CPU: {e}")
            if self._model is None:
                self._model = self._create_model("cpu", self.compute_type)
            return self._model

    def transcribe(
        self,
        audio_path: Path,
        on_progress: Optional[TranscriptionProgress] = None,
    ) -> List[Dict[str, str]]:
        """
        Transcribe an audio file into ``{text, start, end}`` segments.

        Args:
            audio_path: 16 kHz mono wav
            on_progress: Called after every decoded segment with the
                percentage of the audio covered so far

        Returns:
            Segments with ``H:MM:SS,mmm`` timestamps; silent segments are dropped.
        """
        model = self._load_model()
        logger.info(f"Starting Whisper transcription for {audio_path}")

        segments, info = model.transcribe(str(audio_path), language=self.language)
        duration = float(getattr(info, "duration", 0) or 0)

        result = []
        for segment in segments:
            text = (segment.text or "").strip()
            if text:
                result.append(
                    {
                        "text": text,
                        "start": format_transcript_timestamp(float(segment.start)),
                        "end": format_transcript_timestamp(float(segment.end)),
                    }
                )
            if on_progress is not None and duration > 0:
                on_progress(min(100.0, float(segment.end) / duration * 100))

        logger.info(f"Finished Whisper transcription for {audio_path}: {len(result)} segments")
        return result
