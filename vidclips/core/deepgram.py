"""
Deepgram speech-to-text client.

Uses the pre-recorded endpoint with utterance grouping and punctuation, which
gives per-word timings for caption generation.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx

from vidclips.config import (
    DEEPGRAM_API_BASE,
    DEEPGRAM_API_KEY_NAME,
    DEEPGRAM_MODEL,
    DEEPGRAM_TIMEOUT_SECONDS,
)
from vidclips.core.credentials import CredentialStore, EnvCredentialStore, require_credential

logger = logging.getLogger(__name__)


class DeepgramClient:
    """Async client for Deepgram pre-recorded transcription."""

    def __init__(
        self,
        credentials: Optional[CredentialStore] = None,
        model: str = DEEPGRAM_MODEL,
        api_base: str = DEEPGRAM_API_BASE,
        timeout: float = DEEPGRAM_TIMEOUT_SECONDS,
    ):
        self.credentials = credentials or EnvCredentialStore()
        self.model = model
        self.url = f"{api_base}/listen"
        self.timeout = timeout

    async def transcribe_file(self, audio_path: Path) -> Dict[str, Any]:
        """
        Submit an audio file and return the raw Deepgram response.

        Raises:
            MissingCredentialError: If no Deepgram key is configured.
            httpx.HTTPStatusError: If Deepgram rejects the request.
        """
        api_key = require_credential(self.credentials, DEEPGRAM_API_KEY_NAME)
        params = {
            "model": self.model,
            "utterances": "true",
            "punctuate": "true",
        }
        headers = {
            "Authorization": f"Token {api_key}",
            "Content-Type": "audio/wav",
        }

        audio = await asyncio.to_thread(Path(audio_path).read_bytes)
        logger.info(f"Submitting {audio_path} to Deepgram ({len(audio)} bytes)")

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(self.url, params=params, headers=headers, content=audio)
            response.raise_for_status()
            result = response.json()

        if not result:
            raise RuntimeError("No result from Deepgram")
        return result


def get_utterances(response: Dict[str, Any]) -> List[Dict[str, Any]]:
    return (response.get("results") or {}).get("utterances") or []

