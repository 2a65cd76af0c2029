"""
SRT caption generation from Deepgram word timings.
"""

import logging
from typing import Any, Dict, Iterator, List, Tuple

from vidclips.config import CAPTION_MAX_WORDS
from vidclips.core.deepgram import get_utterances
from vidclips.core.utils.timecodes import format_srt_timestamp

logger = logging.getLogger(__name__)


def _chunks(words: List[Dict[str, Any]], size: int) -> Iterator[List[Dict[str, Any]]]:
    for i in range(0, len(words), size):
        yield words[i:i + size]


def caption_cues(response: Dict[str, Any], max_words: int = CAPTION_MAX_WORDS) -> List[Tuple[float, float, str]]:
    """Group each utterance's words into ``(start, end, text)`` cues of at most ``max_words``."""
    cues = []
    for index, utterance in enumerate(get_utterances(response)):
        for chunk in _chunks(utterance.get("words") or [], max_words):
            text = " ".join(
                (w.get("punctuated_word") or w.get("word") or "").strip() for w in chunk
            ).strip()
            if not text:
                logger.debug(f"Skipping caption chunk without text in utterance {index} at {chunk[0].get('start')}s")
                continue
            cues.append((float(chunk[0]["start"]), float(chunk[-1]["end"]), text))
    return cues


def build_srt(response: Dict[str, Any], max_words: int = CAPTION_MAX_WORDS) -> str:
    """
    Render a Deepgram response as SRT text.

    Returns an empty string when the response carries no spoken words.
    """
    blocks = [
        f"{index}\n{format_srt_timestamp(start)} --> {format_srt_timestamp(end)}\n{text}\n"
        for index, (start, end, text) in enumerate(caption_cues(response, max_words), start=1)
    ]
    return "\n".join(blocks)
