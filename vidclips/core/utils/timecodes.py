"""Conversions between seconds and the timestamp strings used by transcripts and SRT."""

import math


def parse_timestamp(value: str) -> float:
    """
    Parse ``H:MM:SS,mmm`` (or ``HH:MM:SS.mmm`` / ``MM:SS``) into seconds.

    A bare number is returned as seconds.
    """
    text = str(value).strip().replace(",", ".")
    if not text:
        return 0.0
    parts = text.split(":")
    if len(parts) > 3:
        raise ValueError(f"Invalid timestamp: {value!r}")
    seconds = 0.0
    for part in parts:
        seconds = seconds * 60 + float(part)
    return seconds


def _split(seconds: float) -> tuple[int, int, int, int]:
    total_ms = int(math.floor(max(seconds, 0.0) * 1000 + 1e-6))
    hours, rem = divmod(total_ms, 3_600_000)
    minutes, rem = divmod(rem, 60_000)
    secs, millis = divmod(rem, 1000)
    return hours, minutes, secs, millis


def format_srt_timestamp(seconds: float) -> str:
    """Format seconds as zero-padded ``HH:MM:SS,mmm``."""
    hours, minutes, secs, millis = _split(seconds)
    return f"{hours:02d}:{minutes:02d}:{secs:02d},{millis:03d}"


def format_transcript_timestamp(seconds: float) -> str:
    """Format seconds as ``H:MM:SS,mmm``, the transcript segment format."""
    hours, minutes, secs, millis = _split(seconds)
    return f"{hours}:{minutes:02d}:{secs:02d},{millis:03d}"


def format_offset(seconds: float) -> str:
    """Compact seconds for prompts: ``12`` or ``12.5``."""
    return f"{round(seconds, 3):g}"
