"""
Core utility modules for process execution, model fallback and timecodes.
"""

from vidclips.core.utils.fallback import FallbackPolicy, is_transient_unavailable
from vidclips.core.utils.process import run_process, filter_benign_warnings
from vidclips.core.utils.timecodes import (
    format_srt_timestamp,
    format_transcript_timestamp,
    parse_timestamp,
)

__all__ = [
    "FallbackPolicy",
    "is_transient_unavailable",
    "run_process",
    "filter_benign_warnings",
    "format_srt_timestamp",
    "format_transcript_timestamp",
    "parse_timestamp",
]
