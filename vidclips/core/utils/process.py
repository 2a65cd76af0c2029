"""
External process execution for yt-dlp and FFmpeg.

Every media step in the pipeline goes through ``run_process`` so exit code
handling and stderr filtering stay in one place.
"""

import logging
import re
import subprocess
from pathlib import Path
from typing import Optional

from vidclips.core.exceptions import ProcessError

logger = logging.getLogger(__name__)

# Patterns for known benign warnings that should be filtered
BENIGN_WARNING_PATTERNS = [
    r"\[av1 @ .*\] Your platform doesn't suppport hardware accelerated AV1 decoding",
    r"\[av1 @ .*\] Failed to get pixel format",
    r"\[av1 @ .*\] Missing Sequence Header",
    r"\[.*\] .* does not support hardware acceleration",
    r"\[.*\] .* hardware acceleration disabled",
    r"^WARNING: \[youtube\] .* nsig extraction failed",
]

# Keep the tail of stderr in error messages, full output goes to the log
STDERR_TAIL_CHARS = 500


def filter_benign_warnings(stderr: str) -> tuple[str, list[str]]:
    """
    Filter out known benign warnings from process stderr.

    Args:
        stderr: Raw stderr output.

    Returns:
        Tuple of (filtered_stderr, filtered_warnings_list).
    """
    filtered_lines = []
    filtered_warnings = []

    for line in stderr.split("\n"):
        if any(re.search(pattern, line, re.IGNORECASE) for pattern in BENIGN_WARNING_PATTERNS):
            filtered_warnings.append(line)
        else:
            filtered_lines.append(line)

    return "\n".join(filtered_lines), filtered_warnings


def _with_log_level(cmd: list[str], log_level: str) -> list[str]:
    """Insert ``-loglevel`` right after the binary (and ``-y`` if present)."""
    if "-loglevel" in cmd:
        return cmd
    insert_pos = 2 if len(cmd) > 1 and cmd[1] == "-y" else 1
    return cmd[:insert_pos] + ["-loglevel", log_level] + cmd[insert_pos:]


def run_process(
    cmd: list[str],
    log_level: Optional[str] = None,
) -> subprocess.CompletedProcess:
    """
    Run an external binary and require a zero exit code.

    Args:
        cmd: Binary followed by its arguments.
        log_level: Optional FFmpeg log level inserted after the binary.

    Returns:
        CompletedProcess instance with filtered stderr.

    Raises:
        ProcessError: If the binary is missing or exits non-zero.
    """
    if log_level:
        cmd = _with_log_level(cmd, log_level)

    binary = Path(cmd[0]).name
    logger.debug("Running %s", " ".join(cmd))

    try:
        result = subprocess.run(
            cmd,
            check=False,
            capture_output=True,
            text=True,
        )
    except FileNotFoundError as e:
        logger.error(f"{binary} is not installed or not on PATH: {e}")
        raise ProcessError(binary, 127, str(e)) from e

    stderr = result.stderr or ""
    if stderr:
        stderr, warnings = filter_benign_warnings(stderr)
        if warnings:
            logger.debug(f"Filtered {len(warnings)} benign {binary} warnings")
        result.stderr = stderr

    if result.returncode != 0:
        logger.error(f"{binary} failed with code {result.returncode}: {stderr}")
        raise ProcessError(binary, result.returncode, stderr.strip()[-STDERR_TAIL_CHARS:] or None)

    return result
