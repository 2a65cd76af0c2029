"""
Parsing and validation of model output.

The model answers in free text. This module extracts the clip array, decodes
it and validates each element.
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional, Sequence

from vidclips.config import MAX_CLIP_SECONDS, MIN_CLIP_SECONDS
from vidclips.core.exceptions import ModelResponseError
from vidclips.core.repositories.models import ClipProposal, ExistingClip

logger = logging.getLogger(__name__)

_ARRAY_PATTERN = re.compile(r"\[[\s\S]*\]")
_FENCED_ARRAY_PATTERN = re.compile(r"```(?:json)?\s*(\[[\s\S]*?\])\s*```")

_NUMBER_FIELDS = ("startTime", "endTime")
_TEXT_FIELDS = ("proposedTitle", "llmReason", "summary")


def extract_json_array(text: str) -> List[Any]:
    """
    Pull the JSON array out of a model response.

    The first ``[...]`` span wins; a fenced code block is the fallback.

    Raises:
        ModelResponseError: If no array can be found or decoded
    """
    match = _ARRAY_PATTERN.search(text)
    candidate: Optional[str] = match.group(0) if match else None
    if candidate is None:
        fenced = _FENCED_ARRAY_PATTERN.search(text)
        candidate = fenced.group(1) if fenced else None

    if candidate is None:
        raise ModelResponseError("Could not parse JSON from AI response")

    try:
        data = json.loads(candidate)
    except json.JSONDecodeError as e:
        raise ModelResponseError(f"Could not parse JSON from AI response: {e}") from e

    if not isinstance(data, list):
        raise ModelResponseError("AI response is not a JSON array")
    return data


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def overlaps(start: float, end: float, other_start: float, other_end: float) -> bool:
    """True when the two ranges share more than zero seconds."""
    return min(end, other_end) - max(start, other_start) > 0


def validate_proposal(
    item: Any,
    existing_clips: Sequence[ExistingClip] = (),
) -> Optional[ClipProposal]:
    """Return a proposal for a well-formed element, ``None`` for anything else."""
    if not isinstance(item, dict):
        return None
    if not all(_is_number(item.get(key)) for key in _NUMBER_FIELDS):
        return None
    if not all(isinstance(item.get(key), str) for key in _TEXT_FIELDS):
        return None

    start, end = float(item["startTime"]), float(item["endTime"])
    duration = end - start
    if start < 0 or start >= end:
        return None
    if duration < MIN_CLIP_SECONDS or duration > MAX_CLIP_SECONDS:
        return None
    if any(overlaps(start, end, clip.start_time, clip.end_time) for clip in existing_clips):
        return None

    return ClipProposal.model_validate(item)


def parse_clip_proposals(
    text: str,
    existing_clips: Sequence[ExistingClip] = (),
) -> List[ClipProposal]:
    """
    Parse and filter clip proposals from a model response.

    Invalid elements are dropped, never corrected. An empty list means the
    model found nothing usable; it is not an error.
    """
    items = extract_json_array(text)
    proposals = [p for p in (validate_proposal(item, existing_clips) for item in items) if p]

    dropped = len(items) - len(proposals)
    if dropped:
        logger.warning(f"Dropped {dropped} of {len(items)} clip proposals that failed validation")
    return proposals


def proposal_to_fields(proposal: ClipProposal) -> Dict[str, Any]:
    return {
        "start_time": proposal.start_time,
        "end_time": proposal.end_time,
        "proposed_title": proposal.proposed_title,
        "llm_reason": proposal.llm_reason,
        "summary": proposal.summary,
    }
