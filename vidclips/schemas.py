"""
Pydantic models for request/response validation.
"""

import re
from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from vidclips.core.repositories.models import ClipStatus, ClipTiming, ExistingClip, VideoStatus

VIDEO_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{11}$")
MAX_CRITERIA_LENGTH = 4000
MAX_SUMMARY_LENGTH = 1000


def validate_video_id(value: str) -> str:
    value = value.strip()
    if not VIDEO_ID_PATTERN.match(value):
        raise ValueError("Invalid video id")
    return value


# -----------------------------------------------------------------------------
# Base Models
# -----------------------------------------------------------------------------

class BaseSchema(BaseModel):
    """Base schema with common configuration."""
    model_config = ConfigDict(
        str_strip_whitespace=True,
        populate_by_name=True,
    )


# -----------------------------------------------------------------------------
# Videos
# -----------------------------------------------------------------------------

class SubmitVideoRequest(BaseSchema):
    """Submit a video for the full pipeline."""
    video_id: str = Field(..., alias="videoId", description="YouTube video id")

    @field_validator("video_id")
    @classmethod
    def check_video_id(cls, v: str) -> str:
        return validate_video_id(v)


class VideoResponse(BaseSchema):
    video_id: str
    title: str
    channel_name: str
    status: VideoStatus
    error_message: Optional[str] = None


class VideoStatusResponse(BaseSchema):
    video_id: str
    status: VideoStatus
    error_message: Optional[str] = None
    clips: List[str] = Field(default_factory=list, description="Ids of produced clips")


class AnalyzeRequest(BaseSchema):
    """Run one analysis pass with caller-chosen criteria."""
    prompt_type: Literal["default", "funny", "educational", "custom"] = Field(
        default="default", alias="promptType"
    )
    custom_criteria: str = Field(default="", max_length=MAX_CRITERIA_LENGTH, alias="customCriteria")
    existing_clips: List[ExistingClip] = Field(default_factory=list, alias="existingClips")


class DeleteVideoResponse(BaseSchema):
    success: bool = True
    video_id: str
    deleted_clips: List[str] = Field(default_factory=list)


# -----------------------------------------------------------------------------
# Clips
# -----------------------------------------------------------------------------

class ClipResponse(BaseSchema):
    id: str
    video_id: str
    start_time: float
    end_time: float
    proposed_title: str
    llm_reason: str
    summary: str
    status: ClipStatus
    srt: Optional[str] = None
    error_message: Optional[str] = None


class ClipListResponse(BaseSchema):
    clips: List[ClipResponse] = Field(default_factory=list)


class ProduceClipsRequest(BaseSchema):
    """New boundaries for the clips to produce."""
    clips: List[ClipTiming] = Field(..., min_length=1, max_length=100)


class ProduceClipsResponse(BaseSchema):
    succeeded: List[str] = Field(default_factory=list)
    failed: List[dict] = Field(default_factory=list)
    success_count: int = 0
    failure_count: int = 0


class UpdateSummaryRequest(BaseSchema):
    summary: str = Field(..., min_length=1, max_length=MAX_SUMMARY_LENGTH)


class SummaryResponse(BaseSchema):
    clip_id: str
    summary: str


class DeleteClipResponse(BaseSchema):
    success: bool = True
    clip_id: str


# -----------------------------------------------------------------------------
# Health
# -----------------------------------------------------------------------------

class HealthResponse(BaseSchema):
    """Health check response."""
    status: str = "healthy"
    version: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
