"""
Pydantic models for repository data structures.

Provides type safety and validation for repository operations.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, ConfigDict, model_validator

VideoStatus = Literal["pending", "transcribed", "error"]
ClipStatus = Literal["pending", "produced", "posted", "error"]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TranscriptSegment(BaseModel):
    """One timed line of a video transcript (``H:MM:SS,mmm`` timestamps)."""

    text: str
    start: str
    end: str


class Video(BaseModel):
    """Video entity with validation."""

    video_id: str = Field(..., min_length=1, max_length=100)
    title: str = Field(..., min_length=1)
    channel_name: str = Field(..., min_length=1)
    youtube_channel_id: str = ""
    published_at: Optional[datetime] = None
    context: str = ""

    transcript: Optional[List[TranscriptSegment]] = None
    status: VideoStatus = "pending"
    error_message: Optional[str] = None

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Video":
        """Create from Firestore document dictionary."""
        return cls.model_validate(data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to Firestore-compatible dictionary."""
        return self.model_dump(exclude_none=False)


class Clip(BaseModel):
    """Clip entity with validation."""

    id: str = Field(..., min_length=1, max_length=100)
    video_id: str = Field(..., min_length=1, max_length=100)

    start_time: float = Field(..., ge=0)
    end_time: float = Field(..., gt=0)
    llm_reason: str
    proposed_title: str
    summary: str

    status: ClipStatus = "pending"
    srt: Optional[str] = None
    deepgram_response: Optional[str] = None
    error_message: Optional[str] = None

    post_url: Optional[str] = None
    post_id: Optional[str] = None

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @model_validator(mode="after")
    def validate_range(self) -> "Clip":
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Clip":
        """Create from Firestore document dictionary."""
        return cls.model_validate(data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to Firestore-compatible dictionary."""
        return self.model_dump(exclude_none=False)


class ClipProposal(BaseModel):
    """A clip range proposed by the model, keyed the way the prompt asks for it."""

    model_config = ConfigDict(populate_by_name=True)

    start_time: float = Field(..., alias="startTime")
    end_time: float = Field(..., alias="endTime")
    proposed_title: str = Field(..., alias="proposedTitle")
    llm_reason: str = Field(..., alias="llmReason")
    summary: str


class ExistingClip(BaseModel):
    """A clip range the model is asked to stay away from."""

    id: str
    start_time: float
    end_time: float
    proposed_title: str
    summary: Optional[str] = None

    @classmethod
    def from_clip(cls, clip: Clip) -> "ExistingClip":
        return cls(
            id=clip.id,
            start_time=clip.start_time,
            end_time=clip.end_time,
            proposed_title=clip.proposed_title,
            summary=clip.summary,
        )


class ClipTiming(BaseModel):
    """New boundaries for a clip about to be produced."""

    id: str = Field(..., min_length=1)
    start_time: float = Field(..., ge=0)
    end_time: float = Field(..., gt=0)

    @model_validator(mode="after")
    def validate_range(self) -> "ClipTiming":
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self
