"""
Repository layer for Firestore data access.
"""

from vidclips.core.repositories.clips import ClipRepository
from vidclips.core.repositories.exceptions import (
    ClipRepositoryError,
    ConflictError,
    NotFoundError,
    RepositoryError,
    VideoRepositoryError,
)
from vidclips.core.repositories.videos import VideoRepository

__all__ = [
    "ClipRepository",
    "ClipRepositoryError",
    "ConflictError",
    "NotFoundError",
    "RepositoryError",
    "VideoRepository",
    "VideoRepositoryError",
]
