"""
Retry-once-with-downgrade policy for model calls.
"""

import logging
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Markers the model API puts in errors when it is temporarily overloaded
UNAVAILABLE_MARKERS = ("503", "unavailable")


def is_transient_unavailable(error: BaseException) -> bool:
    """Return True when the error text signals a temporarily unavailable service."""
    text = str(error).lower()
    return any(marker in text for marker in UNAVAILABLE_MARKERS)


class FallbackPolicy(Generic[T]):
    """
    Run a primary action and, on a classified failure, one secondary action.

    The secondary action runs at most once. Failures the classifier rejects
    propagate unchanged and the secondary action is never called.
    """

    def __init__(
        self,
        primary: Callable[[], T],
        secondary: Callable[[], T],
        should_fallback: Callable[[BaseException], bool] = is_transient_unavailable,
        name: str = "operation",
    ):
        self.primary = primary
        self.secondary = secondary
        self.should_fallback = should_fallback
        self.name = name

    def run(self) -> T:
        try:
            return self.primary()
        except Exception as e:
            if not self.should_fallback(e):
                raise
            logger.warning(f"{self.name} unavailable on primary ({e}), retrying on fallback")
        return self.secondary()
