"""
Credential lookup for external services.

Secrets are read right before each Gemini or Deepgram call so a key added
while the service is running takes effect on the next request.
"""

import logging
import os
from typing import Mapping, Optional, Protocol

from vidclips.core.exceptions import MissingCredentialError

logger = logging.getLogger(__name__)


class CredentialStore(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...


class EnvCredentialStore:
    """Reads credentials from the process environment."""

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self._environ = environ if environ is not None else os.environ

    def get(self, key: str) -> Optional[str]:
        value = self._environ.get(key)
        if not value:
            logger.error(f"API key {key} not found in environment")
            return None
        return value


def require_credential(store: CredentialStore, key: str) -> str:
    """Return the credential or raise ``MissingCredentialError``."""
    value = store.get(key)
    if not value:
        raise MissingCredentialError(key)
    return value
