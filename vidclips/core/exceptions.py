"""
Pipeline exceptions.

Each class maps to one failure family of the clip pipeline so callers can
decide between reporting, retrying on a lower model tier, or giving up.
"""

from typing import Optional


class PipelineError(Exception):
    """Base exception for all pipeline errors."""
    pass


class InputValidationError(PipelineError):
    """Raised when a request cannot be served with the data at hand."""
    pass


class ConfigurationError(PipelineError):
    """Raised when the service is missing required configuration."""
    pass


class MissingCredentialError(ConfigurationError):
    """Raised when a credential needed by a stage is not configured."""

    def __init__(self, key: str):
        super().__init__(f"No {key} configured. Please set it in Settings.")
        self.key = key


class ProcessError(PipelineError):
    """Raised when an external binary exits with a non-zero code."""

    def __init__(self, binary: str, exit_code: int, stderr: Optional[str] = None):
        message = f"{binary} process exited with code {exit_code}"
        if stderr:
            message = f"{message}: {stderr}"
        super().__init__(message)
        self.binary = binary
        self.exit_code = exit_code
        self.stderr = stderr


class ModelResponseError(PipelineError):
    """Raised when the generative model returns unusable output."""
    pass
