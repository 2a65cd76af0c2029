"""
HTTP middleware stack.

Provides:
- Request ID injection
- Request/response logging
- Error sanitization
"""

from vidclips.middleware.request_id import RequestIDMiddleware, get_request_id
from vidclips.middleware.logging import RequestLoggingMiddleware
from vidclips.middleware.error_sanitization import ErrorSanitizationMiddleware

__all__ = [
    "RequestIDMiddleware",
    "RequestLoggingMiddleware",
    "ErrorSanitizationMiddleware",
    "get_request_id",
]
