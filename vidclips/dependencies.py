"""
Shared FastAPI dependencies and helpers for routers.
"""

import asyncio
import logging
from typing import Any, Coroutine, Set

from fastapi import FastAPI, HTTPException, Request, status

from vidclips.core.exceptions import (
    ConfigurationError,
    InputValidationError,
    ModelResponseError,
    PipelineError,
    ProcessError,
)
from vidclips.core.repositories.exceptions import ConflictError, NotFoundError
from vidclips.core.workflow.context import PipelineContext

logger = logging.getLogger(__name__)


def get_pipeline(request: Request) -> PipelineContext:
    return request.app.state.pipeline


def http_error(error: Exception) -> HTTPException:
    """Translate a pipeline or repository error into an HTTP error."""
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, ConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(error))
    if isinstance(error, InputValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
    if isinstance(error, (ModelResponseError, ProcessError)):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(error))
    if isinstance(error, (ConfigurationError, PipelineError)):
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")


def run_in_background(app: FastAPI, coro: Coroutine[Any, Any, Any], name: str) -> asyncio.Task:
    """
    Schedule a pipeline run on the event loop.

    The task is referenced from ``app.state.tasks`` until it finishes; its
    failure is logged, since nobody awaits it.
    """
    tasks: Set[asyncio.Task] = app.state.tasks
    task = asyncio.create_task(coro, name=name)
    tasks.add(task)

    def _done(t: asyncio.Task) -> None:
        tasks.discard(t)
        if t.cancelled():
            logger.warning(f"Background task {name} was cancelled")
        elif t.exception() is not None:
            logger.error(f"Background task {name} failed: {t.exception()}")

    task.add_done_callback(_done)
    return task
