"""vidclips - FastAPI Application Entry Point.

Serves the clip pipeline: submission, analysis, production, clip
maintenance and live progress over WebSocket.
"""

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from vidclips.config import CORS_ORIGINS, DEBUG, logger
from vidclips.core.deepgram import DeepgramClient
from vidclips.core.gemini import GeminiClient
from vidclips.core.progress import ProgressHub
from vidclips.core.repositories import ClipRepository, VideoRepository
from vidclips.core.whisper import WhisperTranscriber
from vidclips.core.workflow.context import PipelineContext
from vidclips.middleware import (
    ErrorSanitizationMiddleware,
    RequestIDMiddleware,
    RequestLoggingMiddleware,
)
from vidclips.routers import clips, progress, videos
from vidclips.schemas import HealthResponse
from vidclips.version import __version__


def build_pipeline() -> PipelineContext:
    """Wire the production collaborators: Firestore, Gemini, Deepgram, local Whisper."""
    return PipelineContext(
        videos=VideoRepository(),
        clips=ClipRepository(),
        progress=ProgressHub(),
        gemini=GeminiClient(),
        deepgram=DeepgramClient(),
        whisper=WhisperTranscriber(),
    )


# -----------------------------------------------------------------------------
# Application Lifespan
# -----------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown events."""
    logger.info("Starting vidclips v%s", __version__)
    if getattr(app.state, "pipeline", None) is None:
        app.state.pipeline = build_pipeline()
    yield

    pending = list(app.state.tasks)
    if pending:
        logger.warning("Cancelling %d running pipeline tasks", len(pending))
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
    logger.info("Shutting down vidclips")


# -----------------------------------------------------------------------------
# Application Factory
# -----------------------------------------------------------------------------

def create_app(pipeline: Optional[PipelineContext] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="vidclips",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if DEBUG else None,
        redoc_url="/redoc" if DEBUG else None,
        openapi_url="/openapi.json" if DEBUG else None,
    )
    app.state.pipeline = pipeline
    app.state.tasks = set()

    # -------------------------------------------------------------------------
    # Middleware Stack (first added = last executed)
    # -------------------------------------------------------------------------

    app.add_middleware(ErrorSanitizationMiddleware, debug=DEBUG)
    app.add_middleware(RequestLoggingMiddleware, exclude_paths={"/health"})
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
        max_age=600,
    )

    # -------------------------------------------------------------------------
    # Exception Handlers
    # -------------------------------------------------------------------------

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle Pydantic validation errors with clean messages."""
        clean_errors = [
            {"field": ".".join(str(loc) for loc in err.get("loc", [])), "message": err.get("msg", "Invalid value")}
            for err in exc.errors()[:5]
        ]
        return JSONResponse(
            status_code=422,
            content={"detail": "Validation error", "errors": clean_errors},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    # -------------------------------------------------------------------------
    # Health Check
    # -------------------------------------------------------------------------

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers and orchestrators."""
        return HealthResponse(
            status="healthy",
            version=__version__,
            timestamp=datetime.now(timezone.utc),
        )

    app.include_router(videos.router)
    app.include_router(clips.router)
    app.include_router(progress.router)

    return app


if __name__ == "__main__":
    uvicorn.run(
        "vidclips.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=DEBUG,
    )
