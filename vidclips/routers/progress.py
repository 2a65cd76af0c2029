import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect, status

from vidclips.core.progress import ProgressDescriptor
from vidclips.core.websocket_messages import send_done, send_error, send_progress
from vidclips.core.workflow.context import PipelineContext
from vidclips.dependencies import get_pipeline

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Progress"])


@router.get("/api/progress/{video_id}", response_model=ProgressDescriptor)
async def get_progress(
    video_id: str,
    ctx: PipelineContext = Depends(get_pipeline),
) -> ProgressDescriptor:
    """Latest progress of a running pipeline."""
    descriptor = ctx.progress.get(video_id)
    if descriptor is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No pipeline running for this video")
    return descriptor


@router.websocket("/ws/progress/{video_id}")
async def progress_socket(websocket: WebSocket, video_id: str):
    """
    Stream progress of one video.

    The current snapshot is sent on connect, then every update. The
    subscription ends when the client disconnects.
    """
    await websocket.accept()
    hub = websocket.app.state.pipeline.progress

    async def _forward() -> None:
        async for descriptor in hub.stream(video_id):
            await send_progress(websocket, descriptor)
            if descriptor.stage == "complete":
                await send_done(websocket, video_id)

    forwarder = asyncio.create_task(_forward())
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info(f"Progress client for {video_id} disconnected")
    except Exception as e:
        logger.exception("Progress WebSocket error for %s: %s", video_id, e)
        await send_error(websocket, "Progress stream failed")
    finally:
        forwarder.cancel()
