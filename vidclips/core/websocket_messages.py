"""
WebSocket Message Utilities

Progress streaming messages sent to subscribed clients.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import WebSocket

from vidclips.core.progress import ProgressDescriptor

logger = logging.getLogger(__name__)


# WebSocket message types
WS_MSG_TYPE_PROGRESS = "progress"
WS_MSG_TYPE_ERROR = "error"
WS_MSG_TYPE_DONE = "done"


async def send_progress(websocket: WebSocket, descriptor: ProgressDescriptor) -> None:
    """
    Send a progress descriptor via WebSocket.

    Args:
        websocket: WebSocket connection
        descriptor: Latest progress of the subscribed video
    """
    try:
        await websocket.send_json({
            "type": WS_MSG_TYPE_PROGRESS,
            **descriptor.model_dump(mode="json"),
        })
    except Exception as e:
        logger.warning(f"Failed to send progress update via WebSocket: {e}")


async def send_error(
    websocket: WebSocket,
    message: str,
    details: Optional[str] = None,
) -> None:
    timestamp = datetime.now(timezone.utc).isoformat()
    try:
        await websocket.send_json({
            "type": WS_MSG_TYPE_ERROR,
            "message": message,
            "details": details,
            "timestamp": timestamp,
        })
    except Exception as e:
        logger.warning(f"Failed to send error message via WebSocket: {e}")


async def send_done(websocket: WebSocket, video_id: str) -> None:
    try:
        await websocket.send_json({
            "type": WS_MSG_TYPE_DONE,
            "videoId": video_id,
        })
    except Exception as e:
        logger.warning(f"Failed to send done message via WebSocket: {e}")
