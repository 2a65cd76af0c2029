"""
In-memory progress broadcasting for running pipelines.

A ``ProgressHub`` keeps the latest ``ProgressDescriptor`` for each video being
processed and notifies observers whenever it changes. Nothing is persisted;
the durable status lives on the video and clip entities.
"""

import asyncio
import logging
from threading import RLock
from typing import AsyncIterator, Callable, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

Stage = Literal["download", "transcription", "analysis", "production", "complete"]

ProgressCallback = Callable[["ProgressDescriptor"], None]

ALL_ENTITIES = "*"


class ClipProgress(BaseModel):
    clip_id: str
    progress: int = Field(default=0, ge=0, le=100)


class ProgressDescriptor(BaseModel):
    """Latest known progress of one pipeline run."""

    entity_id: str
    stage: Stage = "transcription"
    progress: int = Field(default=0, ge=0, le=100)
    message: str = "Starting..."
    clip_ids: Optional[List[str]] = None
    clips: Optional[List[ClipProgress]] = None


class Subscription:
    """Handle returned by the hub; call ``unsubscribe`` to stop receiving updates."""

    def __init__(self, hub: "ProgressHub", topic: str, callback: ProgressCallback):
        self._hub = hub
        self.topic = topic
        self.callback = callback
        self.active = True

    def unsubscribe(self) -> None:
        self._hub.unsubscribe(self)


class ProgressHub:
    """
    Registry of per-entity progress with observer notification.

    Listeners are kept per topic: an entity id, ``"*"`` for every change, or
    ``"stage:<name>"`` for updates that set that stage. Emission iterates a
    copy of the listener list, so listeners may unsubscribe while being
    notified.
    """

    def __init__(self) -> None:
        self._progress: Dict[str, ProgressDescriptor] = {}
        self._listeners: Dict[str, List[Subscription]] = {}
        self._lock = RLock()

    def update(self, entity_id: str, **partial) -> ProgressDescriptor:
        """
        Merge ``partial`` into the entity's descriptor and notify listeners.

        Listeners run under the hub lock, so updates published from several
        threads reach every listener in the order they were stored.
        """
        with self._lock:
            current = self._progress.get(entity_id) or ProgressDescriptor(entity_id=entity_id)
            updated = ProgressDescriptor.model_validate(
                {**current.model_dump(), **partial, "entity_id": entity_id}
            )
            self._progress[entity_id] = updated
            self._emit(ALL_ENTITIES, updated)
            self._emit(entity_id, updated)
            if "stage" in partial:
                self._emit(f"stage:{updated.stage}", updated)
        return updated

    def update_clip(self, entity_id: str, clip_id: str, progress: int) -> Optional[ProgressDescriptor]:
        """
        Set one clip's progress inside its video's descriptor.

        Only clips already listed in the descriptor are touched; unknown clip
        ids leave the list unchanged.
        """
        with self._lock:
            current = self._progress.get(entity_id)
            clips = list(current.clips) if current and current.clips else []
            updated_clips = [
                ClipProgress(clip_id=c.clip_id, progress=progress) if c.clip_id == clip_id else c
                for c in clips
            ]
            return self.update(entity_id, stage="production", clips=updated_clips or None)

    def get(self, entity_id: str) -> Optional[ProgressDescriptor]:
        with self._lock:
            return self._progress.get(entity_id)

    def clear(self, entity_id: str) -> None:
        with self._lock:
            self._progress.pop(entity_id, None)

    def subscribe(self, entity_id: str, callback: ProgressCallback) -> Subscription:
        """Listen to one entity; the current snapshot, if any, is delivered immediately."""
        with self._lock:
            subscription = self._add(entity_id, callback)
            snapshot = self._progress.get(entity_id)
            if snapshot is not None:
                self._notify(subscription, snapshot)
        return subscription

    def on_change(self, callback: ProgressCallback) -> Subscription:
        return self._add(ALL_ENTITIES, callback)

    def on_stage(self, stage: Stage, callback: ProgressCallback) -> Subscription:
        return self._add(f"stage:{stage}", callback)

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            subscription.active = False
            listeners = self._listeners.get(subscription.topic, [])
            if subscription in listeners:
                listeners.remove(subscription)
            if not listeners:
                self._listeners.pop(subscription.topic, None)

    def listener_count(self, topic: str) -> int:
        with self._lock:
            return len(self._listeners.get(topic, []))

    async def stream(self, entity_id: str) -> AsyncIterator[ProgressDescriptor]:
        """
        Yield descriptors for one entity as they arrive.

        Updates may be published from worker threads; they are handed to the
        consuming event loop thread-safely. Closing the iterator unsubscribes.
        """
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue[ProgressDescriptor] = asyncio.Queue()

        def _enqueue(descriptor: ProgressDescriptor) -> None:
            loop.call_soon_threadsafe(queue.put_nowait, descriptor)

        subscription = self.subscribe(entity_id, _enqueue)
        try:
            while True:
                yield await queue.get()
        finally:
            subscription.unsubscribe()

    def _add(self, topic: str, callback: ProgressCallback) -> Subscription:
        subscription = Subscription(self, topic, callback)
        with self._lock:
            self._listeners.setdefault(topic, []).append(subscription)
        return subscription

    def _emit(self, topic: str, descriptor: ProgressDescriptor) -> None:
        with self._lock:
            listeners = list(self._listeners.get(topic, []))
        for subscription in listeners:
            if subscription.active:
                self._notify(subscription, descriptor)

    def _notify(self, subscription: Subscription, descriptor: ProgressDescriptor) -> None:
        try:
            subscription.callback(descriptor)
        except Exception as e:
            logger.warning(f"Progress listener for {subscription.topic} failed: {e}")
