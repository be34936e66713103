"""
Preview Queue
=============

Bounded-concurrency background loading of previews for a list of faces.

High-priority requests (faces the user is looking at right now) jump to the
front of the queue; normal requests are appended. A face that is already
queued, running or resolved is never scheduled twice.
"""

import asyncio
import logging
from collections import deque
from collections.abc import Callable, Iterable
from enum import Enum
from pathlib import Path

from ..core.models import FontFace
from .resolver import PreviewResolver

logger = logging.getLogger(__name__)


class PreviewPriority(str, Enum):
    HIGH = "high"
    NORMAL = "normal"


class PreviewQueue:
    """
    Schedules preview resolution for faces by id.

    Must be driven from a running event loop: ``enqueue`` starts workers
    immediately when there is spare capacity.
    """

    def __init__(
        self,
        resolver: PreviewResolver,
        faces: Iterable[FontFace] = (),
        concurrency: int = 2,
        on_result: Callable[[FontFace, Path | None], None] | None = None,
    ):
        """
        Initialize the queue.

        Args:
            resolver: Resolver used for every face
            faces: Faces that may be requested
            concurrency: Maximum number of previews resolved at once
            on_result: Called with each face and its preview path as results arrive
        """
        self.resolver = resolver
        self.concurrency = max(1, int(concurrency))
        self.on_result = on_result

        self._faces: dict[str, FontFace] = {face.id: face for face in faces}
        self._pending: deque[str] = deque()
        self._queued: set[str] = set()
        self._running: set[str] = set()
        self._tasks: set[asyncio.Task] = set()
        self._results: dict[str, Path | None] = {}
        self._idle = asyncio.Event()
        self._idle.set()
        self._closed = False

    @property
    def results(self) -> dict[str, Path | None]:
        return dict(self._results)

    @property
    def pending_ids(self) -> list[str]:
        return list(self._pending)

    @property
    def running_count(self) -> int:
        return len(self._running)

    def is_loading(self, face_id: str) -> bool:
        return face_id in self._queued or face_id in self._running

    def _should_skip(self, face_id: str) -> bool:
        return (
            face_id not in self._faces
            or face_id in self._queued
            or face_id in self._running
            or face_id in self._results
        )

    def enqueue(self, face_id: str, priority: PreviewPriority = PreviewPriority.NORMAL) -> bool:
        """
        Request the preview for one face.

        Returns:
            True if the face was scheduled
        """
        if self._closed or self._should_skip(face_id):
            return False

        if priority == PreviewPriority.HIGH:
            self._pending.appendleft(face_id)
        else:
            self._pending.append(face_id)
        self._queued.add(face_id)
        self._pump()
        return True

    def enqueue_many(
        self, face_ids: Iterable[str], priority: PreviewPriority = PreviewPriority.NORMAL
    ) -> int:
        """
        Request previews for several faces.

        A high-priority batch lands at the front of the queue in its given
        order. Returns the number of faces scheduled.
        """
        if self._closed:
            return 0

        accepted = []
        for face_id in face_ids:
            if self._should_skip(face_id) or face_id in accepted:
                continue
            accepted.append(face_id)

        if priority == PreviewPriority.HIGH:
            self._pending.extendleft(reversed(accepted))
        else:
            self._pending.extend(accepted)
        self._queued.update(accepted)

        if accepted:
            self._pump()
        return len(accepted)

    def set_faces(self, faces: Iterable[FontFace]) -> None:
        """Replace the known faces, dropping queued work and results for faces that left."""
        self._faces = {face.id: face for face in faces}

        kept = [face_id for face_id in self._pending if face_id in self._faces]
        dropped = len(self._pending) - len(kept)
        self._pending = deque(kept)
        self._queued = set(kept)
        self._results = {
            face_id: path for face_id, path in self._results.items() if face_id in self._faces
        }

        if dropped:
            logger.debug(f"Pruned {dropped} queued previews after face list changed")
        self._update_idle()

    def _update_idle(self) -> None:
        if self._pending or self._running:
            self._idle.clear()
        else:
            self._idle.set()

    def _pump(self) -> None:
        while not self._closed and self._pending and len(self._running) < self.concurrency:
            face_id = self._pending.popleft()
            self._queued.discard(face_id)
            face = self._faces.get(face_id)
            if face is None:
                continue

            self._running.add(face_id)
            task = asyncio.get_running_loop().create_task(self._load(face))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

        self._update_idle()

    async def _load(self, face: FontFace) -> None:
        try:
            result = await self.resolver.resolve_preview(face)
        except asyncio.CancelledError:
            self._running.discard(face.id)
            raise
        except Exception as e:
            logger.warning(f"Preview failed for {face}: {e}")
            result = None

        self._running.discard(face.id)

        # Faces removed while their preview was loading are not reported
        if face.id in self._faces and not self._closed:
            self._results[face.id] = result
            if self.on_result is not None:
                try:
                    self.on_result(face, result)
                except Exception as e:
                    logger.error(f"Preview result callback failed: {e}")

        self._pump()

    async def join(self) -> None:
        """Wait until nothing is queued or running."""
        await self._idle.wait()

    def close(self) -> None:
        """Stop scheduling and cancel running work."""
        self._closed = True
        self._pending.clear()
        self._queued.clear()
        for task in list(self._tasks):
            task.cancel()
        self._running.clear()
        self._idle.set()
