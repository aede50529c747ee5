"""
Serialized sync execution.

SyncQueue runs synchronization passes one at a time, in submission order,
on a single worker task. watch() periodically probes the corpus and submits
a pass when it changed.

Dependencies: asyncio
System role: Single-writer scheduling for RagRefresher
"""

import asyncio
import logging
from typing import Protocol

from ragsync.core.document_processing.models import SyncResult
from ragsync.observability import log_exception_with_context
from ragsync.observability.correlation import new_correlation_id, set_correlation_id

logger = logging.getLogger(__name__)


class Refresher(Protocol):
    async def sync(self) -> SyncResult: ...

    async def check_for_changes(self) -> bool: ...


class SyncQueue:
    """FIFO of sync requests drained by one worker."""

    def __init__(self, refresher: Refresher) -> None:
        self._refresher = refresher
        self._queue: asyncio.Queue[tuple[str, asyncio.Future]] = asyncio.Queue()
        self._worker: asyncio.Task | None = None
        self._stopped = False

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def start(self) -> None:
        """Spawn the worker task. Idempotent while running."""
        if self._stopped:
            raise RuntimeError("SyncQueue has been stopped")
        if not self.running:
            self._worker = asyncio.create_task(self._run(), name="ragsync-sync-worker")

    def submit(self, reason: str = "manual") -> asyncio.Future:
        """
        Enqueue a synchronization pass.

        Args:
            reason: Label for logs (startup, watch, api, ...)

        Returns:
            asyncio.Future: Resolves to the pass SyncResult, or carries its exception

        Raises:
            RuntimeError: If the queue was stopped
        """
        if self._stopped:
            raise RuntimeError("SyncQueue has been stopped")

        future = asyncio.get_running_loop().create_future()
        self._queue.put_nowait((reason, future))
        logger.info(
            f"{__name__}:submit - Sync requested ({reason}), {self._queue.qsize()} pending"
        )
        return future

    async def drain(self) -> None:
        """Wait until every submitted request has completed."""
        await self._queue.join()

    async def stop(self) -> None:
        """Refuse new requests, finish queued ones and stop the worker."""
        self._stopped = True
        if self.running:
            await self.drain()
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
        self._worker = None

    async def _run(self) -> None:
        while True:
            reason, future = await self._queue.get()
            try:
                if future.cancelled():
                    continue
                set_correlation_id(new_correlation_id(f"sync-{reason}"))
                logger.info(f"{__name__}:_run - Running sync ({reason})")
                try:
                    result = await self._refresher.sync()
                except asyncio.CancelledError:
                    future.cancel()
                    raise
                except Exception as e:
                    log_exception_with_context(
                        logger, f"{__name__}:_run - Sync failed ({reason})", e, reason=reason
                    )
                    if not future.done():
                        future.set_exception(e)
                else:
                    if not future.done():
                        future.set_result(result)
            finally:
                self._queue.task_done()


async def watch(
    refresher: Refresher,
    queue: SyncQueue,
    interval_seconds: float,
    stop_event: asyncio.Event,
) -> None:
    """
    Periodically check the corpus and sync when it changed.

    Errors in one iteration are logged; the loop keeps running until
    stop_event is set.

    Args:
        refresher: Provides check_for_changes()
        queue: Queue that runs the passes
        interval_seconds: Pause between checks
        stop_event: Set to end the loop
    """
    logger.info(f"{__name__}:watch - Watching for changes every {interval_seconds}s")

    while not stop_event.is_set():
        try:
            if await refresher.check_for_changes():
                logger.info(f"{__name__}:watch - Changes detected, triggering sync")
                await queue.submit("watch")
        except Exception as e:
            log_exception_with_context(logger, f"{__name__}:watch - Watch iteration failed", e)

        try:
            await asyncio.wait_for(stop_event.wait(), timeout=interval_seconds)
        except asyncio.TimeoutError:
            pass

    logger.info(f"{__name__}:watch - Watcher stopped")
