"""
Single sequential batch worker and the admission/status facade around it.

All scheduling state (store, admission queue, rate limiter) is owned by one
``IngestionProcessor`` and mutated only from the event loop it runs on, so no
locks are needed. Admission never waits on the worker; it only starts the
worker task when none is running.
"""

import asyncio
import contextlib
import itertools
import logging
import time
from typing import Awaitable, Callable, Optional, Sequence

from batching import build_batches
from config import IngestionSettings, get_settings
from exceptions import SchedulerFaulted
from logging_utils import log_event
from models import Ingestion, IngestionStatusResponse, Priority
from priority_queue import AdmissionQueue
from rate_limiter import RateLimiter
from status import snapshot
from storage import IngestionStore

logger = logging.getLogger(__name__)


class IngestionProcessor:
    def __init__(
        self,
        settings: Optional[IngestionSettings] = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.settings = settings or get_settings()
        self._clock = clock
        self._sleep = sleep
        self.store = IngestionStore()
        self.queue = AdmissionQueue()
        self.rate_limiter = RateLimiter(self.settings.rate_limit_seconds, clock=clock, sleep=sleep)
        self._sequence = itertools.count()
        self._worker: Optional[asyncio.Task] = None
        self.fault: Optional[BaseException] = None

    @property
    def is_idle(self) -> bool:
        return self._worker is None or self._worker.done()

    # --- Admission ---
    def submit(self, ids: Sequence[int], priority: Priority) -> str:
        """Admit a request and return its ingestion id.

        Must be called from the event loop that drives the worker.
        """
        # Fails before any state is touched when there is no running loop.
        loop = asyncio.get_running_loop()
        worker = self._worker
        if self.fault is None and worker is not None and worker.done() and not worker.cancelled():
            self.fault = worker.exception()
        if self.fault is not None:
            raise SchedulerFaulted(f"batch worker stopped after an internal fault: {self.fault!r}")

        ingestion = Ingestion(
            priority=Priority(priority),
            created_at=self._clock(),
            sequence=next(self._sequence),
            batches=build_batches(ids, self.settings.batch_size),
        )
        self.store.add(ingestion)
        self.queue.enqueue(ingestion)
        log_event(
            logger,
            logging.INFO,
            "ingestion_admitted",
            ingestion_id=ingestion.ingestion_id,
            priority=ingestion.priority.value,
            batches=len(ingestion.batches),
            queued=len(self.queue),
        )
        self._wake(loop)
        return ingestion.ingestion_id

    def get_status(self, ingestion_id: str) -> IngestionStatusResponse:
        return snapshot(self.store.get(ingestion_id))

    # --- Worker ---
    def _wake(self, loop: asyncio.AbstractEventLoop) -> None:
        if not self.is_idle:
            return
        self._worker = loop.create_task(self._drain())
        self._worker.add_done_callback(self._on_worker_done)

    async def _drain(self) -> None:
        log_event(logger, logging.DEBUG, "worker_started", queued=len(self.queue))
        while True:
            head = self.queue.peek_head()
            if head is None:
                break

            batch = head.next_pending_batch()
            if batch is None:
                self.queue.dequeue_head()
                log_event(logger, logging.INFO, "ingestion_drained", ingestion_id=head.ingestion_id)
                continue

            if self.rate_limiter.delay_until_ready() > 0:
                await self.rate_limiter.wait()
                # Admissions during the wait may have changed the head.
                continue

            started_at = self.rate_limiter.record_dispatch()
            batch.mark_triggered(started_at)
            log_event(
                logger,
                logging.INFO,
                "batch_dispatched",
                ingestion_id=head.ingestion_id,
                batch_id=batch.batch_id,
                ids=batch.ids,
                priority=head.priority.value,
            )

            # Placeholder for real downstream work: fixed cost per id.
            await self._sleep(self.settings.per_id_seconds * len(batch.ids))

            batch.mark_completed(self._clock())
            log_event(
                logger,
                logging.INFO,
                "batch_completed",
                ingestion_id=head.ingestion_id,
                batch_id=batch.batch_id,
                seconds=round(batch.completed_at - started_at, 3),
            )
        log_event(logger, logging.DEBUG, "worker_idle")

    def _on_worker_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is None:
            return
        self.fault = exc
        logger.critical(
            "batch worker died; no further batches will run",
            exc_info=(type(exc), exc, exc.__traceback__),
        )

    # --- Lifecycle ---
    async def join(self) -> None:
        """Wait until the queue is drained and the worker has gone idle.

        Re-raises the worker's exception if it died.
        """
        while self._worker is not None and not self._worker.done():
            await self._worker
        if self._worker is not None and not self._worker.cancelled():
            self._worker.result()

    async def aclose(self) -> None:
        """Cancel the worker if it is running. In-memory state is left as is."""
        worker = self._worker
        self._worker = None
        if worker is None or worker.done():
            return
        worker.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await worker

    async def reset(self) -> None:
        """Stop the worker and forget every ingestion."""
        await self.aclose()
        self.store.clear()
        self.queue.clear()
        self.rate_limiter.reset()
        self._sequence = itertools.count()
        self.fault = None
