"""Notification Dispatcher — supervised, detached fan-out of state transitions.

Invariants:
    - submit() never blocks and never raises: a full queue drops the event
      with a warning, a stopped dispatcher refuses it
    - Each event is handled under dispatch_timeout_seconds
    - Push and realtime are attempted independently; a failure in one is logged
      and does not skip the other
    - Failures are logged with context and never retried here
    - Workers are supervised: an exception while handling one event never
      kills the worker loop
    - stop() drains the queue within the grace period, then cancels workers

Design Decisions:
    - asyncio.Queue + N worker tasks over per-request create_task: bounded
      memory, observable backlog, orderly shutdown
    - Delivery plan computed by core/notification_payloads.py (pure)
"""

import asyncio
import logging

from app.core.domain_types import TransitionEvent
from app.core.errors import LikesError
from app.core.notification_payloads import plan_deliveries
from app.core.repository_protocols import PushSender, RealtimeEmitter

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Consumes transition events and fans them out to push + realtime."""

    def __init__(
        self,
        push: PushSender,
        realtime: RealtimeEmitter,
        *,
        queue_size: int = 1000,
        workers: int = 2,
        timeout_seconds: float = 15,
        channel_id: str = "likes",
    ):
        self._push = push
        self._realtime = realtime
        self._queue: asyncio.Queue[TransitionEvent] = asyncio.Queue(maxsize=queue_size)
        self._worker_count = workers
        self._timeout = timeout_seconds
        self._channel_id = channel_id
        self._workers: list[asyncio.Task] = []
        self._accepting = False

    @property
    def running(self) -> bool:
        return bool(self._workers)

    @property
    def backlog(self) -> int:
        return self._queue.qsize()

    def start(self) -> None:
        if self._workers:
            return
        self._accepting = True
        self._workers = [
            asyncio.create_task(self._run(i), name=f"notification-worker-{i}")
            for i in range(self._worker_count)
        ]
        logger.info(f"Notification dispatcher started ({self._worker_count} workers)")

    def submit(self, event: TransitionEvent) -> bool:
        """Queue an event for delivery. Returns False if it was dropped."""
        if not self._accepting:
            logger.warning(
                "Dispatcher not running, dropping event",
                extra={"event_kind": event.kind.value, "target_id": str(event.recipient)},
            )
            return False
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            logger.warning(
                "Notification queue full, dropping event",
                extra={"event_kind": event.kind.value, "target_id": str(event.recipient)},
            )
            return False
        return True

    async def drain(self) -> None:
        """Wait until every queued event has been handled."""
        await self._queue.join()

    async def stop(self, grace_seconds: float = 5) -> None:
        self._accepting = False
        if not self._workers:
            return
        try:
            await asyncio.wait_for(self._queue.join(), timeout=grace_seconds)
        except asyncio.TimeoutError:
            logger.warning(
                f"Dispatcher shutdown with {self._queue.qsize()} undelivered events",
            )
        for task in self._workers:
            task.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        logger.info("Notification dispatcher stopped")

    async def _run(self, index: int) -> None:
        while True:
            event = await self._queue.get()
            try:
                await asyncio.wait_for(self.dispatch(event), timeout=self._timeout)
            except asyncio.TimeoutError:
                logger.error(
                    f"Dispatch timed out after {self._timeout}s",
                    extra={"event_kind": event.kind.value, "target_id": str(event.recipient)},
                )
            except Exception as e:
                logger.error(
                    f"Worker {index} failed to dispatch event: {e}",
                    exc_info=True,
                    extra={"event_kind": event.kind.value, "target_id": str(event.recipient)},
                )
            finally:
                self._queue.task_done()

    async def dispatch(self, event: TransitionEvent) -> None:
        """Deliver one event now. Collaborator failures are logged, not raised."""
        plan = plan_deliveries(event, self._channel_id)
        extra = {
            "event_kind": event.kind.value,
            "user_id": str(event.actor.id),
            "target_id": str(event.recipient),
        }

        if plan.push is not None:
            try:
                await self._push.deliver(event.recipient, plan.push)
            except LikesError as e:
                logger.error(
                    f"Push delivery failed: {e.message}",
                    extra={**extra, "error_code": e.code},
                )
            except Exception as e:
                logger.error(f"Push delivery failed: {e}", exc_info=True, extra=extra)

        try:
            reached = await self._realtime.emit(
                event.recipient, plan.realtime_event, plan.realtime_payload,
            )
            logger.info(f"Realtime {plan.realtime_event} reached {reached} connection(s)", extra=extra)
        except Exception as e:
            logger.error(f"Realtime emit failed: {e}", exc_info=True, extra=extra)
