"""Notification Dispatcher — verifies detached fan-out and its failure isolation.

Invariants:
    - new_like: push + realtime; new_match from like: push + realtime;
      new_match from accept: realtime only
    - A failing push never skips the realtime emit, and vice versa
    - submit() refuses events when stopped and drops them when the queue is full
    - stop() drains queued events before returning
    - A worker keeps running after an event blows up
"""

import asyncio
import logging

from app.core.domain_types import (
    Profile, TransitionEvent, TransitionKind, TransitionOrigin,
)
from app.core.errors import NotificationDeliveryError
from app.core.notification_payloads import LIKE_TITLE
from app.services.notification_dispatcher import NotificationDispatcher

from tests.services.fakes import RecordingPush, RecordingRealtime, new_user


def make_event(kind=TransitionKind.NEW_LIKE, origin=TransitionOrigin.LIKE):
    actor = Profile(id=new_user(), name="Alice", photo_ref="photos/alice.jpg")
    return TransitionEvent(kind=kind, origin=origin, actor=actor, recipient=new_user())


# ─── dispatch ────────────────────────────────────────────────────

async def test_new_like_sends_push_and_realtime():
    push, realtime = RecordingPush(), RecordingRealtime()
    dispatcher = NotificationDispatcher(push, realtime)
    event = make_event()

    await dispatcher.dispatch(event)

    recipient, notification = push.sent[0]
    assert recipient == event.recipient
    assert notification["title"] == LIKE_TITLE
    assert notification["data"]["likerName"] == "Alice"
    assert realtime.emitted == [(
        event.recipient, "new_like",
        {"fromUser": {"id": str(event.actor.id), "name": "Alice"}, "isMatch": False},
    )]


async def test_match_from_like_sends_new_like_push():
    push, realtime = RecordingPush(), RecordingRealtime()
    dispatcher = NotificationDispatcher(push, realtime)

    await dispatcher.dispatch(make_event(TransitionKind.NEW_MATCH, TransitionOrigin.LIKE))

    assert push.sent[0][1]["title"] == LIKE_TITLE
    assert push.sent[0][1]["data"]["type"] == "new_like"
    assert realtime.emitted[0][2]["isMatch"] is True


async def test_match_from_accept_is_realtime_only():
    push, realtime = RecordingPush(), RecordingRealtime()
    dispatcher = NotificationDispatcher(push, realtime)

    await dispatcher.dispatch(make_event(TransitionKind.NEW_MATCH, TransitionOrigin.ACCEPT))

    assert push.sent == []
    assert realtime.emitted[0][2]["isMatch"] is True


async def test_push_failure_does_not_skip_realtime(caplog):
    push = RecordingPush(fail_with=NotificationDeliveryError("gateway down", 503))
    realtime = RecordingRealtime()
    dispatcher = NotificationDispatcher(push, realtime)

    with caplog.at_level(logging.ERROR):
        await dispatcher.dispatch(make_event())

    assert len(realtime.emitted) == 1
    assert "Push delivery failed" in caplog.text


async def test_realtime_failure_does_not_skip_push(caplog):
    push = RecordingPush()
    realtime = RecordingRealtime(fail_with=RuntimeError("socket closed"))
    dispatcher = NotificationDispatcher(push, realtime)

    with caplog.at_level(logging.ERROR):
        await dispatcher.dispatch(make_event())

    assert len(push.sent) == 1
    assert "Realtime emit failed" in caplog.text


# ─── queue lifecycle ─────────────────────────────────────────────

async def test_submit_refused_before_start():
    dispatcher = NotificationDispatcher(RecordingPush(), RecordingRealtime())

    assert dispatcher.submit(make_event()) is False
    assert dispatcher.backlog == 0


async def test_submitted_events_are_delivered_by_workers():
    push, realtime = RecordingPush(), RecordingRealtime()
    dispatcher = NotificationDispatcher(push, realtime, workers=2)
    dispatcher.start()

    for _ in range(5):
        assert dispatcher.submit(make_event()) is True
    await dispatcher.drain()

    assert len(push.sent) == 5
    assert len(realtime.emitted) == 5
    await dispatcher.stop()
    assert dispatcher.running is False


async def test_full_queue_drops_event():
    dispatcher = NotificationDispatcher(
        RecordingPush(), RecordingRealtime(), queue_size=1,
    )
    dispatcher.start()

    # Workers have not run yet: the first event fills the queue.
    assert dispatcher.submit(make_event()) is True
    assert dispatcher.submit(make_event()) is False

    await dispatcher.stop()


async def test_stop_drains_queue_then_refuses():
    push = RecordingPush()
    dispatcher = NotificationDispatcher(push, RecordingRealtime())
    dispatcher.start()
    dispatcher.submit(make_event())
    dispatcher.submit(make_event())

    await dispatcher.stop(grace_seconds=5)

    assert len(push.sent) == 2
    assert dispatcher.submit(make_event()) is False


async def test_worker_survives_failing_event():
    class FlakyPush(RecordingPush):
        def __init__(self):
            super().__init__()
            self.calls = 0

        async def deliver(self, recipient, notification):
            self.calls += 1
            if self.calls == 1:
                raise RuntimeError("boom")
            return await super().deliver(recipient, notification)

    push = FlakyPush()
    dispatcher = NotificationDispatcher(push, RecordingRealtime(), workers=1)
    dispatcher.start()

    dispatcher.submit(make_event())
    dispatcher.submit(make_event())
    await dispatcher.drain()

    assert push.calls == 2
    assert len(push.sent) == 1
    assert dispatcher.running is True
    await dispatcher.stop()


async def test_slow_event_times_out_and_worker_continues():
    class HangingRealtime(RecordingRealtime):
        async def emit(self, user_id, event, payload):
            if not self.emitted:
                self.emitted.append(None)
                await asyncio.sleep(10)
            return await super().emit(user_id, event, payload)

    realtime = HangingRealtime()
    dispatcher = NotificationDispatcher(
        RecordingPush(), realtime, workers=1, timeout_seconds=0.05,
    )
    dispatcher.start()

    dispatcher.submit(make_event())
    dispatcher.submit(make_event())
    await dispatcher.drain()

    assert len(realtime.emitted) == 2
    await dispatcher.stop()
