"""Notification outbox and publishers.

Units of work never talk to subscribers directly.  Notifications emitted
inside a unit are appended to the Outbox only after the unit commits; the
HTTP layer then flushes the outbox to an EventPublisher.

Delivery is best-effort: a publisher failure is logged and counted, and the
notification is dropped rather than retried.  Subscribers rebuild their view
from the tables if they miss an event.

Two publishers share one Protocol:

  InMemoryEventPublisher: a list per channel, for dev and tests.
  RedisEventPublisher: LPUSH of a JSON document onto ``events:<channel>``;
    the worker BRPOPs from the tail, so events are consumed FIFO.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from ambassador.core.metrics import NOTIFICATION_PUBLISH_FAILURES, OUTBOX_PENDING
from ambassador.models.notification import Notification

logger = logging.getLogger(__name__)

EVENTS_CHANNEL = "ambassador"


class Outbox:
    """Committed notifications waiting to be published, in commit order."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._pending: list[Notification] = []

    def extend(self, notifications: Iterable[Notification]) -> None:
        with self._lock:
            self._pending.extend(notifications)
            OUTBOX_PENDING.set(len(self._pending))

    def drain(self) -> list[Notification]:
        with self._lock:
            drained, self._pending = self._pending, []
            OUTBOX_PENDING.set(0)
            return drained

    def peek(self) -> list[Notification]:
        with self._lock:
            return list(self._pending)

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)


@runtime_checkable
class EventPublisher(Protocol):
    async def publish(self, channel: str, notification: Notification) -> None: ...


class InMemoryEventPublisher:
    def __init__(self) -> None:
        self._channels: dict[str, list[dict]] = {}

    async def publish(self, channel: str, notification: Notification) -> None:
        self._channels.setdefault(channel, []).append(notification.to_dict())

    def published(self, channel: str = EVENTS_CHANNEL) -> list[dict]:
        return list(self._channels.get(channel, []))


class RedisEventPublisher:
    _PREFIX = "events:"

    def __init__(self, redis_client) -> None:
        self._redis = redis_client

    async def publish(self, channel: str, notification: Notification) -> None:
        await self._redis.lpush(
            f"{self._PREFIX}{channel}", json.dumps(notification.to_dict())
        )


async def flush_outbox(
    outbox: Outbox,
    publisher: EventPublisher,
    channel: str = EVENTS_CHANNEL,
) -> int:
    """Publish everything pending.  Returns how many were delivered."""
    delivered = 0
    for notification in outbox.drain():
        try:
            await publisher.publish(channel, notification)
        except Exception:
            NOTIFICATION_PUBLISH_FAILURES.inc()
            logger.exception(
                "Dropped notification %s subject=%s",
                notification.name,
                notification.subject,
            )
            continue
        delivered += 1
    return delivered
