"""Notification consumer.

RUN:  python -m ambassador.worker

Reads notifications the API published to Redis (``events:ambassador``) and
hands each one to the handler registered for its name prefix.  Today the
handlers only log; a UI projection or a mailer would subscribe here.

Delivery is at-most-once, like the publisher: a handler failure is logged
and the event is not redelivered.  Consumers that need the full picture
read the ledger tables, which are authoritative.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable, Coroutine
from typing import Any

from ambassador.core.config import SETTINGS
from ambassador.core.logging import setup_logging
from ambassador.db.redis import redis_pool
from ambassador.services.outbox import EVENTS_CHANNEL

EventHandler = Callable[[dict], Coroutine[Any, Any, None]]

logger = logging.getLogger("ambassador.worker")

HANDLERS: dict[str, EventHandler] = {}


def register_handler(prefix: str):
    """Decorator: handle every event whose name starts with ``prefix.``."""

    def decorator(func):
        HANDLERS[prefix] = func
        return func

    return decorator


@register_handler("ambassador")
async def handle_ambassador_event(event: dict) -> None:
    logger.info(
        "Ambassador %s: %s status=%s token=%s",
        event["name"].split(".", 1)[1],
        event["subject"],
        event["status"],
        event.get("token_id"),
        extra={"ambassador": event["subject"], "token_id": event.get("token_id")},
    )


@register_handler("badge")
async def handle_badge_event(event: dict) -> None:
    logger.info(
        "Badge %s: token=%s holder=%s type=%s",
        event["name"].split(".", 1)[1],
        event.get("token_id"),
        event["subject"],
        event.get("credential_type"),
        extra={"token_id": event.get("token_id")},
    )


@register_handler("application")
async def handle_application_event(event: dict) -> None:
    logger.info(
        "Application %s %s",
        event["subject"],
        event["name"].split(".", 1)[1],
        extra={"application_id": event["subject"]},
    )


async def dispatch(event: dict) -> bool:
    """Route one event to its handler.  Returns False if none is registered."""
    prefix = event.get("name", "").split(".", 1)[0]
    handler = HANDLERS.get(prefix)
    if handler is None:
        logger.debug("No handler for event %s", event.get("name"))
        return False
    try:
        await handler(event)
    except Exception:
        logger.exception("Handler for %s failed", event.get("name"))
        return False
    return True


async def run_worker() -> None:
    if redis_pool is None:
        raise RuntimeError("REDIS_URL is not configured; nothing to consume")

    key = f"events:{EVENTS_CHANNEL}"
    logger.info("Worker started, consuming %s", key)
    while True:
        result = await redis_pool.brpop(key, timeout=1)  # type: ignore[misc]
        if result is None:
            continue
        _, raw = result
        await dispatch(json.loads(raw))


if __name__ == "__main__":
    setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)
    asyncio.run(run_worker())
