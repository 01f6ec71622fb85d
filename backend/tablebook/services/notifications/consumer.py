# backend/tablebook/services/notifications/consumer.py
"""
Notification consumer loop.

Pops reservation events from events:p2p and sends the matching email.
On failure retries up to MAX_RETRIES, then moves the event to the
dead-letter queue.

Started as an asyncio task in the app lifespan when notifications are
enabled. Database and SMTP work run in a thread (asyncio.to_thread).
"""

import asyncio
import json
import logging

import redis.asyncio as aioredis

from ...database import SessionLocal
from ..events import EVENTS_QUEUE
from .mailer import send_reservation_email

logger = logging.getLogger(__name__)

MAX_RETRIES = 3
RETRY_QUEUE = f"{EVENTS_QUEUE}:retry"
DEAD_QUEUE = f"{EVENTS_QUEUE}:dead"

HANDLED_EVENTS = ("reservation_created", "reservation_status_changed")


async def notification_consumer_loop(redis_url: str) -> None:
    """Consume events with BRPOP (5s timeout, no busy-waiting)."""
    r = aioredis.from_url(redis_url, decode_responses=True)
    logger.info("notification_consumer_loop started")

    try:
        while True:
            try:
                result = await r.brpop([EVENTS_QUEUE, RETRY_QUEUE], timeout=5)
                if result is None:
                    continue

                _, raw = result
                await process_raw_event(r, raw)

            except asyncio.CancelledError:
                logger.info("notification_consumer_loop cancelled")
                raise
            except Exception:
                logger.exception("notification_consumer_loop error, retrying in 2s")
                await asyncio.sleep(2)
    finally:
        await r.aclose()


async def process_raw_event(r: aioredis.Redis, raw: str) -> None:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        logger.error(f"Invalid JSON in event queue: {raw[:200]}")
        await r.rpush(DEAD_QUEUE, raw)
        return

    if data.get("type") not in HANDLED_EVENTS:
        logger.info(f"Ignoring event type={data.get('type')}")
        return

    attempt = data.get("_attempt", 1)
    result = await asyncio.to_thread(handle_event, data)
    if result.get("success") or result.get("reason") in ("reservation_not_found", "smtp_not_configured"):
        return

    logger.warning(
        f"Email for reservation={data.get('reservation_id')} failed: "
        f"{result.get('reason')} (attempt {attempt}/{MAX_RETRIES})"
    )
    data["_attempt"] = attempt + 1
    queue = RETRY_QUEUE if attempt < MAX_RETRIES else DEAD_QUEUE
    await r.rpush(queue, json.dumps(data))


def handle_event(data: dict) -> dict:
    """Send the email for one event (synchronous)."""
    db = SessionLocal()
    try:
        return send_reservation_email(db, data["reservation_id"], data["status"])
    except Exception:
        logger.exception(f"Failed to handle event type={data.get('type')}")
        return {"success": False, "reason": "error"}
    finally:
        db.close()
