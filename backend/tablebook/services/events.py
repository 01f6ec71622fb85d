"""
backend/tablebook/services/events.py

Event emitter: pushes reservation events to a Redis queue consumed by the
notification mailer.

Queue: events:p2p. Emission is fire-and-forget: a failure is logged and the
caller carries on (the reservation row is the source of truth).
"""

import json
import time
import logging

from ..redis_client import redis_client

logger = logging.getLogger(__name__)

EVENTS_QUEUE = "events:p2p"


def emit_event(event_type: str, payload: dict) -> None:
    """Push an event onto `events:p2p`."""
    event = {
        "type": event_type,
        **payload,
        "ts": int(time.time()),
    }
    try:
        redis_client.rpush(EVENTS_QUEUE, json.dumps(event))
        logger.info(f"Event emitted: {event_type} → {EVENTS_QUEUE}")
    except Exception as e:
        logger.error(f"Failed to emit event {event_type}: {e}")
