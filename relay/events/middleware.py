"""
Event Observability Middleware.

Cross-cutting middleware applied to the notification subscriber.
Binds structlog context (subject, message_id, correlation_id, source) for
every consumed message and measures processing duration.
"""

import time

import structlog
from faststream import BaseMiddleware

from relay.core.logging import get_logger

logger = get_logger(__name__)


class EventObservabilityMiddleware(BaseMiddleware):
    """Middleware that binds structlog context for bus consumers.

    Every log record emitted while a notification is handled carries the
    bus subject and message identifiers.
    """

    async def on_consume(self, msg):
        raw = getattr(msg, "raw_message", None)

        structlog.contextvars.bind_contextvars(
            subject=getattr(raw, "subject", "unknown"),
            message_id=getattr(msg, "message_id", None) or "unknown",
            correlation_id=getattr(msg, "correlation_id", None) or "unknown",
            source="events",
        )
        self._start_time = time.monotonic()
        return await super().on_consume(msg)

    async def after_consume(self, err):
        duration_ms = round((time.monotonic() - self._start_time) * 1000, 1)

        if err:
            logger.error(
                "Notification consumer crashed",
                extra={"duration_ms": duration_ms, "error": str(err)},
            )
        else:
            logger.info(
                "Notification consumed",
                extra={"duration_ms": duration_ms},
            )

        structlog.contextvars.unbind_contextvars(
            "subject", "message_id", "correlation_id", "source",
        )
        return await super().after_consume(err)
