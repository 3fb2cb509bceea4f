"""
Notification Consumer.

Subscribes to the notification subject and hands every raw message body
to the NotificationDispatcher. The body is passed through undecoded so
malformed payloads are reported by the dispatcher as decode errors.

Delivery guarantees are whatever the NATS subscription provides; a failed
notification is reported and not redelivered.
"""

from collections.abc import Awaitable, Callable

from faststream.nats import NatsBroker
from faststream.nats.annotations import NatsMessage

from relay.core.logging import get_logger
from relay.telegram.dispatcher import NotificationDispatcher

logger = get_logger(__name__)


def make_notification_handler(
    dispatcher: NotificationDispatcher,
) -> Callable[[NatsMessage], Awaitable[None]]:
    """Build the subscriber callback bound to a dispatcher."""

    async def handle_notification(message: NatsMessage) -> None:
        """Process one message from the notification subject."""
        await dispatcher.handle(message.body)

    return handle_notification


def register_notification_consumer(
    broker: NatsBroker, subject: str, dispatcher: NotificationDispatcher,
) -> None:
    """Subscribe the dispatcher to ``subject`` on ``broker``."""
    broker.subscriber(subject)(make_notification_handler(dispatcher))
    logger.info("Notification consumer registered", extra={"subject": subject})
