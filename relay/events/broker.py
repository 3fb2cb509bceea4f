"""
Event Broker.

FastStream NatsBroker setup and the worker application factory.
The factory wires everything once at startup: settings, the shared HTTP
client, the Bot API gateway, the dispatcher, and the subscriber. Nothing
is mutated after that.

Usage:
    uvicorn --factory relay.events.broker:create_event_app --port 8080

GET /health pings the NATS connection.
"""

from faststream.asgi import AsgiFastStream, make_ping_asgi
from faststream.nats import NatsBroker

from relay.core.config_schema import RelaySettings
from relay.core.logging import get_logger

logger = get_logger(__name__)

_app: AsgiFastStream | None = None


def create_event_broker(settings: RelaySettings) -> NatsBroker:
    """Create a NatsBroker for the configured bus URL.

    Returns:
        Configured NatsBroker instance
    """
    from relay.events.middleware import EventObservabilityMiddleware

    broker = NatsBroker(
        settings.nats_url,
        middlewares=[EventObservabilityMiddleware],
    )
    logger.info("Event broker created", extra={"nats_url": settings.nats_url})
    return broker


def create_event_app(settings: RelaySettings | None = None) -> AsgiFastStream:
    """Create the relay worker application.

    Args:
        settings: Resolved settings; loaded from config/ when omitted

    Returns:
        ASGI FastStream app with the notification consumer and health route
    """
    global _app
    if _app is not None:
        return _app

    if settings is None:
        from relay.core.config import get_relay_settings
        from relay.core.logging import setup_logging

        setup_logging()
        settings = get_relay_settings()

    from relay.events.consumers.notifications import register_notification_consumer
    from relay.telegram.dispatcher import NotificationDispatcher
    from relay.telegram.gateway import TelegramGateway, create_http_client

    broker = create_event_broker(settings)
    http_client = create_http_client(settings)
    gateway = TelegramGateway(http_client, settings.telegram_url, settings.telegram_token)
    dispatcher = NotificationDispatcher(gateway, settings)

    register_notification_consumer(broker, settings.nats_subject, dispatcher)

    _app = AsgiFastStream(
        broker,
        asgi_routes=[
            ("/health", make_ping_asgi(broker, timeout=settings.health_ping_timeout)),
        ],
    )

    @_app.after_shutdown
    async def close_http_client() -> None:
        await http_client.aclose()
        logger.info("HTTP client closed")

    logger.info("Relay worker application created", extra={"subject": settings.nats_subject})
    return _app
