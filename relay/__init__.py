"""
Notification Relay.

- core/: configuration, logging, exceptions
- events/: NATS broker, consumer, command schemas
- telegram/: Bot API payloads, keyboards, gateway, dispatcher
"""
