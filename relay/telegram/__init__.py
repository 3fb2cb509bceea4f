"""
Telegram Bot API Module.

Outbound side of the relay: payload models, keyboards, callback tokens,
the HTTP gateway, and the dispatcher that ties them to inbound commands.

Structure:
    relay/telegram/
    ├── __init__.py      # This file
    ├── callbacks.py     # "sub <id>" / "unsub <id>" callback tokens
    ├── keyboards.py     # Inline keyboard builders
    ├── payloads.py      # Bot API request bodies and builders
    ├── gateway.py       # HTTP gateway (httpx)
    └── dispatcher.py    # NotificationDispatcher
"""

from relay.telegram.dispatcher import NotificationDispatcher, report_error
from relay.telegram.gateway import ContentKind, TelegramGateway, create_http_client

__all__ = [
    "ContentKind",
    "NotificationDispatcher",
    "TelegramGateway",
    "create_http_client",
    "report_error",
]
