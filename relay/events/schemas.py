"""
Notification Schemas.

Inbound command shapes published on the notification subject. Every
message is a JSON object whose ``type`` key selects the command model;
the remaining camelCase keys are the fields that command needs.

Tags:
    startType              - greeting, or anime card with subscribe button
    defaultType            - plain text echo
    answerInlineQueryType  - inline search results
    subscribeType          - user pressed "subscribe" on an anime card
    unsubscribeType        - user pressed "unsubscribe" on an anime card
    setWebhookType         - register the webhook and certificate

Usage:
    from relay.events.schemas import decode_command

    command = decode_command(b'{"type":"startType","telegramId":7,"text":"hi"}')
"""

import json
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from relay.core.exceptions import CommandDecodeError
from relay.core.logging import get_logger

logger = get_logger(__name__)


class _CommandBase(BaseModel):
    """camelCase on the wire, snake_case in code; unknown keys ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class InlineAnime(_CommandBase):
    """Anime descriptor attached to start and inline query commands."""

    internal_id: int
    name: str
    thumbnail_url: str
    user_has_subscription: bool = False


class StartCommand(_CommandBase):
    type: Literal["startType"]
    telegram_id: int
    text: str = ""
    inline_anime: InlineAnime | None = None


class DefaultCommand(_CommandBase):
    type: Literal["defaultType"]
    telegram_id: int
    text: str = ""


class AnswerInlineQueryCommand(_CommandBase):
    type: Literal["answerInlineQueryType"]
    inline_query_id: str
    inline_animes: list[InlineAnime] = Field(default_factory=list)


class SubscribeCommand(_CommandBase):
    """Callback press on a "subscribe" button.

    telegram_id and message_id identify the message whose keyboard is edited.
    """

    type: Literal["subscribeType"]
    callback_query_id: str
    telegram_id: int
    message_id: int
    internal_anime_id: int


class UnsubscribeCommand(_CommandBase):
    """Callback press on an "unsubscribe" button. Mirror of SubscribeCommand."""

    type: Literal["unsubscribeType"]
    callback_query_id: str
    telegram_id: int
    message_id: int
    internal_anime_id: int


class SetWebhookCommand(_CommandBase):
    type: Literal["setWebhookType"]


InboundCommand = Annotated[
    StartCommand
    | DefaultCommand
    | AnswerInlineQueryCommand
    | SubscribeCommand
    | UnsubscribeCommand
    | SetWebhookCommand,
    Field(discriminator="type"),
]

_command_adapter: TypeAdapter[InboundCommand] = TypeAdapter(InboundCommand)

KNOWN_COMMAND_TYPES = frozenset({
    "startType",
    "defaultType",
    "answerInlineQueryType",
    "subscribeType",
    "unsubscribeType",
    "setWebhookType",
})


def decode_command(raw: bytes | str) -> InboundCommand | None:
    """
    Decode a raw bus payload into a typed command.

    Args:
        raw: JSON document as bytes or str

    Returns:
        The command model, or None when the ``type`` tag is missing or
        not one this relay handles. Such messages are dropped.

    Raises:
        CommandDecodeError: If the payload is not a JSON object or a known
            command's fields fail validation
    """
    try:
        data = json.loads(raw)
    except (ValueError, TypeError) as e:
        raise CommandDecodeError("Notification is not valid JSON", cause=e) from e

    if not isinstance(data, dict):
        raise CommandDecodeError(
            f"Notification must be a JSON object, got {type(data).__name__}",
        )

    command_type = data.get("type")
    if not isinstance(command_type, str) or command_type not in KNOWN_COMMAND_TYPES:
        logger.debug("Unknown notification type dropped", extra={"type": command_type})
        return None

    try:
        return _command_adapter.validate_python(data)
    except ValidationError as e:
        raise CommandDecodeError(
            f"Invalid {command_type} notification", cause=e,
        ) from e
