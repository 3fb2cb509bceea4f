"""
Notification Dispatcher.

Turns one raw bus message into Bot API calls. The message is decoded into
a command, routed on its type, and each resulting call goes through the
gateway. Every RelayError raised along the way is handed to the error sink
on its own; a failing call never prevents a sibling call from running.

Routing:
    StartCommand              → sendMessage, or sendPhoto with an anime card
    DefaultCommand            → sendMessage
    AnswerInlineQueryCommand  → answerInlineQuery
    SubscribeCommand          → answerCallbackQuery + editMessageReplyMarkup (concurrent)
    UnsubscribeCommand        → answerCallbackQuery + editMessageReplyMarkup (concurrent)
    SetWebhookCommand         → setWebhook (multipart, certificate + url)

Messages with an unknown type are dropped without an error.

Usage:
    dispatcher = NotificationDispatcher(gateway, settings)
    await dispatcher.handle(msg.body)
"""

import asyncio
from collections.abc import Awaitable, Callable
from pathlib import Path

from relay.core.config_schema import RelaySettings
from relay.core.exceptions import FileAccessError, RelayError
from relay.core.logging import get_logger, log_with_source
from relay.events.schemas import (
    AnswerInlineQueryCommand,
    DefaultCommand,
    SetWebhookCommand,
    StartCommand,
    SubscribeCommand,
    UnsubscribeCommand,
    decode_command,
)
from relay.telegram import payloads
from relay.telegram.gateway import TelegramGateway

logger = get_logger(__name__)

ErrorSink = Callable[[RelayError], None]


def report_error(error: RelayError) -> None:
    """Default error sink: one structured error record per failure."""
    log_with_source(
        logger,
        "events",
        "error",
        "Notification handling failed",
        code=error.code,
        error=error.message,
        status_code=getattr(error, "status_code", None),
        cause=repr(error.cause) if error.cause is not None else None,
    )


class NotificationDispatcher:
    """
    Routes decoded notifications to the Bot API.

    Holds only references injected at startup; nothing is mutated while
    handling, so concurrent handle() calls do not interfere.

    Args:
        gateway: Outbound Bot API gateway
        settings: Resolved relay settings
        error_sink: Receives each error produced while handling a message
    """

    def __init__(
        self,
        gateway: TelegramGateway,
        settings: RelaySettings,
        error_sink: ErrorSink = report_error,
    ) -> None:
        self._gateway = gateway
        self._settings = settings
        self._error_sink = error_sink

    async def handle(self, raw: bytes | str) -> None:
        """Handle one bus message. Errors go to the sink, never to the caller."""
        for error in await self.dispatch(raw):
            self._error_sink(error)

    async def dispatch(self, raw: bytes | str) -> list[RelayError]:
        """
        Decode and route one bus message.

        Returns:
            Errors in the order the failing calls completed. Empty on success
            and for dropped messages.
        """
        try:
            command = decode_command(raw)
        except RelayError as e:
            return [e]

        errors: list[RelayError] = []

        match command:
            case StartCommand():
                await self._attempt(self._send_start(command), errors)
            case DefaultCommand():
                await self._attempt(self._send_default(command), errors)
            case AnswerInlineQueryCommand():
                await self._attempt(self._answer_inline_query(command), errors)
            case SubscribeCommand():
                await self._acknowledge_subscription(command, subscribed=True, errors=errors)
            case UnsubscribeCommand():
                await self._acknowledge_subscription(command, subscribed=False, errors=errors)
            case SetWebhookCommand():
                await self._attempt(self._set_webhook(), errors)
            case _:
                pass

        return errors

    @staticmethod
    async def _attempt(call: Awaitable[int], errors: list[RelayError]) -> None:
        try:
            await call
        except RelayError as e:
            errors.append(e)

    async def _send_start(self, command: StartCommand) -> int:
        payload = payloads.build_start_payload(command)
        if isinstance(payload, payloads.SendPhoto):
            return await self._gateway.send_json(payloads.SEND_PHOTO, payload)
        return await self._gateway.send_json(payloads.SEND_MESSAGE, payload)

    async def _send_default(self, command: DefaultCommand) -> int:
        return await self._gateway.send_json(
            payloads.SEND_MESSAGE, payloads.build_default_payload(command),
        )

    async def _answer_inline_query(self, command: AnswerInlineQueryCommand) -> int:
        return await self._gateway.send_json(
            payloads.ANSWER_INLINE_QUERY,
            payloads.build_inline_query_answer(
                command, self._settings.inline_result_url_template,
            ),
        )

    async def _acknowledge_subscription(
        self,
        command: SubscribeCommand | UnsubscribeCommand,
        subscribed: bool,
        errors: list[RelayError],
    ) -> None:
        """Answer the callback query and swap the keyboard, concurrently.

        Both calls always run to completion; errors are appended as each
        call finishes.
        """
        answer = self._gateway.send_json(
            payloads.ANSWER_CALLBACK_QUERY,
            payloads.build_callback_answer(command),
        )
        edit = self._gateway.send_json(
            payloads.EDIT_MESSAGE_REPLY_MARKUP,
            payloads.build_subscription_markup_edit(command, subscribed),
        )
        await asyncio.gather(
            self._attempt(answer, errors),
            self._attempt(edit, errors),
        )

    async def _set_webhook(self) -> int:
        path = Path(self._settings.public_key_path)
        try:
            certificate = await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            raise FileAccessError(f"Cannot open public key {path}", cause=e) from e

        return await self._gateway.send_form(
            payloads.SET_WEBHOOK,
            payloads.build_webhook_form((path.name, certificate), self._settings.webhook_url),
        )
