"""
Bot API Payloads.

Request bodies for the Bot API methods the relay calls, and the builders
that turn inbound commands into them. Bodies are serialized with
``to_request_body`` which drops unset optional fields, so a plain text
message never carries an empty ``reply_markup``.

Method → body:
    sendMessage             SendMessage
    sendPhoto               SendPhoto
    answerInlineQuery       AnswerInlineQuery
    answerCallbackQuery     AnswerCallbackQuery
    editMessageReplyMarkup  EditMessageReplyMarkup
    setWebhook              multipart form (build_webhook_form)
"""

from typing import Any, Literal

from aiogram.types import InlineKeyboardMarkup
from pydantic import BaseModel, ConfigDict

from relay.events.schemas import (
    AnswerInlineQueryCommand,
    DefaultCommand,
    InlineAnime,
    StartCommand,
    SubscribeCommand,
    UnsubscribeCommand,
)
from relay.telegram.keyboards import get_link_keyboard, get_subscription_keyboard

SEND_MESSAGE = "sendMessage"
SEND_PHOTO = "sendPhoto"
ANSWER_CALLBACK_QUERY = "answerCallbackQuery"
ANSWER_INLINE_QUERY = "answerInlineQuery"
EDIT_MESSAGE_REPLY_MARKUP = "editMessageReplyMarkup"
SET_WEBHOOK = "setWebhook"

INLINE_RESULT_LINK_TEXT = "open"
SUBSCRIBED_DESCRIPTION = "You are subscribed"

FilePart = tuple[str, bytes]


class BotApiPayload(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    def to_request_body(self) -> dict[str, Any]:
        """JSON-ready dict without unset optional fields."""
        return self.model_dump(mode="json", exclude_none=True)


class SendMessage(BotApiPayload):
    chat_id: int
    text: str
    reply_markup: InlineKeyboardMarkup | None = None


class SendPhoto(BotApiPayload):
    chat_id: int
    photo: str
    caption: str
    reply_markup: InlineKeyboardMarkup | None = None


class InputTextMessageContent(BotApiPayload):
    message_text: str


class InlineQueryResultArticle(BotApiPayload):
    type: Literal["article"] = "article"
    id: str
    title: str
    thumbnail_url: str
    input_message_content: InputTextMessageContent
    reply_markup: InlineKeyboardMarkup
    description: str | None = None


class AnswerInlineQuery(BotApiPayload):
    inline_query_id: str
    results: list[InlineQueryResultArticle]
    cache_time: int = 0


class AnswerCallbackQuery(BotApiPayload):
    callback_query_id: str


class EditMessageReplyMarkup(BotApiPayload):
    chat_id: int
    message_id: int
    reply_markup: InlineKeyboardMarkup


# =============================================================================
# Builders
# =============================================================================


def build_text_message(chat_id: int, text: str) -> SendMessage:
    """Plain text message without a keyboard."""
    return SendMessage(chat_id=chat_id, text=text)


def build_anime_card(chat_id: int, anime: InlineAnime) -> SendPhoto:
    """Photo message for an anime with its subscribe/unsubscribe toggle."""
    return SendPhoto(
        chat_id=chat_id,
        photo=anime.thumbnail_url,
        caption=anime.name,
        reply_markup=get_subscription_keyboard(
            anime.internal_id, anime.user_has_subscription,
        ),
    )


def build_start_payload(command: StartCommand) -> SendMessage | SendPhoto:
    """Greeting text, or the anime card when the command carries one."""
    if command.inline_anime is None:
        return build_text_message(command.telegram_id, command.text)
    return build_anime_card(command.telegram_id, command.inline_anime)


def build_default_payload(command: DefaultCommand) -> SendMessage:
    return build_text_message(command.telegram_id, command.text)


def build_inline_result(
    index: int, anime: InlineAnime, url_template: str,
) -> InlineQueryResultArticle:
    """
    One inline query result for an anime.

    Args:
        index: Position in the candidate list, used as the result ID
        anime: Candidate anime
        url_template: Deep-link template with one positional substitution
            for the internal anime ID

    Returns:
        InlineQueryResultArticle with a single link button
    """
    return InlineQueryResultArticle(
        id=str(index),
        title=anime.name,
        thumbnail_url=anime.thumbnail_url,
        input_message_content=InputTextMessageContent(
            message_text=f"{anime.name}\n{anime.thumbnail_url}",
        ),
        description=SUBSCRIBED_DESCRIPTION if anime.user_has_subscription else None,
        reply_markup=get_link_keyboard(
            INLINE_RESULT_LINK_TEXT, url_template.format(anime.internal_id),
        ),
    )


def build_inline_query_answer(
    command: AnswerInlineQueryCommand, url_template: str,
) -> AnswerInlineQuery:
    """Answer with one article per candidate, in input order, never cached."""
    return AnswerInlineQuery(
        inline_query_id=command.inline_query_id,
        results=[
            build_inline_result(index, anime, url_template)
            for index, anime in enumerate(command.inline_animes)
        ],
        cache_time=0,
    )


def build_callback_answer(
    command: SubscribeCommand | UnsubscribeCommand,
) -> AnswerCallbackQuery:
    """Empty acknowledgement of the button press."""
    return AnswerCallbackQuery(callback_query_id=command.callback_query_id)


def build_subscription_markup_edit(
    command: SubscribeCommand | UnsubscribeCommand, subscribed: bool,
) -> EditMessageReplyMarkup:
    """
    Replace the keyboard on the pressed message.

    Args:
        command: The subscribe or unsubscribe command
        subscribed: Subscription state after the press; True yields the
            "unsubscribe" button, False the "subscribe" button
    """
    return EditMessageReplyMarkup(
        chat_id=command.telegram_id,
        message_id=command.message_id,
        reply_markup=get_subscription_keyboard(command.internal_anime_id, subscribed),
    )


def build_webhook_form(certificate: FilePart, webhook_url: str) -> dict[str, str | FilePart]:
    """Multipart parameters for setWebhook: certificate as (filename, bytes) and URL."""
    return {
        "certificate": certificate,
        "url": webhook_url,
    }
