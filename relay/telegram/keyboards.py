"""
Inline Keyboard Builders.

Keyboards attached to anime cards and inline query results. Every keyboard
here is a single row holding a single button; a button carries either a
callback token or an external URL, never both.
"""

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup
from aiogram.utils.keyboard import InlineKeyboardBuilder

from relay.telegram.callbacks import (
    SUBSCRIBE_LABEL,
    UNSUBSCRIBE_LABEL,
    subscription_token,
)


def get_subscription_keyboard(internal_id: int, subscribed: bool) -> InlineKeyboardMarkup:
    """
    Build the subscribe/unsubscribe toggle keyboard.

    Args:
        internal_id: Internal anime ID encoded in the callback token
        subscribed: Whether the user is already subscribed. A subscribed
            user gets the "unsubscribe" button, everyone else "subscribe".

    Returns:
        InlineKeyboardMarkup with one callback button
    """
    builder = InlineKeyboardBuilder()

    builder.button(
        text=UNSUBSCRIBE_LABEL if subscribed else SUBSCRIBE_LABEL,
        callback_data=subscription_token(internal_id, subscribed),
    )

    return builder.as_markup()


def get_link_keyboard(text: str, url: str) -> InlineKeyboardMarkup:
    """Build a keyboard with a single external link button."""
    builder = InlineKeyboardBuilder()
    builder.button(text=text, url=url)
    return builder.as_markup()


def keyboard_from_rows(rows: list[list[dict]]) -> InlineKeyboardMarkup:
    """
    Rebuild a keyboard from its JSON form (list of rows of button dicts).

    Row and button order are preserved.
    """
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [InlineKeyboardButton(**button) for button in row]
            for row in rows
        ],
    )
