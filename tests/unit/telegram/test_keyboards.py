"""
Unit tests for inline keyboard builders.

Tests keyboard construction and button layout.
"""

from aiogram.types import InlineKeyboardMarkup

from relay.telegram.keyboards import (
    get_link_keyboard,
    get_subscription_keyboard,
    keyboard_from_rows,
)


class TestSubscriptionKeyboard:
    def test_returns_inline_keyboard(self):
        assert isinstance(get_subscription_keyboard(1, subscribed=False), InlineKeyboardMarkup)

    def test_single_row_single_button(self):
        keyboard = get_subscription_keyboard(1, subscribed=False)

        assert len(keyboard.inline_keyboard) == 1
        assert len(keyboard.inline_keyboard[0]) == 1

    def test_unsubscribed_user_gets_subscribe_button(self):
        button = get_subscription_keyboard(42, subscribed=False).inline_keyboard[0][0]

        assert button.text == "subscribe"
        assert button.callback_data == "sub 42"
        assert button.url is None

    def test_subscribed_user_gets_unsubscribe_button(self):
        button = get_subscription_keyboard(42, subscribed=True).inline_keyboard[0][0]

        assert button.text == "unsubscribe"
        assert button.callback_data == "unsub 42"


class TestLinkKeyboard:
    def test_link_button_has_url_only(self):
        button = get_link_keyboard("open", "https://t.me/bot?start=5").inline_keyboard[0][0]

        assert button.text == "open"
        assert button.url == "https://t.me/bot?start=5"
        assert button.callback_data is None


class TestKeyboardRoundTrip:
    def test_rows_survive_json_round_trip(self):
        """Rows and buttons keep their order, texts, and callback/url fields."""
        rows = [
            [
                {"text": "subscribe", "callback_data": "sub 1"},
                {"text": "open", "url": "https://t.me/bot?start=1"},
            ],
            [{"text": "unsubscribe", "callback_data": "unsub 2"}],
        ]

        encoded = keyboard_from_rows(rows).model_dump(mode="json", exclude_none=True)
        decoded = keyboard_from_rows(encoded["inline_keyboard"])

        assert encoded["inline_keyboard"] == rows
        assert [[b.text for b in row] for row in decoded.inline_keyboard] == [
            ["subscribe", "open"],
            ["unsubscribe"],
        ]
        assert decoded.inline_keyboard[0][0].callback_data == "sub 1"
        assert decoded.inline_keyboard[0][1].url == "https://t.me/bot?start=1"
        assert decoded.inline_keyboard[1][0].callback_data == "unsub 2"
