"""
Unit tests for Bot API payload builders.

Checks the wire shape of every request body the relay produces.
"""

import pytest

from relay.events.schemas import (
    AnswerInlineQueryCommand,
    DefaultCommand,
    InlineAnime,
    StartCommand,
    SubscribeCommand,
    UnsubscribeCommand,
)
from relay.telegram import payloads

URL_TEMPLATE = "https://t.me/anime_notify_bot?start={}"


def _anime(internal_id: int = 42, subscribed: bool = False, name: str = "Frieren") -> InlineAnime:
    return InlineAnime(
        internal_id=internal_id,
        name=name,
        thumbnail_url=f"https://img.test/{internal_id}.jpg",
        user_has_subscription=subscribed,
    )


def _subscription(model, internal_anime_id: int = 42):
    return model(
        type="subscribeType" if model is SubscribeCommand else "unsubscribeType",
        callback_query_id="cb-1",
        telegram_id=7,
        message_id=100,
        internal_anime_id=internal_anime_id,
    )


class TestStartPayload:
    def test_plain_start_is_text_message_without_keyboard(self):
        payload = payloads.build_start_payload(
            StartCommand(type="startType", telegram_id=7, text="hi"),
        )

        assert isinstance(payload, payloads.SendMessage)
        assert payload.to_request_body() == {"chat_id": 7, "text": "hi"}

    @pytest.mark.parametrize(
        "subscribed,label,token",
        [(False, "subscribe", "sub 42"), (True, "unsubscribe", "unsub 42")],
    )
    def test_start_with_anime_is_photo_card(self, subscribed, label, token):
        payload = payloads.build_start_payload(
            StartCommand(type="startType", telegram_id=7, inline_anime=_anime(subscribed=subscribed)),
        )

        assert isinstance(payload, payloads.SendPhoto)
        assert payload.to_request_body() == {
            "chat_id": 7,
            "photo": "https://img.test/42.jpg",
            "caption": "Frieren",
            "reply_markup": {
                "inline_keyboard": [[{"text": label, "callback_data": token}]],
            },
        }


class TestDefaultPayload:
    def test_default_is_text_message(self):
        payload = payloads.build_default_payload(
            DefaultCommand(type="defaultType", telegram_id=3, text="echo"),
        )
        assert payload.to_request_body() == {"chat_id": 3, "text": "echo"}


class TestInlineQueryAnswer:
    def test_results_follow_input_order_with_sequential_ids(self):
        command = AnswerInlineQueryCommand(
            type="answerInlineQueryType",
            inline_query_id="q-1",
            inline_animes=[_anime(9, name="A"), _anime(3, name="B"), _anime(5, name="C")],
        )

        body = payloads.build_inline_query_answer(command, URL_TEMPLATE).to_request_body()

        assert body["inline_query_id"] == "q-1"
        assert body["cache_time"] == 0
        assert [r["id"] for r in body["results"]] == ["0", "1", "2"]
        assert [r["title"] for r in body["results"]] == ["A", "B", "C"]

    def test_result_shape(self):
        command = AnswerInlineQueryCommand(
            type="answerInlineQueryType", inline_query_id="q", inline_animes=[_anime(42)],
        )

        result = payloads.build_inline_query_answer(command, URL_TEMPLATE).to_request_body()["results"][0]

        assert result == {
            "type": "article",
            "id": "0",
            "title": "Frieren",
            "thumbnail_url": "https://img.test/42.jpg",
            "input_message_content": {"message_text": "Frieren\nhttps://img.test/42.jpg"},
            "reply_markup": {
                "inline_keyboard": [[{"text": "open", "url": "https://t.me/anime_notify_bot?start=42"}]],
            },
        }

    def test_description_only_for_subscribed_candidates(self):
        command = AnswerInlineQueryCommand(
            type="answerInlineQueryType",
            inline_query_id="q",
            inline_animes=[_anime(1, subscribed=True), _anime(2, subscribed=False)],
        )

        results = payloads.build_inline_query_answer(command, URL_TEMPLATE).to_request_body()["results"]

        assert results[0]["description"] == payloads.SUBSCRIBED_DESCRIPTION
        assert "description" not in results[1]

    def test_empty_candidate_list(self):
        command = AnswerInlineQueryCommand(type="answerInlineQueryType", inline_query_id="q")

        body = payloads.build_inline_query_answer(command, URL_TEMPLATE).to_request_body()

        assert body == {"inline_query_id": "q", "results": [], "cache_time": 0}


class TestSubscriptionPayloads:
    def test_callback_answer_is_empty_acknowledgement(self):
        payload = payloads.build_callback_answer(_subscription(SubscribeCommand))
        assert payload.to_request_body() == {"callback_query_id": "cb-1"}

    def test_subscribe_edit_shows_unsubscribe(self):
        payload = payloads.build_subscription_markup_edit(
            _subscription(SubscribeCommand, 42), subscribed=True,
        )

        assert payload.to_request_body() == {
            "chat_id": 7,
            "message_id": 100,
            "reply_markup": {
                "inline_keyboard": [[{"text": "unsubscribe", "callback_data": "unsub 42"}]],
            },
        }

    def test_unsubscribe_edit_shows_subscribe(self):
        payload = payloads.build_subscription_markup_edit(
            _subscription(UnsubscribeCommand, 42), subscribed=False,
        )

        button = payload.to_request_body()["reply_markup"]["inline_keyboard"][0][0]
        assert button == {"text": "subscribe", "callback_data": "sub 42"}


class TestWebhookForm:
    def test_form_fields(self):
        form = payloads.build_webhook_form(("public.pem", b"cert"), "https://relay.test/hook")

        assert form == {"certificate": ("public.pem", b"cert"), "url": "https://relay.test/hook"}
