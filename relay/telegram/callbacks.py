"""
Subscription Callback Data Factories.

Callback tokens carried by the subscribe/unsubscribe buttons. A token is
the action verb and the internal anime ID separated by a single space
("sub 42", "unsub 42"). The component that turns callback queries back
into subscribe/unsubscribe notifications parses the same format, so the
separator and prefixes must not change.
"""

from aiogram.filters.callback_data import CallbackData

SUBSCRIBE_LABEL = "subscribe"
UNSUBSCRIBE_LABEL = "unsubscribe"


class SubscribeCallback(CallbackData, prefix="sub", sep=" "):
    """
    Token for a "subscribe" button.

    Usage:
        SubscribeCallback(internal_id=42).pack()  # "sub 42"
    """

    internal_id: int


class UnsubscribeCallback(CallbackData, prefix="unsub", sep=" "):
    """
    Token for an "unsubscribe" button.

    Usage:
        UnsubscribeCallback(internal_id=42).pack()  # "unsub 42"
    """

    internal_id: int


def subscription_token(internal_id: int, subscribed: bool) -> str:
    """Token for the button shown to a user who is (or is not) subscribed."""
    if subscribed:
        return UnsubscribeCallback(internal_id=internal_id).pack()
    return SubscribeCallback(internal_id=internal_id).pack()


def parse_callback_token(token: str) -> SubscribeCallback | UnsubscribeCallback:
    """
    Parse a callback token produced by subscription_token.

    Raises:
        ValueError: If the token is neither a subscribe nor an unsubscribe token
    """
    prefix = token.split(" ", 1)[0]
    factories = {cls.__prefix__: cls for cls in (SubscribeCallback, UnsubscribeCallback)}
    if prefix not in factories:
        raise ValueError(f"Unknown callback token: {token!r}")
    try:
        return factories[prefix].unpack(token)
    except TypeError as e:
        # wrong number of parts
        raise ValueError(f"Malformed callback token: {token!r}") from e
