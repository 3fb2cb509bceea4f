"""
Telegram Bot API Gateway.

Outbound HTTP for every Bot API call the relay makes. One shared
``httpx.AsyncClient`` is created at startup and injected here; the gateway
itself holds no per-request state and is safe to use from concurrently
handled notifications.

Request URL: ``{base_url}{token}/{method}``, e.g.
``https://api.telegram.org/bot<token>/sendMessage``.

Encodings:
    ContentKind.JSON       - JSON body, Content-Type: application/json
    ContentKind.MULTIPART  - multipart/form-data; (filename, bytes) tuples and
                             file-like values become file parts, str values
                             plain fields

Only status 200 counts as success. Transport failures raise TransportError,
other statuses UnexpectedStatusError. Nothing is retried.

Usage:
    client = create_http_client(settings)
    gateway = TelegramGateway(client, settings.telegram_url, settings.telegram_token)

    await gateway.send_json("sendMessage", SendMessage(chat_id=7, text="hi"))
    await gateway.send_form("setWebhook", {"certificate": ("public.pem", pem), "url": webhook_url})
"""

import asyncio
import json
import os
from enum import Enum
from typing import Any

import httpx

from relay.core.config_schema import RelaySettings
from relay.core.exceptions import RequestBuildError, TransportError, UnexpectedStatusError
from relay.core.logging import get_logger, log_with_source
from relay.telegram.payloads import BotApiPayload

logger = get_logger(__name__)

SUCCESS_STATUS = 200


class ContentKind(str, Enum):
    """Request body encodings."""

    JSON = "json"
    MULTIPART = "multipart"


def create_http_client(settings: RelaySettings) -> httpx.AsyncClient:
    """Create the shared HTTP client for Bot API calls."""
    return httpx.AsyncClient(
        timeout=settings.request_timeout,
        verify=settings.verify_tls,
    )


def _is_file(value: Any) -> bool:
    return hasattr(value, "read")


def _is_file_part(value: Any) -> bool:
    return (
        isinstance(value, tuple)
        and len(value) == 2
        and isinstance(value[0], str)
        and isinstance(value[1], bytes)
    )


class TelegramGateway:
    """
    Sends Bot API requests and classifies their outcome.

    Args:
        client: Shared async HTTP client
        base_url: Bot API base URL, token is appended directly
        token: Bot token
    """

    def __init__(self, client: httpx.AsyncClient, base_url: str, token: str) -> None:
        self._client = client
        self._base_url = base_url
        self._token = token

    def method_url(self, method: str) -> str:
        """Full URL for a Bot API method name."""
        return f"{self._base_url}{self._token}/{method}"

    def _redact(self, url: str) -> str:
        if not self._token:
            return url
        return url.replace(self._token, "***")

    async def send_json(self, method: str, payload: BotApiPayload | dict[str, Any]) -> int:
        """POST a JSON body to a Bot API method."""
        return await self.post(self.method_url(method), ContentKind.JSON, payload)

    async def send_form(self, method: str, parameters: dict[str, Any]) -> int:
        """POST multipart form parameters to a Bot API method."""
        return await self.post(self.method_url(method), ContentKind.MULTIPART, parameters)

    async def post(self, url: str, kind: ContentKind, payload: Any) -> int:
        """
        Build and send one POST request.

        Args:
            url: Destination URL
            kind: Body encoding
            payload: BotApiPayload or dict for JSON; dict of str, (filename,
                bytes) or file-like values for multipart

        Returns:
            The response status code (always 200)

        Raises:
            RequestBuildError: If the body cannot be serialized
            TransportError: If the request fails before a response arrives
            UnexpectedStatusError: If the status code is not 200
        """
        if kind == ContentKind.JSON:
            request_kwargs = self._json_request(payload)
        else:
            request_kwargs = await self._multipart_request(payload)

        safe_url = self._redact(url)
        log_with_source(
            logger, "telegram", "debug", "Http request",
            method="POST", url=safe_url, content_kind=kind.value,
            body=request_kwargs.get("content"),
        )

        try:
            response = await self._client.post(url, **request_kwargs)
        except httpx.RequestError as e:
            log_with_source(
                logger, "telegram", "warning", "Http request failed",
                url=safe_url, error=str(e),
            )
            raise TransportError(f"POST {safe_url} failed", cause=e) from e

        body = response.text
        log_with_source(
            logger, "telegram", "debug", "Http response",
            url=safe_url, status_code=response.status_code, body=body,
        )

        if response.status_code != SUCCESS_STATUS:
            raise UnexpectedStatusError(response.status_code, url=safe_url, body=body)
        return response.status_code

    @staticmethod
    def _json_request(payload: BotApiPayload | dict[str, Any]) -> dict[str, Any]:
        try:
            if isinstance(payload, BotApiPayload):
                data = payload.to_request_body()
            else:
                data = payload
            content = json.dumps(data)
        except (TypeError, ValueError) as e:
            raise RequestBuildError("Cannot serialize JSON body", cause=e) from e
        return {
            "content": content,
            "headers": {"Content-Type": "application/json"},
        }

    @staticmethod
    async def _multipart_request(parameters: dict[str, Any]) -> dict[str, Any]:
        data: dict[str, str] = {}
        files: dict[str, tuple[str, bytes]] = {}
        for name, value in parameters.items():
            if _is_file_part(value):
                files[name] = value
            elif _is_file(value):
                filename = os.path.basename(getattr(value, "name", "") or name)
                try:
                    files[name] = (filename, await asyncio.to_thread(value.read))
                except OSError as e:
                    raise RequestBuildError(f"Cannot read form file {name!r}", cause=e) from e
            elif isinstance(value, str):
                data[name] = value
            else:
                raise RequestBuildError(
                    f"Unsupported form value for {name!r}: {type(value).__name__}",
                )
        return {"data": data, "files": files}
