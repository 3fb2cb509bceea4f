"""
Configuration Management.

Loads secrets from config/.env and settings from config/settings/*.yaml.
Environment variables override both, so a deployment can run from the
checked-in YAML and inject only what differs.

Secrets and overrides (.env / environment):
    TELEGRAM_TOKEN              - Bot token, appended to the Bot API base URL
    TELEGRAM_URL                - Bot API base URL (overrides telegram.yaml)
    PATH_TO_PUBLIC_KEY          - Webhook certificate path
    WEBHOOK_URL                 - Public webhook URL registered with Telegram
    PORT                        - Listen port for the health endpoint
    NATS_URL                    - Bus URL
    NATS_SUBJECT                - Subscription subject
    INLINE_RESULT_URL_TEMPLATE  - Deep-link template for inline results

Settings (YAML):
    application.yaml - App identity, server, timeouts
    events.yaml      - NATS connection and subject
    telegram.yaml    - Bot API, webhook and inline result settings
    logging.yaml     - Logging configuration
"""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from relay.core.config_schema import (
    ApplicationSchema,
    EventsSchema,
    LoggingSchema,
    RelaySettings,
    TelegramSchema,
)


def find_project_root() -> Path:
    """Find project root by looking for .project_root marker file."""
    current = Path.cwd()
    while current != current.parent:
        if (current / ".project_root").exists():
            return current
        current = current.parent
    raise RuntimeError("Project root not found. Ensure .project_root file exists.")


def validate_project_root() -> Path:
    """
    Validate that the project root can be found.

    Raises SystemExit with a clear message if .project_root is not found.
    Use this in entry scripts before any configuration loading.
    """
    try:
        return find_project_root()
    except RuntimeError as e:
        raise SystemExit(f"Error: {e}") from e


def resolve_project_path(configured_path: str) -> Path:
    """Resolve a configured path; relative paths are taken from the project root."""
    path = Path(configured_path)
    if path.is_absolute():
        return path
    return find_project_root() / path


def load_yaml_config(filename: str) -> dict[str, Any]:
    """Load a YAML configuration file from config/settings/."""
    project_root = find_project_root()
    config_path = project_root / "config" / "settings" / filename

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        return yaml.safe_load(f) or {}


class Settings(BaseSettings):
    """Secrets and environment overrides loaded from config/.env and the process environment."""

    telegram_token: str = ""
    telegram_url: str | None = None
    path_to_public_key: str | None = None
    webhook_url: str | None = None
    port: int | None = None
    nats_url: str | None = None
    nats_subject: str | None = None
    inline_result_url_template: str | None = None

    model_config = SettingsConfigDict(
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


def _load_validated(schema_cls: type, filename: str) -> Any:
    """Load YAML and validate against schema. Returns typed model instance."""
    raw = load_yaml_config(filename)
    try:
        return schema_cls(**raw)
    except ValidationError as e:
        raise ValueError(
            f"Invalid configuration in {filename}:\n{e}"
        ) from e


class AppConfig:
    """
    Application configuration loaded from YAML files.

    Each YAML file is validated against its Pydantic schema at load time.
    Properties return typed Pydantic model instances with attribute access.
    """

    def __init__(self) -> None:
        self._application = _load_validated(ApplicationSchema, "application.yaml")
        self._events = _load_validated(EventsSchema, "events.yaml")
        self._telegram = _load_validated(TelegramSchema, "telegram.yaml")
        self._logging = _load_validated(LoggingSchema, "logging.yaml")

    @property
    def application(self) -> ApplicationSchema:
        """Application settings."""
        return self._application

    @property
    def events(self) -> EventsSchema:
        """Event bus settings (NATS url, subject)."""
        return self._events

    @property
    def telegram(self) -> TelegramSchema:
        """Telegram Bot API settings."""
        return self._telegram

    @property
    def logging(self) -> LoggingSchema:
        """Logging settings."""
        return self._logging


@lru_cache
def get_settings() -> Settings:
    """Get cached secrets instance. Resolves .env path from project root."""
    env_path = find_project_root() / "config" / ".env"
    return Settings(_env_file=str(env_path))


@lru_cache
def get_app_config() -> AppConfig:
    """Get cached application configuration."""
    return AppConfig()


def build_relay_settings(config: AppConfig, secrets: Settings) -> RelaySettings:
    """
    Merge YAML configuration with secrets and environment overrides.

    Any override set in the environment (or config/.env) replaces the YAML
    value; unset overrides leave the YAML value in place. A relative public
    key path is resolved against the project root.

    Args:
        config: Validated YAML configuration
        secrets: Secrets and overrides

    Returns:
        Frozen RelaySettings
    """
    app = config.application
    nats = config.events.nats
    telegram = config.telegram

    def pick(override: Any, default: Any) -> Any:
        return override if override not in (None, "") else default

    return RelaySettings(
        nats_url=pick(secrets.nats_url, nats.url),
        nats_subject=pick(secrets.nats_subject, nats.subject),
        telegram_url=pick(secrets.telegram_url, telegram.api_url),
        telegram_token=secrets.telegram_token,
        webhook_url=pick(secrets.webhook_url, telegram.webhook_url),
        public_key_path=str(resolve_project_path(
            pick(secrets.path_to_public_key, telegram.public_key_path),
        )),
        inline_result_url_template=pick(
            secrets.inline_result_url_template, telegram.inline_result_url_template,
        ),
        port=pick(secrets.port, app.server.port),
        host=app.server.host,
        request_timeout=app.timeouts.external_api,
        health_ping_timeout=app.timeouts.health_ping,
        verify_tls=telegram.verify_tls,
    )


@lru_cache
def get_relay_settings() -> RelaySettings:
    """Get the cached, merged relay settings. Built once per process."""
    return build_relay_settings(get_app_config(), get_settings())
