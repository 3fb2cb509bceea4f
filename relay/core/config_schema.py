"""
Configuration Schemas.

Pydantic models defining the expected structure of each YAML config file.
Used by AppConfig to validate configuration at load time. If a YAML file
has missing keys, wrong types, or unknown fields, a clear ValidationError
is raised at startup instead of a cryptic KeyError deep in application code.

Each top-level class corresponds to one file in config/settings/:
    ApplicationSchema  → application.yaml
    EventsSchema       → events.yaml
    TelegramSchema     → telegram.yaml
    LoggingSchema      → logging.yaml

RelaySettings is not backed by a single file: it is the merged, read-only
view (YAML + environment overrides) handed to the gateway and dispatcher.
"""

from string import Formatter

from pydantic import BaseModel, ConfigDict, field_validator


class _StrictBase(BaseModel):
    """Base with extra='forbid' so unknown YAML keys are caught immediately."""

    model_config = ConfigDict(extra="forbid")


def check_url_template(template: str) -> str:
    """
    Require exactly one positional ``{}`` field in a deep-link template.

    The template is filled with ``template.format(internal_id)``; named or
    indexed fields, format specs, or no field at all are rejected.

    Raises:
        ValueError: If the template does not have that shape
    """
    fields = [
        (name, spec, conversion)
        for _, name, spec, conversion in Formatter().parse(template)
        if name is not None
    ]
    if fields != [("", "", None)]:
        raise ValueError(
            f"URL template must contain exactly one '{{}}' placeholder, got {template!r}",
        )
    return template


# =============================================================================
# application.yaml
# =============================================================================


class ServerSchema(_StrictBase):
    host: str
    port: int


class TimeoutsSchema(_StrictBase):
    external_api: float
    health_ping: float


class ApplicationSchema(_StrictBase):
    name: str
    version: str
    description: str
    environment: str
    server: ServerSchema
    timeouts: TimeoutsSchema


# =============================================================================
# events.yaml
# =============================================================================


class NatsSchema(_StrictBase):
    url: str
    subject: str


class EventsSchema(_StrictBase):
    nats: NatsSchema


# =============================================================================
# telegram.yaml
# =============================================================================


class TelegramSchema(_StrictBase):
    api_url: str
    webhook_url: str
    public_key_path: str
    inline_result_url_template: str
    verify_tls: bool

    @field_validator("inline_result_url_template")
    @classmethod
    def validate_url_template(cls, value: str) -> str:
        return check_url_template(value)


# =============================================================================
# logging.yaml
# =============================================================================


class ConsoleHandlerSchema(_StrictBase):
    enabled: bool


class FileHandlerSchema(_StrictBase):
    enabled: bool
    path: str
    max_bytes: int
    backup_count: int


class HandlersSchema(_StrictBase):
    console: ConsoleHandlerSchema
    file: FileHandlerSchema


class LoggingSchema(_StrictBase):
    level: str
    format: str
    handlers: HandlersSchema


# =============================================================================
# Merged runtime settings
# =============================================================================


class RelaySettings(BaseModel):
    """Resolved settings consumed read-only by the relay core."""

    model_config = ConfigDict(frozen=True)

    nats_url: str
    nats_subject: str
    telegram_url: str
    telegram_token: str
    webhook_url: str
    public_key_path: str
    inline_result_url_template: str
    port: int
    host: str = "0.0.0.0"
    request_timeout: float = 10.0
    health_ping_timeout: float = 5.0
    verify_tls: bool = True

    @field_validator("inline_result_url_template")
    @classmethod
    def validate_url_template(cls, value: str) -> str:
        return check_url_template(value)
