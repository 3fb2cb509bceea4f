"""
Relay Logging.

structlog on top of stdlib logging, configured from config/settings/logging.yaml.
Records are JSON by default; the CLI switches to the console renderer.

While a bus message is handled, EventObservabilityMiddleware binds
``subject``, ``message_id`` and ``correlation_id``, so every gateway and
dispatcher record for that message carries them. Records that report a
failed notification also carry the error ``code`` and, for Bot API
rejections, ``status_code``.

The Bot API URL embeds the bot token, so httpx's own request log is held
at WARNING and the gateway logs redacted URLs itself.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog
from structlog.typing import Processor

from relay.core.config import find_project_root, load_yaml_config

VALID_SOURCES = frozenset({
    "cli",
    "telegram",
    "events",
    "internal",
    "unknown",
})

# Third-party loggers whose INFO output would leak the token or flood the relay log
_QUIET_LOGGERS = ("httpx", "uvicorn.access")

_logging_config: dict[str, Any] | None = None


def _load_logging_config() -> dict[str, Any]:
    global _logging_config
    if _logging_config is None:
        _logging_config = load_yaml_config("logging.yaml")
    return _logging_config


def _resolve_log_path(configured_path: str) -> Path:
    return find_project_root() / configured_path


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            ],
        ),
    ]


def setup_logging(
    level: str | None = None,
    format_type: str | None = None,
    enable_console: bool | None = None,
    enable_file_logging: bool | None = None,
) -> None:
    """
    Configure relay logging. Arguments left as None take the logging.yaml value.

    Args:
        level: DEBUG shows every Bot API request and response (token redacted)
        format_type: 'json' or 'console'
        enable_console: Log to stdout
        enable_file_logging: Also write JSON lines to the rotating file
    """
    config = _load_logging_config()
    console_config = config["handlers"]["console"]
    file_config = config["handlers"]["file"]

    level = level if level is not None else config["level"]
    format_type = format_type if format_type is not None else config["format"]
    if enable_console is None:
        enable_console = console_config["enabled"]
    if enable_file_logging is None:
        enable_file_logging = file_config["enabled"]

    processors = _shared_processors()

    structlog.configure(
        processors=processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    json_formatter = structlog.stdlib.ProcessorFormatter(
        processor=structlog.processors.JSONRenderer(),
        foreign_pre_chain=processors,
    )
    if format_type == "console":
        console_formatter = structlog.stdlib.ProcessorFormatter(
            processor=structlog.dev.ConsoleRenderer(colors=True),
            foreign_pre_chain=processors,
        )
    else:
        console_formatter = json_formatter

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if enable_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(console_formatter)
        root_logger.addHandler(console_handler)

    if enable_file_logging:
        log_path = _resolve_log_path(file_config["path"])
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            filename=str(log_path),
            maxBytes=file_config["max_bytes"],
            backupCount=file_config["backup_count"],
            encoding="utf-8",
        )
        file_handler.setFormatter(json_formatter)
        root_logger.addHandler(file_handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> Any:
    return structlog.get_logger(name)


def log_with_source(logger: Any, source: str, level: str, message: str, **kwargs: Any) -> None:
    """
    Log with an explicit ``source`` field (one of VALID_SOURCES).

    An unknown level raises AttributeError.
    """
    log_method = getattr(logger, level.lower())
    log_method(message, source=source, **kwargs)
