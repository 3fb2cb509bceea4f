#!/usr/bin/env python3
"""
Notification Relay CLI.

Primary entry point for all relay operations.
Use --service to select what to run.

Usage:
    python cli.py --help
    python cli.py --service relay --verbose
    python cli.py --service health
    python cli.py --service config
"""

import subprocess
import sys
from pathlib import Path

import click
import structlog

PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from relay.core.logging import get_logger, setup_logging


def validate_project_root() -> Path:
    """Validate that we're running from the project root."""
    if not (PROJECT_ROOT / ".project_root").exists():
        click.echo(
            click.style("Error: .project_root not found. Run from project root.", fg="red"),
            err=True,
        )
        sys.exit(1)
    return PROJECT_ROOT


def mask_secret(value: str) -> str:
    """Show only the last four characters of a secret."""
    if len(value) <= 4:
        return "*" * len(value)
    return "*" * (len(value) - 4) + value[-4:]


@click.command()
@click.option(
    "--service", "-s",
    type=click.Choice(["relay", "health", "config", "info"]),
    default="info",
    help="Service or command to run.",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Enable verbose output (INFO level logging).",
)
@click.option(
    "--debug", "-d",
    is_flag=True,
    help="Enable debug output (DEBUG level logging).",
)
@click.option(
    "--port",
    default=None,
    type=int,
    help="Listen port for the health endpoint (overrides config).",
)
def main(service: str, verbose: bool, debug: bool, port: int | None) -> None:
    """
    Notification Relay CLI.

    \b
    Examples:
        python cli.py --service relay --verbose
        python cli.py --service relay --port 8099
        python cli.py --service health
        python cli.py --service config
        python cli.py --service info
    """
    validate_project_root()

    if debug:
        log_level = "DEBUG"
    elif verbose:
        log_level = "INFO"
    else:
        log_level = "WARNING"

    setup_logging(level=log_level, format_type="console")

    structlog.contextvars.bind_contextvars(source="cli")

    logger = get_logger(__name__)

    logger.debug("CLI invoked", extra={"service": service, "log_level": log_level})

    if service == "relay":
        run_relay(logger, port, log_level)
    elif service == "health":
        check_health(logger, port)
    elif service == "config":
        show_config(logger)
    elif service == "info":
        show_info(logger)


def _load_settings(logger):
    from relay.core.config import get_relay_settings

    try:
        return get_relay_settings()
    except Exception as e:
        logger.error("Failed to load configuration", extra={"error": str(e)})
        click.echo(click.style(f"Error loading configuration: {e}", fg="red"), err=True)
        sys.exit(1)


def run_relay(logger, port: int | None, log_level: str) -> None:
    """Start the relay worker (NATS consumer + health endpoint)."""
    settings = _load_settings(logger)

    listen_port = port or settings.port

    if not settings.telegram_token:
        click.echo(
            click.style("Error: TELEGRAM_TOKEN is not set in config/.env or the environment.", fg="red"),
            err=True,
        )
        sys.exit(1)

    logger.info(
        "Starting relay",
        extra={"subject": settings.nats_subject, "host": settings.host, "port": listen_port},
    )

    cmd = [
        sys.executable, "-m", "uvicorn",
        "relay.events.broker:create_event_app",
        "--factory",
        "--host", settings.host,
        "--port", str(listen_port),
        "--log-level", log_level.lower(),
    ]

    click.echo(f"Relaying {settings.nats_subject} from {settings.nats_url}")
    click.echo(f"Health endpoint at http://{settings.host}:{listen_port}/health")
    click.echo("Press Ctrl+C to stop\n")

    try:
        subprocess.run(cmd, check=True)
    except KeyboardInterrupt:
        logger.info("Relay stopped")
    except subprocess.CalledProcessError as e:
        logger.error("Relay failed to start", extra={"exit_code": e.returncode})
        sys.exit(e.returncode)


def check_health(logger, port: int | None) -> None:
    """Query the health endpoint of a running relay."""
    import httpx

    settings = _load_settings(logger)
    url = f"http://127.0.0.1:{port or settings.port}/health"

    try:
        response = httpx.get(url, timeout=settings.health_ping_timeout + 1)
    except httpx.HTTPError as e:
        logger.error("Health check failed", extra={"url": url, "error": str(e)})
        click.echo(click.style(f"Relay not reachable at {url}", fg="red"), err=True)
        sys.exit(1)

    if response.status_code in (200, 204):
        click.echo(click.style("Relay healthy (NATS connected)", fg="green"))
    else:
        click.echo(click.style(f"Relay unhealthy (HTTP {response.status_code})", fg="red"), err=True)
        sys.exit(1)


def show_config(logger) -> None:
    """Display the resolved configuration (YAML merged with environment)."""
    settings = _load_settings(logger)

    click.echo("Relay Configuration:\n")
    click.echo("-" * 40)
    for key, value in settings.model_dump().items():
        if key == "telegram_token":
            value = mask_secret(value)
        click.echo(f"  {key}: {value}")

    logger.info("Configuration displayed successfully")


def show_info(logger) -> None:
    """Display application information."""
    click.echo("Notification Relay")
    click.echo("=" * 40)

    try:
        from relay.core.config import get_app_config
        application = get_app_config().application
        click.echo(f"Name: {application.name}")
        click.echo(f"Version: {application.version}")
        click.echo(f"Description: {application.description}")
    except Exception as e:
        logger.error(
            "Failed to load application configuration",
            extra={"error": str(e)},
        )
        click.echo(
            click.style(
                "Error: Could not load application.yaml configuration.",
                fg="red",
            ),
            err=True,
        )
        sys.exit(1)

    click.echo()
    click.echo("Services (--service):")
    click.echo("  relay          NATS → Telegram relay worker")
    click.echo("  health         Check a running relay")
    click.echo("  config         Display resolved configuration")
    click.echo("  info           Show this information")
    click.echo()
    click.echo("Options:")
    click.echo("  --verbose, -v  Enable INFO level logging")
    click.echo("  --debug, -d    Enable DEBUG level logging")
    click.echo("  --port         Override the listen port")


if __name__ == "__main__":
    main()
