"""
Command-line interface for feedbacker.

Provides commands to run the API server, initialize the database,
and run diagnostic checks.

Usage:
    feedbacker serve    # Run the API server
    feedbacker init-db  # Create tables
    feedbacker health   # Check dependencies and provider configuration
"""

import asyncio
import os
import sys

import click

from feedbacker.config.settings import get_settings
from feedbacker.observability.logging import setup_logging
from feedbacker.observability.metrics import get_metrics


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool) -> None:
    """Feedbacker - voice feedback ingestion for retail stores."""
    if debug:
        os.environ["LOG_LEVEL"] = "DEBUG"
        get_settings.cache_clear()

    setup_logging()


@main.command("init-db")
def init_db() -> None:
    """Create the feedback and settings tables."""
    from feedbacker.feedback.repository import FeedbackRepository
    from feedbacker.settings_store.repository import SettingsRepository
    from feedbacker.storage.database import Database

    async def run():
        async with Database() as db:
            await FeedbackRepository(db).create_table()
            await SettingsRepository(db).create_table()
        click.echo("Database initialized successfully")

    asyncio.run(run())


@main.command()
def health() -> None:
    """Check the database and list configured providers."""
    import structlog

    from feedbacker.api.routes.health import configured_providers
    from feedbacker.storage.database import Database

    logger = structlog.get_logger()

    async def check() -> dict[str, bool]:
        results: dict[str, bool] = {}
        try:
            async with Database() as db:
                results["postgres"] = await db.health_check()
        except Exception as e:
            results["postgres"] = False
            logger.error("Postgres health check failed", error=str(e))

        for name, configured in configured_providers().items():
            results[f"{name}_configured"] = configured
        return results

    results = asyncio.run(check())

    click.echo("\nHealth Check Results:")
    click.echo("-" * 40)
    for name, status in results.items():
        icon = "✓" if status else "✗"
        color = "green" if status else "red"
        click.echo(click.style(f"  {icon} {name}: {status}", fg=color))
    click.echo("-" * 40)

    if results["postgres"]:
        click.echo(click.style("Database healthy!", fg="green"))
        sys.exit(0)
    click.echo(click.style("Database unhealthy!", fg="red"))
    sys.exit(1)


@main.command()
@click.option("--host", default=None, help="API server host")
@click.option("--port", default=None, type=int, help="API server port")
@click.option("--reload", is_flag=True, help="Enable auto-reload (dev only)")
@click.option("--metrics-port", default=None, type=int, help="Metrics server port")
def serve(host: str | None, port: int | None, reload: bool, metrics_port: int | None) -> None:
    """Start the feedback API server."""
    import uvicorn

    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port
    metrics_port = metrics_port or settings.metrics_port

    # Start metrics server on separate port
    get_metrics().start_server(port=metrics_port)

    click.echo(f"Starting API server on {host}:{port}")
    click.echo(f"Metrics available on http://localhost:{metrics_port}/metrics")
    click.echo(f"API docs available on http://localhost:{port}/docs")

    uvicorn.run(
        "feedbacker.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level="info",
    )


if __name__ == "__main__":
    main()
