"""Click CLI for running and inspecting the webhook relay."""

from __future__ import annotations

import asyncio
import logging

import click
import uvicorn

from src.config import ConfigError, RelayConfig
from src.server.app import create_app_from_config
from src.webhook.dispatcher import DeliveryError, WebhookDispatcher
from src.webhook.mapping import (
    MappingEncodeError,
    MappingLoadError,
    dump_webhook_map,
    load_webhook_map,
)

logger = logging.getLogger(__name__)


@click.group()
@click.option("--map", "map_path", default=None, help="Path to the webhook map JSON.")
@click.pass_context
def cli(ctx: click.Context, map_path: str | None) -> None:
    """Relay messages to webhooks registered in a code map."""
    ctx.ensure_object(dict)
    try:
        config = RelayConfig.from_env()
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    if map_path:
        config = config.model_copy(update={"map_path": map_path})
    ctx.obj["config"] = config


@cli.command()
@click.option("--host", default=None, help="Bind address (default: HOST or 0.0.0.0).")
@click.option("--port", type=click.IntRange(1, 65535), default=None,
              help="Listening port (default: PORT or 8080).")
@click.option("--log-level", default="info",
              type=click.Choice(["debug", "info", "warning", "error"]))
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None, log_level: str) -> None:
    """Serve the relay endpoint."""
    config: RelayConfig = ctx.obj["config"]
    updates: dict[str, object] = {}
    if host:
        updates["host"] = host
    if port:
        updates["port"] = port
    config = config.model_copy(update=updates)

    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Server starting on port %d", config.port)
    uvicorn.run(
        create_app_from_config(config),
        host=config.host,
        port=config.port,
        log_level=log_level,
    )


@cli.command("list")
@click.pass_context
def list_map(ctx: click.Context) -> None:
    """Print the webhook map."""
    config: RelayConfig = ctx.obj["config"]
    try:
        webhook_map = load_webhook_map(config.map_path)
    except MappingLoadError as exc:
        raise click.ClickException(str(exc)) from exc
    try:
        output = dump_webhook_map(webhook_map, indent=2)
    except MappingEncodeError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(output.decode())


@cli.command()
@click.argument("code")
@click.argument("message")
@click.pass_context
def send(ctx: click.Context, code: str, message: str) -> None:
    """Deliver MESSAGE to the webhook registered for CODE."""
    config: RelayConfig = ctx.obj["config"]
    try:
        webhook_map = load_webhook_map(config.map_path)
    except MappingLoadError as exc:
        raise click.ClickException(str(exc)) from exc

    target = webhook_map.get(code)
    if target is None:
        raise click.ClickException(f"Invalid code: {code}")

    dispatcher = WebhookDispatcher(timeout=config.delivery_timeout)
    try:
        asyncio.run(dispatcher.deliver(target.webhooks_url, message))
    except DeliveryError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo("Message sent successfully")


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
