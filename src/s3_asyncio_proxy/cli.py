#!/usr/bin/env python3
"""Command line interface of the s3-asyncio-proxy."""

import asyncio
import dataclasses
import sys

import click
from aiohttp import web

from .auth import DEFAULT_EXPIRES_IN
from .config import ProxyConfig, build_backend
from .exceptions import ProxyError
from .logging_config import configure_logging
from .s3 import S3Backend
from .server import app_from_config


@click.group()
@click.option(
    "--service", type=click.Choice(["s3", "local"]), default="s3", show_default=True
)
@click.option("--directory", default="", help="Directory served by the local service")
@click.option("--access-key-id", default="", help="Defaults to AWS_ACCESS_KEY_ID")
@click.option(
    "--secret-access-key", default="", help="Defaults to AWS_SECRET_ACCESS_KEY"
)
@click.option("--region", default="", help="Defaults to AWS_DEFAULT_REGION")
@click.option("--endpoint-url", default="", help="Defaults to AWS_ENDPOINT_URL_S3")
@click.option("--bucket", default="")
@click.option("--prefix", default="", help="Prepended to every object key")
@click.option(
    "--link-style",
    type=click.Choice(["path", "vhost"]),
    default="vhost",
    show_default=True,
)
@click.option("--timeout", "timeout_seconds", default=5.0, show_default=True)
@click.option(
    "--expires-in",
    default=DEFAULT_EXPIRES_IN,
    show_default=True,
    help="Presigned URL expiration time in seconds",
)
@click.option("--log-level", default="INFO", show_default=True)
@click.pass_context
def cli(ctx, log_level, **options):
    """Serve objects from S3 or a local directory over HTTP."""
    ctx.ensure_object(dict)
    ctx.obj["logger"] = configure_logging(log_level)
    ctx.obj["config"] = ProxyConfig(**options)


def _build_backend(ctx):
    try:
        return build_backend(ctx.obj["config"], logger=ctx.obj["logger"])
    except ProxyError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.option("--host", default="0.0.0.0", show_default=True)
@click.option("--port", default=8080, show_default=True)
@click.option(
    "--passthrough-status",
    is_flag=True,
    help="Answer with the upstream status code instead of 500 on S3 errors",
)
@click.pass_context
def serve(ctx, host, port, passthrough_status):
    """Run the HTTP server."""
    config = ctx.obj["config"]
    if passthrough_status:
        config = dataclasses.replace(config, passthrough_status=True)

    try:
        app = app_from_config(config, logger=ctx.obj["logger"])
    except ProxyError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    web.run_app(app, host=host, port=port, print=None)


@cli.command()
@click.argument("key")
@click.pass_context
def presign(ctx, key):
    """Print a presigned GET URL for KEY (the prefix is applied)."""
    backend = _build_backend(ctx)
    if not isinstance(backend, S3Backend):
        click.echo("Error: presign needs the s3 service", err=True)
        sys.exit(1)

    try:
        url = backend.generate_presigned_url(backend.prefix + key)
    except ProxyError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(url)


@cli.command()
@click.argument("identifier")
@click.argument("output_path", type=click.Path(dir_okay=False))
@click.pass_context
def get(ctx, identifier, output_path):
    """Download one object through the configured backend."""
    backend = _build_backend(ctx)

    async def _get():
        try:
            return await backend.get(identifier)
        finally:
            await backend.close()

    try:
        result = asyncio.run(_get())
    except ProxyError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    with open(output_path, "wb") as f:
        f.write(result.body)

    click.echo("Download successful!")
    click.echo(f"Content Type: {result.headers.get('Content-Type', 'N/A')}")
    click.echo(f"Content Length: {len(result.body)} bytes")


if __name__ == "__main__":
    cli()
