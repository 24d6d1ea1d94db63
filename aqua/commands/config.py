"""Show the effective global configuration."""

import json

import click

from aqua.utils.error_handler import handle_exceptions

from ._context import load_cfg


@click.command("config")
@handle_exceptions
@click.pass_context
def config(ctx: click.Context) -> None:
    """Print the merged configuration (defaults, file, environment) as JSON."""
    cfg = load_cfg(ctx.obj)
    click.echo(json.dumps(cfg.to_dict(), indent=2, default=str))
