"""Root CLI group for opdispatch with global flags and command registration."""

from __future__ import annotations

import click

from opdispatch import __version__
from opdispatch.commands import register_commands
from opdispatch.commands._base import DispatchGroup
from opdispatch.commands._context import AppContext
from opdispatch.config.settings import DispatchSettings


@click.group(
    cls=DispatchGroup,
    invoke_without_command=True,
    examples="""\
  opdispatch services myapp.services:registry
  opdispatch start myapp.services:registry echo echo --input '"hello"'
  opdispatch --json info myapp.services:registry orders fulfil tok-1""",
)
@click.version_option(version=__version__, prog_name="opdispatch")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug logs.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
) -> None:
    """opdispatch — inspect and invoke operation handlers in-process."""
    ctx.ensure_object(dict)
    settings = DispatchSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        verbose=verbose,
        log_json=log_json,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
