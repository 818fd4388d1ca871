"""Entry point for the ``valentine-flows`` command."""

from typing import Optional

import click

from valentine_flows import __version__
from valentine_flows.cli.commands import run_cmd, status_cmd
from valentine_flows.cli.context import get_context


@click.group()
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False),
    default=None,
    help="TOML config file (overrides VALENTINE_FLOWS_CONFIG_FILE).",
)
@click.option("--verbose", "-v", is_flag=True, help="Log provider calls and audit events to stderr.")
@click.version_option(__version__, prog_name="valentine-flows")
@click.pass_context
def cli(ctx: click.Context, config_file: Optional[str], verbose: bool) -> None:
    """Strict provider orchestration for guided Valentine flows."""
    cli_ctx = get_context(ctx)
    cli_ctx.config_file = config_file
    if verbose:
        cli_ctx.config.setup_logging()


cli.add_command(run_cmd)
cli.add_command(status_cmd)


if __name__ == "__main__":
    cli()
