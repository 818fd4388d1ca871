"""CLI commands."""

from valentine_flows.cli.commands.flows import run_cmd
from valentine_flows.cli.commands.status import status_cmd

__all__ = [
    "run_cmd",
    "status_cmd",
]
