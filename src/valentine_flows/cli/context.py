"""Shared CLI context."""

from dataclasses import dataclass
from typing import Optional

import click

from valentine_flows.config import AppConfig, get_config


@dataclass
class CliContext:
    """Per-invocation state attached to ``click.Context.obj``."""

    config_file: Optional[str] = None
    _config: Optional[AppConfig] = None

    @property
    def config(self) -> AppConfig:
        if self._config is None:
            self._config = AppConfig.from_env(self.config_file) if self.config_file else get_config()
        return self._config


def get_context(ctx: click.Context) -> CliContext:
    """Return the ``CliContext`` for *ctx*, creating one if needed."""
    obj = ctx.ensure_object(CliContext)
    return obj
