"""Shared fixtures for CLI command tests."""

import json

import pytest
from click.testing import CliRunner


@pytest.fixture
def cli_runner():
    return CliRunner()


@pytest.fixture
def request_file(tmp_path):
    """Write a JSON request body and return its path."""

    def _write(body, name="request.json"):
        path = tmp_path / name
        path.write_text(body if isinstance(body, str) else json.dumps(body))
        return str(path)

    return _write


@pytest.fixture
def empty_config(tmp_path):
    """An explicit, empty config file so no user or project config leaks in."""
    path = tmp_path / "valentine-flows.toml"
    path.write_text("")
    return str(path)
