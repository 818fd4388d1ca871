"""Fixtures for configuration loading tests."""

import pytest


@pytest.fixture
def isolated_dirs(tmp_path, monkeypatch):
    """Run from an empty project dir with an empty XDG config home."""
    project = tmp_path / "project"
    project.mkdir()
    xdg = tmp_path / "xdg"
    (xdg / "valentine-flows").mkdir(parents=True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(xdg))
    monkeypatch.chdir(project)
    return project, xdg / "valentine-flows" / "config.toml"
