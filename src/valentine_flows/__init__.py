"""valentine-flows: strict provider orchestration for guided AI flows."""

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_package_version


def _get_version() -> str:
    """Get package version from metadata (single source of truth: pyproject.toml)."""
    try:
        return get_package_version("valentine-flows")
    except PackageNotFoundError:
        return "0.3.0"  # Fallback for dev without install


__version__ = _get_version()
