"""vfshell: an in-memory file system explored through a small shell."""

from __future__ import annotations

import tomllib
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

__all__ = ["__version__"]


def _source_version() -> str | None:
    """Version from the checkout's pyproject.toml when running from source."""
    pyproject = Path(__file__).resolve().parents[2] / "pyproject.toml"
    if not pyproject.is_file():
        return None
    with pyproject.open("rb") as handle:
        project = tomllib.load(handle).get("project", {})
    if project.get("name") != "vfshell":
        return None
    return project.get("version")


def _resolve_version() -> str:
    source = _source_version()
    if source is not None:
        return source
    try:
        return version("vfshell")
    except PackageNotFoundError:
        return "0+unknown"


__version__ = _resolve_version()
