"""Config file discovery and loading.

Settings live either in a dedicated ``opdispatch.toml`` or in the
``[tool.opdispatch]`` table of a project's ``pyproject.toml``. The nearest
directory holding either wins, walking up like git looks for ``.git/``;
within one directory ``opdispatch.toml`` takes precedence.

``OPDISPATCH_CONFIG`` (a file, or a directory holding ``opdispatch.toml``)
and the ``--config`` CLI flag bypass the walk.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

import click

CONFIG_FILENAME = "opdispatch.toml"
PYPROJECT_FILENAME = "pyproject.toml"
CONFIG_ENV_VAR = "OPDISPATCH_CONFIG"
PYPROJECT_TABLE = ("tool", "opdispatch")


def find_config(start: Path | None = None) -> Path | None:
    """Locate the config file that applies to *start* (default: cwd).

    Returns None when nothing is found, including when ``OPDISPATCH_CONFIG``
    names a path that does not exist.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        if p.is_dir():
            p = p / CONFIG_FILENAME
        return p if p.is_file() else None

    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        pyproject = directory / PYPROJECT_FILENAME
        if pyproject.is_file() and _pyproject_table(_read_toml(pyproject)) is not None:
            return pyproject
    return None


def load_config_data(path: Path) -> dict[str, Any]:
    """Read the settings mapping from *path*.

    For ``pyproject.toml`` only the ``[tool.opdispatch]`` table is returned
    (empty when absent).

    Raises:
        click.ClickException: The file is not valid TOML.
    """
    data = _read_toml(path)
    if path.name == PYPROJECT_FILENAME:
        return _pyproject_table(data) or {}
    return data


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {path}: {exc}"
        raise click.ClickException(msg) from exc


def _pyproject_table(data: dict[str, Any]) -> dict[str, Any] | None:
    table: Any = data
    for key in PYPROJECT_TABLE:
        if not isinstance(table, dict) or key not in table:
            return None
        table = table[key]
    return table if isinstance(table, dict) else None
