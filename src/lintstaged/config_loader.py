# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Locate and load lintstaged configuration (TOML, pyproject, Python module)."""

from __future__ import annotations

import importlib.util
import logging
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final

from .config import LintStagedConfig, parse_config
from .errors import ConfigNotFound, ConfigurationInvalid

LOGGER = logging.getLogger(__name__)

PYPROJECT_FILENAME: Final[str] = "pyproject.toml"
PYPROJECT_TOOL_KEY: Final[str] = "tool"
PYPROJECT_SECTION_KEY: Final[str] = "lintstaged"
PYTHON_CONFIG_ATTRIBUTE: Final[str] = "config"
SEARCH_PLACES: Final[tuple[str, ...]] = (
    ".lintstagedrc.toml",
    "lintstaged.toml",
    PYPROJECT_FILENAME,
    "lintstaged_config.py",
)


@dataclass(frozen=True, slots=True)
class LoadedConfig:
    """Validated configuration together with the file it came from."""

    config: LintStagedConfig
    source: Path


def _load_toml(path: Path) -> Mapping[str, Any]:
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigurationInvalid(f"Could not parse {path}: {exc}") from exc


def _load_pyproject(path: Path) -> Mapping[str, Any] | None:
    """Return the ``[tool.lintstaged]`` table, or ``None`` when it is absent."""

    tool_section = _load_toml(path).get(PYPROJECT_TOOL_KEY)
    if not isinstance(tool_section, Mapping):
        return None
    section = tool_section.get(PYPROJECT_SECTION_KEY)
    if section is None:
        return None
    if not isinstance(section, Mapping):
        raise ConfigurationInvalid(f"[tool.{PYPROJECT_SECTION_KEY}] in {path} must be a table")
    return section


def _load_python(path: Path) -> Mapping[str, Any]:
    """Execute a Python configuration module and return its ``config`` mapping."""

    spec = importlib.util.spec_from_file_location(f"_lintstaged_config_{abs(hash(path))}", path)
    if spec is None or spec.loader is None:
        raise ConfigurationInvalid(f"Could not import {path}")
    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as exc:  # noqa: BLE001 - user code may raise anything
        raise ConfigurationInvalid(f"Could not import {path}: {type(exc).__name__}: {exc}") from exc
    payload = getattr(module, PYTHON_CONFIG_ATTRIBUTE, None)
    if not isinstance(payload, Mapping):
        raise ConfigurationInvalid(f"{path} must define a '{PYTHON_CONFIG_ATTRIBUTE}' mapping")
    return payload


def read_config_file(path: Path) -> Mapping[str, Any] | None:
    """Return the raw configuration mapping stored in ``path``.

    Args:
        path: Configuration file (TOML, ``pyproject.toml``, or Python module).

    Returns:
        Mapping[str, Any] | None: Raw mapping, or ``None`` for a ``pyproject.toml``
        without a ``[tool.lintstaged]`` table.
    """

    if path.name == PYPROJECT_FILENAME:
        return _load_pyproject(path)
    if path.suffix == ".py":
        return _load_python(path)
    return _load_toml(path)


def find_config(start: Path) -> Path | None:
    """Search ``start`` and its parents for the first configuration file.

    Args:
        start: Directory the search starts from.

    Returns:
        Path | None: Located configuration file, or ``None``.
    """

    for directory in (start, *start.parents):
        for name in SEARCH_PLACES:
            candidate = directory / name
            if not candidate.is_file():
                continue
            if name == PYPROJECT_FILENAME and _load_pyproject(candidate) is None:
                continue
            LOGGER.debug("found configuration at %s", candidate)
            return candidate
    return None


def load_config(config_path: Path | None = None, *, cwd: Path | None = None) -> LoadedConfig:
    """Load and validate configuration.

    Args:
        config_path: Explicit configuration file; skips discovery when given.
        cwd: Directory discovery starts from; defaults to the current directory.

    Returns:
        LoadedConfig: Validated configuration and its source file.

    Raises:
        ConfigNotFound: If no configuration could be located.
        ConfigurationInvalid: If the configuration cannot be parsed or validated.
    """

    if config_path is not None:
        path = config_path.resolve()
        if not path.is_file():
            raise ConfigNotFound(f"Config could not be found at {config_path}")
    else:
        located = find_config((cwd or Path.cwd()).resolve())
        if located is None:
            raise ConfigNotFound("Config could not be found")
        path = located

    raw = read_config_file(path)
    if raw is None:
        raise ConfigNotFound(f"{path} has no [tool.{PYPROJECT_SECTION_KEY}] table")
    config = parse_config(raw)
    LOGGER.debug("loaded configuration from %s: %r", path, config)
    return LoadedConfig(config=config, source=path)


__all__ = ["LoadedConfig", "SEARCH_PLACES", "find_config", "load_config", "read_config_file"]
