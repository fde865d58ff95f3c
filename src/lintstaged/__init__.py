# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Run linters against the files git selected for a commit or a CI build."""

from __future__ import annotations

from importlib import metadata

from .config import LintStagedConfig, parse_config
from .config_loader import load_config
from .modes import SelectionMode
from .orchestrator import RunCoordinator, RunOptions, RunResult, run_all

__all__ = [
    "LintStagedConfig",
    "RunCoordinator",
    "RunOptions",
    "RunResult",
    "SelectionMode",
    "__version__",
    "load_config",
    "parse_config",
    "run_all",
]

try:
    __version__ = metadata.version("lintstaged")
except metadata.PackageNotFoundError:  # pragma: no cover - local development fallback
    __version__ = "0.0.0"
