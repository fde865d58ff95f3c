# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Pattern-group generation and subtask construction."""

from __future__ import annotations

from .builder import build_tasks, check_argument_length, normalize_command
from .generator import generate_groups
from .models import (
    CommandKind,
    CommandSpec,
    DynamicCommand,
    ExecutableTask,
    Invocation,
    LiteralCommand,
    PatternTaskGroup,
    as_command_spec,
)

__all__ = [
    "CommandKind",
    "CommandSpec",
    "DynamicCommand",
    "ExecutableTask",
    "Invocation",
    "LiteralCommand",
    "PatternTaskGroup",
    "as_command_spec",
    "build_tasks",
    "check_argument_length",
    "generate_groups",
    "normalize_command",
]
