# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Value objects describing commands, pattern groups, and executable tasks."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

CommandFactory = Callable[[Sequence[str]], "str | Sequence[str]"]


class CommandKind(str, Enum):
    """Tag distinguishing the two command spec variants."""

    LITERAL = "literal"
    DYNAMIC = "dynamic"


@dataclass(frozen=True, slots=True)
class LiteralCommand:
    """Command line to which matched files are appended."""

    command: str
    kind: CommandKind = field(default=CommandKind.LITERAL, init=False)

    def __str__(self) -> str:
        return self.command


@dataclass(frozen=True, slots=True)
class DynamicCommand:
    """Callable that turns the matched file list into one or more command lines."""

    factory: CommandFactory
    kind: CommandKind = field(default=CommandKind.DYNAMIC, init=False)

    def __str__(self) -> str:
        name = getattr(self.factory, "__qualname__", None) or repr(self.factory)
        return f"[Function {name}]"


CommandSpec = LiteralCommand | DynamicCommand


def as_command_spec(raw: object) -> CommandSpec:
    """Wrap a raw configuration value in the matching command spec.

    Args:
        raw: String, callable, or existing command spec.

    Returns:
        CommandSpec: Tagged command spec.

    Raises:
        TypeError: If ``raw`` is neither a string nor a callable.
    """

    if isinstance(raw, (LiteralCommand, DynamicCommand)):
        return raw
    if isinstance(raw, str):
        if not raw.strip():
            raise TypeError("command strings must not be empty")
        return LiteralCommand(raw.strip())
    if callable(raw):
        return DynamicCommand(raw)
    raise TypeError(f"commands must be strings or callables, got {type(raw).__name__}")


@dataclass(frozen=True, slots=True)
class PatternTaskGroup:
    """Files matched by one configured pattern together with its commands."""

    pattern: str
    files: tuple[str, ...]
    commands: tuple[CommandSpec, ...]

    @property
    def skippable(self) -> bool:
        """Return ``True`` when the pattern matched no files."""

        return not self.files


@dataclass(frozen=True, slots=True)
class Invocation:
    """Resolved process invocation for a single task."""

    args: tuple[str, ...]
    cwd: Path
    shell: bool = False
    restage: bool = False

    @property
    def shell_command(self) -> str:
        """Return the command line handed to the shell in shell mode."""

        return self.args[0]


@dataclass(frozen=True, slots=True)
class ExecutableTask:
    """Display title plus the invocation that implements it."""

    title: str
    invocation: Invocation


__all__ = [
    "CommandFactory",
    "CommandKind",
    "CommandSpec",
    "DynamicCommand",
    "ExecutableTask",
    "Invocation",
    "LiteralCommand",
    "PatternTaskGroup",
    "as_command_spec",
]
