# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Turn pattern groups into ordered, executable subtasks."""

from __future__ import annotations

import logging
import os
import re
import shlex
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from ..errors import ArgumentLengthWarning, ConfigurationInvalid
from ..modes import SelectionMode
from .models import CommandKind, CommandSpec, DynamicCommand, ExecutableTask, Invocation, PatternTaskGroup

LOGGER = logging.getLogger(__name__)

# Tool name -> flag that switches the tool from reporting to rewriting files.
FIX_FLAGS: Final[dict[str, str]] = {
    "eslint": "--fix",
    "jsonlint": "--in-place",
    "prettier": "--write",
    "stylelint": "--fix",
}

# https://unix.stackexchange.com/a/120652 and the platform documentation for
# darwin and cmd.exe command-line limits.
_DEFAULT_MAX_ARG_LENGTH: Final[int] = 131072
_PLATFORM_MAX_ARG_LENGTH: Final[dict[str, int]] = {"darwin": 262144, "win32": 8191}

FILE_PLACEHOLDER: Final[str] = "[file]"
_PLACEHOLDER_RUN: Final[re.Pattern[str]] = re.compile(r"\[file\].*\[file\]")
_GIT_COMMAND: Final[re.Pattern[str]] = re.compile(r"^git(\.exe)?$", re.IGNORECASE)
RESTAGE_TITLE: Final[str] = "git add"
DYNAMIC_TITLE: Final[str] = "[Function]"


@dataclass(frozen=True, slots=True)
class NormalizedCommand:
    """Check and fix forms of a literal command."""

    check: str
    fix: str

    def resolve(self, mode: SelectionMode) -> str:
        """Return the form appropriate for ``mode``."""

        return self.fix if mode.should_fix else self.check


def normalize_command(command: str) -> NormalizedCommand:
    """Split ``command`` into check and fix forms for known fixable tools.

    Args:
        command: Literal command line from configuration.

    Returns:
        NormalizedCommand: Identical forms unless the tool has a known fix flag.
    """

    stripped = command.strip()
    if not stripped:
        raise ConfigurationInvalid("command strings must not be empty")
    head, _, rest = stripped.partition(" ")
    fix_flag = FIX_FLAGS.get(Path(head).name)
    if fix_flag is None:
        return NormalizedCommand(check=stripped, fix=stripped)
    flag_re = re.compile(rf"\s+{re.escape(fix_flag)}(?=\s|$)")
    check = flag_re.sub("", stripped)
    fix = stripped if flag_re.search(stripped) else " ".join(part for part in (head, fix_flag, rest.strip()) if part)
    return NormalizedCommand(check=check, fix=fix)


def max_argument_length(platform: str | None = None) -> int:
    """Return the command-line length limit for ``platform``."""

    return _PLATFORM_MAX_ARG_LENGTH.get(platform or sys.platform, _DEFAULT_MAX_ARG_LENGTH)


def check_argument_length(
    files: Sequence[str],
    *,
    limit: int | None = None,
) -> ArgumentLengthWarning | None:
    """Return a warning when the joined file list exceeds ``limit`` bytes.

    Args:
        files: Selected files, relative to the repository root.
        limit: Explicit byte limit; defaults to the current platform's.

    Returns:
        ArgumentLengthWarning | None: Warning record, or ``None`` when within limits.
    """

    threshold = max_argument_length() if limit is None else limit
    length = len(" ".join(files).encode("utf-8"))
    if length > threshold:
        return ArgumentLengthWarning(length=length, limit=threshold)
    return None


def _resolve_dynamic(command: DynamicCommand, files: Sequence[str]) -> list[str]:
    """Call a dynamic command and validate the command lines it returns.

    Args:
        command: Dynamic command spec.
        files: File list passed to the factory.

    Returns:
        list[str]: One or more command lines.

    Raises:
        ConfigurationInvalid: If the factory fails or returns something other
            than a string or a sequence of strings.
    """

    try:
        resolved = command.factory(list(files))
    except Exception as exc:  # noqa: BLE001 - user callables may raise anything
        raise ConfigurationInvalid(f"{command} raised {type(exc).__name__}: {exc}") from exc
    lines = [resolved] if isinstance(resolved, str) else resolved
    valid = isinstance(lines, Sequence) and bool(lines)
    if not valid or not all(isinstance(line, str) and line.strip() for line in lines):
        raise ConfigurationInvalid(f"{command} must return a command string or a list of command strings")
    return list(lines)


def _titles_for_dynamic(mode: SelectionMode, command: DynamicCommand, count: int, lines: int) -> list[str]:
    """Return short display titles for each line produced by a dynamic command.

    The factory is called with placeholders so titles never spell out the
    full file list. Titles show the same check or fix form that runs.
    """

    try:
        mock_lines = _resolve_dynamic(command, [FILE_PLACEHOLDER] * count)
    except ConfigurationInvalid:
        mock_lines = []
    resolved = [normalize_command(line).resolve(mode) for line in mock_lines[:lines]]
    titles = [_PLACEHOLDER_RUN.sub(FILE_PLACEHOLDER, line) for line in resolved]
    titles.extend(DYNAMIC_TITLE for _ in range(lines - len(titles)))
    return titles


def _invocation(
    command: str,
    files: Sequence[str],
    *,
    append_files: bool,
    shell: bool,
    git_root: Path,
    cwd: Path,
) -> Invocation:
    """Bind ``command`` and ``files`` into an :class:`Invocation`."""

    if shell:
        line = f"{command} {shlex.join(files)}" if append_files and files else command
        return Invocation(args=(line,), cwd=cwd, shell=True)
    tokens = shlex.split(command)
    if not tokens:
        raise ConfigurationInvalid("command strings must not be empty")
    args = (*tokens, *files) if append_files else tuple(tokens)
    workdir = git_root if _GIT_COMMAND.match(tokens[0]) else cwd
    return Invocation(args=args, cwd=workdir)


def _restage_task(files: Sequence[str], *, git_root: Path, cwd: Path) -> ExecutableTask:
    """Return the subtask adding ``files`` back to the index."""

    absolute = [os.path.normpath(cwd / entry) for entry in files]
    invocation = Invocation(args=("git", "add", "--", *absolute), cwd=git_root, restage=True)
    return ExecutableTask(title=RESTAGE_TITLE, invocation=invocation)


def _tasks_for_command(
    mode: SelectionMode,
    spec: CommandSpec,
    files: Sequence[str],
    *,
    git_root: Path,
    cwd: Path,
    shell: bool,
) -> list[ExecutableTask]:
    """Return the subtasks implementing a single command spec."""

    if spec.kind is CommandKind.DYNAMIC:
        lines = [normalize_command(line).resolve(mode) for line in _resolve_dynamic(spec, files)]
        titles = _titles_for_dynamic(mode, spec, len(files), len(lines))
        return [
            ExecutableTask(
                title=title,
                invocation=_invocation(line, files, append_files=False, shell=shell, git_root=git_root, cwd=cwd),
            )
            for title, line in zip(titles, lines)
        ]
    command = normalize_command(spec.command).resolve(mode)
    invocation = _invocation(command, files, append_files=True, shell=shell, git_root=git_root, cwd=cwd)
    return [ExecutableTask(title=command, invocation=invocation)]


def build_tasks(
    mode: SelectionMode,
    group: PatternTaskGroup,
    *,
    git_root: Path,
    cwd: Path,
    shell: bool = False,
) -> list[ExecutableTask]:
    """Return the ordered subtasks for ``group``.

    Args:
        mode: Selection mode deciding between check and fix forms.
        group: Pattern group whose commands are being built.
        git_root: Top-level directory of the working tree.
        cwd: Directory non-git commands run from.
        shell: Hand command lines to the shell without tokenizing them.

    Returns:
        list[ExecutableTask]: Configured commands in order, followed by a
        re-stage task when ``mode`` writes fixes back.

    Raises:
        ConfigurationInvalid: If a command spec cannot be turned into a command line.
    """

    if group.skippable:
        return []
    tasks: list[ExecutableTask] = []
    for spec in group.commands:
        tasks.extend(_tasks_for_command(mode, spec, group.files, git_root=git_root, cwd=cwd, shell=shell))
    if mode.should_restage:
        tasks.append(_restage_task(group.files, git_root=git_root, cwd=cwd))
    LOGGER.debug("pattern=%s tasks=%r", group.pattern, [task.title for task in tasks])
    return tasks


__all__ = [
    "FILE_PLACEHOLDER",
    "FIX_FLAGS",
    "NormalizedCommand",
    "RESTAGE_TITLE",
    "build_tasks",
    "check_argument_length",
    "max_argument_length",
    "normalize_command",
]
