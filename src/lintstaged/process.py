# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Safe wrappers around ``subprocess`` execution."""

from __future__ import annotations

import shutil

# Bandit: subprocess usage is intentional; argv invocations never use a shell and
# shell invocations are only issued when the user opts into shell mode.
import subprocess  # nosec B404 suppression_valid: Controlled subprocess wrapper.
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from subprocess import CompletedProcess
from typing import Final

TIMEOUT_EXIT_CODE: Final[int] = 124


@dataclass(frozen=True, slots=True)
class CommandOptions:
    """Immutable command execution options."""

    cwd: Path | None = None
    check: bool = True
    capture_output: bool = True
    text: bool = True
    timeout: float | None = None
    input: str | None = None


class SubprocessExecutionError(RuntimeError):
    """Raised when a subprocess exits with a non-zero status while ``check`` is true."""

    def __init__(
        self,
        command: Sequence[str],
        returncode: int,
        stdout: str | None,
        stderr: str | None,
    ) -> None:
        """Initialise the error with captured subprocess metadata.

        Args:
            command: Normalised command sequence that was executed.
            returncode: Exit status reported by the subprocess.
            stdout: Captured standard output stream.
            stderr: Captured standard error stream.
        """
        super().__init__(
            f"Command '{command[0]}' exited with status {returncode}. stderr: {(stderr or '').strip() or '<none>'}",
        )
        self.command = tuple(command)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


CommandRunner = Callable[..., CompletedProcess[str]]


def _ensure_text(value: str | bytes | None) -> str | None:
    """Return ``value`` decoded to text when supplied as ``bytes``.

    Args:
        value: Stream output captured from subprocess execution.

    Returns:
        str | None: Text output or ``None`` when no data was captured.
    """

    if value is None or isinstance(value, str):
        return value
    return value.decode(errors="ignore")


def _normalize_args(args: Sequence[str]) -> list[str]:
    """Normalise the subprocess argument sequence.

    Args:
        args: Raw command arguments supplied by the caller.

    Returns:
        list[str]: Validated argument list suitable for subprocess execution.

    Raises:
        ValueError: If no arguments are provided.
        FileNotFoundError: If the executable cannot be resolved on ``PATH``.
    """

    if not args:
        msg = "subprocess command requires at least one argument"
        raise ValueError(msg)

    head, *rest = args
    head_path = Path(head)
    if head_path.is_absolute():
        return [str(head_path), *rest]

    resolved = shutil.which(head)
    if resolved is None:
        msg = f"Executable '{head}' was not found on PATH"
        raise FileNotFoundError(msg)
    return [resolved, *rest]


def _execute(
    payload: str | list[str],
    display: Sequence[str],
    options: CommandOptions,
    *,
    shell: bool,
) -> CompletedProcess[str]:
    """Run ``payload`` and translate timeouts and ``check`` semantics.

    Args:
        payload: Argument list, or a single string when ``shell`` is true.
        display: Command representation used in error messages.
        options: Execution options.
        shell: Whether the payload is handed to the platform shell.

    Returns:
        CompletedProcess[str]: Completed process metadata.

    Raises:
        SubprocessExecutionError: When ``check`` is true and the process exits
            with a non-zero status.
    """

    try:
        completed: CompletedProcess[str] = subprocess.run(  # nosec B602 B603 - see module note
            payload,
            cwd=str(options.cwd) if options.cwd is not None else None,
            check=False,
            capture_output=options.capture_output,
            text=options.text,
            timeout=options.timeout,
            input=options.input,
            stdin=None if options.input is not None else subprocess.DEVNULL,
            shell=shell,
        )
    except subprocess.TimeoutExpired as exc:
        stdout = _ensure_text(exc.stdout) or ""
        stderr = _ensure_text(exc.stderr)
        timeout_msg = f"Command timed out after {options.timeout:.1f}s"
        completed = subprocess.CompletedProcess(
            args=list(display),
            returncode=TIMEOUT_EXIT_CODE,
            stdout=stdout,
            stderr=f"{stderr}\n{timeout_msg}" if stderr else timeout_msg,
        )

    if options.check and completed.returncode != 0:
        raise SubprocessExecutionError(
            display,
            completed.returncode,
            completed.stdout if isinstance(completed.stdout, str) else None,
            completed.stderr if isinstance(completed.stderr, str) else None,
        )
    return completed


def run_command(args: Sequence[str], *, options: CommandOptions | None = None) -> CompletedProcess[str]:
    """Execute ``args`` after normalising the executable path.

    Args:
        args: Command and argument sequence to execute.
        options: Options configuring execution semantics.

    Returns:
        CompletedProcess: Subprocess execution metadata.

    Raises:
        FileNotFoundError: If the executable cannot be resolved on ``PATH``.
        SubprocessExecutionError: When ``check`` is true and the process exits
            with a non-zero status.
    """

    normalized = _normalize_args(args)
    return _execute(normalized, normalized, options or CommandOptions(), shell=False)


def run_shell(command: str, *, options: CommandOptions | None = None) -> CompletedProcess[str]:
    """Execute ``command`` through the platform shell.

    Args:
        command: Complete command line, including any file arguments.
        options: Options configuring execution semantics.

    Returns:
        CompletedProcess: Subprocess execution metadata.
    """

    if not command.strip():
        raise ValueError("shell command must not be empty")
    return _execute(command, [command], options or CommandOptions(), shell=True)


__all__ = [
    "CommandOptions",
    "CommandRunner",
    "SubprocessExecutionError",
    "TIMEOUT_EXIT_CODE",
    "run_command",
    "run_shell",
]
