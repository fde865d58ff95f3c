# SPDX-License-Identifier: MIT
"""Option declarations and normalisation for the lintstaged command."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Final

import typer

from ..errors import ConfigurationInvalid
from ..modes import SelectionMode
from .shared import CLIError

_TRUE_VALUES: Final[frozenset[str]] = frozenset({"true", "yes", "on"})
_FALSE_VALUES: Final[frozenset[str]] = frozenset({"false", "no", "off"})

MODE_OPTION = Annotated[
    str,
    typer.Option(
        "--mode",
        "-m",
        help="File selection mode: all, modified, staged, or ci.",
    ),
]
CONFIG_OPTION = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Path to a configuration file; skips discovery."),
]
CONCURRENT_OPTION = Annotated[
    str | None,
    typer.Option(
        "--concurrent",
        "-p",
        help="Run pattern groups concurrently: true, false, or a maximum number of groups.",
    ),
]
RELATIVE_OPTION = Annotated[
    bool | None,
    typer.Option("--relative/--absolute", help="Pass paths relative to the working directory."),
]
SHELL_OPTION = Annotated[
    bool | None,
    typer.Option("--shell/--no-shell", help="Run each command through the system shell."),
]
QUIET_OPTION = Annotated[
    bool,
    typer.Option("--quiet", "-q", help="Only print failures."),
]
DEBUG_OPTION = Annotated[
    bool,
    typer.Option("--debug", "-d", help="Print debug output and every subtask."),
]
EMOJI_OPTION = Annotated[
    bool,
    typer.Option("--emoji/--no-emoji", help="Toggle emoji output."),
]
COLOR_OPTION = Annotated[
    bool | None,
    typer.Option("--color/--no-color", help="Force colour output on or off; defaults to terminal detection."),
]
CWD_OPTION = Annotated[
    Path | None,
    typer.Option("--cwd", help="Working directory to run from."),
]


def parse_concurrency(raw: str | None) -> bool | int | None:
    """Return the concurrency setting encoded in ``raw``.

    Args:
        raw: ``true``/``false`` or a non-negative integer; ``None`` when unset.

    Returns:
        bool | int | None: Parsed value, or ``None`` to keep the configured one.

    Raises:
        CLIError: If ``raw`` is neither a boolean word nor a non-negative integer.
    """

    if raw is None:
        return None
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    try:
        number = int(value)
    except ValueError as exc:
        raise CLIError(f"Invalid value for --concurrent: {raw!r}") from exc
    if number < 0:
        raise CLIError(f"Invalid value for --concurrent: {raw!r}")
    return number


@dataclass(slots=True)
class RunCLIOptions:
    """Normalised CLI options for a lintstaged invocation."""

    mode: SelectionMode
    config: Path | None
    concurrent: bool | int | None
    relative: bool | None
    shell: bool | None
    quiet: bool
    debug: bool
    emoji: bool
    cwd: Path
    color: bool | None = None

    @classmethod
    def from_cli(
        cls,
        *,
        mode: str,
        config: Path | None,
        concurrent: str | None,
        relative: bool | None,
        shell: bool | None,
        quiet: bool,
        debug: bool,
        emoji: bool,
        cwd: Path | None,
        color: bool | None = None,
    ) -> RunCLIOptions:
        """Return options parsed from raw CLI arguments.

        Raises:
            CLIError: If the mode or concurrency value is invalid.
        """

        try:
            parsed_mode = SelectionMode.parse(mode)
        except ConfigurationInvalid as exc:
            raise CLIError(str(exc)) from exc
        return cls(
            mode=parsed_mode,
            config=config,
            concurrent=parse_concurrency(concurrent),
            relative=relative,
            shell=shell,
            quiet=quiet,
            debug=debug,
            emoji=emoji,
            cwd=(cwd or Path.cwd()).resolve(),
            color=color,
        )


__all__ = [
    "COLOR_OPTION",
    "CONCURRENT_OPTION",
    "CONFIG_OPTION",
    "CWD_OPTION",
    "DEBUG_OPTION",
    "EMOJI_OPTION",
    "MODE_OPTION",
    "QUIET_OPTION",
    "RELATIVE_OPTION",
    "RunCLIOptions",
    "SHELL_OPTION",
    "parse_concurrency",
]
