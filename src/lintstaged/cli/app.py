# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point."""

from __future__ import annotations

import typer

from ..logging import enable_debug_logging
from ._run_cli_models import (
    COLOR_OPTION,
    CONCURRENT_OPTION,
    CONFIG_OPTION,
    CWD_OPTION,
    DEBUG_OPTION,
    EMOJI_OPTION,
    MODE_OPTION,
    QUIET_OPTION,
    RELATIVE_OPTION,
    SHELL_OPTION,
    RunCLIOptions,
)
from ._run_cli_services import perform_run
from .shared import CLIError, build_cli_logger

app = typer.Typer(
    name="lintstaged",
    help="Run linters against git-selected files.",
    add_completion=False,
    no_args_is_help=False,
)


@app.command()
def run(
    mode: MODE_OPTION = "modified",
    config: CONFIG_OPTION = None,
    concurrent: CONCURRENT_OPTION = None,
    relative: RELATIVE_OPTION = None,
    shell: SHELL_OPTION = None,
    quiet: QUIET_OPTION = False,
    debug: DEBUG_OPTION = False,
    emoji: EMOJI_OPTION = True,
    cwd: CWD_OPTION = None,
    color: COLOR_OPTION = None,
) -> None:
    """Run the configured commands for every pattern matching the selected files.

    Exits with status 0 when every group passed and local changes were
    restored, 1 otherwise.
    """

    logger = build_cli_logger(emoji=emoji, debug=debug, no_color=color is False)
    if debug:
        enable_debug_logging()
    try:
        options = RunCLIOptions.from_cli(
            mode=mode,
            config=config,
            concurrent=concurrent,
            relative=relative,
            shell=shell,
            quiet=quiet,
            debug=debug,
            emoji=emoji,
            cwd=cwd,
            color=color,
        )
    except CLIError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc

    try:
        result = perform_run(options, logger=logger)
    except CLIError as exc:
        raise typer.Exit(code=exc.exit_code) from exc

    raise typer.Exit(code=0 if result.passed else 1)


def main() -> None:
    """Console-script entry point."""

    app()


__all__ = ["app", "main"]
