# SPDX-License-Identifier: MIT
"""Services backing the lintstaged command: configuration loading and the run."""

from __future__ import annotations

from ..config_loader import LoadedConfig, load_config
from ..errors import ConfigNotFound, ConfigurationInvalid, LintStagedError
from ..orchestrator import RunCoordinator, RunOptions, RunResult
from ..reporting import ReportOptions, render_report
from ._run_cli_models import RunCLIOptions
from .shared import CLIError, CLILogger

CONFIG_HELP = "Please make sure you have created it correctly."


def load_run_config(options: RunCLIOptions, *, logger: CLILogger) -> LoadedConfig:
    """Load the configuration selected by ``options``.

    Args:
        options: Normalised CLI options.
        logger: Logger used for user-facing messages.

    Returns:
        LoadedConfig: Validated configuration and its source.

    Raises:
        CLIError: If the configuration is missing or invalid.
    """

    try:
        loaded = load_config(options.config, cwd=options.cwd)
    except ConfigNotFound as exc:
        logger.fail(f"{exc}.")
        logger.fail(CONFIG_HELP)
        raise CLIError(str(exc), exit_code=exc.exit_code) from exc
    except ConfigurationInvalid as exc:
        logger.fail(f"Could not parse lintstaged config.\n\n{exc}")
        logger.fail(CONFIG_HELP)
        raise CLIError(str(exc), exit_code=exc.exit_code) from exc

    logger.debug(f"config source={loaded.source}")
    if options.debug:
        logger.echo("Running lintstaged with the following config:")
        for pattern, commands in loaded.config.linters.items():
            logger.echo(f"  {pattern}: {', '.join(str(command) for command in commands)}")
    return loaded


def build_run_options(options: RunCLIOptions, loaded: LoadedConfig) -> RunOptions:
    """Merge CLI flags over configuration values."""

    return RunOptions.from_config(
        loaded.config,
        mode=options.mode,
        cwd=options.cwd,
        concurrent=options.concurrent,
        relative=options.relative,
        shell=options.shell,
        quiet=options.quiet,
        emoji=options.emoji,
        color=options.color,
    )


def perform_run(
    options: RunCLIOptions,
    *,
    logger: CLILogger,
    coordinator: RunCoordinator | None = None,
) -> RunResult:
    """Load configuration, run every group, and render the report.

    Args:
        options: Normalised CLI options.
        logger: Logger used for user-facing messages.
        coordinator: Optional coordinator, injectable for tests.

    Returns:
        RunResult: Aggregated run outcome.

    Raises:
        CLIError: If configuration, file selection, or the run itself fails fatally.
    """

    loaded = load_run_config(options, logger=logger)
    runner = coordinator or RunCoordinator()
    try:
        result = runner.run(loaded.config, build_run_options(options, loaded))
    except LintStagedError as exc:
        logger.fail(str(exc))
        raise CLIError(str(exc), exit_code=exc.exit_code) from exc

    render_report(
        result,
        ReportOptions(quiet=options.quiet, verbose=options.debug, emoji=options.emoji, color=options.color),
    )
    return result


__all__ = ["CONFIG_HELP", "build_run_options", "load_run_config", "perform_run"]
