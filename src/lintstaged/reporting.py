# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Render run results to the console."""

from __future__ import annotations

from dataclasses import dataclass

from .errors import ReconcileFailed, SnapshotFailed
from .executor import GroupResult, GroupStatus, TaskResult, TaskStatus
from .logging import detect_tty, fail, get_console_manager, info, ok, section, warn
from .orchestrator import RunResult

TASK_FAILURE_HINT = "Please fix them and try committing again."


@dataclass(frozen=True, slots=True)
class ReportOptions:
    """Console preferences applied while rendering a report."""

    quiet: bool = False
    verbose: bool = False
    emoji: bool = True
    color: bool | None = None

    @property
    def use_color(self) -> bool:
        """Return whether colour output is active."""

        return detect_tty() if self.color is None else self.color


def describe_failure(task: TaskResult) -> str:
    """Return the headline printed for a failed subtask."""

    if task.returncode is None:
        return f"{task.title} failed to start."
    return f"{task.title} found some errors (exit code {task.returncode}). {TASK_FAILURE_HINT}"


def _print_output(output: str, options: ReportOptions) -> None:
    if not output:
        return
    console = get_console_manager().get(color=options.use_color, emoji=options.emoji)
    console.print(output, markup=False)


def _render_group(group: GroupResult, options: ReportOptions) -> None:
    if group.status is GroupStatus.SKIPPED:
        if not options.quiet:
            skipped = f"{group.pattern} [skipped] {group.reason or ''}".rstrip()
            info(skipped, use_emoji=options.emoji, use_color=options.color)
        return
    heading = f"Running tasks for {group.pattern} ({group.file_count} files)"
    if group.status is GroupStatus.PASSED:
        if options.quiet:
            return
        ok(heading, use_emoji=options.emoji, use_color=options.color)
        if options.verbose:
            for task in group.tasks:
                info(f"  {task.title}", use_emoji=False, use_color=options.color)
        return

    fail(heading, use_emoji=options.emoji, use_color=options.color)
    for task in group.tasks:
        if task.status is TaskStatus.FAILED:
            fail(describe_failure(task), use_emoji=options.emoji, use_color=options.color)
            _print_output(task.output, options)
        elif task.status is TaskStatus.NOT_RUN and options.verbose:
            info(f"  {task.title} [not run]", use_emoji=False, use_color=options.color)


def _render_guard(result: RunResult, options: ReportOptions) -> None:
    error = result.guard_error
    if isinstance(error, SnapshotFailed):
        fail(str(error), use_emoji=options.emoji, use_color=options.color)
        return
    if result.restored is True:
        if not options.quiet:
            ok("Restored local changes", use_emoji=options.emoji, use_color=options.color)
        return
    if result.restored is False:
        detail = str(error) if isinstance(error, ReconcileFailed) else "Unable to restore local changes"
        fail(detail, use_emoji=options.emoji, use_color=options.color)


def render_report(result: RunResult, options: ReportOptions) -> None:
    """Render ``result`` honouring quiet and verbose preferences.

    Failures and guard problems are always printed; everything else is
    suppressed by ``quiet``.

    Args:
        result: Aggregated run outcome.
        options: Console preferences for the report.
    """

    if result.message is not None:
        if not options.quiet:
            info(result.message, use_emoji=options.emoji, use_color=options.color)
        return

    if not options.quiet:
        section("lintstaged", use_color=options.use_color)
    for group in result.groups:
        _render_group(group, options)
    if result.failed_groups and not options.quiet:
        warn(
            f"{len(result.failed_groups)} of {len(result.groups)} pattern groups failed",
            use_emoji=options.emoji,
        )
    # The guard outcome is always the last line.
    _render_guard(result, options)


__all__ = ["ReportOptions", "TASK_FAILURE_HINT", "describe_failure", "render_report"]
