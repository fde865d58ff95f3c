# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Run coordinator sequencing selection, the working-tree guard, and task groups."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path

from .config import LintStagedConfig
from .errors import ArgumentLengthWarning, ConfigurationInvalid, GuardError, ReconcileFailed, SnapshotFailed
from .executor import GroupResult, GroupStatus, TaskExecutor, skipped_result
from .git import GitClient
from .logging import fail, warn
from .modes import SelectionMode
from .process import CommandRunner, run_command, run_shell
from .selection import select_files
from .tasks import ExecutableTask, PatternTaskGroup, build_tasks, check_argument_length, generate_groups
from .workflow import Snapshot, WorkingTreeGuard

LOGGER = logging.getLogger(__name__)

NOTHING_TO_DO = "No staged files match any of provided globs."
STASH_FAILED_REASON = "Local changes could not be stashed"


@dataclass(frozen=True, slots=True)
class RunOptions:
    """Per-invocation settings, already merged from configuration and the CLI."""

    mode: SelectionMode = SelectionMode.MODIFIED
    cwd: Path = field(default_factory=Path.cwd)
    concurrent: bool | int = True
    relative: bool = False
    shell: bool = False
    quiet: bool = False
    emoji: bool = True
    color: bool | None = None

    @classmethod
    def from_config(cls, config: LintStagedConfig, **overrides: object) -> RunOptions:
        """Return options seeded from ``config`` with ``overrides`` applied.

        ``None`` overrides are ignored so unset CLI flags fall back to the
        configuration values.
        """

        values: dict[str, object] = {
            "concurrent": config.concurrent,
            "relative": config.relative,
            "shell": config.shell,
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        if "mode" in values:
            values["mode"] = SelectionMode.parse(values["mode"])  # type: ignore[arg-type]
        return cls(**values)  # type: ignore[arg-type]


@dataclass(slots=True)
class RunContext:
    """Mutable run-scoped state shared between the guard and group execution."""

    has_snapshot: bool = False
    has_errors: bool = False


@dataclass(slots=True)
class RunResult:
    """Aggregated outcome of a run."""

    passed: bool
    groups: list[GroupResult] = field(default_factory=list)
    warnings: list[ArgumentLengthWarning] = field(default_factory=list)
    snapshot: Snapshot | None = None
    restored: bool | None = None
    guard_error: GuardError | None = None
    message: str | None = None

    @property
    def failed_groups(self) -> list[GroupResult]:
        """Return the groups that reported a failure."""

        return [group for group in self.groups if group.status is GroupStatus.FAILED]


def resolve_concurrency(concurrent: bool | int, group_count: int) -> int:
    """Return the number of groups allowed to run at once.

    Args:
        concurrent: ``True`` for unbounded, ``False``/``0`` for sequential, or
            a positive limit.
        group_count: Number of groups that will run.

    Returns:
        int: Worker count, at least one.

    Raises:
        ConfigurationInvalid: If ``concurrent`` is negative.
    """

    ceiling = max(1, group_count)
    if isinstance(concurrent, bool):
        return ceiling if concurrent else 1
    if concurrent < 0:
        raise ConfigurationInvalid(f"concurrent must be a boolean or a non-negative integer, got {concurrent}")
    if concurrent == 0:
        return 1
    return min(concurrent, ceiling)


@dataclass(slots=True)
class RunCoordinator:
    """Drive a complete run from file selection through reconciliation."""

    git_runner: CommandRunner = run_command
    executor: TaskExecutor = field(default_factory=TaskExecutor)

    def run(self, config: LintStagedConfig, options: RunOptions) -> RunResult:
        """Execute every configured pattern group for the selected files.

        Args:
            config: Validated configuration holding linters and ignore globs.
            options: Run options for this invocation.

        Returns:
            RunResult: Aggregated result; ``passed`` is ``False`` when any task
            failed or the guard could not restore local changes.

        Raises:
            ConfigurationInvalid: For invalid concurrency or command specs.
            SelectionFailed: When git could not enumerate files.
        """

        mode = SelectionMode.parse(options.mode)
        cwd = options.cwd.resolve()
        git = GitClient.discover(cwd, runner=self.git_runner)
        files = select_files(mode, git)
        LOGGER.debug("selected files=%r", files)
        warnings = self._check_argument_length(files, options)

        groups = generate_groups(
            config.linters,
            files,
            git_root=git.root,
            cwd=cwd,
            relative=options.relative,
            ignore=config.ignore,
        )
        if all(group.skippable for group in groups):
            return RunResult(
                passed=True,
                groups=[skipped_result(group, mode) for group in groups],
                warnings=warnings,
                message=NOTHING_TO_DO,
            )

        workers = resolve_concurrency(options.concurrent, sum(1 for group in groups if not group.skippable))
        plans = [
            (group, build_tasks(mode, group, git_root=git.root, cwd=cwd, shell=options.shell)) for group in groups
        ]

        result = RunResult(passed=False, warnings=warnings)
        context = RunContext()
        guard = WorkingTreeGuard(git, enabled=mode.needs_guard)
        guard.engage()
        try:
            result.snapshot = guard.snapshot()
        except SnapshotFailed as exc:
            result.guard_error = exc
            result.groups = [
                GroupResult(pattern=group.pattern, status=GroupStatus.SKIPPED, reason=STASH_FAILED_REASON)
                for group in groups
            ]
            return result
        context.has_snapshot = result.snapshot is not None

        finished = False
        try:
            result.groups = self._execute(plans, mode, workers)
            context.has_errors = any(group.status is GroupStatus.FAILED for group in result.groups)
            finished = True
        finally:
            if context.has_snapshot:
                self._reconcile(guard, result, in_flight_error=not finished, options=options)

        result.passed = not context.has_errors and result.guard_error is None
        return result

    @staticmethod
    def _check_argument_length(files: Sequence[str], options: RunOptions) -> list[ArgumentLengthWarning]:
        notice = check_argument_length(files)
        if notice is None:
            return []
        if not options.quiet:
            warn(notice.message, use_emoji=options.emoji, use_color=options.color)
        return [notice]

    def _execute(
        self,
        plans: Sequence[tuple[PatternTaskGroup, list[ExecutableTask]]],
        mode: SelectionMode,
        workers: int,
    ) -> list[GroupResult]:
        """Run every non-skipped group, sequentially or in a bounded pool.

        Sibling groups keep running when one fails; results keep configuration order.
        """

        results: dict[int, GroupResult] = {}
        runnable: list[tuple[int, PatternTaskGroup, list[ExecutableTask]]] = []
        for order, (group, tasks) in enumerate(plans):
            if group.skippable:
                results[order] = skipped_result(group, mode)
            else:
                runnable.append((order, group, tasks))

        if workers <= 1:
            for order, group, tasks in runnable:
                results[order] = self.executor.run_group(group, tasks)
        else:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                future_map = {
                    pool.submit(self.executor.run_group, group, tasks): order for order, group, tasks in runnable
                }
                for future in as_completed(future_map):
                    results[future_map[future]] = future.result()
        return [results[order] for order in sorted(results)]

    @staticmethod
    def _reconcile(
        guard: WorkingTreeGuard,
        result: RunResult,
        *,
        in_flight_error: bool,
        options: RunOptions,
    ) -> None:
        """Capture task fixes and restore unstaged changes exactly once."""

        guard.update()
        try:
            guard.reconcile()
        except ReconcileFailed as exc:
            result.guard_error = exc
            result.restored = False
            if in_flight_error:
                # The report will not be rendered; surface the recovery path now.
                fail(str(exc), use_emoji=options.emoji, use_color=options.color)
            return
        result.restored = True


def run_all(
    config: LintStagedConfig,
    options: RunOptions,
    *,
    git_runner: CommandRunner | None = None,
    task_runner: CommandRunner | None = None,
    shell_runner: CommandRunner | None = None,
) -> RunResult:
    """Convenience wrapper building a :class:`RunCoordinator` and running it.

    Args:
        config: Validated configuration.
        options: Run options for this invocation.
        git_runner: Optional runner used for git queries and guard operations.
        task_runner: Optional runner used for configured commands and re-staging.
        shell_runner: Optional runner used for shell-mode commands.

    Returns:
        RunResult: Aggregated run outcome.
    """

    executor = TaskExecutor(runner=task_runner or run_command, shell_runner=shell_runner or run_shell)
    coordinator = RunCoordinator(git_runner=git_runner or run_command, executor=executor)
    return coordinator.run(config, options)


__all__ = [
    "NOTHING_TO_DO",
    "RunContext",
    "RunCoordinator",
    "RunOptions",
    "RunResult",
    "STASH_FAILED_REASON",
    "resolve_concurrency",
    "run_all",
]
