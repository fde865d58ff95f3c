# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Execution helpers for running subtasks and recording outcomes."""

from __future__ import annotations

import logging
import shlex
import threading
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from subprocess import CompletedProcess

from .modes import SelectionMode
from .process import CommandOptions, CommandRunner, run_command, run_shell
from .tasks.models import ExecutableTask, PatternTaskGroup

LOGGER = logging.getLogger(__name__)


class TaskStatus(str, Enum):
    """Outcome of a single subtask."""

    PASSED = "passed"
    FAILED = "failed"
    NOT_RUN = "not_run"


class GroupStatus(str, Enum):
    """Outcome of a pattern group."""

    SKIPPED = "skipped"
    PASSED = "passed"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class TaskResult:
    """Result of a subtask; output is only kept for failures."""

    title: str
    status: TaskStatus
    returncode: int | None = None
    output: str = ""


@dataclass(slots=True)
class GroupResult:
    """Result of every subtask belonging to one pattern group."""

    pattern: str
    status: GroupStatus
    file_count: int = 0
    tasks: list[TaskResult] = field(default_factory=list)
    reason: str | None = None

    @property
    def failed_tasks(self) -> list[TaskResult]:
        """Return the subtasks that failed."""

        return [task for task in self.tasks if task.status is TaskStatus.FAILED]


def skipped_result(group: PatternTaskGroup, mode: SelectionMode) -> GroupResult:
    """Return the result recorded for a group that matched no files."""

    return GroupResult(
        pattern=group.pattern,
        status=GroupStatus.SKIPPED,
        reason=f"No {mode.noun} files match {group.pattern}",
    )


def _combine_output(completed: CompletedProcess[str]) -> str:
    parts = [(completed.stdout or "").strip(), (completed.stderr or "").strip()]
    return "\n".join(part for part in parts if part)


@dataclass(slots=True)
class TaskExecutor:
    """Run subtasks through injectable command runners.

    Re-stage subtasks share ``index_lock`` so concurrent groups never race on
    the git index lock file.
    """

    runner: CommandRunner = run_command
    shell_runner: CommandRunner = run_shell
    index_lock: threading.Lock = field(default_factory=threading.Lock)

    def run_task(self, task: ExecutableTask) -> TaskResult:
        """Execute ``task`` and return its result.

        Args:
            task: Subtask to execute.

        Returns:
            TaskResult: Passed, or failed with the captured output.
        """

        invocation = task.invocation
        options = CommandOptions(cwd=invocation.cwd, check=False, capture_output=True)
        LOGGER.debug("running title=%r command=%r cwd=%s", task.title, _display(invocation.args), invocation.cwd)
        try:
            if invocation.shell:
                completed = self.shell_runner(invocation.shell_command, options=options)
            elif invocation.restage:
                with self.index_lock:
                    completed = self.runner(list(invocation.args), options=options)
            else:
                completed = self.runner(list(invocation.args), options=options)
        except (OSError, ValueError) as exc:
            return TaskResult(title=task.title, status=TaskStatus.FAILED, output=str(exc))

        if completed.returncode == 0:
            return TaskResult(title=task.title, status=TaskStatus.PASSED, returncode=0)
        return TaskResult(
            title=task.title,
            status=TaskStatus.FAILED,
            returncode=completed.returncode,
            output=_combine_output(completed),
        )

    def run_group(self, group: PatternTaskGroup, tasks: Sequence[ExecutableTask]) -> GroupResult:
        """Run ``tasks`` in order, stopping at the first failure.

        Args:
            group: Pattern group the subtasks were built from.
            tasks: Ordered subtasks for the group.

        Returns:
            GroupResult: Passed or failed result; subtasks after a failure are
            recorded as not run.
        """

        results: list[TaskResult] = []
        failed = False
        for task in tasks:
            if failed:
                results.append(TaskResult(title=task.title, status=TaskStatus.NOT_RUN))
                continue
            result = self.run_task(task)
            results.append(result)
            failed = result.status is TaskStatus.FAILED
        status = GroupStatus.FAILED if failed else GroupStatus.PASSED
        LOGGER.debug("pattern=%s status=%s", group.pattern, status.value)
        return GroupResult(pattern=group.pattern, status=status, file_count=len(group.files), tasks=results)


def _display(args: Sequence[str]) -> str:
    return shlex.join(args)


__all__ = [
    "GroupResult",
    "GroupStatus",
    "TaskExecutor",
    "TaskResult",
    "TaskStatus",
    "skipped_result",
]
