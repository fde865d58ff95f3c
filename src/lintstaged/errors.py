# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception hierarchy shared by the selection, guard, and run layers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .workflow import Snapshot


class LintStagedError(RuntimeError):
    """Base class for fatal errors that abort a run."""

    exit_code: int = 1


class ConfigurationInvalid(LintStagedError):
    """Raised when the mode, configuration, or a command spec is malformed."""


class ConfigNotFound(ConfigurationInvalid):
    """Raised when no configuration source could be located."""


class SelectionFailed(LintStagedError):
    """Raised when git could not enumerate the files for the selected mode."""


class NotAGitDirectory(SelectionFailed):
    """Raised when the working directory is not inside a git working tree."""


class GuardError(LintStagedError):
    """Base class for working-tree guard failures."""


class GuardStateError(GuardError):
    """Raised when a guard transition is requested from the wrong state."""


class SnapshotFailed(GuardError):
    """Raised when unstaged changes could not be set aside before running tasks."""

    def __init__(self, message: str, *, backup: str | None = None) -> None:
        """Initialise the error with the optional backup stash handle.

        Args:
            message: Human-readable failure description.
            backup: Commit hash of the backup stash when one was recorded.
        """

        super().__init__(message)
        self.backup = backup


class ReconcileFailed(GuardError):
    """Raised when unstaged changes could not be merged back after the run.

    The snapshot handle is kept on the exception so callers can point the user
    at the preserved backup instead of losing it.
    """

    def __init__(self, message: str, *, snapshot: Snapshot) -> None:
        """Initialise the error with the snapshot that could not be reconciled.

        Args:
            message: Human-readable failure description.
            snapshot: Snapshot handle preserved for manual recovery.
        """

        super().__init__(message)
        self.snapshot = snapshot


@dataclass(frozen=True, slots=True)
class ArgumentLengthWarning:
    """Non-fatal notice that the selected file list exceeds the platform limit."""

    length: int
    limit: int

    @property
    def message(self) -> str:
        """Return the user-facing warning text."""

        return (
            f"lintstaged generated an argument string of {self.length} characters, "
            "and commands might not run correctly on your platform. It is recommended to use "
            "functions as linters and split your command based on the number of staged files."
        )


__all__ = [
    "ArgumentLengthWarning",
    "ConfigNotFound",
    "ConfigurationInvalid",
    "GuardError",
    "GuardStateError",
    "LintStagedError",
    "NotAGitDirectory",
    "ReconcileFailed",
    "SelectionFailed",
    "SnapshotFailed",
]
