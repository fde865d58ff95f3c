# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Working-tree guard that sets aside unstaged edits while staged files are linted.

The guard is a small state machine owned by the run coordinator::

    idle -> snapshot_pending -> snapshotted -> reconciling -> idle
                     |                              |
                     v                              v
              snapshot_failed               reconcile_failed

While ``snapshotted`` the work tree holds exactly the staged content, so fixers
only ever see what is about to be committed. Reconciliation checks the user's
full work tree back out and carries any task fixes over on top of it. Before
anything is touched a backup stash is recorded; it is dropped only after a
successful reconciliation.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Final

from .errors import GuardStateError, ReconcileFailed, SnapshotFailed
from .git import GitClient, GitCommandError

LOGGER = logging.getLogger(__name__)

BACKUP_MESSAGE: Final[str] = "lintstaged automatic backup"
_UNCHANGED: Final[frozenset[str]] = frozenset({" ", "?", "!"})
_RENAME_CODES: Final[frozenset[str]] = frozenset({"R", "C"})


class GuardState(str, Enum):
    """Enumerate the guard lifecycle states."""

    IDLE = "idle"
    SNAPSHOT_PENDING = "snapshot_pending"
    SNAPSHOTTED = "snapshotted"
    RECONCILING = "reconciling"
    SNAPSHOT_FAILED = "snapshot_failed"
    RECONCILE_FAILED = "reconcile_failed"


@dataclass(frozen=True, slots=True)
class StatusEntry:
    """Single record from ``git status --porcelain``."""

    index: str
    worktree: str
    path: str

    @property
    def partially_staged(self) -> bool:
        """Return whether the file has both staged and unstaged changes."""

        return self.index not in _UNCHANGED and self.worktree not in _UNCHANGED

    @property
    def deleted_in_worktree(self) -> bool:
        """Return whether the file was removed from disk without staging the removal."""

        return self.worktree == "D"


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Handle to the unstaged changes set aside by the guard."""

    index_tree: str
    working_tree: str
    backup: str | None
    partially_staged: tuple[str, ...]
    deleted: tuple[str, ...] = ()

    def recovery_hint(self) -> str:
        """Return the git command that brings the original changes back."""

        if self.backup:
            return f"git stash apply --index {self.backup}"
        return f"git read-tree {self.working_tree} && git checkout-index -af"


def parse_porcelain(records: Sequence[str]) -> list[StatusEntry]:
    """Parse NUL separated ``git status --porcelain -z`` records.

    Args:
        records: Records produced by the status query.

    Returns:
        list[StatusEntry]: Parsed entries; rename sources are skipped.
    """

    entries: list[StatusEntry] = []
    iterator = iter(records)
    for record in iterator:
        if len(record) < 4:
            continue
        index, worktree, path = record[0], record[1], record[3:]
        if index in _RENAME_CODES:
            next(iterator, None)
        entries.append(StatusEntry(index=index, worktree=worktree, path=path))
    return entries


class WorkingTreeGuard:
    """Snapshot and restore unstaged changes around task execution."""

    def __init__(self, git: GitClient, *, enabled: bool) -> None:
        """Create a guard for the working tree behind ``git``.

        Args:
            git: Client rooted at the working tree.
            enabled: When ``False`` every transition is a no-op.
        """

        self._git = git
        self.enabled = enabled
        self._state = GuardState.IDLE
        self._snapshot: Snapshot | None = None
        self._updated_tree: str | None = None

    @property
    def state(self) -> GuardState:
        """Return the current lifecycle state."""

        return self._state

    def _require(self, *states: GuardState) -> None:
        if self._state not in states:
            expected = ", ".join(state.value for state in states)
            raise GuardStateError(f"guard is {self._state.value}; expected {expected}")

    def engage(self) -> None:
        """Move from ``idle`` to ``snapshot_pending``."""

        if not self.enabled:
            return
        self._require(GuardState.IDLE)
        self._state = GuardState.SNAPSHOT_PENDING

    def snapshot(self) -> Snapshot | None:
        """Set aside unstaged changes of partially staged files.

        Returns:
            Snapshot | None: Handle to the saved changes, or ``None`` when no
            file is partially staged and nothing had to be saved.

        Raises:
            SnapshotFailed: If git could not save the changes. The index is
                restored and any backup stash is left in place.
        """

        if not self.enabled:
            return None
        self._require(GuardState.SNAPSHOT_PENDING)
        try:
            status = parse_porcelain(self._git.run_z(["status", "--porcelain", "-z", "--untracked-files=no"]))
        except GitCommandError as exc:
            self._state = GuardState.SNAPSHOT_FAILED
            raise SnapshotFailed(f"Unable to inspect working tree status: {exc}") from exc

        partial = tuple(entry.path for entry in status if entry.partially_staged)
        if not partial:
            LOGGER.debug("no partially staged files found")
            self._state = GuardState.IDLE
            return None
        LOGGER.debug("partially staged files=%r", partial)

        index_tree: str | None = None
        backup: str | None = None
        try:
            index_tree = self._git.run(["write-tree"]).strip()
            backup = self._git.run(["stash", "create", BACKUP_MESSAGE]).strip() or None
            if backup:
                self._git.run(["stash", "store", "--quiet", "-m", BACKUP_MESSAGE, backup])
            self._git.run(["add", "--update"])
            working_tree = self._git.run(["write-tree"]).strip()
            self._git.run(["read-tree", index_tree])
            self._git.run(["checkout-index", "-af"])
        except GitCommandError as exc:
            self._state = GuardState.SNAPSHOT_FAILED
            self._restore_index(index_tree)
            hint = f" Your changes are saved in stash {backup}." if backup else ""
            raise SnapshotFailed(f"Unable to stash unstaged changes: {exc}.{hint}", backup=backup) from exc

        self._snapshot = Snapshot(
            index_tree=index_tree,
            working_tree=working_tree,
            backup=backup,
            partially_staged=partial,
            deleted=tuple(entry.path for entry in status if entry.deleted_in_worktree),
        )
        self._state = GuardState.SNAPSHOTTED
        return self._snapshot

    def update(self) -> None:
        """Record the index as left by the tasks so fixes survive reconciliation."""

        if self._snapshot is None:
            return
        self._require(GuardState.SNAPSHOTTED)
        try:
            self._updated_tree = self._git.run(["write-tree"]).strip()
        except GitCommandError as exc:
            LOGGER.debug("could not record task changes to the index: %s", exc)
            self._updated_tree = None

    def reconcile(self) -> None:
        """Restore the user's unstaged changes on top of the task output.

        Raises:
            ReconcileFailed: If the changes could not be restored cleanly. The
                backup stash is preserved and referenced by the exception.
        """

        self._require(GuardState.SNAPSHOTTED)
        snapshot = self._snapshot
        if snapshot is None:  # pragma: no cover - guarded by the state check
            raise GuardStateError("guard has no snapshot to reconcile")
        self._state = GuardState.RECONCILING
        try:
            self._git.run(["read-tree", snapshot.working_tree])
            self._git.run(["checkout-index", "-af"])
            self._remove_deleted(snapshot.deleted)
            updated = self._updated_tree
            if updated is None or updated == snapshot.index_tree:
                self._git.run(["read-tree", snapshot.index_tree])
            else:
                self._git.run(["read-tree", updated])
                self._apply_task_changes(snapshot.index_tree, updated)
        except (GitCommandError, OSError) as exc:
            self._state = GuardState.RECONCILE_FAILED
            raise ReconcileFailed(
                f"Unable to restore local changes: {exc}. Recover them with `{snapshot.recovery_hint()}`.",
                snapshot=snapshot,
            ) from exc

        self._drop_backup(snapshot.backup)
        self._snapshot = None
        self._updated_tree = None
        self._state = GuardState.IDLE

    def _apply_task_changes(self, index_tree: str, updated_tree: str) -> None:
        """Apply the diff between the original and task-updated index to the work tree."""

        diff = self._git.run(
            [
                "diff-tree",
                "-p",
                "--ignore-submodules",
                "--binary",
                "--no-color",
                "--no-ext-diff",
                "--unified=0",
                index_tree,
                updated_tree,
            ]
        )
        if not diff.strip():
            return
        patch = diff if diff.endswith("\n") else f"{diff}\n"
        self._git.run(["apply", "-v", "--whitespace=nowarn", "--recount", "--unidiff-zero"], input_text=patch)

    def _remove_deleted(self, paths: Iterable[str]) -> None:
        for path in paths:
            (self._git.root / Path(path)).unlink(missing_ok=True)

    def _restore_index(self, index_tree: str | None) -> None:
        if index_tree is None:
            return
        try:
            self._git.run(["read-tree", index_tree])
        except GitCommandError as exc:
            LOGGER.debug("could not restore index tree %s: %s", index_tree, exc)

    def _drop_backup(self, backup: str | None) -> None:
        """Drop the backup stash entry recorded for ``backup``."""

        if backup is None:
            return
        try:
            listing = self._git.run(["stash", "list", "--format=%gd %H"])
            for line in listing.splitlines():
                ref, _, commit = line.partition(" ")
                if commit.strip() == backup:
                    self._git.run(["stash", "drop", "--quiet", ref])
                    return
        except GitCommandError as exc:
            # The changes are already restored; a leftover stash entry is harmless.
            LOGGER.debug("could not drop backup stash %s: %s", backup, exc)


__all__ = [
    "BACKUP_MESSAGE",
    "GuardState",
    "Snapshot",
    "StatusEntry",
    "WorkingTreeGuard",
    "parse_porcelain",
]
