# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the working-tree guard."""

from __future__ import annotations

from pathlib import Path

import pytest

from lintstaged.errors import GuardStateError, ReconcileFailed
from lintstaged.git import GitClient
from lintstaged.workflow import GuardState, WorkingTreeGuard, parse_porcelain

COMMITTED = "a\nb\nc\nd\ne\n"
STAGED = "A\nb\nc\nd\ne\n"
WORKING = "A\nb\nc\nd\nE\n"


@pytest.fixture
def partial_repo(git_repo: Path, git) -> Path:
    """Repository whose ``app.js`` has both staged and unstaged edits."""

    target = git_repo / "app.js"
    target.write_text(COMMITTED, encoding="utf-8")
    git(git_repo, "add", "app.js")
    git(git_repo, "commit", "--quiet", "-m", "add app")
    target.write_text(STAGED, encoding="utf-8")
    git(git_repo, "add", "app.js")
    target.write_text(WORKING, encoding="utf-8")
    return git_repo


def _guard(repo: Path) -> WorkingTreeGuard:
    guard = WorkingTreeGuard(GitClient(repo), enabled=True)
    guard.engage()
    return guard


def _read(repo: Path, name: str) -> str:
    return (repo / name).read_text(encoding="utf-8")


def test_parse_porcelain_skips_rename_sources() -> None:
    entries = parse_porcelain(["R  new.js", "old.js", "MM both.js", " D gone.js"])

    assert [(entry.path, entry.partially_staged) for entry in entries] == [
        ("new.js", False),
        ("both.js", True),
        ("gone.js", False),
    ]
    assert entries[2].deleted_in_worktree


def test_disabled_guard_is_a_no_op(git_repo: Path) -> None:
    guard = WorkingTreeGuard(GitClient(git_repo), enabled=False)
    guard.engage()

    assert guard.snapshot() is None
    assert guard.state is GuardState.IDLE


def test_no_partially_staged_files_skips_snapshot(git_repo: Path, git) -> None:
    (git_repo / "README.md").write_text("# staged\n", encoding="utf-8")
    git(git_repo, "add", "README.md")
    guard = _guard(git_repo)

    assert guard.snapshot() is None
    assert guard.state is GuardState.IDLE
    assert git(git_repo, "stash", "list") == ""


def test_snapshot_hides_unstaged_edits_until_reconcile(partial_repo: Path, git) -> None:
    guard = _guard(partial_repo)

    snapshot = guard.snapshot()

    assert snapshot is not None
    assert snapshot.partially_staged == ("app.js",)
    assert guard.state is GuardState.SNAPSHOTTED
    assert _read(partial_repo, "app.js") == STAGED
    assert git(partial_repo, "stash", "list") != ""

    guard.update()
    guard.reconcile()

    assert guard.state is GuardState.IDLE
    assert _read(partial_repo, "app.js") == WORKING
    assert git(partial_repo, "show", ":app.js") == STAGED
    assert git(partial_repo, "stash", "list") == ""


def test_task_fixes_are_carried_into_work_tree(partial_repo: Path, git) -> None:
    guard = _guard(partial_repo)
    guard.snapshot()
    fixed = "A\nb\nC\nd\ne\n"
    (partial_repo / "app.js").write_text(fixed, encoding="utf-8")
    git(partial_repo, "add", "app.js")

    guard.update()
    guard.reconcile()

    assert git(partial_repo, "show", ":app.js") == fixed
    assert _read(partial_repo, "app.js") == "A\nb\nC\nd\nE\n"


def test_conflicting_fix_keeps_backup_and_user_edits(partial_repo: Path, git) -> None:
    guard = _guard(partial_repo)
    snapshot = guard.snapshot()
    assert snapshot is not None and snapshot.backup
    (partial_repo / "app.js").write_text("A\nb\nc\nd\nX\n", encoding="utf-8")
    git(partial_repo, "add", "app.js")

    guard.update()
    with pytest.raises(ReconcileFailed) as excinfo:
        guard.reconcile()

    assert guard.state is GuardState.RECONCILE_FAILED
    assert excinfo.value.snapshot is snapshot
    assert snapshot.backup in str(excinfo.value)
    assert _read(partial_repo, "app.js") == WORKING
    assert snapshot.backup in git(partial_repo, "stash", "list", "--format=%H")


def test_unstaged_deletions_survive_the_round_trip(partial_repo: Path, git) -> None:
    (partial_repo / "notes.txt").write_text("keep\n", encoding="utf-8")
    git(partial_repo, "add", "notes.txt")
    git(partial_repo, "commit", "--quiet", "-m", "notes", "--", "notes.txt")
    (partial_repo / "notes.txt").unlink()

    guard = _guard(partial_repo)
    snapshot = guard.snapshot()

    assert snapshot is not None and snapshot.deleted == ("notes.txt",)
    assert (partial_repo / "notes.txt").exists()

    guard.update()
    guard.reconcile()

    assert not (partial_repo / "notes.txt").exists()
    assert git(partial_repo, "ls-files", "notes.txt") == "notes.txt\n"


def test_reconcile_without_snapshot_is_a_state_error(git_repo: Path) -> None:
    guard = WorkingTreeGuard(GitClient(git_repo), enabled=True)

    with pytest.raises(GuardStateError):
        guard.reconcile()
