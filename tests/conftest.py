# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import shlex
import shutil
import subprocess
import sys
from collections.abc import Callable
from pathlib import Path

import pytest

GitRunner = Callable[..., str]


def run_git(repo: Path, *args: str) -> str:
    """Run ``git`` inside ``repo`` and return stdout."""

    completed = subprocess.run(
        ["git", *args],
        cwd=repo,
        check=True,
        capture_output=True,
        text=True,
    )
    return completed.stdout


def python_command(script: Path) -> str:
    """Return a command line running ``script`` with the current interpreter."""

    return f"{shlex.quote(sys.executable)} {shlex.quote(str(script))}"


@pytest.fixture(autouse=True)
def _isolated_git_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep user-level git configuration out of the test repositories."""

    home = tmp_path / "home"
    home.mkdir(exist_ok=True)
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Test User")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "test@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Test User")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "test@example.com")


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """Return a fresh repository holding one committed ``README.md``."""

    if shutil.which("git") is None:
        pytest.skip("git executable not available")
    repo = tmp_path / "repo"
    repo.mkdir()
    run_git(repo, "init", "--quiet")
    run_git(repo, "config", "user.name", "Test User")
    run_git(repo, "config", "user.email", "test@example.com")
    run_git(repo, "config", "commit.gpgsign", "false")
    run_git(repo, "config", "core.autocrlf", "false")
    (repo / "README.md").write_text("# demo\n", encoding="utf-8")
    run_git(repo, "add", "README.md")
    run_git(repo, "commit", "--quiet", "-m", "initial")
    return repo


@pytest.fixture
def git() -> GitRunner:
    """Return the :func:`run_git` helper for use inside tests."""

    return run_git


@pytest.fixture
def python_cmd() -> Callable[[Path], str]:
    """Return the :func:`python_command` helper for use inside tests."""

    return python_command
