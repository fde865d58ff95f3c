# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Thin git command layer used by file selection and the working-tree guard."""

from __future__ import annotations

import logging
import shlex
from collections.abc import Sequence
from pathlib import Path

from .errors import NotAGitDirectory
from .process import CommandOptions, CommandRunner, SubprocessExecutionError, run_command

LOGGER = logging.getLogger(__name__)


class GitCommandError(RuntimeError):
    """Raised when a git command exits with a non-zero status."""

    def __init__(self, args: Sequence[str], returncode: int, stderr: str | None) -> None:
        detail = (stderr or "").strip() or "<no output>"
        super().__init__(f"git {shlex.join(args)} failed with exit code {returncode}: {detail}")
        self.args_list = tuple(args)
        self.returncode = returncode
        self.stderr = stderr


class GitClient:
    """Execute git commands rooted at a working tree."""

    def __init__(self, root: Path, *, runner: CommandRunner | None = None) -> None:
        """Create a client for the working tree at ``root``.

        Args:
            root: Top-level directory of the git working tree.
            runner: Optional command runner; defaults to :func:`run_command`.
        """

        self.root = root
        self._runner = runner or run_command

    def run(self, args: Sequence[str], *, input_text: str | None = None) -> str:
        """Run ``git <args>`` and return its stdout.

        Args:
            args: Arguments passed after the ``git`` executable.
            input_text: Optional payload written to the command's stdin.

        Returns:
            str: Captured standard output.

        Raises:
            GitCommandError: If git exits with a non-zero status or cannot be started.
        """

        command = ["git", *args]
        LOGGER.debug("running command=%r cwd=%s", shlex.join(command), self.root)
        options = CommandOptions(cwd=self.root, check=True, capture_output=True, input=input_text)
        try:
            completed = self._runner(command, options=options)
        except SubprocessExecutionError as exc:
            raise GitCommandError(args, exc.returncode, exc.stderr) from exc
        except OSError as exc:
            raise GitCommandError(args, 127, str(exc)) from exc
        if completed.returncode != 0:
            raise GitCommandError(args, completed.returncode, completed.stderr)
        return completed.stdout or ""

    def run_z(self, args: Sequence[str]) -> list[str]:
        """Run a ``-z`` git query and return its NUL separated records."""

        return [entry for entry in self.run(args).split("\0") if entry]

    @classmethod
    def discover(cls, cwd: Path, *, runner: CommandRunner | None = None) -> GitClient:
        """Return a client for the working tree containing ``cwd``.

        Args:
            cwd: Directory from which the run was started.
            runner: Optional command runner forwarded to the client.

        Returns:
            GitClient: Client rooted at the top level of the working tree.

        Raises:
            NotAGitDirectory: If ``cwd`` is not inside a git working tree.
        """

        probe = cls(cwd, runner=runner)
        try:
            top_level = probe.run(["rev-parse", "--show-toplevel"]).strip()
        except GitCommandError as exc:
            raise NotAGitDirectory("Current directory is not a git directory!") from exc
        if not top_level:
            raise NotAGitDirectory("Current directory is not a git directory!")
        root = Path(top_level).resolve()
        LOGGER.debug("resolved git root=%s", root)
        return cls(root, runner=runner)


__all__ = ["GitClient", "GitCommandError"]
