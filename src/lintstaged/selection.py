# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Git-based file selection for each :class:`SelectionMode`."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Final

from .errors import SelectionFailed
from .git import GitClient, GitCommandError
from .modes import SelectionMode

LOGGER = logging.getLogger(__name__)

FileList = tuple[str, ...]

_TRACKED_QUERY: Final[tuple[str, ...]] = ("ls-files", "-z")
_MODIFIED_QUERY: Final[tuple[str, ...]] = ("diff", "--name-only", "-z", "--diff-filter=ACMR", "HEAD")
_STAGED_QUERY: Final[tuple[str, ...]] = ("diff", "--staged", "--name-only", "-z", "--diff-filter=ACMR")

_QUERIES: Final[dict[SelectionMode, tuple[str, ...]]] = {
    SelectionMode.ALL: _TRACKED_QUERY,
    SelectionMode.CI: _TRACKED_QUERY,
    SelectionMode.MODIFIED: _MODIFIED_QUERY,
    SelectionMode.STAGED: _STAGED_QUERY,
}


def unique_in_order(paths: Iterable[str]) -> FileList:
    """Return ``paths`` without duplicates, keeping first-seen order."""

    return tuple(dict.fromkeys(path for path in paths if path))


def select_files(mode: SelectionMode, git: GitClient) -> FileList:
    """Return the git-root-relative files eligible under ``mode``.

    Args:
        mode: Selection mode for the run.
        git: Client rooted at the working tree.

    Returns:
        FileList: Files in the order git enumerated them.

    Raises:
        SelectionFailed: If the underlying git query fails.
    """

    query = _QUERIES[mode]
    try:
        entries = git.run_z(query)
    except GitCommandError as exc:
        raise SelectionFailed(f"Unable to determine {mode.noun} files: {exc}") from exc
    files = unique_in_order(entries)
    LOGGER.debug("selected %d %s files", len(files), mode.noun)
    return files


__all__ = ["FileList", "select_files", "unique_in_order"]
