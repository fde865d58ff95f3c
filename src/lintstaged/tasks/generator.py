# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Map configured glob patterns to the selected files they match."""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Iterable, Mapping, Sequence
from functools import lru_cache
from pathlib import Path
from typing import Final

import pathspec
from pathspec.patterns import GitWildMatchPattern

from .models import CommandSpec, PatternTaskGroup

LOGGER = logging.getLogger(__name__)

_BRACE_RE: Final[re.Pattern[str]] = re.compile(r"\{([^{}]*,[^{}]*)\}")
_NEGATION: Final[str] = "!"
_PARENT_PREFIX: Final[str] = "../"
_MATCH_ALL: Final[str] = "*"
# Suffix letting a wildmatch pattern also match everything below a directory it names.
_DIR_DESCENDANTS: Final[str] = "(?:(?P<ps_d>/).*)?"


class FilePathPattern(GitWildMatchPattern):
    """Wildmatch pattern that only matches a path by its own name.

    Plain gitignore semantics let ``*.js`` match ``lib.js/index.css`` through the
    parent directory. Selected files are always files, so that branch is dropped.
    """

    __slots__ = ()

    @classmethod
    def pattern_to_regex(cls, pattern: str) -> tuple[str | None, bool | None]:
        regex, include = super().pattern_to_regex(pattern)
        if isinstance(regex, str):
            regex = regex.replace(_DIR_DESCENDANTS, "")
        return regex, include


def expand_braces(pattern: str) -> list[str]:
    """Expand ``{a,b}`` alternations in ``pattern``.

    Args:
        pattern: Glob pattern possibly containing brace alternations.

    Returns:
        list[str]: One pattern per alternative, in declaration order.
    """

    match = _BRACE_RE.search(pattern)
    if match is None:
        return [pattern]
    head, tail = pattern[: match.start()], pattern[match.end() :]
    expanded: list[str] = []
    for option in match.group(1).split(","):
        expanded.extend(expand_braces(f"{head}{option}{tail}"))
    return expanded


@lru_cache(maxsize=256)
def compile_pattern(pattern: str, ignore: tuple[str, ...] = ()) -> pathspec.PathSpec:
    """Return a wildmatch spec for ``pattern`` with ``ignore`` entries negated.

    A pattern made only of negations matches every file except the negated ones.

    Args:
        pattern: Configured glob pattern.
        ignore: Global ignore globs applied after the pattern.

    Returns:
        pathspec.PathSpec: Compiled matcher.
    """

    lines = expand_braces(pattern)
    if all(line.startswith(_NEGATION) for line in lines):
        lines.insert(0, _MATCH_ALL)
    for entry in ignore:
        lines.extend(f"{_NEGATION}{line}" for line in expand_braces(entry.lstrip(_NEGATION)))
    return pathspec.PathSpec.from_lines(FilePathPattern, lines)


def _relative_to(path: str, base: Path) -> str:
    """Return ``path`` relative to ``base`` using forward slashes."""

    try:
        return Path(os.path.relpath(path, base)).as_posix()
    except ValueError:
        # Different drives on Windows; treat the file as outside ``base``.
        return f"{_PARENT_PREFIX}{Path(path).as_posix()}"


def generate_groups(
    linters: Mapping[str, Sequence[CommandSpec]],
    files: Iterable[str],
    *,
    git_root: Path,
    cwd: Path,
    relative: bool = False,
    ignore: Sequence[str] = (),
) -> list[PatternTaskGroup]:
    """Return one :class:`PatternTaskGroup` per configured pattern.

    Args:
        linters: Ordered mapping of glob pattern to commands.
        files: Git-root-relative files selected for the run.
        git_root: Top-level directory of the working tree.
        cwd: Directory the run was started from; patterns match relative to it.
        relative: Hand cwd-relative paths to commands instead of absolute ones.
        ignore: Global ignore globs applied to every pattern.

    Returns:
        list[PatternTaskGroup]: Groups in configuration order, including empty ones.
    """

    absolute = [os.path.normpath(git_root / entry) for entry in files]
    candidates = [(path, _relative_to(path, cwd)) for path in absolute]
    ignore_key = tuple(ignore)

    groups: list[PatternTaskGroup] = []
    for pattern, commands in linters.items():
        matcher = compile_pattern(pattern, ignore_key)
        include_parents = pattern.startswith(_PARENT_PREFIX)
        matched: list[str] = []
        for absolute_path, relative_path in candidates:
            if relative_path.startswith(_PARENT_PREFIX) and not include_parents:
                continue
            if matcher.match_file(relative_path):
                matched.append(relative_path if relative else absolute_path)
        LOGGER.debug("pattern=%s matched=%d", pattern, len(matched))
        groups.append(PatternTaskGroup(pattern=pattern, files=tuple(matched), commands=tuple(commands)))
    return groups


__all__ = ["FilePathPattern", "compile_pattern", "expand_braces", "generate_groups"]
