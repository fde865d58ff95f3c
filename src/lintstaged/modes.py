# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""File selection modes and the behaviour each one implies."""

from __future__ import annotations

from enum import Enum

from .errors import ConfigurationInvalid


class SelectionMode(str, Enum):
    """Enumerate the supported file selection modes."""

    ALL = "all"
    MODIFIED = "modified"
    STAGED = "staged"
    CI = "ci"

    @classmethod
    def parse(cls, raw: str | SelectionMode) -> SelectionMode:
        """Return the mode matching ``raw``.

        Args:
            raw: Mode name supplied by configuration or the CLI.

        Returns:
            SelectionMode: Matching enum member.

        Raises:
            ConfigurationInvalid: If ``raw`` does not name a known mode.
        """

        if isinstance(raw, SelectionMode):
            return raw
        try:
            return cls(str(raw).strip().lower())
        except ValueError as exc:
            choices = ", ".join(member.value for member in cls)
            raise ConfigurationInvalid(f"Invalid mode: {raw!r} (expected one of {choices})") from exc

    @property
    def should_fix(self) -> bool:
        """Return whether commands run in their fix form."""

        return self is SelectionMode.STAGED

    @property
    def should_restage(self) -> bool:
        """Return whether matched files are added back to the index after the commands."""

        return self is SelectionMode.STAGED

    @property
    def needs_guard(self) -> bool:
        """Return whether unstaged changes must be set aside around the run."""

        return self is SelectionMode.STAGED

    @property
    def noun(self) -> str:
        """Return the adjective used when describing selected files."""

        return {
            SelectionMode.ALL: "tracked",
            SelectionMode.MODIFIED: "modified",
            SelectionMode.STAGED: "staged",
            SelectionMode.CI: "tracked",
        }[self]


__all__ = ["SelectionMode"]
