# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models for lintstaged."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, Final

from pydantic import BaseModel, ConfigDict, Field, PlainValidator, ValidationError, field_validator, model_validator

from .errors import ConfigurationInvalid
from .tasks.models import CommandSpec, as_command_spec

LINTERS_KEY: Final[str] = "linters"
# Option keys only valid alongside a ``linters`` table.
_OPTION_KEYS: Final[frozenset[str]] = frozenset({"ignore", "concurrent", "relative", "shell"})


def _validate_command(value: Any) -> CommandSpec:
    """Return ``value`` as a command spec, reporting bad entries as validation errors."""

    try:
        return as_command_spec(value)
    except TypeError as exc:
        raise ValueError(str(exc)) from exc


CommandField = Annotated[Any, PlainValidator(_validate_command)]


class LintStagedConfig(BaseModel):
    """Validated configuration: pattern to command mapping plus run options."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    linters: dict[str, tuple[CommandField, ...]] = Field(default_factory=dict)
    ignore: tuple[str, ...] = ()
    concurrent: bool | int = True
    relative: bool = False
    shell: bool = False

    @field_validator("linters", mode="before")
    @classmethod
    def _wrap_single_commands(cls, value: Any) -> Any:
        """Accept a single command per pattern as shorthand for a one-item list."""

        if not isinstance(value, Mapping):
            raise ValueError("linters must be a mapping of glob patterns to commands")
        wrapped: dict[Any, Any] = {}
        for pattern, commands in value.items():
            if not isinstance(pattern, str) or not pattern.strip():
                raise ValueError(f"invalid glob pattern: {pattern!r}")
            entries = commands if isinstance(commands, (list, tuple)) else [commands]
            if not entries:
                raise ValueError(f"pattern {pattern!r} has no commands")
            wrapped[pattern] = tuple(entries)
        return wrapped

    @field_validator("ignore", mode="before")
    @classmethod
    def _coerce_ignore(cls, value: Any) -> Any:
        if isinstance(value, str):
            return (value,)
        return value

    @field_validator("concurrent")
    @classmethod
    def _check_concurrent(cls, value: bool | int) -> bool | int:
        if not isinstance(value, bool) and value < 0:
            raise ValueError("concurrent must be a boolean or a non-negative integer")
        return value

    @model_validator(mode="after")
    def _require_linters(self) -> LintStagedConfig:
        if not self.linters:
            raise ValueError("configuration must define at least one glob pattern")
        return self


def parse_config(raw: Mapping[str, Any]) -> LintStagedConfig:
    """Validate a raw configuration mapping.

    Both the simple form (``{"*.js": "eslint"}``) and the advanced form
    (``{"linters": {...}, "ignore": [...], "concurrent": 2}``) are accepted.

    Args:
        raw: Mapping loaded from a configuration source.

    Returns:
        LintStagedConfig: Validated configuration.

    Raises:
        ConfigurationInvalid: If the mapping is malformed.
    """

    if not isinstance(raw, Mapping):
        raise ConfigurationInvalid("Configuration must be a table or mapping")
    if LINTERS_KEY in raw:
        payload: dict[str, Any] = dict(raw)
    elif _OPTION_KEYS.intersection(raw):
        raise ConfigurationInvalid("Options such as 'ignore' or 'concurrent' require a 'linters' table")
    else:
        payload = {LINTERS_KEY: dict(raw)}
    try:
        return LintStagedConfig.model_validate(payload)
    except ValidationError as exc:
        raise ConfigurationInvalid(f"Invalid configuration:\n{exc}") from exc


__all__ = ["LintStagedConfig", "parse_config"]
