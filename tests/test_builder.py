# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for subtask construction."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import pytest

from lintstaged.errors import ConfigurationInvalid
from lintstaged.modes import SelectionMode
from lintstaged.tasks import DynamicCommand, LiteralCommand, PatternTaskGroup, build_tasks, normalize_command
from lintstaged.tasks.builder import RESTAGE_TITLE, check_argument_length, max_argument_length


def _group(tmp_path: Path, *commands: object, files: Sequence[str] = ("a.js", "b.js")) -> PatternTaskGroup:
    absolute = tuple(str(tmp_path / name) for name in files)
    specs = tuple(
        cmd if isinstance(cmd, (LiteralCommand, DynamicCommand)) else LiteralCommand(str(cmd)) for cmd in commands
    )
    return PatternTaskGroup(pattern="*.js", files=absolute, commands=specs)


def test_normalize_command_adds_fix_flag_for_known_tools() -> None:
    normalized = normalize_command("eslint --max-warnings=0")

    assert normalized.check == "eslint --max-warnings=0"
    assert normalized.fix == "eslint --fix --max-warnings=0"


def test_normalize_command_strips_configured_fix_flag_for_checks() -> None:
    normalized = normalize_command("prettier --write --single-quote")

    assert normalized.check == "prettier --single-quote"
    assert normalized.fix == "prettier --write --single-quote"


def test_normalize_command_leaves_unknown_tools_alone() -> None:
    normalized = normalize_command("mypy --strict")

    assert normalized.check == normalized.fix == "mypy --strict"


def test_modified_mode_runs_check_form_without_restage(tmp_path: Path) -> None:
    tasks = build_tasks(SelectionMode.MODIFIED, _group(tmp_path, "eslint --fix"), git_root=tmp_path, cwd=tmp_path)

    assert [task.title for task in tasks] == ["eslint"]
    assert tasks[0].invocation.args == ("eslint", str(tmp_path / "a.js"), str(tmp_path / "b.js"))


def test_staged_mode_runs_fix_form_and_restages(tmp_path: Path) -> None:
    tasks = build_tasks(
        SelectionMode.STAGED,
        _group(tmp_path, "stylelint", "mypy"),
        git_root=tmp_path,
        cwd=tmp_path,
    )

    assert [task.title for task in tasks] == ["stylelint --fix", "mypy", RESTAGE_TITLE]
    restage = tasks[-1].invocation
    assert restage.restage
    assert restage.cwd == tmp_path
    assert restage.args[:3] == ("git", "add", "--")
    assert restage.args[3:] == (str(tmp_path / "a.js"), str(tmp_path / "b.js"))


def test_restage_keeps_symlinked_paths_unresolved(tmp_path: Path) -> None:
    target = tmp_path / "target.js"
    target.write_text("x\n", encoding="utf-8")
    try:
        (tmp_path / "link.js").symlink_to(target)
    except OSError:
        pytest.skip("symlinks not supported")

    tasks = build_tasks(
        SelectionMode.STAGED,
        _group(tmp_path, "eslint", files=("sub/../link.js",)),
        git_root=tmp_path,
        cwd=tmp_path,
    )

    assert tasks[-1].invocation.args[3:] == (str(tmp_path / "link.js"),)


def test_git_commands_run_from_git_root(tmp_path: Path) -> None:
    cwd = tmp_path / "sub"
    tasks = build_tasks(SelectionMode.ALL, _group(tmp_path, "git diff --stat", "eslint"), git_root=tmp_path, cwd=cwd)

    assert tasks[0].invocation.cwd == tmp_path
    assert tasks[1].invocation.cwd == cwd


def test_skippable_group_builds_nothing(tmp_path: Path) -> None:
    group = _group(tmp_path, "eslint", files=())

    assert build_tasks(SelectionMode.STAGED, group, git_root=tmp_path, cwd=tmp_path) == []


def test_shell_mode_keeps_command_line_intact(tmp_path: Path) -> None:
    tasks = build_tasks(
        SelectionMode.ALL,
        _group(tmp_path, "echo start && cat", files=("my file.js",)),
        git_root=tmp_path,
        cwd=tmp_path,
        shell=True,
    )

    invocation = tasks[0].invocation
    assert invocation.shell
    assert invocation.shell_command == f"echo start && cat '{tmp_path / 'my file.js'}'"


def test_dynamic_command_controls_file_arguments(tmp_path: Path) -> None:
    def per_file(files: Sequence[str]) -> list[str]:
        return [f"eslint {name}" for name in files]

    group = _group(tmp_path, DynamicCommand(per_file))
    tasks = build_tasks(SelectionMode.STAGED, group, git_root=tmp_path, cwd=tmp_path)

    assert [task.invocation.args for task in tasks[:2]] == [
        ("eslint", "--fix", str(tmp_path / "a.js")),
        ("eslint", "--fix", str(tmp_path / "b.js")),
    ]
    assert [task.title for task in tasks[:2]] == ["eslint --fix [file]", "eslint --fix [file]"]


def test_dynamic_command_title_collapses_file_lists(tmp_path: Path) -> None:
    def joined(files: Sequence[str]) -> str:
        return f"tsc --noEmit {' '.join(files)}"

    tasks = build_tasks(SelectionMode.ALL, _group(tmp_path, DynamicCommand(joined)), git_root=tmp_path, cwd=tmp_path)

    assert tasks[0].title == "tsc --noEmit [file]"
    assert tasks[0].invocation.args[-2:] == (str(tmp_path / "a.js"), str(tmp_path / "b.js"))


def test_dynamic_command_title_uses_check_form_outside_fix_modes(tmp_path: Path) -> None:
    def fixing(files: Sequence[str]) -> str:
        return f"prettier --write {' '.join(files)}"

    tasks = build_tasks(SelectionMode.ALL, _group(tmp_path, DynamicCommand(fixing)), git_root=tmp_path, cwd=tmp_path)

    assert tasks[0].title == "prettier [file]"
    assert tasks[0].invocation.args[:1] == ("prettier",)


def test_dynamic_command_returning_garbage_is_rejected(tmp_path: Path) -> None:
    def broken(files: Sequence[str]) -> object:
        return 42

    with pytest.raises(ConfigurationInvalid, match="must return a command string"):
        build_tasks(SelectionMode.ALL, _group(tmp_path, DynamicCommand(broken)), git_root=tmp_path, cwd=tmp_path)


def test_argument_length_at_limit_does_not_warn() -> None:
    files = ["a" * 10, "b" * 9]

    assert check_argument_length(files, limit=20) is None


def test_argument_length_one_byte_over_limit_warns() -> None:
    files = ["a" * 10, "b" * 10]

    notice = check_argument_length(files, limit=20)

    assert notice is not None
    assert notice.length == 21
    assert "argument string of 21 characters" in notice.message


def test_max_argument_length_per_platform() -> None:
    assert max_argument_length("darwin") == 262144
    assert max_argument_length("win32") == 8191
    assert max_argument_length("linux") == 131072
