# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the ``lintstaged`` command line."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from lintstaged.cli._run_cli_models import RunCLIOptions, parse_concurrency
from lintstaged.cli.app import app
from lintstaged.cli.shared import CLIError, build_cli_logger


def _write_config(repo: Path, patterns: dict[str, str]) -> None:
    lines = [f"{json.dumps(pattern)} = {json.dumps(command)}" for pattern, command in patterns.items()]
    (repo / ".lintstagedrc.toml").write_text("\n".join(lines) + "\n", encoding="utf-8")


def _script(tmp_path: Path, name: str, body: str) -> Path:
    path = tmp_path / name
    path.write_text(body, encoding="utf-8")
    return path


def test_passing_run_exits_zero(git_repo: Path, git, python_cmd, tmp_path: Path) -> None:
    checker = _script(tmp_path, "ok.py", "import sys\nsys.exit(0)\n")
    _write_config(git_repo, {"*.md": python_cmd(checker)})
    git(git_repo, "add", ".lintstagedrc.toml")

    result = CliRunner().invoke(app, ["--mode", "all", "--cwd", str(git_repo), "--no-emoji"])

    assert result.exit_code == 0, result.stdout
    assert "Running tasks for *.md" in result.stdout


def test_failing_run_prints_task_output(git_repo: Path, python_cmd, tmp_path: Path) -> None:
    checker = _script(tmp_path, "bad.py", "import sys\nprint('bad lint in', sys.argv[1:])\nsys.exit(1)\n")
    _write_config(git_repo, {"*.md": python_cmd(checker)})

    result = CliRunner().invoke(app, ["--mode", "all", "--cwd", str(git_repo), "--no-emoji"])

    assert result.exit_code == 1
    assert "bad lint in" in result.stdout
    assert "found some errors" in result.stdout


def test_quiet_success_prints_nothing_about_groups(git_repo: Path, python_cmd, tmp_path: Path) -> None:
    checker = _script(tmp_path, "ok.py", "")
    _write_config(git_repo, {"*.md": python_cmd(checker)})

    result = CliRunner().invoke(app, ["--mode", "all", "--cwd", str(git_repo), "--quiet", "--no-emoji"])

    assert result.exit_code == 0
    assert "Running tasks" not in result.stdout


def test_nothing_to_do_exits_zero(git_repo: Path) -> None:
    _write_config(git_repo, {"*.py": "ruff check"})

    result = CliRunner().invoke(app, ["--mode", "staged", "--cwd", str(git_repo), "--no-emoji"])

    assert result.exit_code == 0
    assert "No staged files match any of provided globs." in result.stdout


def test_missing_config_exits_one(git_repo: Path) -> None:
    result = CliRunner().invoke(app, ["--cwd", str(git_repo), "--no-emoji"])

    assert result.exit_code == 1
    assert "Config could not be found" in result.stdout


def test_invalid_mode_exits_one(git_repo: Path) -> None:
    _write_config(git_repo, {"*.md": "markdownlint"})

    result = CliRunner().invoke(app, ["--mode", "sometimes", "--cwd", str(git_repo), "--no-emoji"])

    assert result.exit_code == 1
    assert "Invalid mode" in result.stdout


def test_not_a_git_directory_exits_one(tmp_path: Path) -> None:
    project = tmp_path / "plain"
    project.mkdir()
    _write_config(project, {"*.md": "markdownlint"})

    result = CliRunner().invoke(app, ["--cwd", str(project), "--no-emoji"])

    assert result.exit_code == 1
    assert "not a git directory" in result.stdout


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(None, None), ("true", True), ("FALSE", False), ("0", 0), ("3", 3)],
)
def test_parse_concurrency(raw: str | None, expected: bool | int | None) -> None:
    assert parse_concurrency(raw) == expected


@pytest.mark.parametrize("raw", ["-1", "many"])
def test_parse_concurrency_rejects_invalid_values(raw: str) -> None:
    with pytest.raises(CLIError, match="--concurrent"):
        parse_concurrency(raw)


def test_skipped_groups_are_listed_without_debug(git_repo: Path, python_cmd, tmp_path: Path) -> None:
    checker = _script(tmp_path, "ok.py", "")
    _write_config(git_repo, {"*.md": python_cmd(checker), "*.py": python_cmd(checker)})

    result = CliRunner().invoke(app, ["--mode", "all", "--cwd", str(git_repo), "--no-emoji"])

    assert result.exit_code == 0, result.stdout
    assert "*.py [skipped] No tracked files match *.py" in result.stdout


def test_quiet_hides_skipped_groups(git_repo: Path, python_cmd, tmp_path: Path) -> None:
    checker = _script(tmp_path, "ok.py", "")
    _write_config(git_repo, {"*.md": python_cmd(checker), "*.py": python_cmd(checker)})

    result = CliRunner().invoke(app, ["--mode", "all", "--cwd", str(git_repo), "--no-emoji", "--quiet"])

    assert result.exit_code == 0
    assert "[skipped]" not in result.stdout


def test_no_color_flag_disables_ansi_output(git_repo: Path, python_cmd, tmp_path: Path) -> None:
    checker = _script(tmp_path, "bad.py", "import sys\nsys.exit(1)\n")
    _write_config(git_repo, {"*.md": python_cmd(checker)})

    result = CliRunner().invoke(app, ["--mode", "all", "--cwd", str(git_repo), "--no-color"])

    assert result.exit_code == 1
    assert "found some errors" in result.stdout
    assert "\x1b[" not in result.stdout


def test_no_color_reaches_logger_and_options(git_repo: Path) -> None:
    logger = build_cli_logger(emoji=False, no_color=True)
    options = RunCLIOptions.from_cli(
        mode="all",
        config=None,
        concurrent=None,
        relative=None,
        shell=None,
        quiet=False,
        debug=False,
        emoji=False,
        cwd=git_repo,
        color=False,
    )

    assert logger.use_color is False
    assert logger.console.no_color
    assert options.color is False
    assert build_cli_logger(emoji=False).use_color is None
