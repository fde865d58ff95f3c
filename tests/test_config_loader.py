# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for configuration discovery and loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from lintstaged.config_loader import find_config, load_config
from lintstaged.errors import ConfigNotFound, ConfigurationInvalid
from lintstaged.tasks import DynamicCommand


def test_discovery_walks_up_from_cwd(tmp_path: Path) -> None:
    (tmp_path / ".lintstagedrc.toml").write_text('"*.js" = "eslint"\n', encoding="utf-8")
    nested = tmp_path / "src" / "pkg"
    nested.mkdir(parents=True)

    loaded = load_config(cwd=nested)

    assert loaded.source == (tmp_path / ".lintstagedrc.toml").resolve()
    assert list(loaded.config.linters) == ["*.js"]


def test_pyproject_without_tool_table_is_skipped(tmp_path: Path) -> None:
    project = tmp_path / "project"
    project.mkdir()
    (project / "pyproject.toml").write_text('[project]\nname = "demo"\n', encoding="utf-8")
    (tmp_path / "lintstaged.toml").write_text('[linters]\n"*.py" = ["ruff check"]\n', encoding="utf-8")

    assert find_config(project.resolve()) == (tmp_path / "lintstaged.toml").resolve()


def test_pyproject_tool_table_is_loaded(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text(
        '[tool.lintstaged]\nconcurrent = false\n\n[tool.lintstaged.linters]\n"*.py" = "ruff check"\n',
        encoding="utf-8",
    )

    loaded = load_config(cwd=tmp_path)

    assert loaded.config.concurrent is False
    assert [str(cmd) for cmd in loaded.config.linters["*.py"]] == ["ruff check"]


def test_rc_file_takes_precedence_in_same_directory(tmp_path: Path) -> None:
    (tmp_path / ".lintstagedrc.toml").write_text('"*.js" = "eslint"\n', encoding="utf-8")
    (tmp_path / "lintstaged.toml").write_text('"*.css" = "stylelint"\n', encoding="utf-8")

    assert list(load_config(cwd=tmp_path).config.linters) == ["*.js"]


def test_python_config_supports_dynamic_commands(tmp_path: Path) -> None:
    (tmp_path / "lintstaged_config.py").write_text(
        "def per_file(files):\n"
        "    return [f'eslint {name}' for name in files]\n"
        "\n"
        "config = {'*.js': per_file}\n",
        encoding="utf-8",
    )

    loaded = load_config(cwd=tmp_path)

    assert isinstance(loaded.config.linters["*.js"][0], DynamicCommand)


def test_python_config_without_mapping_is_invalid(tmp_path: Path) -> None:
    path = tmp_path / "lintstaged_config.py"
    path.write_text("config = ['eslint']\n", encoding="utf-8")

    with pytest.raises(ConfigurationInvalid, match="'config' mapping"):
        load_config(path)


def test_explicit_path_bypasses_discovery(tmp_path: Path) -> None:
    (tmp_path / ".lintstagedrc.toml").write_text('"*.js" = "eslint"\n', encoding="utf-8")
    explicit = tmp_path / "custom.toml"
    explicit.write_text('"*.md" = "markdownlint"\n', encoding="utf-8")

    assert list(load_config(explicit).config.linters) == ["*.md"]


def test_missing_explicit_path_raises_not_found(tmp_path: Path) -> None:
    with pytest.raises(ConfigNotFound, match="Config could not be found"):
        load_config(tmp_path / "missing.toml")


def test_invalid_toml_is_reported(tmp_path: Path) -> None:
    path = tmp_path / "broken.toml"
    path.write_text('"*.js" = \n', encoding="utf-8")

    with pytest.raises(ConfigurationInvalid, match="Could not parse"):
        load_config(path)
