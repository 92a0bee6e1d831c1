"""Tests for config file loading and merging."""

from __future__ import annotations

from pathlib import Path

import pytest

from summarize.cli import _parse_args  # pyright: ignore[reportPrivateUsage]
from summarize.config import SummarizeConfig, find_config_file, load_config, merge_cli_with_config
from summarize.errors import ConfigError


def test_find_config_summarize_toml(tmp_path: Path) -> None:
    config_file = tmp_path / "summarize.toml"
    config_file.write_text("file-types = ['rs']\n")
    assert find_config_file(tmp_path) == config_file


def test_find_config_dot_summarize_toml_takes_precedence(tmp_path: Path) -> None:
    (tmp_path / "summarize.toml").write_text("file-types = ['rs']\n")
    dot_config = tmp_path / ".summarize.toml"
    dot_config.write_text("file-types = ['kt']\n")
    assert find_config_file(tmp_path) == dot_config


def test_find_config_pyproject_toml(tmp_path: Path) -> None:
    config_file = tmp_path / "pyproject.toml"
    config_file.write_text("[tool.summarize]\nmodel = 'gpt-4o'\n")
    assert find_config_file(tmp_path) == config_file


def test_find_config_pyproject_without_section_skipped(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text("[tool.ruff]\nline-length = 100\n")
    assert find_config_file(tmp_path) is None


def test_find_config_walks_up(tmp_path: Path) -> None:
    config_file = tmp_path / "summarize.toml"
    config_file.write_text("hidden = true\n")
    subdir = tmp_path / "sub" / "deep"
    subdir.mkdir(parents=True)
    assert find_config_file(subdir) == config_file


def test_load_config_sections_and_kebab_case(tmp_path: Path) -> None:
    config_file = tmp_path / "summarize.toml"
    config_file.write_text(
        "[discovery]\n"
        "file-types = ['rs', 'toml']\n"
        "globs = ['!**/tests/**']\n"
        "glob-mode = 'any'\n"
        "respect-ignore-files = false\n"
        "files-max-size = 4096\n"
        "unknown-key = 1\n"
        "[model]\n"
        "model = 'gpt-4o'\n"
        "api-base = 'http://localhost:8080/v1'\n"
    )
    config = load_config(config_file)
    assert config.file_types == ["rs", "toml"]
    assert config.globs == ["!**/tests/**"]
    assert config.glob_mode == "any"
    assert config.respect_ignore_files is False
    assert config.files_max_size == 4096
    assert config.model == "gpt-4o"
    assert config.api_base == "http://localhost:8080/v1"
    assert config.hidden is None


def test_load_config_pyproject(tmp_path: Path) -> None:
    config_file = tmp_path / "pyproject.toml"
    config_file.write_text("[tool.summarize]\nfile-types = ['py']\n")
    assert load_config(config_file).file_types == ["py"]


def test_load_config_invalid_toml(tmp_path: Path) -> None:
    config_file = tmp_path / "summarize.toml"
    config_file.write_text("file-types = [\n")
    with pytest.raises(ConfigError):
        load_config(config_file)


def test_merge_config_fills_unset_options() -> None:
    options, explicit = _parse_args([])
    config = SummarizeConfig(file_types=["rs"], model="gpt-4o", hidden=True)
    merge_cli_with_config(options, config, explicit)
    assert options.file_types == ["rs"]
    assert options.model == "gpt-4o"
    assert options.hidden is True


def test_merge_explicit_cli_flags_win() -> None:
    options, explicit = _parse_args(["-f", "kt", "--model", "gpt-4o-mini"])
    assert explicit == {"file_types", "model"}
    config = SummarizeConfig(file_types=["rs"], model="gpt-4o", globs=["*.kt"])
    merge_cli_with_config(options, config, explicit)
    assert options.file_types == ["kt"]
    assert options.model == "gpt-4o-mini"
    assert options.globs == ["*.kt"]


def test_merge_none_config_is_noop() -> None:
    options, explicit = _parse_args([])
    assert merge_cli_with_config(options, None, explicit) is options
    assert options.file_types == []


@pytest.mark.parametrize(
    ("line", "key"),
    [
        ("globs = 'README.md'", "globs"),
        ("file-types = ['rs', 3]", "file-types"),
        ("extend-exclude = 'drafts/'", "extend-exclude"),
        ("files-max-size = '10k'", "files-max-size"),
        ("files-max-size = -1", "files-max-size"),
        ("files-max-size = true", "files-max-size"),
        ("hidden = 'yes'", "hidden"),
        ("skip-errors = 1", "skip-errors"),
        ("glob-mode = 'some'", "glob-mode"),
        ("model = 'gpt-2'", "model"),
        ("api-base = 8080", "api-base"),
    ],
)
def test_load_config_rejects_wrong_types(tmp_path: Path, line: str, key: str) -> None:
    config_file = tmp_path / "summarize.toml"
    config_file.write_text(line + "\n")
    with pytest.raises(ConfigError, match=f"'{key}'") as exc:
        load_config(config_file)
    assert str(config_file) in str(exc.value)


def test_load_config_checks_values_inside_sections(tmp_path: Path) -> None:
    config_file = tmp_path / "summarize.toml"
    config_file.write_text("[discovery]\nglobs = '**/*.rs'\n")
    with pytest.raises(ConfigError, match="'globs' must be a list of strings"):
        load_config(config_file)


def test_load_config_unreadable_file(tmp_path: Path) -> None:
    not_a_file = tmp_path / "summarize.toml"
    not_a_file.mkdir()
    with pytest.raises(ConfigError, match="could not read config file"):
        load_config(not_a_file)


def test_load_config_snake_case_keys(tmp_path: Path) -> None:
    config_file = tmp_path / "summarize.toml"
    config_file.write_text("files_max_size = 10\nskip_errors = true\n")
    config = load_config(config_file)
    assert config.files_max_size == 10
    assert config.skip_errors is True


def test_find_config_broken_pyproject_skipped(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text("[tool.summarize\n")
    assert find_config_file(tmp_path) is None


def test_settings_lists_only_set_values() -> None:
    config = SummarizeConfig(globs=["*.rs"], hidden=False)
    assert config.settings() == {"globs": ["*.rs"], "hidden": False}
