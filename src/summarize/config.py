"""
Config files for summarize.

The nearest of `.summarize.toml`, `summarize.toml`, or a `pyproject.toml` with a
`[tool.summarize]` table is used, searching from the walk root upwards. Keys may
sit at the top level or inside `[discovery]` and `[model]` tables, and are written
in kebab-case. Every value is type-checked on load, so a bad setting fails before
any file is read. Explicit CLI flags override config values, which override the
built-in defaults.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from summarize.errors import ConfigError
from summarize.file_walker import GlobMode
from summarize.llm import MODELS

if sys.version_info >= (3, 11):
    import tomllib  # pyright: ignore[reportUnreachable]
else:
    import tomli as tomllib  # type: ignore[no-redef]  # pyright: ignore[reportUnreachable]

logger = logging.getLogger(__name__)


@dataclass
class SummarizeConfig:
    """
    Settings read from a config file. `None` means the file does not set the
    value, so the CLI flag or built-in default applies.
    """

    file_types: list[str] | None = None
    globs: list[str] | None = None
    glob_mode: str | None = None
    respect_ignore_files: bool | None = None
    hidden: bool | None = None
    extend_exclude: list[str] | None = None
    files_max_size: int | None = None
    skip_errors: bool | None = None
    model: str | None = None
    api_base: str | None = None

    def settings(self) -> dict[str, Any]:
        """The values this config sets, by option name."""
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        return {name: value for name, value in values.items() if value is not None}


# Per directory, the first of these that applies wins.
_CONFIG_FILENAMES = (".summarize.toml", "summarize.toml", "pyproject.toml")

_SECTIONS = ("discovery", "model")


def _string_list(key: str, value: Any) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"'{key}' must be a list of strings, got {value!r}")
    return list(value)


def _boolean(key: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"'{key}' must be true or false, got {value!r}")
    return value


def _byte_count(key: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigError(f"'{key}' must be a non-negative number of bytes, got {value!r}")
    return value


def _string(key: str, value: Any) -> str:
    if not isinstance(value, str):
        raise ConfigError(f"'{key}' must be a string, got {value!r}")
    return value


def _glob_mode(key: str, value: Any) -> str:
    choices = [mode.value for mode in GlobMode]
    if value not in choices:
        raise ConfigError(f"'{key}' must be one of {choices}, got {value!r}")
    return value


def _model(key: str, value: Any) -> str:
    if value not in MODELS:
        raise ConfigError(f"'{key}' must be one of {list(MODELS)}, got {value!r}")
    return value


_CHECKS: dict[str, Callable[[str, Any], Any]] = {
    "file_types": _string_list,
    "globs": _string_list,
    "glob_mode": _glob_mode,
    "respect_ignore_files": _boolean,
    "hidden": _boolean,
    "extend_exclude": _string_list,
    "files_max_size": _byte_count,
    "skip_errors": _boolean,
    "model": _model,
    "api_base": _string,
}


def find_config_file(start_dir: Path) -> Path | None:
    """
    Return the config file that applies to `start_dir`, the walk root: the first
    match in `start_dir`, then in each parent up to the filesystem root.
    """
    start = start_dir.resolve()
    for directory in (start, *start.parents):
        for filename in _CONFIG_FILENAMES:
            candidate = directory / filename
            if not candidate.is_file():
                continue
            if filename != "pyproject.toml" or _has_summarize_table(candidate):
                return candidate
    return None


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except OSError as e:
        raise ConfigError(f"could not read config file {path}: {e.strerror or e}") from e
    except ValueError as e:
        # TOMLDecodeError, or bytes that are not UTF-8.
        raise ConfigError(f"invalid config file {path}: {e}") from e


def _has_summarize_table(pyproject: Path) -> bool:
    try:
        data = _read_toml(pyproject)
    except ConfigError:
        # Someone else's broken pyproject.toml is not ours to report.
        return False
    return isinstance(data.get("tool", {}).get("summarize"), dict)


def load_config(config_path: Path) -> SummarizeConfig:
    """
    Read and check a config file. Raises `ConfigError` naming the file when it
    can't be read, isn't valid TOML, or sets a value of the wrong type.
    """
    data = _read_toml(config_path)
    if config_path.name == "pyproject.toml":
        data = data.get("tool", {}).get("summarize", {})
    try:
        return _parse_config_data(data)
    except ConfigError as e:
        raise ConfigError(f"{config_path}: {e}") from e


def _parse_config_data(data: dict[str, Any]) -> SummarizeConfig:
    entries: list[tuple[str, Any]] = []
    for key, value in data.items():
        if key in _SECTIONS and isinstance(value, dict):
            entries.extend(value.items())
        else:
            entries.append((key, value))

    values: dict[str, Any] = {}
    for key, value in entries:
        name = key.replace("-", "_")
        check = _CHECKS.get(name)
        if check is None:
            logger.warning("Ignoring unknown config key '%s'", key)
            continue
        values[name] = check(key, value)
    return SummarizeConfig(**values)


def merge_cli_with_config(
    cli_opts: Any, config: SummarizeConfig | None, explicit_flags: set[str]
) -> Any:
    """
    Copy the config's settings onto `cli_opts`, except for options given
    explicitly on the command line. Returns `cli_opts`.
    """
    if config is None:
        return cli_opts
    for name, value in config.settings().items():
        if name not in explicit_flags:
            setattr(cli_opts, name, value)
    return cli_opts
