"""
Hierarchical `.ignore` / `.gitignore` handling using pathspec.

Each directory that holds ignore files contributes one `IgnoreLayer`. A path is
checked against the layers from the deepest directory up; the first layer with a
matching rule decides, so deeper rules override shallower ones. Inside a layer,
`.ignore` is consulted before `.gitignore`, and inside a file the last matching
rule wins, which is how a negated `!rule` re-includes a path.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

import pathspec

from summarize.file_walker.defaults import IGNORE_FILENAMES


def compile_rules(lines: Iterable[str]) -> pathspec.PathSpec | None:
    """Compile gitignore-syntax lines, or `None` if there are no rules."""
    rules = [line for line in lines if line.strip() and not line.strip().startswith("#")]
    if not rules:
        return None
    return pathspec.GitIgnoreSpec.from_lines(rules)


def load_ignore_file(path: Path) -> pathspec.PathSpec | None:
    """
    Read one ignore file and return a compiled `PathSpec`, or `None` if the file
    doesn't exist, can't be read, or is empty.
    """
    if not path.is_file():
        return None
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return None
    return compile_rules(text.splitlines())


def rule_decision(spec: pathspec.PathSpec, rel_path: str) -> bool | None:
    """
    `True` if the last rule matching `rel_path` ignores it, `False` if it
    re-includes it, `None` if no rule matches.
    """
    decision: bool | None = None
    for pattern in spec.patterns:
        if pattern.include is None:
            continue
        if pattern.match_file(rel_path) is not None:
            decision = pattern.include
    return decision


@dataclass(frozen=True)
class IgnoreLayer:
    """Rules rooted at `directory`, highest precedence first."""

    directory: Path
    specs: tuple[pathspec.PathSpec, ...]

    @classmethod
    def load(cls, directory: Path) -> IgnoreLayer | None:
        specs = [load_ignore_file(directory / name) for name in IGNORE_FILENAMES]
        found = tuple(spec for spec in specs if spec is not None)
        if not found:
            return None
        return cls(directory, found)

    def decision(self, path: Path, is_dir: bool) -> bool | None:
        try:
            rel = path.relative_to(self.directory).as_posix()
        except ValueError:
            return None
        if is_dir:
            # Directory-only rules such as `build/` need the trailing slash.
            rel += "/"
        for spec in self.specs:
            decided = rule_decision(spec, rel)
            if decided is not None:
                return decided
        return None


def is_ignored(layers: Sequence[IgnoreLayer], path: Path, is_dir: bool) -> bool:
    """Check `path` against a root-to-leaf chain of layers."""
    for layer in reversed(layers):
        decided = layer.decision(path, is_dir)
        if decided is not None:
            return decided
    return False
