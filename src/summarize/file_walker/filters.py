"""Extension and glob predicates combined into a single admission decision."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import PurePath

from summarize.file_walker.globs import Glob


class GlobMode(str, Enum):
    """
    How multiple globs combine. `ALL` requires every glob to accept a path;
    `ANY` (the older behavior) accepts a path if a single glob does.
    """

    ALL = "all"
    ANY = "any"


def file_extension(path: str | PurePath) -> str | None:
    """
    Characters after the last `.` of the final path segment, or `None` if the
    name has no dot or is a dot-file such as `.bashrc`.
    """
    name = PurePath(path).name
    stem, dot, ext = name.rpartition(".")
    if not dot or not stem:
        return None
    return ext


@dataclass(frozen=True)
class FilterSet:
    """
    File extensions are alternatives (any one admits); globs are constraints
    (all must accept, unless `glob_mode` is `ANY`). Empty lists admit everything.
    """

    extensions: tuple[str, ...] = ()
    globs: tuple[Glob, ...] = ()
    glob_mode: GlobMode = GlobMode.ALL

    @classmethod
    def from_strings(
        cls,
        extensions: Iterable[str] = (),
        globs: Iterable[str] = (),
        glob_mode: GlobMode = GlobMode.ALL,
    ) -> FilterSet:
        """Parse every glob up front. Raises `GlobParseError` on the first bad one."""
        return cls(
            extensions=tuple(extensions),
            globs=tuple(Glob.parse(g) for g in globs),
            glob_mode=glob_mode,
        )

    def extension_matches(self, path: str | PurePath) -> bool:
        if not self.extensions:
            return True
        ext = file_extension(path)
        return ext is not None and ext in self.extensions

    def globs_match(self, path: str | PurePath) -> bool:
        if not self.globs:
            return True
        if self.glob_mode is GlobMode.ANY:
            return any(g.matches(path) for g in self.globs)
        return all(g.matches(path) for g in self.globs)

    def admits(self, path: str | PurePath) -> bool:
        return self.extension_matches(path) and self.globs_match(path)
