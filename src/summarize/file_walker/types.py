"""Data types shared by the walker and the streaming bridge."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

from summarize.errors import WalkError


@dataclass(frozen=True)
class DiscoveredFile:
    """
    A file that passed filtering, with its full contents. `path` is joined onto
    the walk root, so it is absolute only if the root was.
    """

    path: Path
    content: bytes = field(repr=False)

    @property
    def text(self) -> str:
        """Contents decoded as UTF-8, with invalid bytes replaced."""
        return self.content.decode("utf-8", errors="replace")


# One traversal item: a file, or the error that took its place.
WalkResult = Union[DiscoveredFile, WalkError]


@dataclass
class WalkerConfig:
    """
    Traversal options.

    `extra_excludes` are gitignore-style patterns relative to the walk root, with
    lower precedence than any ignore file found in the tree.
    `files_max_size=0` disables the size limit.
    """

    respect_ignore_files: bool = True
    include_hidden: bool = False
    follow_links: bool = False
    extra_excludes: list[str] = field(default_factory=list)
    files_max_size: int = 0
