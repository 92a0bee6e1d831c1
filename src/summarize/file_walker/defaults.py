"""
Directory names pruned from every traversal, and the ignore files honored
along the way.
"""

from __future__ import annotations

# Version control metadata. Pruned even when hidden entries are included.
VCS_DIRECTORIES: frozenset[str] = frozenset({".git", ".hg", ".svn", ".bzr", "_darcs"})

# Ignore files read in each visited directory, highest precedence first.
IGNORE_FILENAMES: tuple[str, ...] = (".ignore", ".gitignore")

# Read-ahead between the walker thread and the consumer.
DEFAULT_STREAM_CAPACITY = 100
