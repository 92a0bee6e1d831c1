"""
Walker: recursive, ignore-file-aware traversal that loads the files a
`FilterSet` admits.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from pathlib import Path

from summarize.errors import EnumerationError, ReadError
from summarize.file_walker.defaults import VCS_DIRECTORIES
from summarize.file_walker.filters import FilterSet
from summarize.file_walker.ignore_files import IgnoreLayer, compile_rules, is_ignored
from summarize.file_walker.types import DiscoveredFile, WalkerConfig, WalkResult

logger = logging.getLogger(__name__)


class Walker:
    """
    Walks a directory tree with `os.walk()`, pruning hidden, version-control and
    ignored directories in place, and yields a `DiscoveredFile` for every file the
    filter set admits. Failures are yielded as `EnumerationError` / `ReadError`
    items and the walk carries on.

    Traversal order is whatever `os.walk()` produces: top-down, a directory's
    files before its subdirectories, no sorting.
    """

    def __init__(
        self, filters: FilterSet | None = None, config: WalkerConfig | None = None
    ) -> None:
        self._filters: FilterSet = filters if filters is not None else FilterSet()
        self._config: WalkerConfig = config if config is not None else WalkerConfig()

    def walk(self, root: str | Path) -> Iterator[WalkResult]:
        root = Path(root)
        # Ignore-rule chains per visited directory, root first.
        chains: dict[Path, list[IgnoreLayer]] = {root: self._base_layers(root)}
        enumeration_errors: list[EnumerationError] = []

        def on_error(err: OSError) -> None:
            failed = Path(err.filename) if err.filename else root
            enumeration_errors.append(EnumerationError(failed, err))

        for dirpath, dirnames, filenames in os.walk(
            root, onerror=on_error, followlinks=self._config.follow_links
        ):
            yield from enumeration_errors
            enumeration_errors.clear()

            current = Path(dirpath)
            chain = chains.pop(current, None)
            if chain is None:
                chain = []
            if self._config.respect_ignore_files:
                layer = IgnoreLayer.load(current)
                if layer is not None:
                    chain = [*chain, layer]

            # Prune in place so os.walk never descends into skipped directories.
            kept: list[str] = []
            for name in dirnames:
                if self._is_dir_skipped(name, current / name, chain):
                    logger.debug("Skipping directory %s", current / name)
                    continue
                kept.append(name)
                chains[current / name] = chain
            dirnames[:] = kept

            for filename in filenames:
                item = self._visit_file(current / filename, chain)
                if item is not None:
                    yield item

        yield from enumeration_errors

    def _base_layers(self, root: Path) -> list[IgnoreLayer]:
        """Extra exclusions form the lowest-precedence layer, rooted at the walk root."""
        spec = compile_rules(self._config.extra_excludes)
        if spec is None:
            return []
        return [IgnoreLayer(root, (spec,))]

    def _is_dir_skipped(self, name: str, path: Path, chain: list[IgnoreLayer]) -> bool:
        if name in VCS_DIRECTORIES:
            return True
        if name.startswith(".") and not self._config.include_hidden:
            return True
        return is_ignored(chain, path, is_dir=True)

    def _visit_file(self, path: Path, chain: list[IgnoreLayer]) -> WalkResult | None:
        if path.name.startswith(".") and not self._config.include_hidden:
            return None
        if is_ignored(chain, path, is_dir=False):
            return None
        if path.is_dir():
            # Directories are never admitted.
            return None
        if not self._filters.admits(path):
            return None
        if self._exceeds_max_size(path):
            logger.debug("Skipping %s: larger than %d bytes", path, self._config.files_max_size)
            return None
        try:
            content = path.read_bytes()
        except OSError as e:
            return ReadError(path, e)
        logger.debug("Including %s [%d bytes]", path, len(content))
        return DiscoveredFile(path, content)

    def _exceeds_max_size(self, path: Path) -> bool:
        """Check if a file exceeds the configured max size. 0 = no limit."""
        if self._config.files_max_size == 0:
            return False
        try:
            return path.stat().st_size > self._config.files_max_size
        except OSError:
            # Let the read report the failure.
            return False


def find(
    root: str | Path, filters: FilterSet | None = None, config: WalkerConfig | None = None
) -> Iterator[WalkResult]:
    """Synchronously walk `root`, yielding admitted files and per-entry errors."""
    return Walker(filters, config).walk(root)
