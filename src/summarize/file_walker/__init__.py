"""
Directory traversal and glob filtering, with a bounded asynchronous stream of
the admitted files.

Usage::

    from summarize.file_walker import FilterSet, find, stream

    filters = FilterSet.from_strings(extensions=["py"], globs=["!**/tests/**"])
    for item in find("src", filters):
        ...

    async with stream("src", filters) as files:
        async for item in files:
            ...

Items are `DiscoveredFile` values, or a `WalkError` in place of an entry that
could not be listed or read.
"""

from summarize.file_walker.bridge import FileStream, stream
from summarize.file_walker.defaults import DEFAULT_STREAM_CAPACITY
from summarize.file_walker.filters import FilterSet, GlobMode
from summarize.file_walker.globs import Glob
from summarize.file_walker.types import DiscoveredFile, WalkerConfig, WalkResult
from summarize.file_walker.walker import Walker, find

__all__ = [
    "DEFAULT_STREAM_CAPACITY",
    "DiscoveredFile",
    "FileStream",
    "FilterSet",
    "Glob",
    "GlobMode",
    "WalkResult",
    "Walker",
    "WalkerConfig",
    "find",
    "stream",
]
