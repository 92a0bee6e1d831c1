"""
summarize: collect the source files of a project and ask a language model to
summarize them.
"""

from summarize.file_walker import (
    DiscoveredFile,
    FileStream,
    FilterSet,
    Glob,
    GlobMode,
    Walker,
    WalkerConfig,
    find,
    stream,
)

__all__ = [
    "DiscoveredFile",
    "FileStream",
    "FilterSet",
    "Glob",
    "GlobMode",
    "Walker",
    "WalkerConfig",
    "find",
    "stream",
]
