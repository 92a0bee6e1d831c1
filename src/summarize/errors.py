"""Exception types for summarize."""

from __future__ import annotations

from pathlib import Path


class SummarizeError(Exception):
    """Base error for summarize."""


class GlobParseError(SummarizeError, ValueError):
    """Raised when a glob expression cannot be compiled."""

    def __init__(self, raw: str, reason: str) -> None:
        super().__init__(f"could not parse glob '{raw}': {reason}")
        self.raw = raw
        self.reason = reason


class EmptyPatternError(GlobParseError):
    """Raised for an empty glob, or a bare `!` with nothing to negate."""

    def __init__(self, raw: str) -> None:
        super().__init__(raw, "empty pattern")


class WalkError(SummarizeError):
    """
    A per-entry traversal failure. Walk errors are yielded in place of the entry
    they concern and never abort the traversal.
    """

    action = "failed on"

    def __init__(self, path: Path, cause: OSError) -> None:
        super().__init__(f"{self.action} {path}: {cause.strerror or cause}")
        self.path = path
        self.cause = cause


class EnumerationError(WalkError):
    """Listing a directory failed."""

    action = "could not list directory"


class ReadError(WalkError):
    """Reading an admitted file failed."""

    action = "could not read file"


class ChannelClosed(SummarizeError):
    """The consuming end of a file stream went away."""


class ConfigError(SummarizeError):
    """Raised when a config file cannot be parsed."""


class ModelError(SummarizeError):
    """Raised when the language model request fails."""
