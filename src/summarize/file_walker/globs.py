"""
Shell-style glob patterns with negation and a recursive `**` wildcard.

Syntax:
- `*` matches any run of characters, including `/`
- `?` matches any single character
- `[abc]`, `[a-z]`, `[!abc]` match one character from (or not from) a class
- `**` as a whole path component matches zero or more path segments
- a leading `!` negates the whole pattern

A pattern without `**` matches either the full path or the file's base name, so
`README.md` matches a readme at any depth. A pattern with `**` is matched
against the full path only.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import PurePath

from summarize.errors import EmptyPatternError, GlobParseError

NEGATION_MARKER = "!"
RECURSIVE_WILDCARD = "**"


def _translate_class(expression: str, start: int) -> tuple[str, int]:
    """
    Translate the character class opening at `expression[start]` (a `[`).
    Returns the regex fragment and the index just past the closing `]`.
    """
    i = start + 1
    negate = False
    if i < len(expression) and expression[i] == "!":
        negate = True
        i += 1
    items: list[str] = []
    # A `]` directly after the opening bracket is a literal member.
    if i < len(expression) and expression[i] == "]":
        items.append(re.escape("]"))
        i += 1
    while i < len(expression) and expression[i] != "]":
        char = expression[i]
        if i + 2 < len(expression) and expression[i + 1] == "-" and expression[i + 2] != "]":
            low, high = char, expression[i + 2]
            if low > high:
                raise GlobParseError(expression, f"invalid range '{low}-{high}'")
            items.append(f"{re.escape(low)}-{re.escape(high)}")
            i += 3
        else:
            items.append(re.escape(char))
            i += 1
    if i >= len(expression):
        raise GlobParseError(expression, "unterminated character class")
    if not items:
        raise GlobParseError(expression, "empty character class")
    return f"[{'^' if negate else ''}{''.join(items)}]", i + 1


def translate(expression: str) -> str:
    """
    Translate a glob expression (without negation marker) into a regex source
    string suitable for `re.fullmatch`.
    """
    parts: list[str] = []
    i = 0
    n = len(expression)
    while i < n:
        char = expression[i]
        if char == "*":
            if expression.startswith(RECURSIVE_WILDCARD, i):
                at_start = i == 0 or expression[i - 1] == "/"
                end = i + len(RECURSIVE_WILDCARD)
                if not at_start or (end < n and expression[end] != "/"):
                    raise GlobParseError(
                        expression, "recursive wildcards must form a single path component"
                    )
                if end == n:
                    # Trailing `**` (or the whole pattern): anything at all.
                    parts.append(".*")
                    i = end
                else:
                    # `**/`: zero or more leading directories.
                    parts.append("(?:.*/)?")
                    i = end + 1
            else:
                parts.append(".*")
                i += 1
        elif char == "?":
            parts.append(".")
            i += 1
        elif char == "[":
            fragment, i = _translate_class(expression, i)
            parts.append(fragment)
        else:
            parts.append(re.escape(char))
            i += 1
    return "".join(parts)


@dataclass(frozen=True)
class Glob:
    """
    A parsed glob expression plus its negation flag. Build with `Glob.parse()`.
    """

    raw: str
    expression: str
    negate: bool
    regex: re.Pattern[str] = field(repr=False, compare=False)

    @classmethod
    def parse(cls, raw: str) -> Glob:
        negate = raw.startswith(NEGATION_MARKER)
        expression = raw[len(NEGATION_MARKER) :] if negate else raw
        if not expression:
            raise EmptyPatternError(raw)
        try:
            source = translate(expression)
        except GlobParseError as e:
            raise GlobParseError(raw, e.reason) from None
        regex = re.compile(source, re.DOTALL)
        return cls(raw=raw, expression=expression, negate=negate, regex=regex)

    @property
    def path_aware(self) -> bool:
        """True if this pattern only ever matches against the full path."""
        return RECURSIVE_WILDCARD in self.expression

    def matches(self, path: str | PurePath) -> bool:
        pure = PurePath(path)
        result = self.regex.fullmatch(pure.as_posix()) is not None
        if not result and not self.path_aware:
            result = self.regex.fullmatch(pure.name) is not None
        return not result if self.negate else result

    def __str__(self) -> str:
        return self.raw
