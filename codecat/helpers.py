"""Shared helpers: glob matching, extension sets, size formatting, output blocks."""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from functools import lru_cache

logger = logging.getLogger(__name__)


class PatternError(ValueError):
    """Raised for a malformed glob pattern."""


class _Wild(enum.Enum):
    STAR = "*"
    ANY = "?"


@dataclass(frozen=True)
class _CharClass:
    negated: bool
    ranges: tuple[tuple[str, str], ...]

    def matches(self, ch: str) -> bool:
        hit = any(lo <= ch <= hi for lo, hi in self.ranges)
        return hit != self.negated


_Token = _Wild | _CharClass | str


def _class_char(pattern: str, i: int) -> tuple[str, int]:
    """Read one (possibly escaped) character inside a character class."""
    if i >= len(pattern) or pattern[i] in "-]":
        raise PatternError(f"syntax error in pattern: {pattern!r}")
    if pattern[i] == "\\":
        i += 1
        if i >= len(pattern):
            raise PatternError(f"syntax error in pattern: {pattern!r}")
    ch = pattern[i]
    i += 1
    if i >= len(pattern):
        raise PatternError(f"syntax error in pattern: {pattern!r}")
    return ch, i


@lru_cache(maxsize=1024)
def _parse(pattern: str) -> tuple[_Token, ...]:
    tokens: list[_Token] = []
    i = 0
    n = len(pattern)
    while i < n:
        c = pattern[i]
        if c == "*":
            if not tokens or tokens[-1] is not _Wild.STAR:
                tokens.append(_Wild.STAR)
            i += 1
        elif c == "?":
            tokens.append(_Wild.ANY)
            i += 1
        elif c == "[":
            i += 1
            negated = False
            if i < n and pattern[i] == "^":
                negated = True
                i += 1
            ranges: list[tuple[str, str]] = []
            while True:
                if i < n and pattern[i] == "]" and ranges:
                    i += 1
                    break
                lo, i = _class_char(pattern, i)
                hi = lo
                if pattern[i] == "-":
                    hi, i = _class_char(pattern, i + 1)
                ranges.append((lo, hi))
            tokens.append(_CharClass(negated, tuple(ranges)))
        elif c == "\\":
            i += 1
            if i >= n:
                raise PatternError(f"syntax error in pattern: {pattern!r}")
            tokens.append(pattern[i])
            i += 1
        else:
            tokens.append(c)
            i += 1
    return tuple(tokens)


def validate_pattern(pattern: str) -> None:
    """Raise PatternError if the glob pattern is malformed."""
    _parse(pattern)


def glob_match(pattern: str, name: str) -> bool:
    """Match name against a shell glob where '*' and '?' never cross '/'.

    Supports '*', '?', '[...]' classes with '^' negation and ranges, and
    backslash escapes. Raises PatternError for a malformed pattern.
    """
    tokens = _parse(pattern)
    size = len(name)

    @lru_cache(maxsize=None)
    def match_from(t: int, s: int) -> bool:
        if t == len(tokens):
            return s == size
        token = tokens[t]
        if token is _Wild.STAR:
            j = s
            while True:
                if match_from(t + 1, j):
                    return True
                if j == size or name[j] == "/":
                    return False
                j += 1
        if s == size:
            return False
        ch = name[s]
        if token is _Wild.ANY:
            ok = ch != "/"
        elif isinstance(token, _CharClass):
            ok = token.matches(ch)
        else:
            ok = ch == token
        return ok and match_from(t + 1, s + 1)

    return match_from(0, 0)


def matches_glob(target: str, patterns: Iterable[str]) -> str | None:
    """Return the first pattern that matches target, or None.

    Malformed patterns never match.
    """
    for pattern in patterns:
        try:
            if glob_match(pattern, target):
                return pattern
        except PatternError:
            continue
    return None


def process_extensions(ext_list: Iterable[str]) -> set[str]:
    """Normalise extension entries into a set of lower-case '.ext' strings.

    Entries may hold several comma-separated extensions.
    """
    processed: set[str] = set()
    for entry in ext_list:
        for part in entry.split(","):
            cleaned = part.lower().strip()
            if not cleaned:
                continue
            if not cleaned.startswith("."):
                cleaned = "." + cleaned
            if cleaned == ".":
                logger.warning(
                    "Ignoring invalid extension format '.' - use specific filenames "
                    "with -f for extensionless files. input_part=%r",
                    part,
                )
                continue
            processed.add(cleaned)
    logger.debug("Finished processing extensions: %s", sorted(processed))
    return processed


def format_bytes(size: int) -> str:
    """Format a byte count with binary (KiB, MiB, ...) units."""
    unit = 1024
    if size < unit:
        return f"{size} B"
    div, exp = unit, 0
    n = size // unit
    while n >= unit:
        div *= unit
        exp += 1
        n //= unit
    value = size / div
    prefix = "KMGTPE"[exp]
    if value == int(value):
        return f"{int(value)} {prefix}iB"
    return f"{value:.1f} {prefix}iB"


def format_file_block(marker: str, rel_path: str, content: str | bytes) -> str:
    """Return one file's block for the concatenated output."""
    if isinstance(content, bytes):
        content = content.decode("utf-8", errors="replace")
    logger.debug("Adding file content to output. path=%s size=%d", rel_path, len(content))
    return f"{marker} {rel_path}\n{content}{marker}\n"