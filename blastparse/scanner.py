"""
Cursor Scanner
==============
Immutable forward-moving cursor over a report buffer.

Every operation returns a new Cursor and leaves the original untouched,
so an optional sub-parse can be attempted against the current position
and simply discarded on failure:

    try:
        attempt = cursor.newline().tag("Range 1: ")
    except ReportParseError:
        attempt = None  # cursor is still where it was
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from .errors import AnchorNotFound, MalformedNumber

# ─── Patterns & Limits ────────────────────────────────────────────────────────

DIGITS_PATTERN = re.compile(r"[0-9]+")
WHITESPACE_PATTERN = re.compile(r"\s*")
HORIZONTAL_SPACE_PATTERN = re.compile(r"[ \t]*")
NON_SPACE_PATTERN = re.compile(r"\S*")

# Decimal, optional fraction, optional exponent: "78.6", "1e-10", "0.0", ".5"
FLOAT_PATTERN = re.compile(
    r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$"
)

INT32_MAX = 2**31 - 1
INT64_MAX = 2**63 - 1

# A record starts on a line whose first character is '>'
RECORD_BREAK = "\n>"


def parse_float(field: str, text: str, offset: Optional[int] = None) -> float:
    """Parse a floating-point literal, rejecting anything but plain numbers."""
    candidate = text.strip()
    if not FLOAT_PATTERN.match(candidate):
        raise MalformedNumber(field, text, offset)
    return float(candidate)


@dataclass(frozen=True)
class Cursor:
    """A position within an immutable text buffer."""

    text: str
    pos: int = 0

    # ─── Inspection ───────────────────────────────────────────────────────

    @property
    def remainder(self) -> str:
        return self.text[self.pos:]

    def startswith(self, literal: str) -> bool:
        return self.text.startswith(literal, self.pos)

    def find(self, token: str, limit: Optional[int] = None) -> int:
        """Absolute index of the next ``token`` before ``limit``, or -1."""
        end = len(self.text) if limit is None else limit
        return self.text.find(token, self.pos, end)

    def record_end(self) -> int:
        """Index of the next line that opens a record, or the buffer end."""
        index = self.text.find(RECORD_BREAK, self.pos)
        return len(self.text) if index == -1 else index

    def line_number(self) -> int:
        """1-based line number of the cursor position."""
        return self.text.count("\n", 0, self.pos) + 1

    # ─── Movement ─────────────────────────────────────────────────────────

    def advance(self, count: int) -> Cursor:
        return Cursor(self.text, min(self.pos + count, len(self.text)))

    def seek(self, pos: int) -> Cursor:
        return Cursor(self.text, pos)

    def skip_to(self, token: str, limit: Optional[int] = None) -> Cursor:
        """
        Move to the next occurrence of ``token`` (not past it).

        Raises:
            AnchorNotFound: If ``token`` does not occur before ``limit``.
        """
        index = self.find(token, limit)
        if index == -1:
            raise AnchorNotFound(token, self.pos)
        return self.seek(index)

    def take_until(
        self, token: str, limit: Optional[int] = None
    ) -> tuple[str, Cursor]:
        """Capture text up to (not including) the next ``token``."""
        target = self.skip_to(token, limit)
        return self.text[self.pos:target.pos], target

    def tag(self, literal: str) -> Cursor:
        """
        Consume ``literal`` exactly at the cursor.

        Raises:
            AnchorNotFound: If the buffer does not continue with ``literal``.
        """
        if not self.startswith(literal):
            raise AnchorNotFound(literal, self.pos)
        return self.advance(len(literal))

    def skip_whitespace(self) -> Cursor:
        match = WHITESPACE_PATTERN.match(self.text, self.pos)
        return self.seek(match.end())

    def newline(self) -> Cursor:
        """Consume trailing spaces/tabs and one line terminator."""
        pos = HORIZONTAL_SPACE_PATTERN.match(self.text, self.pos).end()
        cursor = self.seek(pos)
        if cursor.startswith("\r\n"):
            return cursor.advance(2)
        return cursor.tag("\n")

    # ─── Captures ─────────────────────────────────────────────────────────

    def take_token(self) -> tuple[str, Cursor]:
        """Capture a run of non-whitespace characters (possibly empty)."""
        match = NON_SPACE_PATTERN.match(self.text, self.pos)
        return match.group(0), self.seek(match.end())

    def digits(self, field: str, max_value: int = INT32_MAX) -> tuple[int, Cursor]:
        """
        Capture a maximal run of ASCII decimal digits as an integer.

        Raises:
            MalformedNumber: If no digit follows or the value exceeds
                ``max_value``.
        """
        match = DIGITS_PATTERN.match(self.text, self.pos)
        if not match:
            raise MalformedNumber(field, self.text[self.pos:self.pos + 20], self.pos)
        value = int(match.group(0))
        if value > max_value:
            raise MalformedNumber(field, match.group(0), self.pos)
        return value, self.seek(match.end())
