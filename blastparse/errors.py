"""
Parse Errors
============
Exception hierarchy raised by the header and alignment extractors.

Every error carries the absolute character offset into the report
buffer where the failure was detected, so the engine can translate it
into a line number for the user.
"""

from __future__ import annotations

from typing import Optional


class ReportParseError(Exception):
    """Base class for all report parsing failures."""

    def __init__(self, message: str, offset: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.offset = offset


class AnchorNotFound(ReportParseError):
    """A required literal marker is missing from the remaining input."""

    def __init__(self, token: str, offset: Optional[int] = None):
        super().__init__(f"Anchor not found: {token!r}", offset)
        self.token = token


class MalformedField(ReportParseError):
    """A captured field is present but unusable."""

    def __init__(self, field: str, text: str, offset: Optional[int] = None):
        super().__init__(f"Malformed {field}: {text!r}", offset)
        self.field = field
        self.text = text


class MalformedNumber(MalformedField):
    """A numeric field's digit run is absent, unparseable or out of range."""


class EndOfInput(ReportParseError):
    """No further record marker exists. Signals the end of the hit list."""

    def __init__(self, offset: Optional[int] = None):
        super().__init__("No further record marker", offset)


class MalformedRecord(ReportParseError):
    """
    A record started (its '>' marker was found) but could not be completed.

    Distinguished from EndOfInput: it means a truncated or corrupted
    record, and aborts the whole document.
    """

    def __init__(
        self,
        record_number: int,
        line: int,
        cause: ReportParseError,
    ):
        super().__init__(
            f"Record {record_number} (line {line}): {cause.message}",
            cause.offset,
        )
        self.record_number = record_number
        self.line = line
        self.cause = cause
