"""
Alignment Extractor
===================
Parses one hit record at a time from the text that follows the header.

Example record:

    >DNA-directed RNA polymerase II subunit RPB1 [Eschrichtius robustus]
    Sequence ID: MBV99095.1 Length: 1457
    Range 1: 160 to 195

    Score:78.6 bits(192), Expect:1e-10,

A record with no significant similarity stops after the length and is
immediately followed by the next '>' line.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from .errors import AnchorNotFound, EndOfInput, MalformedField
from .models import Alignment
from .scanner import INT64_MAX, Cursor, parse_float

logger = logging.getLogger(__name__)

# ─── Anchor Tokens ────────────────────────────────────────────────────────────

RECORD_MARKER = ">"
SEQUENCE_ID_ANCHOR = "Sequence ID: "
LENGTH_ANCHOR = " Length:"
RANGE_ANCHOR = "Range 1: "
RANGE_SEPARATOR = " to "
SCORE_ANCHOR = "Score:"
SCORE_TERMINATOR = " bits"
EXPECT_ANCHOR = "Expect:"
EXPECT_TERMINATOR = ","

# Wrapped name lines: the break and its surrounding whitespace
LINE_WRAP_PATTERN = re.compile(r"\s*\n\s*")


class AlignmentExtractor:
    """
    Anchor-driven extractor for a single hit record.

    The mandatory part of a record (marker, name, sequence ID, length)
    must parse or the record fails. Range, bit score and expect value
    form one optional block gated on the range line: without a range
    no statistics are read at all.
    """

    def parse(self, buffer: str) -> tuple[Alignment, str]:
        """
        Parse the next record in ``buffer``.

        Args:
            buffer: Unconsumed report text.

        Returns:
            The Alignment and the text remaining after it.

        Raises:
            EndOfInput: If no '>' marker remains.
            AnchorNotFound: If a mandatory anchor is missing.
            MalformedField: If a captured field is unusable.
        """
        alignment, cursor = self.parse_at(Cursor(buffer))
        return alignment, cursor.remainder

    def parse_at(self, cursor: Cursor) -> tuple[Alignment, Cursor]:
        """Cursor-based variant of :meth:`parse` used by the engine."""
        marker = cursor.find(RECORD_MARKER)
        if marker == -1:
            raise EndOfInput(cursor.pos)

        cursor = cursor.seek(marker).advance(len(RECORD_MARKER))
        record_end = cursor.record_end()

        name, cursor = cursor.take_until(SEQUENCE_ID_ANCHOR, record_end)
        cursor = cursor.tag(SEQUENCE_ID_ANCHOR)

        sequence_id, cursor = cursor.take_token()
        if not sequence_id:
            raise MalformedField("sequence ID", sequence_id, cursor.pos)

        cursor = cursor.tag(LENGTH_ANCHOR).skip_whitespace()
        target_length, cursor = cursor.digits("target length")

        fields = {
            "target_name": self._clean_name(name),
            "sequence_id": sequence_id,
            "target_length": target_length,
        }

        if self._ends_without_statistics(cursor):
            logger.debug(f"Record {sequence_id}: no alignment statistics")
            return Alignment(**fields), cursor

        statistics, cursor = self._parse_statistics(cursor, record_end)
        alignment = Alignment(**fields, **statistics)
        logger.debug(
            f"Record {sequence_id}: range={alignment.range} "
            f"score={alignment.score} expect={alignment.expect_value}"
        )
        return alignment, cursor

    # ─── Mandatory Part Helpers ───────────────────────────────────────────

    @staticmethod
    def _clean_name(name: str) -> str:
        return LINE_WRAP_PATTERN.sub(" ", name.strip())

    @staticmethod
    def _ends_without_statistics(cursor: Cursor) -> bool:
        # Blank lines before the next marker fall through to the range attempt
        return cursor.startswith("\n" + RECORD_MARKER) or cursor.startswith(
            "\r\n" + RECORD_MARKER
        )

    # ─── Optional Statistics Block ────────────────────────────────────────

    def _parse_statistics(
        self, cursor: Cursor, record_end: int
    ) -> tuple[dict, Cursor]:
        hit_range, cursor = self._parse_range(cursor)
        if hit_range is None:
            return {}, cursor

        score, cursor = self._parse_score(cursor, record_end)
        expect_value, cursor = self._parse_expect(cursor, record_end)
        return {
            "range": hit_range,
            "score": score,
            "expect_value": expect_value,
        }, cursor

    def _parse_range(
        self, cursor: Cursor
    ) -> tuple[Optional[tuple[int, int]], Cursor]:
        """
        Attempt "\\nRange 1: <start> to <end>".

        Without the "Range 1: " line nothing is consumed. Once that line is
        matched the coordinates are mandatory.
        """
        try:
            attempt = cursor.newline().tag(RANGE_ANCHOR).skip_whitespace()
        except AnchorNotFound:
            return None, cursor

        start, attempt = attempt.digits("range start", INT64_MAX)
        attempt = attempt.tag(RANGE_SEPARATOR).skip_whitespace()
        end, attempt = attempt.digits("range end", INT64_MAX)
        return (start, end), attempt

    def _parse_score(
        self, cursor: Cursor, record_end: int
    ) -> tuple[Optional[float], Cursor]:
        index = cursor.find(SCORE_ANCHOR, record_end)
        if index == -1:
            return None, cursor

        value = cursor.seek(index).tag(SCORE_ANCHOR)
        text, cursor = value.take_until(SCORE_TERMINATOR, record_end)
        return parse_float("bit score", text, value.pos), cursor

    def _parse_expect(
        self, cursor: Cursor, record_end: int
    ) -> tuple[Optional[float], Cursor]:
        index = cursor.find(EXPECT_ANCHOR, record_end)
        if index == -1:
            return None, cursor

        value = cursor.seek(index).tag(EXPECT_ANCHOR).skip_whitespace()
        text, cursor = value.take_until(EXPECT_TERMINATOR, record_end)
        return parse_float("expect value", text, value.pos), cursor
