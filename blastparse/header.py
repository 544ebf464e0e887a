"""
Header Extractor
================
Parses the one-time report preamble:

    Program: BLASTX
    Query: None ID: lcl|Query_60974(dna) Length: 2030

The query line is matched verbatim. Reports produced for a different
query identifier need a different ``QUERY_ANCHOR``, passed in through
``ParserConfig.query_anchor``.
"""

from __future__ import annotations

import logging

from .models import Header
from .scanner import Cursor

logger = logging.getLogger(__name__)

# ─── Format Constants ─────────────────────────────────────────────────────────

PROGRAM_ANCHOR = "Program: "
QUERY_ANCHOR = "Query: None ID: lcl|Query_60974(dna) Length: "


class HeaderExtractor:
    """Locates and parses the report header."""

    def __init__(self, query_anchor: str = QUERY_ANCHOR):
        self.query_anchor = query_anchor

    def parse(self, buffer: str) -> tuple[Header, str]:
        """
        Parse the header at the start of ``buffer``.

        Args:
            buffer: Full report text.

        Returns:
            The Header and the unconsumed text after the query length.

        Raises:
            AnchorNotFound: If "Program: " or the query line is missing.
            MalformedNumber: If the query length is absent or too large.
        """
        header, cursor = self.parse_at(Cursor(buffer))
        return header, cursor.remainder

    def parse_at(self, cursor: Cursor) -> tuple[Header, Cursor]:
        """Cursor-based variant of :meth:`parse` used by the engine."""
        cursor = cursor.skip_to(PROGRAM_ANCHOR).tag(PROGRAM_ANCHOR)
        program, cursor = cursor.take_until("\n")
        cursor = cursor.tag("\n").tag(self.query_anchor)
        query_length, cursor = cursor.digits("query length")

        header = Header(program=program.rstrip("\r"), query_length=query_length)
        logger.debug(
            f"Header: program={header.program} "
            f"query_length={header.query_length}"
        )
        return header, cursor
