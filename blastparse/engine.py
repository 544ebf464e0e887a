"""
Report Parser Engine
====================
Main orchestrator that combines header extraction, record extraction,
validation, and output formatting into a complete parsing pipeline.

Usage:
    engine = ParserEngine(config)
    result = engine.parse("path/to/report.txt")
    # result is a ParseResult with structured JSON output

Architecture:
    Report text → HeaderExtractor → AlignmentExtractor (repeated) →
    BlastDocument → ValidationEngine → ParseResult (JSON)
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from . import __version__
from .alignment import RECORD_MARKER, AlignmentExtractor
from .errors import EndOfInput, MalformedRecord, ReportParseError
from .header import QUERY_ANCHOR, HeaderExtractor
from .models import (
    BlastDocument,
    ParseResult,
    ParseVersion,
    ReportMetadata,
)
from .scanner import Cursor
from .validator import ValidationEngine

logger = logging.getLogger(__name__)

LOG_FORMAT = "[%(asctime)s] %(levelname)-8s %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass
class ParserConfig:
    """Configuration for the parser engine."""

    # Report format
    query_anchor: str = QUERY_ANCHOR

    # Output settings
    output_dir: str = "output"
    save_output: bool = False

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None


class ParserEngine:
    """
    Main report parsing engine.

    Orchestrates the full pipeline:
        1. Header extraction
        2. Record extraction until no '>' marker remains
        3. Validation
        4. Output formatting

    Holds no state between parses; one engine can parse many reports.
    """

    def __init__(self, config: Optional[ParserConfig] = None):
        self.config = config or ParserConfig()
        self._setup_logging()

    def _setup_logging(self):
        """Configure logging based on config."""
        log_level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        package_logger = logging.getLogger("blastparse")
        package_logger.setLevel(log_level)

        # Console handler
        consoles = [
            h for h in package_logger.handlers
            if type(h) is logging.StreamHandler
        ]
        if not consoles:
            console = logging.StreamHandler()
            console.setFormatter(
                logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
            )
            package_logger.addHandler(console)
            consoles = [console]
        for console in consoles:
            console.setLevel(log_level)

        # File handler
        if self.config.log_file:
            log_path = Path(self.config.log_file).resolve()
            already = any(
                isinstance(h, logging.FileHandler)
                and Path(h.baseFilename) == log_path
                for h in package_logger.handlers
            )
            if not already:
                log_path.parent.mkdir(parents=True, exist_ok=True)
                file_handler = logging.FileHandler(log_path, encoding="utf-8")
                file_handler.setLevel(log_level)
                file_handler.setFormatter(
                    logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
                )
                package_logger.addHandler(file_handler)

    # ─── Text Parsing ─────────────────────────────────────────────────────

    def parse_text(self, buffer: str) -> BlastDocument:
        """
        Parse a complete report held in memory.

        Args:
            buffer: Full report text.

        Returns:
            BlastDocument with the header and all records in file order.

        Raises:
            AnchorNotFound: If the header anchors are missing.
            MalformedNumber: If the query length is unusable.
            MalformedRecord: If a record starts but cannot be completed.
        """
        document, _ = self._parse_document(buffer)
        return document

    def _parse_document(self, buffer: str) -> tuple[BlastDocument, int]:
        """Parse ``buffer``, also returning the record marker count."""
        header_extractor = HeaderExtractor(query_anchor=self.config.query_anchor)
        header, cursor = header_extractor.parse_at(Cursor(buffer))
        marker_count = buffer.count(RECORD_MARKER, cursor.pos)

        extractor = AlignmentExtractor()
        alignments = []
        while True:
            try:
                alignment, cursor = extractor.parse_at(cursor)
            except EndOfInput:
                break
            except ReportParseError as e:
                record_number = len(alignments) + 1
                where = cursor if e.offset is None else cursor.seek(e.offset)
                error = MalformedRecord(record_number, where.line_number(), e)
                logger.error(str(error))
                raise error from e
            alignments.append(alignment)

        logger.debug(f"Extracted {len(alignments)} records")
        return BlastDocument(header=header, alignments=tuple(alignments)), marker_count

    # ─── File Parsing ─────────────────────────────────────────────────────

    def parse(self, report_path: str) -> ParseResult:
        """
        Parse a report file into a structured document.

        Args:
            report_path: Path to the text report.

        Returns:
            ParseResult containing the document, metadata, and validation.

        Raises:
            FileNotFoundError: If the report doesn't exist.
            UnicodeDecodeError: If the report is not UTF-8/ASCII text.
            ReportParseError: If the header or a record is malformed.
        """
        report_path = os.path.abspath(report_path)

        if not os.path.exists(report_path):
            raise FileNotFoundError(f"Report not found: {report_path}")

        start_time = time.time()
        logger.info(f"Starting parse of: {report_path}")

        # ── Step 1: Read report and compute metadata ──────────────────
        with open(report_path, "r", encoding="utf-8") as f:
            buffer = f.read()
        metadata = self._build_metadata(report_path)

        # ── Step 2: Header and records ────────────────────────────────
        logger.info("Phase 1: Record extraction")
        document, marker_count = self._parse_document(buffer)

        # ── Step 3: Validation ────────────────────────────────────────
        logger.info("Phase 2: Validation")
        validation = ValidationEngine().validate(document, marker_count)

        # ── Step 4: Build result ──────────────────────────────────────
        result = ParseResult(
            source=metadata,
            parse_version=ParseVersion(
                parser_version=__version__,
                record_marker_count=marker_count,
                alignment_count=document.alignment_count,
            ),
            document=document,
            validation=validation,
        )

        elapsed = time.time() - start_time
        logger.info(
            f"Parse complete in {elapsed:.2f}s: "
            f"{document.alignment_count} alignments extracted"
        )

        # ── Step 5: Save output ───────────────────────────────────────
        if self.config.save_output:
            output_dir = Path(self.config.output_dir)
            output_dir.mkdir(parents=True, exist_ok=True)
            output_file = output_dir / f"{Path(report_path).stem}_parsed.json"
            self._save_json(result, output_file)

        return result

    def _build_metadata(self, report_path: str) -> ReportMetadata:
        """Build source metadata from file info."""
        return ReportMetadata(
            source_file=os.path.basename(report_path),
            file_hash=self._compute_file_hash(report_path),
            file_size_bytes=os.path.getsize(report_path),
        )

    def _compute_file_hash(self, filepath: str) -> str:
        """Compute SHA-256 hash of a file."""
        sha256 = hashlib.sha256()
        with open(filepath, "rb") as f:
            for chunk in iter(lambda: f.read(8192), b""):
                sha256.update(chunk)
        return sha256.hexdigest()

    def _save_json(self, result: ParseResult, filepath: Path):
        """Save ParseResult to JSON file."""
        data = result.model_dump()
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False, default=str)
        logger.info(f"Saved JSON output: {filepath}")


def parse_report(buffer: str, config: Optional[ParserConfig] = None) -> BlastDocument:
    """Parse report text with a default (or given) configuration."""
    return ParserEngine(config).parse_text(buffer)
