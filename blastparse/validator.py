"""
Validation Engine
=================
Post-parse validation and reporting.

After parsing each report, generates a summary:
    - Total Alignments
    - Alignments With / Without Hits
    - Record Marker Count vs. Parsed Alignments
    - Duplicate Sequence IDs
    - Hits Missing Score / Expect Value
    - Best Bit Score and Expect Value

Never raises; problems are reported and logged.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Optional

from .models import BlastDocument, ValidationReport

logger = logging.getLogger(__name__)


class ValidationEngine:
    """
    Validates a parsed document and produces a report.
    """

    def validate(
        self,
        document: BlastDocument,
        record_marker_count: Optional[int] = None,
    ) -> ValidationReport:
        """
        Run full validation on a parsed document.

        Args:
            document: The parsed report.
            record_marker_count: Number of '>' markers seen after the
                header, when known.

        Returns:
            ValidationReport with all detected issues.
        """
        report = ValidationReport(record_marker_count=record_marker_count)

        alignments = document.alignments
        if record_marker_count is not None:
            report.marker_count_matches = record_marker_count == len(alignments)

        if not alignments:
            logger.warning("No alignments to validate")
            return report

        report.total_alignments = len(alignments)

        id_counts = Counter(a.sequence_id for a in alignments)
        report.duplicate_sequence_ids = sorted(
            seq_id for seq_id, count in id_counts.items() if count > 1
        )

        hits = document.hits()
        report.alignments_with_hits = len(hits)
        report.alignments_without_hits = len(alignments) - len(hits)

        report.hits_missing_score = [
            a.sequence_id for a in hits if a.score is None
        ]
        report.hits_missing_expect = [
            a.sequence_id for a in hits if a.expect_value is None
        ]

        scores = [a.score for a in hits if a.score is not None]
        expects = [a.expect_value for a in hits if a.expect_value is not None]
        report.best_score = max(scores) if scores else None
        report.best_expect_value = min(expects) if expects else None

        # Log summary
        logger.info("=" * 60)
        logger.info("VALIDATION REPORT")
        logger.info("=" * 60)
        logger.info(f"Program: {document.header.program}")
        logger.info(f"Total Alignments: {report.total_alignments}")
        logger.info(
            f"With Hits: {report.alignments_with_hits} "
            f"({report.hit_rate}%)"
        )
        logger.info(f"Without Hits: {report.alignments_without_hits}")
        if report.marker_count_matches is False:
            logger.warning(
                f"Record markers ({record_marker_count}) do not match "
                f"parsed alignments ({report.total_alignments})"
            )
        logger.info(
            f"Duplicate Sequence IDs: {len(report.duplicate_sequence_ids)}"
        )
        logger.info(f"Hits Missing Score: {len(report.hits_missing_score)}")
        logger.info(f"Hits Missing Expect: {len(report.hits_missing_expect)}")
        logger.info(f"Best Bit Score: {report.best_score}")
        logger.info(f"Best Expect Value: {report.best_expect_value}")
        logger.info("=" * 60)

        return report
