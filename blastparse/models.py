"""
Data Models
===========
Pydantic models for the structured output of a BLAST text report parse.
All models are frozen once built and serialise to JSON via model_dump().
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator


# ─── Report Models ────────────────────────────────────────────────────────────


class Header(BaseModel):
    """The one-time report preamble."""
    model_config = ConfigDict(frozen=True)

    program: str = Field(description="Search program, e.g. BLASTX")
    query_length: int = Field(ge=0)


class Alignment(BaseModel):
    """
    One reported hit.

    A hit either carries full alignment statistics (range, bit score,
    expect value) or none of them at all.
    """
    model_config = ConfigDict(frozen=True)

    target_name: str
    sequence_id: str = Field(pattern=r"^\S+$")
    target_length: int = Field(ge=0)
    range: Optional[tuple[int, int]] = Field(
        default=None,
        description="Start/end coordinates on the subject sequence",
    )
    score: Optional[float] = Field(default=None, description="Bit score")
    expect_value: Optional[float] = None

    @model_validator(mode="after")
    def _statistics_need_range(self) -> Alignment:
        if self.range is None and (
            self.score is not None or self.expect_value is not None
        ):
            raise ValueError("score and expect_value require a range")
        return self

    @computed_field
    @property
    def has_hits(self) -> bool:
        return self.range is not None

    def model_dump(self, **kwargs):
        data = super().model_dump(**kwargs)
        if isinstance(data.get("range"), tuple):
            data["range"] = list(data["range"])
        return data


class BlastDocument(BaseModel):
    """A parsed report: one header and the hits in file order."""
    model_config = ConfigDict(frozen=True)

    header: Header
    alignments: tuple[Alignment, ...] = ()

    @computed_field
    @property
    def alignment_count(self) -> int:
        return len(self.alignments)

    def hits(self) -> list[Alignment]:
        """Alignments that carry statistics, in file order."""
        return [a for a in self.alignments if a.has_hits]

    def model_dump(self, **kwargs):
        data = super().model_dump(**kwargs)
        data["alignments"] = [a.model_dump(**kwargs) for a in self.alignments]
        return data


# ─── Run Models ───────────────────────────────────────────────────────────────


class ReportMetadata(BaseModel):
    """Metadata about the source report file."""
    source_file: str = ""
    file_hash: str = ""
    file_size_bytes: int = 0


class ParseVersion(BaseModel):
    """Version tracking for a parse run."""
    parser_version: str = "0.1.0"
    parse_timestamp: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    record_marker_count: int = 0
    alignment_count: int = 0


class ValidationReport(BaseModel):
    """Post-parse validation report."""
    total_alignments: int = 0
    alignments_with_hits: int = 0
    alignments_without_hits: int = 0
    record_marker_count: Optional[int] = None
    marker_count_matches: Optional[bool] = None
    duplicate_sequence_ids: list[str] = Field(default_factory=list)
    hits_missing_score: list[str] = Field(default_factory=list)
    hits_missing_expect: list[str] = Field(default_factory=list)
    best_score: Optional[float] = None
    best_expect_value: Optional[float] = None

    @computed_field
    @property
    def hit_rate(self) -> float:
        if self.total_alignments == 0:
            return 0.0
        return round(
            self.alignments_with_hits / self.total_alignments * 100,
            2
        )


class ParseResult(BaseModel):
    """
    Complete output of a parse run.
    This is the top-level JSON structure written by the engine.
    """
    source: ReportMetadata
    parse_version: ParseVersion
    document: BlastDocument
    validation: ValidationReport = Field(
        default_factory=ValidationReport
    )

    def model_dump(self, **kwargs):
        data = super().model_dump(**kwargs)
        data["document"] = self.document.model_dump(**kwargs)
        return data
