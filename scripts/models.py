"""
Pydantic models for plagiarism detection results.

SimilarityResult is what the engine hands back for one pair of documents;
PairResult and PlagiarismReport describe a batch run over a directory.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from segments import Segment, to_source_range


class ScoreBand(str, Enum):
    """Display band for a similarity score."""
    high = "high"
    elevated = "elevated"
    moderate = "moderate"
    low = "low"


def score_band(score: float) -> ScoreBand:
    if score >= 0.9:
        return ScoreBand.high
    if score >= 0.7:
        return ScoreBand.elevated
    if score >= 0.5:
        return ScoreBand.moderate
    return ScoreBand.low


# =============================================================================
# Engine output
# =============================================================================

class MatchedSegment(BaseModel):
    """Corresponding normalized-line ranges (inclusive) in both documents."""
    model_config = ConfigDict(populate_by_name=True)

    file1_start: int = Field(..., ge=0, alias="file1Start")
    file1_end: int = Field(..., ge=0, alias="file1End")
    file2_start: int = Field(..., ge=0, alias="file2Start")
    file2_end: int = Field(..., ge=0, alias="file2End")
    lines: List[str] = Field(default_factory=list, description="Matched lines from document 1")

    @model_validator(mode="after")
    def check_bounds(self) -> "MatchedSegment":
        if self.file1_start > self.file1_end or self.file2_start > self.file2_end:
            raise ValueError("segment start must not exceed end")
        return self

    @classmethod
    def from_segment(cls, segment: Segment) -> "MatchedSegment":
        return cls(
            file1_start=segment.start1,
            file1_end=segment.end1,
            file2_start=segment.start2,
            file2_end=segment.end2,
            lines=segment.lines,
        )


class SimilarityResult(BaseModel):
    """Score and matched segments for one document pair."""
    model_config = ConfigDict(populate_by_name=True)

    similarity_score: float = Field(..., ge=0, le=1, alias="similarityScore")
    matched_segments: List[MatchedSegment] = Field(default_factory=list, alias="matchedSegments")

    def to_payload(self) -> dict:
        """camelCase dict for UI callers."""
        return self.model_dump(by_alias=True)


# =============================================================================
# Batch report
# =============================================================================

class PairResult(BaseModel):
    """One compared file pair, with the normalized text needed for display."""
    file1: str
    file2: str
    similarity_score: float = Field(..., ge=0, le=1)
    flagged: bool
    matched_segments: List[MatchedSegment] = Field(default_factory=list)
    file1_lines: List[str] = Field(default_factory=list, description="Normalized lines of file1")
    file2_lines: List[str] = Field(default_factory=list, description="Normalized lines of file2")
    file1_source_lines: List[int] = Field(default_factory=list, description="Raw line index per normalized line")
    file2_source_lines: List[int] = Field(default_factory=list, description="Raw line index per normalized line")

    @property
    def band(self) -> ScoreBand:
        return score_band(self.similarity_score)

    def source_range(self, segment: MatchedSegment, side: int) -> Optional[Tuple[int, int]]:
        """Raw-line range of a segment on side 1 or 2, if the line map is available."""
        if side == 1:
            start, end, mapping = segment.file1_start, segment.file1_end, self.file1_source_lines
        else:
            start, end, mapping = segment.file2_start, segment.file2_end, self.file2_source_lines
        return to_source_range(start, end, mapping)


class PlagiarismReport(BaseModel):
    """Full batch comparison report."""
    root: str
    threshold: float = Field(..., ge=0, le=1)
    shingle_size: int = Field(..., ge=1)
    total_files: int = Field(..., ge=0)
    total_pairs: int = Field(..., ge=0)
    flagged_pairs: int = Field(..., ge=0)
    generated_at: datetime = Field(default_factory=datetime.now)
    pairs: List[PairResult] = Field(default_factory=list)

    @field_validator("threshold")
    def round_threshold(cls, v: float) -> float:
        """Round threshold to 4 decimal places."""
        return round(float(v), 4)

    def flagged(self) -> List[PairResult]:
        return [pair for pair in self.pairs if pair.flagged]
