"""Turn shared shingles into matched line ranges and merge them.

Ranges index the normalized line sequence of each document, not raw lines.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

from shingle_index import SHINGLE_SIZE, MatchedShingle

logger = logging.getLogger("plagiarism.segments")


@dataclass
class Segment:
    """Inclusive line ranges in both documents plus the matched lines of the first."""
    start1: int
    end1: int
    start2: int
    end2: int
    lines: List[str] = field(default_factory=list)

    def absorb(self, other: "Segment") -> "Segment":
        """Widen to cover `other`.

        Only the first document's ranges are known to touch; the second
        document's bounds are widened regardless and may span unrelated lines.
        Lines are de-duplicated by text in first-seen order.
        """
        return Segment(
            start1=min(self.start1, other.start1),
            end1=max(self.end1, other.end1),
            start2=min(self.start2, other.start2),
            end2=max(self.end2, other.end2),
            lines=list(dict.fromkeys(self.lines + other.lines)),
        )


def expand_matches(
    matched: Iterable[MatchedShingle], lines1: Sequence[str], k: int = SHINGLE_SIZE
) -> List[Segment]:
    """One raw segment per (position1, position2) pair of every matched shingle."""
    raw: List[Segment] = []
    for shingle in matched:
        for p1 in shingle.positions1:
            window = list(lines1[p1:p1 + k])
            for p2 in shingle.positions2:
                raw.append(Segment(p1, p1 + k - 1, p2, p2 + k - 1, list(window)))
    return raw


def merge_segments(segments: Sequence[Segment]) -> List[Segment]:
    """Greedily merge segments that overlap or touch in document-1 coordinates."""
    if not segments:
        return []

    ordered = sorted(segments, key=lambda s: s.start1)
    merged: List[Segment] = []
    current = ordered[0]
    for nxt in ordered[1:]:
        if nxt.start1 <= current.end1 + 1:
            current = current.absorb(nxt)
        else:
            merged.append(current)
            current = nxt
    merged.append(current)

    logger.debug("Merged %d raw segments into %d", len(segments), len(merged))
    return merged


def build_segments(
    matched: Iterable[MatchedShingle], lines1: Sequence[str], k: int = SHINGLE_SIZE
) -> List[Segment]:
    return merge_segments(expand_matches(matched, lines1, k))


def to_source_range(start: int, end: int, source_lines: Sequence[int]) -> Optional[Tuple[int, int]]:
    """Map an inclusive normalized-line range onto raw line indices.

    Returns None when the map is too short to cover the range.
    """
    if end >= len(source_lines):
        return None
    return source_lines[start], source_lines[end]
