"""k-line shingle indexing and Jaccard similarity over shingle digests."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from structure_fingerprint import fingerprint, string_hash

logger = logging.getLogger("plagiarism.shingles")

SHINGLE_SIZE = 3

# digest -> ordered window start indices
ShingleIndex = Dict[str, List[int]]


@dataclass
class MatchedShingle:
    """A digest present in both documents, with its window starts on each side."""
    digest: str
    positions1: List[int]
    positions2: List[int]


def window_digest(lines: Sequence[str], start: int, k: int = SHINGLE_SIZE) -> str:
    return string_hash(fingerprint("\n".join(lines[start:start + k])))


def build_shingle_index(lines: Sequence[str], k: int = SHINGLE_SIZE) -> ShingleIndex:
    """Map each window digest to the start indices of the windows producing it."""
    index: ShingleIndex = {}
    if len(lines) < k:
        return index

    for start in range(len(lines) - k + 1):
        index.setdefault(window_digest(lines, start, k), []).append(start)

    logger.debug("Indexed %d windows into %d distinct shingles", len(lines) - k + 1, len(index))
    return index


def jaccard_similarity(
    index1: ShingleIndex, index2: ShingleIndex
) -> Tuple[float, List[MatchedShingle]]:
    """Jaccard similarity over the sets of distinct digests, plus the shared digests.

    Repeats of a shingle inside one document count once.
    """
    matched = [
        MatchedShingle(digest=digest, positions1=positions, positions2=index2[digest])
        for digest, positions in index1.items()
        if digest in index2
    ]
    union = len(index1.keys() | index2.keys())
    if union == 0:
        return 0.0, matched
    return len(matched) / union, matched
