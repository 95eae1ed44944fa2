#!/usr/bin/env python3
"""Structural code plagiarism detection for C/C++ sources.

For each pair of documents this script:
1. Normalizes the code (comments, whitespace, identifier renaming)
2. Fingerprints every window of 3 normalized lines by structure only
3. Computes Jaccard similarity over the distinct window digests
4. Expands shared windows into matched line ranges and merges them

Run over a directory it compares every file against every other file and
writes a JSON report and a CSV summary.
"""

from __future__ import annotations

import argparse
import concurrent.futures
import csv
import logging
import os
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from tqdm import tqdm

from code_normalizer import NormalizedDocument, normalize, normalize_document
from models import MatchedSegment, PairResult, PlagiarismReport, SimilarityResult
from segments import build_segments
from shingle_index import SHINGLE_SIZE, build_shingle_index, jaccard_similarity

LOGGER_NAME = "plagiarism"
logger = logging.getLogger(LOGGER_NAME)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
SKIP_DIRS = {".git", ".venv", "venv", "node_modules", "__pycache__", "build", "dist", ".idea", ".vscode"}

SOURCE_EXTENSIONS = {".cpp", ".h", ".hpp"}

# Pairs scoring at or above this are flagged by callers
DEFAULT_THRESHOLD = 0.7

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------
def compare_normalized(lines1: Sequence[str], lines2: Sequence[str]) -> SimilarityResult:
    """Score two already normalized documents and locate the matching ranges."""
    index1 = build_shingle_index(lines1)
    index2 = build_shingle_index(lines2)
    similarity, matched = jaccard_similarity(index1, index2)
    segments = build_segments(matched, lines1)
    return SimilarityResult(
        similarity_score=similarity,
        matched_segments=[MatchedSegment.from_segment(s) for s in segments],
    )


def detect(source1: str, source2: str, threshold: float = DEFAULT_THRESHOLD) -> SimilarityResult:
    """Compare two raw source texts.

    `threshold` is not applied here; it is part of the signature so callers
    can pass the value they will flag with (score >= threshold).
    """
    return compare_normalized(normalize(source1), normalize(source2))


# ---------------------------------------------------------------------------
# File Collection
# ---------------------------------------------------------------------------
def collect_source_files(root: Path, extensions: Iterable[str] = SOURCE_EXTENSIONS) -> List[Path]:
    """Return source files under root, sorted, skipping tool directories."""
    wanted = {ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in extensions}
    found: List[Path] = []
    for dirpath, dirs, files in os.walk(root):
        dirs[:] = sorted(d for d in dirs if d not in SKIP_DIRS)
        for file_name in sorted(files):
            if Path(file_name).suffix.lower() in wanted:
                found.append(Path(dirpath) / file_name)
    return found


def load_documents(paths: Iterable[Path], root: Path) -> Dict[str, NormalizedDocument]:
    """Normalize each readable file once, keyed by path relative to root."""
    documents: Dict[str, NormalizedDocument] = {}
    for path in paths:
        try:
            source = path.read_text(encoding="utf-8", errors="ignore")
        except OSError as exc:
            logger.warning("Skipping unreadable file %s: %s", path, exc)
            continue
        documents[path.relative_to(root).as_posix()] = normalize_document(source)
    return documents


# ---------------------------------------------------------------------------
# Pairwise Comparison
# ---------------------------------------------------------------------------
def compare_pair(
    name1: str,
    doc1: NormalizedDocument,
    name2: str,
    doc2: NormalizedDocument,
    threshold: float,
) -> PairResult:
    result = compare_normalized(doc1.lines, doc2.lines)
    return PairResult(
        file1=name1,
        file2=name2,
        similarity_score=result.similarity_score,
        flagged=result.similarity_score >= threshold,
        matched_segments=result.matched_segments,
        file1_lines=doc1.lines,
        file2_lines=doc2.lines,
        file1_source_lines=doc1.source_lines,
        file2_source_lines=doc2.source_lines,
    )


def iter_pairs(names: Sequence[str]) -> Iterable[Tuple[str, str]]:
    for i, name1 in enumerate(names):
        for name2 in names[i + 1:]:
            yield name1, name2


def compare_all_pairs(
    documents: Dict[str, NormalizedDocument],
    threshold: float = DEFAULT_THRESHOLD,
    workers: int = 1,
    show_progress: bool = False,
) -> List[PairResult]:
    """Compare every unordered pair of documents, highest score first."""
    names = sorted(documents)
    pairs = list(iter_pairs(names))
    results: List[PairResult] = []

    with tqdm(total=len(pairs), desc="Comparing", disable=not show_progress) as pbar:
        if workers <= 1:
            for name1, name2 in pairs:
                results.append(compare_pair(name1, documents[name1], name2, documents[name2], threshold))
                pbar.update(1)
        else:
            with concurrent.futures.ProcessPoolExecutor(max_workers=workers) as executor:
                futures = [
                    executor.submit(compare_pair, n1, documents[n1], n2, documents[n2], threshold)
                    for n1, n2 in pairs
                ]
                for future in concurrent.futures.as_completed(futures):
                    results.append(future.result())
                    pbar.update(1)

    results.sort(key=lambda r: (-r.similarity_score, r.file1, r.file2))
    return results


def build_report(root: Path, results: List[PairResult], total_files: int, threshold: float) -> PlagiarismReport:
    return PlagiarismReport(
        root=str(root),
        threshold=threshold,
        shingle_size=SHINGLE_SIZE,
        total_files=total_files,
        total_pairs=len(results),
        flagged_pairs=sum(1 for r in results if r.flagged),
        pairs=results,
    )


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------
def write_plagiarism_report(output_path: Path, report: PlagiarismReport) -> None:
    """Write the full JSON report."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(report.model_dump_json(indent=2), encoding="utf-8")


def write_plagiarism_csv(output_path: Path, results: List[PairResult]) -> None:
    """Write CSV summary."""
    output_path.parent.mkdir(parents=True, exist_ok=True)

    rows = [
        {
            "file1": r.file1,
            "file2": r.file2,
            "similarity_score": round(r.similarity_score, 4),
            "flagged": r.flagged,
            "segments": len(r.matched_segments),
        }
        for r in results
    ]

    with output_path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=["file1", "file2", "similarity_score", "flagged", "segments"])
        writer.writeheader()
        writer.writerows(rows)


def setup_logging(verbose: bool = False, log_file: Optional[Path] = None) -> logging.Logger:
    """Configure the "plagiarism" logger; library loggers propagate into it."""
    run_logger = logging.getLogger(LOGGER_NAME)
    run_logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    run_logger.handlers[:] = []

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    run_logger.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        run_logger.addHandler(file_handler)
    return run_logger


def _threshold(value: str) -> float:
    number = float(value)
    if not 0.0 <= number <= 1.0:
        raise argparse.ArgumentTypeError("threshold must be between 0 and 1")
    return number


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------
def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Detect structural code plagiarism between source files")
    parser.add_argument("--root", default="submissions", help="Directory containing the source files")
    parser.add_argument("--extensions", nargs="+", default=sorted(SOURCE_EXTENSIONS), help="File extensions to compare")
    parser.add_argument("--threshold", type=_threshold, default=DEFAULT_THRESHOLD, help="Flag pairs scoring at or above this (0-1)")
    parser.add_argument("--workers", type=int, default=1, help="Number of worker processes")
    parser.add_argument("--output", default="results/plagiarism_report.json", help="JSON report output")
    parser.add_argument("--csv-output", default="results/plagiarism_scores.csv", help="CSV summary output")
    parser.add_argument("--log-file", default=None, help="Also write logs to this file")
    parser.add_argument("--no-progress", action="store_true", help="Hide the progress bar")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    args = parser.parse_args(argv)
    setup_logging(args.verbose, Path(args.log_file) if args.log_file else None)

    root_dir = Path(args.root)
    if not root_dir.is_dir():
        raise SystemExit(f"Root directory not found: {root_dir}")

    paths = collect_source_files(root_dir, args.extensions)
    documents = load_documents(paths, root_dir)
    if len(documents) < 2:
        raise SystemExit("Need at least two source files to compare")

    logger.info(
        "Comparing %d files (%d pairs)", len(documents), len(documents) * (len(documents) - 1) // 2
    )
    results = compare_all_pairs(
        documents, threshold=args.threshold, workers=args.workers, show_progress=not args.no_progress
    )
    report = build_report(root_dir, results, len(documents), args.threshold)

    write_plagiarism_report(Path(args.output), report)
    print(f"Wrote detailed report to {args.output}")

    write_plagiarism_csv(Path(args.csv_output), results)
    print(f"Wrote CSV summary to {args.csv_output}")

    # Print summary
    print("\n" + "=" * 70)
    print("PLAGIARISM DETECTION SUMMARY")
    print("=" * 70)

    flagged = report.flagged()
    print(f"\n{len(flagged)} of {report.total_pairs} pairs at or above {args.threshold:.0%}")
    for pair in flagged:
        print(f"   • {pair.file1} <-> {pair.file2} (score: {pair.similarity_score:.2f}, "
              f"{len(pair.matched_segments)} segments)")

    if not flagged:
        print("\nNo pairs above the threshold.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
