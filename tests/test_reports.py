from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest
from pydantic import ValidationError

from code_normalizer import normalize_document
from detect_plagiarism import build_report, compare_all_pairs, write_plagiarism_csv, write_plagiarism_report
from generate_plagiarism_html import generate_html_report, highlighted_lines, render_report
from models import MatchedSegment, PairResult, ScoreBand, SimilarityResult, score_band
from plot_similarity import load_scores, make_plot, similarity_matrix

ADD = "#include <iostream>\nint add(int a, int b) {\n  return a + b;\n}\n"
SUM = "#include <iostream>\nint sum(int x, int y) {\n  return x + y;\n}\n"
LOOP = "while (ready) {\n  poll();\n}\n"


def _report(tmp: Path):
    documents = {
        "a.cpp": normalize_document(ADD),
        "b.cpp": normalize_document(SUM),
        "c.cpp": normalize_document(LOOP),
    }
    results = compare_all_pairs(documents, threshold=0.7)
    return build_report(tmp, results, len(documents), 0.7)


@pytest.mark.parametrize(
    "score, band",
    [(1.0, ScoreBand.high), (0.9, ScoreBand.high), (0.75, ScoreBand.elevated), (0.5, ScoreBand.moderate), (0.1, ScoreBand.low)],
)
def test_score_band(score: float, band: ScoreBand) -> None:
    assert score_band(score) == band


def test_segment_bounds_are_validated() -> None:
    with pytest.raises(ValidationError):
        MatchedSegment(file1_start=3, file1_end=1, file2_start=0, file2_end=2)
    with pytest.raises(ValidationError):
        MatchedSegment(file1_start=-1, file1_end=1, file2_start=0, file2_end=2)


def test_similarity_score_is_bounded() -> None:
    with pytest.raises(ValidationError):
        SimilarityResult(similarity_score=1.5)


def test_models_accept_camel_case_input() -> None:
    result = SimilarityResult.model_validate({
        "similarityScore": 0.5,
        "matchedSegments": [{"file1Start": 0, "file1End": 2, "file2Start": 1, "file2End": 3, "lines": ["x"]}],
    })
    assert result.matched_segments[0].file2_end == 3


def test_source_range_missing_map_returns_none() -> None:
    segment = MatchedSegment(file1_start=0, file1_end=2, file2_start=0, file2_end=2)
    pair = PairResult(file1="a", file2="b", similarity_score=1.0, flagged=True, matched_segments=[segment])
    assert pair.source_range(segment, 1) is None


def test_highlighted_lines_cover_segment_ranges(tmp_path: Path) -> None:
    top = _report(tmp_path).pairs[0]
    assert highlighted_lines(top, 1) == {0, 1, 2, 3}
    assert highlighted_lines(top, 2) == {0, 1, 2, 3}


def test_render_report_escapes_code(tmp_path: Path) -> None:
    page = render_report(_report(tmp_path))
    assert "#include &lt;VAR_1&gt;" in page
    assert "<VAR_1>" not in page
    assert 'class="code-line match"' in page
    assert "a.cpp ↔ b.cpp" in page


def test_render_report_flagged_only(tmp_path: Path) -> None:
    page = render_report(_report(tmp_path), flagged_only=True)
    assert "a.cpp ↔ b.cpp" in page
    assert "a.cpp ↔ c.cpp" not in page


def test_generate_html_report_from_json(tmp_path: Path) -> None:
    json_path = tmp_path / "results" / "report.json"
    html_path = tmp_path / "results" / "report.html"
    write_plagiarism_report(json_path, _report(tmp_path))

    generate_html_report(json_path, html_path)
    assert html_path.read_text(encoding="utf-8").startswith("<!DOCTYPE html>")


def test_generate_html_report_missing_input(tmp_path: Path) -> None:
    with pytest.raises(SystemExit, match="not found"):
        generate_html_report(tmp_path / "nope.json", tmp_path / "out.html")


def test_plot_from_csv(tmp_path: Path) -> None:
    csv_path = tmp_path / "scores.csv"
    png_path = tmp_path / "plots" / "scores.png"
    write_plagiarism_csv(csv_path, _report(tmp_path).pairs)

    df = load_scores(csv_path)
    matrix = similarity_matrix(df)
    assert list(matrix.index) == ["a.cpp", "b.cpp", "c.cpp"]
    assert matrix.loc["a.cpp", "b.cpp"] == matrix.loc["b.cpp", "a.cpp"] == 1.0

    make_plot(df, png_path, top_n=5, threshold=0.7)
    assert png_path.stat().st_size > 0


def test_load_scores_rejects_wrong_columns(tmp_path: Path) -> None:
    csv_path = tmp_path / "other.csv"
    pd.DataFrame({"repo": ["a"], "score": [0.1]}).to_csv(csv_path, index=False)
    with pytest.raises(SystemExit, match="missing columns"):
        load_scores(csv_path)


def test_source_range_uses_line_map() -> None:
    segment = MatchedSegment(file1_start=0, file1_end=1, file2_start=1, file2_end=2)
    pair = PairResult(
        file1="a", file2="b", similarity_score=0.8, flagged=True, matched_segments=[segment],
        file1_source_lines=[2, 4], file2_source_lines=[0, 3, 7],
    )
    assert pair.source_range(segment, 1) == (2, 4)
    assert pair.source_range(segment, 2) == (3, 7)


def test_pair_header_carries_band_class(tmp_path: Path) -> None:
    page = render_report(_report(tmp_path))
    assert 'class="pair-header high"' in page
    assert 'class="pair-header low"' in page
