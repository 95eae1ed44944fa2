#!/usr/bin/env python3
"""Generate HTML plagiarism report for easy review."""

import html
from pathlib import Path
from typing import List, Set

from models import PairResult, PlagiarismReport

STYLE = """
        * { box-sizing: border-box; }
        body {
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
            line-height: 1.6;
            max-width: 1400px;
            margin: 0 auto;
            padding: 20px;
            background: #f5f5f5;
        }
        h1 { color: #333; border-bottom: 3px solid #e74c3c; padding-bottom: 10px; }
        h2 { color: #444; margin-top: 30px; }
        .summary {
            display: grid;
            grid-template-columns: repeat(auto-fit, minmax(200px, 1fr));
            gap: 20px;
            margin: 20px 0;
        }
        .summary-card {
            background: white;
            padding: 20px;
            border-radius: 8px;
            box-shadow: 0 2px 4px rgba(0,0,0,0.1);
            text-align: center;
        }
        .summary-card.flagged { border-left: 4px solid #e74c3c; }
        .summary-card.total { border-left: 4px solid #3498db; }
        .summary-card.clean { border-left: 4px solid #27ae60; }
        .summary-card h3 { margin: 0 0 10px 0; font-size: 2em; }
        .summary-card p { margin: 0; color: #666; }

        .pair {
            background: white;
            margin: 20px 0;
            border-radius: 8px;
            box-shadow: 0 2px 4px rgba(0,0,0,0.1);
            overflow: hidden;
        }
        .pair-header {
            padding: 15px 20px;
            display: flex;
            justify-content: space-between;
            align-items: center;
            cursor: pointer;
        }
        .pair-header.high { background: #e74c3c; color: white; }
        .pair-header.elevated { background: #e67e22; color: white; }
        .pair-header.moderate { background: #f1c40f; color: #333; }
        .pair-header.low { background: #27ae60; color: white; }
        .pair-header h3 { margin: 0; font-size: 1.1em; }
        .pair-header .score {
            background: rgba(255,255,255,0.2);
            padding: 5px 15px;
            border-radius: 20px;
            font-weight: bold;
        }

        .pair-content { padding: 20px; display: none; }
        .pair.expanded .pair-content { display: block; }

        .code-comparison {
            display: grid;
            grid-template-columns: 1fr 1fr;
            gap: 10px;
        }
        .code-block {
            background: #2d2d2d;
            color: #f8f8f2;
            padding: 15px;
            border-radius: 4px;
            overflow-x: auto;
            font-family: 'Monaco', 'Menlo', monospace;
            font-size: 0.85em;
            white-space: pre-wrap;
            word-break: break-all;
        }
        .code-block h4 { color: #888; margin: 0 0 10px 0; font-size: 0.9em; }
        .code-line { display: block; }
        .code-line.match { background: rgba(231, 76, 60, 0.35); }
        .line-no { color: #777; display: inline-block; width: 3em; }

        .segments {
            background: #fff3cd;
            border: 1px solid #ffc107;
            padding: 10px 15px;
            border-radius: 4px;
            margin-top: 10px;
        }
        .segments ul { margin: 5px 0; padding-left: 20px; }

        .timestamp { color: #888; font-size: 0.9em; margin-top: 30px; }

        @media (max-width: 800px) {
            .code-comparison { grid-template-columns: 1fr; }
        }
"""


def highlighted_lines(pair: PairResult, side: int) -> Set[int]:
    """Normalized line indices covered by any matched segment on one side."""
    covered: Set[int] = set()
    for segment in pair.matched_segments:
        if side == 1:
            covered.update(range(segment.file1_start, segment.file1_end + 1))
        else:
            covered.update(range(segment.file2_start, segment.file2_end + 1))
    return covered


def render_code(title: str, lines: List[str], source_lines: List[int], covered: Set[int]) -> str:
    rendered = []
    for index, line in enumerate(lines):
        line_no = source_lines[index] + 1 if index < len(source_lines) else index + 1
        css = "code-line match" if index in covered else "code-line"
        rendered.append(
            f'<span class="{css}"><span class="line-no">{line_no}</span>{html.escape(line)}</span>'
        )
    return f'<div class="code-block"><h4>📁 {html.escape(title)}</h4>{"".join(rendered)}</div>'


def _format_range(value) -> str:
    return "n/a" if value is None else f"{value[0] + 1}-{value[1] + 1}"


def render_segments(pair: PairResult) -> str:
    if not pair.matched_segments:
        return '<div class="segments"><strong>No matched segments.</strong></div>'
    items = []
    for segment in pair.matched_segments:
        items.append(
            "<li>"
            f"normalized {segment.file1_start}-{segment.file1_end} ↔ {segment.file2_start}-{segment.file2_end}"
            f" (source lines {_format_range(pair.source_range(segment, 1))}"
            f" ↔ {_format_range(pair.source_range(segment, 2))})"
            "</li>"
        )
    return f'<div class="segments"><strong>Matched segments:</strong><ul>{"".join(items)}</ul></div>'


def render_pair(pair: PairResult) -> str:
    band = pair.band.value
    marker = "🚨 " if pair.flagged else ""
    return f"""
    <div class="pair">
        <div class="pair-header {band}" onclick="togglePair(this)">
            <h3>{marker}{html.escape(pair.file1)} ↔ {html.escape(pair.file2)}</h3>
            <span class="score">{pair.similarity_score:.0%}</span>
        </div>
        <div class="pair-content">
            <div class="code-comparison">
                {render_code(pair.file1, pair.file1_lines, pair.file1_source_lines, highlighted_lines(pair, 1))}
                {render_code(pair.file2, pair.file2_lines, pair.file2_source_lines, highlighted_lines(pair, 2))}
            </div>
            {render_segments(pair)}
        </div>
    </div>
"""


def render_report(report: PlagiarismReport, flagged_only: bool = False) -> str:
    pairs = report.flagged() if flagged_only else report.pairs
    clean = report.total_pairs - report.flagged_pairs
    body = "".join(render_pair(pair) for pair in pairs) or "<p>No pairs to show.</p>"

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Plagiarism Detection Report</title>
    <style>{STYLE}</style>
    <script>
        function togglePair(el) {{
            el.closest('.pair').classList.toggle('expanded');
        }}
    </script>
</head>
<body>
    <h1>🔍 Code Plagiarism Detection Report</h1>

    <div class="summary">
        <div class="summary-card total">
            <h3>{report.total_pairs}</h3>
            <p>Pairs compared ({report.total_files} files)</p>
        </div>
        <div class="summary-card flagged">
            <h3>{report.flagged_pairs}</h3>
            <p>🚨 At or above {report.threshold:.0%}</p>
        </div>
        <div class="summary-card clean">
            <h3>{clean}</h3>
            <p>✅ Below threshold</p>
        </div>
    </div>

    <h2>{"Flagged Pairs" if flagged_only else "All Pairs"}</h2>
{body}
    <p class="timestamp">Generated: {report.generated_at.strftime('%Y-%m-%d %H:%M:%S')}</p>
</body>
</html>
"""


def generate_html_report(json_path: Path, output_path: Path, flagged_only: bool = False) -> None:
    """Generate HTML report from JSON plagiarism data."""
    if not json_path.exists():
        raise SystemExit(f"Input report not found: {json_path}")

    report = PlagiarismReport.model_validate_json(json_path.read_text(encoding="utf-8"))

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(render_report(report, flagged_only), encoding="utf-8")
    print(f"Generated HTML report: {output_path}")


if __name__ == "__main__":
    import argparse
    parser = argparse.ArgumentParser()
    parser.add_argument("--input", default="results/plagiarism_report.json")
    parser.add_argument("--output", default="results/plagiarism_report.html")
    parser.add_argument("--flagged-only", action="store_true")
    args = parser.parse_args()

    generate_html_report(Path(args.input), Path(args.output), args.flagged_only)
