#!/usr/bin/env python3
"""Plot similarity results produced by scripts/detect_plagiarism.py.

Reads the CSV summary (results/plagiarism_scores.csv by default) and writes a
PNG with the strongest pairs, the score distribution and a file heatmap.
"""

from __future__ import annotations

import argparse
from pathlib import Path

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

REQUIRED_COLUMNS = {"file1", "file2", "similarity_score"}


def load_scores(csv_path: Path) -> pd.DataFrame:
    if not csv_path.exists():
        raise SystemExit(f"Input CSV not found: {csv_path}")
    df = pd.read_csv(csv_path)
    if not REQUIRED_COLUMNS.issubset(df.columns):
        raise SystemExit(f"CSV missing columns: {REQUIRED_COLUMNS - set(df.columns)}")
    return df


def similarity_matrix(df: pd.DataFrame) -> pd.DataFrame:
    """Symmetric file x file matrix of pair scores (1.0 on the diagonal)."""
    names = sorted(set(df["file1"]) | set(df["file2"]))
    matrix = pd.DataFrame(np.eye(len(names)), index=names, columns=names)
    for _, row in df.iterrows():
        matrix.loc[row["file1"], row["file2"]] = row["similarity_score"]
        matrix.loc[row["file2"], row["file1"]] = row["similarity_score"]
    return matrix


def make_plot(df: pd.DataFrame, out_path: Path, top_n: int, threshold: float) -> None:
    df = df.copy()
    df["pair"] = df["file1"] + " ↔ " + df["file2"]

    top = df.sort_values("similarity_score", ascending=False).head(top_n)

    fig, axes = plt.subplots(1, 3, figsize=(24, 8))

    # Top pairs (bar)
    colors = ["#C44E52" if score >= threshold else "#4C72B0" for score in top["similarity_score"]]
    axes[0].barh(top["pair"], top["similarity_score"], color=colors)
    axes[0].axvline(threshold, color="#333333", linestyle="--", linewidth=1)
    axes[0].invert_yaxis()
    axes[0].set_xlim(0, 1)
    axes[0].set_xlabel("Similarity score")
    axes[0].set_title(f"Top {top_n} file pairs")

    # Histogram of scores
    axes[1].hist(df["similarity_score"], bins=20, range=(0, 1), color="#55A868", alpha=0.8)
    axes[1].axvline(threshold, color="#333333", linestyle="--", linewidth=1)
    axes[1].set_xlabel("Similarity score")
    axes[1].set_ylabel("Count")
    axes[1].set_title("Score distribution")

    # Heatmap
    matrix = similarity_matrix(df)
    im = axes[2].imshow(matrix.values, cmap="Reds", vmin=0, vmax=1)
    axes[2].set_xticks(np.arange(len(matrix)))
    axes[2].set_xticklabels(matrix.columns, rotation=45, ha="right", fontsize=8)
    axes[2].set_yticks(np.arange(len(matrix)))
    axes[2].set_yticklabels(matrix.index, fontsize=8)
    axes[2].set_title("Similarity heatmap")
    fig.colorbar(im, ax=axes[2], fraction=0.046, pad=0.04)

    fig.tight_layout()
    out_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out_path, dpi=150, bbox_inches="tight")
    plt.close(fig)


def main() -> None:
    parser = argparse.ArgumentParser(description="Plot file similarity results.")
    parser.add_argument(
        "--input",
        default="results/plagiarism_scores.csv",
        help="CSV produced by detect_plagiarism.py",
    )
    parser.add_argument(
        "--output",
        default="results/plagiarism_scores.png",
        help="Where to write the plot PNG",
    )
    parser.add_argument("--top-n", type=int, default=20, help="Top pairs to plot")
    parser.add_argument("--threshold", type=float, default=0.7, help="Threshold line to draw")
    args = parser.parse_args()

    df = load_scores(Path(args.input))
    make_plot(df, Path(args.output), args.top_n, args.threshold)
    print(f"Wrote plot to {args.output}")


if __name__ == "__main__":
    main()
