#!/usr/bin/env python3
import argparse, os, sys
from pathlib import Path

import matplotlib
# Default to a non-interactive backend; we'll only show() if --show
if "MPLBACKEND" not in os.environ:
    matplotlib.use("Agg")
import matplotlib.pyplot as plt
import pandas as pd

from npuzzle_pdb.experiments.summarize import load, sem

METRICS = ("expanded", "generated", "time_sec", "g")


def agg_mean(df: pd.DataFrame, metric: str) -> pd.DataFrame:
    ok = df[(df["status"] == "solved") & df[metric].notna()]
    return (ok.groupby(["heuristic", "n", "depth"], as_index=False)
              .agg(mean=(metric, "mean"), err=(metric, sem)))


def plot_metric(ax, df: pd.DataFrame, metric: str):
    series = agg_mean(df, metric)
    for (heur, n), part in series.groupby(["heuristic", "n"]):
        part = part.sort_values("depth")
        ax.errorbar(part["depth"], part["mean"], yerr=part["err"], marker="o", capsize=3,
                    label=f"{heur} | {n}×{n}")
    ax.set_xlabel("Scramble depth")
    ax.set_ylabel(metric)
    ax.set_title(f"{metric} vs depth (mean ± sem)")
    ax.grid(True)
    if len(series):
        ax.legend()


def save_fig(fig, outdir: Path, name: str) -> Path:
    outdir.mkdir(parents=True, exist_ok=True)
    path = outdir / f"{name}.png"
    fig.savefig(path, dpi=200, bbox_inches="tight")
    print(f"Saved: {path}")
    return path


def main(argv=None):
    ap = argparse.ArgumentParser(description="Plot runner CSVs and save PNGs.")
    ap.add_argument("csv", nargs="+", help="One or more CSV result files")
    ap.add_argument("--save", default="results/plots", help="Directory to save plots")
    ap.add_argument("--show", action="store_true", help="Also open interactive windows (if GUI available)")
    args = ap.parse_args(argv)

    df = load(args.csv)
    if df.empty:
        print("No rows to plot. Are your CSVs empty?")
        sys.exit(0)

    outdir = Path(args.save)
    base = "combo" if len(args.csv) > 1 else Path(args.csv[0]).stem

    fig, axes = plt.subplots(1, 3, figsize=(15, 5))
    for ax, metric in zip(axes, ["expanded", "time_sec", "g"]):
        plot_metric(ax, df, metric)
    plt.tight_layout()
    save_fig(fig, outdir, f"{base}_combined")
    plt.close(fig)

    for metric in METRICS:
        fig, ax = plt.subplots(figsize=(8, 6))
        plot_metric(ax, df, metric)
        plt.tight_layout()
        save_fig(fig, outdir, f"{base}_{metric}")
        plt.close(fig)

    if args.show:
        plt.show()


if __name__ == "__main__":
    main()
