#!/usr/bin/env python3
from __future__ import annotations
import argparse, os
from pathlib import Path
from typing import Iterable

import numpy as np
import pandas as pd

NUMERIC = ("n", "depth", "seed", "solvable", "g", "expanded", "generated",
           "peak_recursion", "bound_final", "time_sec", "h_hits", "h_misses")


def sem(x):
    x = np.asarray(x, float)
    n = np.sum(~np.isnan(x))
    return 0.0 if n <= 1 else np.nanstd(x, ddof=1) / np.sqrt(n)


def load(files: Iterable) -> pd.DataFrame:
    dfs = []
    for p in files:
        df = pd.read_csv(p)
        df["file"] = os.path.basename(str(p))
        dfs.append(df)
    if not dfs:
        return pd.DataFrame()
    df = pd.concat(dfs, ignore_index=True, sort=False)
    for c in NUMERIC:
        if c in df.columns:
            df[c] = pd.to_numeric(df[c], errors="coerce")
    return df


def summarize(df: pd.DataFrame) -> pd.DataFrame:
    """Per (heuristic, n, depth): solved count, mean, std, SEM and hit rate of the table lookups."""
    if df.empty:
        return df
    ok = df[df["status"] == "solved"].copy()
    g = (ok.groupby(["heuristic", "n", "depth"], as_index=False)
           .agg(solved=("status", "size"),
                g_mean=("g", "mean"),
                time_mean=("time_sec", "mean"),
                time_std=("time_sec", "std"),
                time_sem=("time_sec", sem),
                exp_mean=("expanded", "mean"),
                exp_std=("expanded", "std"),
                exp_sem=("expanded", sem),
                hits=("h_hits", "sum"),
                misses=("h_misses", "sum")))
    total = df.groupby(["heuristic", "n", "depth"]).size().rename("n_total").reset_index()
    g = total.merge(g, on=["heuristic", "n", "depth"], how="left")
    g["solved"] = g["solved"].fillna(0).astype(int)
    lookups = g["hits"] + g["misses"]
    g["hit_rate"] = np.where(lookups > 0, g["hits"] / lookups.where(lookups > 0, 1), np.nan)
    return g.sort_values(["heuristic", "n", "depth"]).reset_index(drop=True)


def status_counts(df: pd.DataFrame) -> pd.DataFrame:
    if df.empty:
        return df
    return df.groupby(["heuristic", "solvable", "status"]).size().rename("rows").reset_index()


def write_summary_md(path: Path, table: pd.DataFrame, counts: pd.DataFrame):
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write("# Experiment Summary\n\n")
        f.write("This file was auto-generated from CSVs.\n\n")
        if table.empty:
            f.write("_No rows._\n")
            return
        f.write("| heuristic | n | depth | solved/total | moves mean | time mean±sem (s) | expanded mean±sem | PDB hit rate |\n")
        f.write("|:---|---:|---:|---:|---:|---:|---:|---:|\n")
        for r in table.itertuples(index=False):
            hit = "—" if pd.isna(r.hit_rate) else f"{r.hit_rate:.3f}"
            g_mean = "—" if pd.isna(r.g_mean) else f"{r.g_mean:.2f}"
            t = "—" if pd.isna(r.time_mean) else f"{r.time_mean:.6f}±{r.time_sem:.6f}"
            e = "—" if pd.isna(r.exp_mean) else f"{r.exp_mean:.1f}±{r.exp_sem:.1f}"
            f.write(f"| {r.heuristic} | {r.n} | {r.depth} | {r.solved}/{r.n_total} | {g_mean} | {t} | {e} | {hit} |\n")
        f.write("\n## Outcomes\n\n| heuristic | solvable | status | rows |\n|:---|:---:|:---|---:|\n")
        for r in counts.itertuples(index=False):
            f.write(f"| {r.heuristic} | {r.solvable} | {r.status} | {r.rows} |\n")
        f.write("\n")


def main(argv=None):
    ap = argparse.ArgumentParser(description="Summarize runner CSVs into a Markdown table.")
    ap.add_argument("files", nargs="+", help="CSV files from runner.py")
    ap.add_argument("--out", default="report/summary.md")
    args = ap.parse_args(argv)

    df = load(args.files)
    table = summarize(df)
    write_summary_md(Path(args.out), table, status_counts(df))
    print(f"Wrote {args.out}")
    if not table.empty:
        print(table[["heuristic", "n", "depth", "solved", "n_total", "g_mean", "exp_mean"]].to_string(index=False))


if __name__ == "__main__":
    main()
