#!/usr/bin/env python3
import subprocess, sys
from pathlib import Path

def run(desc, cmd):
    print(f"\n=== {desc} ===\n{cmd}")
    r = subprocess.run(cmd, shell=True)
    if r.returncode != 0:
        sys.exit(r.returncode)

def main():
    Path("results").mkdir(exist_ok=True)
    run("3x3 Manhattan", "python -m npuzzle_pdb.experiments.runner --n 3 --depths 6 10 14 18 --per_depth 10 --manhattan-only --include_unsolvable --out results/p8_manhattan.csv")
    csvs = ["results/p8_manhattan.csv"]
    if Path("pdb/patternDb_4.json").exists():
        run("4x4 pattern database", "python -m npuzzle_pdb.experiments.runner --n 4 --depths 10 20 30 --per_depth 10 --pdb-dir pdb --out results/p15_pdb.csv")
        csvs.append("results/p15_pdb.csv")
    run("Summary", "python -m npuzzle_pdb.experiments.summarize " + " ".join(csvs) + " --out report/summary.md")
    run("Plots", "python -m npuzzle_pdb.experiments.plot " + " ".join(csvs) + " --save results/plots")

if __name__ == "__main__":
    main()
