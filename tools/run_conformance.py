#!/usr/bin/env python3
from __future__ import annotations

import argparse
import dataclasses
import json
from pathlib import Path

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402

from betlang.composition import bet_parallel  # noqa: E402
from betlang.config import load_runtime_spec  # noqa: E402
from betlang.conformance import run_conformance, weather_chain, write_conformance_report  # noqa: E402
from betlang.context import seeded  # noqa: E402
from betlang.distributions import random_walk  # noqa: E402
from betlang.logger import RunLogger  # noqa: E402
from betlang.markov import markov_simulate  # noqa: E402
from betlang.statistics import frequency_table  # noqa: E402


def _plot_matplotlib(walk: list, bets: list, out_dir: Path) -> None:
    fig1 = plt.figure(figsize=(11, 5.5))
    plt.plot(range(len(walk)), walk, linewidth=2.0)
    plt.title("random walk", fontsize=14, pad=15)
    plt.xlabel("step", fontsize=12)
    plt.ylabel("position", fontsize=12)
    plt.grid(True, alpha=0.3, linestyle="--")
    fig1.tight_layout()
    fig1.savefig(out_dir / "random_walk.png", dpi=140)
    plt.close(fig1)

    table = frequency_table(bets)
    fig2 = plt.figure(figsize=(7, 5))
    plt.bar([str(k) for k in table], list(table.values()))
    plt.title("bet(A, B, C)", fontsize=14, pad=15)
    plt.ylabel("count", fontsize=12)
    plt.grid(True, axis="y", alpha=0.3, linestyle="--")
    fig2.tight_layout()
    fig2.savefig(out_dir / "bet_histogram.png", dpi=140)
    plt.close(fig2)


def _write_md_summary(payload: dict, walk: list, out_path: Path) -> None:
    from betlang.viz import sparkline  # noqa

    summary = payload.get("summary") or {}
    lines = [
        "# Conformance report",
        "",
        f"Date (UTC): {payload.get('created_utc', '')}",
        f"Seed: {payload.get('seed')}",
        "",
        f"Checks passed: **{summary.get('n_passed')} / {summary.get('n_checks')}**",
        "",
        "| check | result |",
        "|---|---|",
    ]
    for name, check in sorted((payload.get("checks") or {}).items()):
        lines.append(f"| {name} | {'pass' if check.get('passed') else 'FAIL'} |")
    lines += ["", f"Random walk: `{sparkline(walk)}`", ""]
    out_path.write_text("\n".join(lines), encoding="utf-8")


def main() -> int:
    ap = argparse.ArgumentParser(description="Run the seeded betlang conformance suite and write a report.")
    ap.add_argument("--config", type=str, default=None, help="Runtime YAML (default: docs/runtime.yaml).")
    ap.add_argument("--seed", type=int, default=None, help="Override the configured seed.")
    ap.add_argument("--out-dir", type=str, default="_ci_out", help="Output directory.")
    ap.add_argument("--plot", action="store_true", help="Write PNG plots with matplotlib.")
    ap.add_argument("--plotly", action="store_true", help="Write interactive HTML plots with Plotly.")
    args = ap.parse_args()

    spec = load_runtime_spec(args.config)
    if args.seed is not None:
        spec = dataclasses.replace(spec, seed=int(args.seed))
        spec.validate()

    out_dir = Path(args.out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    logger = RunLogger(out_dir)

    report = run_conformance(spec, logger=logger)
    json_path = out_dir / "conformance_report.json"
    write_conformance_report(report, json_path)
    payload = json.loads(json_path.read_text(encoding="utf-8"))

    with seeded(spec.seed):
        walk = random_walk(spec.walk_steps)
        bets = bet_parallel(spec.uniformity_draws, "A", "B", "C")
        traj = markov_simulate(weather_chain(), spec.markov_steps)

    _write_md_summary(payload, walk, out_dir / "conformance_summary.md")

    if args.plot:
        _plot_matplotlib(walk, bets, out_dir)

    if args.plotly:
        from betlang.viz import plot_histogram, plot_trajectory  # noqa

        plot_trajectory(walk, title="random walk", y_label="position", out_html=out_dir / "random_walk.html")
        plot_histogram(bets, title="bet(A, B, C)", out_html=out_dir / "bet_histogram.html", expected=spec.uniformity_draws / 3.0)
        plot_histogram(traj, title="Markov state visits", out_html=out_dir / "markov_visits.html")

    logger.log("outputs", {"out_dir": str(out_dir), "plot": bool(args.plot), "plotly": bool(args.plotly)})
    return 0 if report.summary["all_passed"] else 1


if __name__ == "__main__":
    raise SystemExit(main())
