"""CLI entry point for chart generation."""

import argparse
import logging
import sys
from pathlib import Path

from lifeplan_sim_jp.charts import life_event_markers, plot_asset_trajectory, plot_cashflow_stack
from lifeplan_sim_jp.config import build_input, parse_args
from lifeplan_sim_jp.simulation import project


def _add_chart_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--output", type=Path, default=Path("reports/charts"),
        help="出力ディレクトリ (default: reports/charts)",
    )
    parser.add_argument(
        "--name", type=str, default="",
        help="出力ファイル名のサフィックス（例: 30 → assets-30.png）",
    )


def main(argv: list[str] | None = None):
    r, args = parse_args("ライフプランシミュレーション チャート生成", _add_chart_args, argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")

    try:
        sim_input = build_input(r)
    except ValueError as e:
        print(f"入力エラー: {e}", file=sys.stderr)
        raise SystemExit(1)
    profile = sim_input.profile
    print(f"シミュレーション（{profile.current_age}歳→{profile.death_age}歳）...", file=sys.stderr)
    projection = project(sim_input)

    markers = life_event_markers(sim_input.life_events)
    paths = [
        plot_asset_trajectory(projection, sim_input.params, args.output, args.name, markers),
        plot_cashflow_stack(projection, args.output, args.name),
    ]
    for path in paths:
        print(f"  → {path}", file=sys.stderr)


if __name__ == "__main__":
    main()
