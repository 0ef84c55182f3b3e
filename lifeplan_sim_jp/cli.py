"""CLI entry point for a single life-plan projection."""

import argparse
import logging
import sys
from pathlib import Path

from lifeplan_sim_jp.config import build_input, parse_args
from lifeplan_sim_jp.events import describe_year
from lifeplan_sim_jp.export import write_csv
from lifeplan_sim_jp.models import MaritalStatus, SimulationInput
from lifeplan_sim_jp.pension import calculate_pension, estimate_annual_pension
from lifeplan_sim_jp.simulation import summarize
from lifeplan_sim_jp.store import SimulatorStore

OCCUPATION_LABELS = {
    "company_employee": "会社員",
    "part_time_with_pension": "パート（厚生年金あり）",
    "part_time_without_pension": "パート（厚生年金なし）",
    "self_employed": "自営業",
    "homemaker": "専業主婦（夫）",
}


def _add_cli_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--csv", type=Path, default=None, help="キャッシュフロー表をCSVで出力")
    parser.add_argument("--save-snapshot", type=Path, default=None, help="入力データをJSONで保存")
    parser.add_argument("--snapshot", type=Path, default=None, help="保存済みJSONから入力データを読み込む（設定より優先）")
    parser.add_argument("--verbose", "-v", action="store_true", help="デバッグログを表示")


def _print_header(sim_input: SimulationInput):
    profile = sim_input.profile
    params = sim_input.params
    print("=" * 80)
    print(
        f"ライフプランシミュレーション（{profile.current_age}歳-{profile.death_age}歳、"
        f"{profile.start_year}-{profile.end_year}年、{profile.horizon_years}年間）"
    )
    print(
        f"  職業: {OCCUPATION_LABELS[profile.occupation.value]} / "
        f"生活費: {profile.monthly_living_expense:.1f}万円/月 / "
        f"年金受給開始: {profile.pension_start_age}歳"
        + ("（在職）" if profile.work_after_pension else "")
    )
    if profile.marital_status is not MaritalStatus.SINGLE and profile.spouse is not None:
        status = "既婚" if profile.marital_status is MaritalStatus.MARRIED else f"{profile.marriage_year}年結婚予定"
        occupation = profile.spouse.occupation.value if profile.spouse.occupation else "homemaker"
        print(f"  配偶者: {status} / {OCCUPATION_LABELS[occupation]}")
    n_children = len(profile.children) + len(profile.planned_children)
    print(f"  子供: {n_children}人" if n_children else "  子供: なし")
    print(
        f"  インフレ率: {params.inflation_rate:.1f}% / 教育費上昇率: {params.education_cost_increase_rate:.1f}% / "
        f"運用利回り: {params.investment_return:.1f}% / 投資割合: {params.investment_ratio:.0f}%"
        f"（上限{params.max_investment_amount:.0f}万円/年）"
    )
    print("=" * 80)
    print()


def _print_yearly_log(store: SimulatorStore):
    profile = store.sim_input.profile
    records = store.projection.records
    print("【サンプル年次ログ（5年ごと）】")
    print("-" * 110)
    print(
        f"{'年度':<6} {'年齢':<5} {'収入(万)':<10} {'年金(万)':<10} {'支出(万)':<10} "
        f"{'収支(万)':<10} {'運用資産(万)':<12} {'総資産(万)':<12} イベント"
    )
    print("-" * 110)
    for i, r in enumerate(records):
        if i % 5 == 0 or i == len(records) - 1:
            events = describe_year(r.year, profile, store.life_events)
            print(
                f"{r.year:<6} {r.age:<5} "
                f"{r.total_personal_income:<10.1f} "
                f"{r.pension_income + r.spouse_pension_income:<10.1f} "
                f"{r.total_personal_expense:<10.1f} "
                f"{r.personal_balance:<10.1f} "
                f"{r.total_investment_assets:<12.1f} "
                f"{r.personal_total_assets:<12.1f} "
                f"{events}"
            )
    print("-" * 110)


def _print_summary(store: SimulatorStore):
    s = summarize(store.projection)
    print("\n" + "=" * 80)
    print("【最終資産サマリー】")
    print("=" * 80)
    print(f"  {s['final_age']}歳時点の個人総資産: {s['final_personal_assets']:>10.1f}万円 ({s['final_personal_assets']/10000:.2f}億円)")
    print(f"    うち運用資産: {s['final_investment_assets']:>10.1f}万円")
    if s["final_corporate_assets"]:
        print(f"  法人総資産: {s['final_corporate_assets']:>10.1f}万円")
    print(f"  最低資産: {s['min_personal_assets']:.1f}万円（{s['min_personal_assets_year']}年）")
    if s["first_shortfall_year"] is not None:
        print(f"    ⚠ {s['first_shortfall_year']}年に個人総資産がマイナス")


def _print_pension_reference(sim_input: SimulationInput, annual_income: float = 0.0, work_end_age: int = 65):
    """Reference figures from the accrual-history engine; not part of the ledger."""
    profile = sim_input.profile
    breakdown = calculate_pension(profile, sim_input.income)
    print("\n【年金見込み（加入記録ベース・参考値）】")
    print(
        f"  加入月数: {breakdown.months.total_months}ヶ月"
        f"（厚生年金{breakdown.months.welfare_months} / 国民年金{breakdown.months.national_months}"
        f" / 第3号{breakdown.months.category3_months}）"
    )
    print(f"  平均標準報酬月額: {breakdown.history.avg_standard_remuneration:,}円")
    print(
        f"  老齢基礎年金: {breakdown.basic_pension_amount:,}円/年 / "
        f"老齢厚生年金: {breakdown.welfare_pension_amount:,}円/年 "
        f"（{profile.pension_start_age}歳受給、調整率{breakdown.adjustment_rate:.3f}）"
    )
    print(f"  合計: {breakdown.total_pension_man_yen:.1f}万円/年")
    if annual_income > 0:
        estimate = estimate_annual_pension(
            annual_income,
            profile.work_start_age,
            work_end_age,
            profile.pension_start_age,
            profile.occupation,
        )
        print(f"  生涯平均による概算: {estimate:.1f}万円/年")


def main(argv: list[str] | None = None):
    """Execute a single projection and print the report."""
    r, args = parse_args("ライフプランシミュレーション", _add_cli_args, argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
    )

    if args.snapshot is not None:
        store = SimulatorStore(initialize=False)
        if not store.load_snapshot(args.snapshot):
            print(f"スナップショットを読み込めませんでした: {args.snapshot}", file=sys.stderr)
            raise SystemExit(1)
    else:
        try:
            sim_input = build_input(r)
        except ValueError as e:
            print(f"入力エラー: {e}", file=sys.stderr)
            raise SystemExit(1)
        store = SimulatorStore(sim_input, initialize=False)

    if not store.ledger:
        print("キャッシュフローを計算できませんでした", file=sys.stderr)
        raise SystemExit(1)

    _print_header(store.sim_input)
    _print_yearly_log(store)
    _print_summary(store)
    if args.snapshot is None:
        _print_pension_reference(store.sim_input, r["income"], r["retirement_age"])
    else:
        _print_pension_reference(store.sim_input)

    if args.csv is not None:
        path = write_csv(args.csv, store.sim_input, store.projection)
        print(f"\nCSV: {path}")
    if args.save_snapshot is not None:
        path = store.save_snapshot(args.save_snapshot)
        print(f"スナップショット: {path}")


if __name__ == "__main__":
    main()
