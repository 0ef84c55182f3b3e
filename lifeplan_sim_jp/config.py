"""TOML config loader with CLI > config > default resolution."""

import argparse
import sys
import tomllib
from collections.abc import Callable
from datetime import date
from pathlib import Path

from lifeplan_sim_jp.defaults import fill_salary, initialize_form_data
from lifeplan_sim_jp.models import (
    AssetCategory,
    Child,
    EducationPlan,
    HousingConfig,
    HousingType,
    IncomeCategory,
    LifeEvent,
    MaritalStatus,
    OwnConfig,
    PlannedChild,
    Profile,
    RentConfig,
    SchoolChoice,
    SimulationInput,
    SpouseInfo,
    UniversityChoice,
)
from lifeplan_sim_jp.params import SimulationParams

DEFAULT_CONFIG_PATH = Path("config.toml")

DEFAULTS = {
    "age": 30,
    "start_year": None,
    "death_age": 80,
    "gender": "male",
    "occupation": "company_employee",
    "marital_status": "single",
    "spouse_age": None,
    "marriage_age": None,
    "spouse_occupation": "",
    "spouse_income": 0.0,
    "living": 20.0,
    "income": 500.0,
    "income_raise": 0.0,
    "retirement_age": 65,
    "housing": "rent",
    "rent": 10.0,
    "rent_increase": 0.0,
    "renewal_fee": 10.0,
    "renewal_interval": 2,
    "purchase_in": 0,
    "purchase_price": 4000.0,
    "loan_amount": 3500.0,
    "interest_rate": 1.0,
    "loan_term": 35,
    "maintenance_rate": 1.0,
    "children": "",
    "planned_children": "",
    "education_private_from": "",
    "education_field": "文系",
    "savings": 500.0,
    "investments": 0.0,
    "pension_start_age": 65,
    "work_after_pension": False,
    "inflation": 1.0,
    "education_inflation": 1.0,
    "investment_return": 1.0,
    "investment_ratio": 10.0,
    "max_investment": 100.0,
    "life_events": "",
}

# 私立に切り替える段階（以降はすべて私立）
PRIVATE_FROM_STAGES = ("保育園", "幼稚園", "小学校", "中学", "高校", "大学")
_PLAN_FIELDS = ("nursery", "preschool", "elementary", "junior_high", "high_school")


def _join_list(v) -> str:
    if isinstance(v, list):
        return ",".join(":".join(str(x) for x in item) if isinstance(item, list) else str(item) for item in v)
    if v is False:
        return ""
    return v


def load_config(path: Path | None = None) -> dict:
    """Load TOML config file. Returns empty dict if file doesn't exist."""
    if path is None:
        path = DEFAULT_CONFIG_PATH
    if not path.exists():
        return {}
    try:
        with open(path, "rb") as f:
            raw = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        print(f"設定ファイルの読み込みに失敗: {path}: {e}", file=sys.stderr)
        raise SystemExit(1)
    # Normalize lists → CLI-compatible strings
    # children = [5, 8] → "5,8"
    # life_events = [[2030, "expense", "旅行", 50, "海外旅行"]] → "2030:expense:旅行:50:海外旅行"
    for key in ("children", "planned_children", "life_events"):
        if key in raw:
            raw[key] = _join_list(raw[key])
    return raw


def create_parser(description: str) -> argparse.ArgumentParser:
    """Create argparse parser with shared simulation flags."""
    d = DEFAULTS
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("--config", type=Path, default=None, help="設定ファイルパス (default: config.toml)")
    parser.add_argument("--age", type=int, default=None, help=f"現在の年齢 (default: {d['age']})")
    parser.add_argument("--start-year", type=int, default=None, help="開始年度 (default: 今年)")
    parser.add_argument("--death-age", type=int, default=None, help=f"想定寿命 (default: {d['death_age']})")
    parser.add_argument("--gender", type=str, default=None, help="性別: male, female (default: male)")
    parser.add_argument("--occupation", type=str, default=None, help="職業: company_employee, part_time_with_pension, part_time_without_pension, self_employed, homemaker (default: company_employee)")
    parser.add_argument("--marital-status", type=str, default=None, help="婚姻状況: single, married, planning (default: single)")
    parser.add_argument("--spouse-age", type=int, default=None, help="配偶者の年齢（married=現在、planning=結婚時）")
    parser.add_argument("--marriage-age", type=int, default=None, help="結婚予定の本人年齢（planningのみ）")
    parser.add_argument("--spouse-occupation", type=str, default=None, help="配偶者の職業 (default: homemaker)")
    parser.add_argument("--spouse-income", type=float, default=None, help=f"配偶者の年収・額面（万円）(default: {d['spouse_income']})")
    parser.add_argument("--living", type=float, default=None, help=f"生活費（万円/月）(default: {d['living']})")
    parser.add_argument("--income", type=float, default=None, help=f"年収・額面（万円）(default: {d['income']:.0f})")
    parser.add_argument("--income-raise", type=float, default=None, help=f"昇給率（%%/年）(default: {d['income_raise']})")
    parser.add_argument("--retirement-age", type=int, default=None, help=f"給与収入が終わる年齢 (default: {d['retirement_age']})")
    parser.add_argument("--housing", type=str, default=None, help="住居: rent, own (default: rent)")
    parser.add_argument("--rent", type=float, default=None, help=f"家賃（万円/月）(default: {d['rent']})")
    parser.add_argument("--rent-increase", type=float, default=None, help=f"家賃上昇率（%%/年）(default: {d['rent_increase']})")
    parser.add_argument("--renewal-fee", type=float, default=None, help=f"更新料（万円）(default: {d['renewal_fee']})")
    parser.add_argument("--renewal-interval", type=int, default=None, help=f"更新間隔（年）(default: {d['renewal_interval']})")
    parser.add_argument("--purchase-in", type=int, default=None, help="何年後に購入するか（ownのみ, default: 0）")
    parser.add_argument("--purchase-price", type=float, default=None, help=f"物件価格（万円）(default: {d['purchase_price']:.0f})")
    parser.add_argument("--loan-amount", type=float, default=None, help=f"借入額（万円）(default: {d['loan_amount']:.0f})")
    parser.add_argument("--interest-rate", type=float, default=None, help=f"ローン金利（%%）(default: {d['interest_rate']})")
    parser.add_argument("--loan-term", type=int, default=None, help=f"返済期間（年）(default: {d['loan_term']})")
    parser.add_argument("--maintenance-rate", type=float, default=None, help=f"維持費率（物件価格の%%/年）(default: {d['maintenance_rate']})")
    parser.add_argument("--children", type=str, default=None, help="子供の現在の年齢（カンマ区切り、例: 5,8）")
    parser.add_argument("--planned-children", type=str, default=None, help="出産予定（何年後か、カンマ区切り、例: 2,4）")
    parser.add_argument("--education-private-from", type=str, default=None, help=f"私立切替段階: \"\"=全公立, {', '.join(PRIVATE_FROM_STAGES)} (default: 全公立)")
    parser.add_argument("--education-field", type=str, default=None, help="大学の系統: 文系, 理系 (default: 文系)")
    parser.add_argument("--savings", type=float, default=None, help=f"現金・預金（万円）(default: {d['savings']:.0f})")
    parser.add_argument("--investments", type=float, default=None, help=f"運用資産（株式・投資信託, 万円）(default: {d['investments']:.0f})")
    parser.add_argument("--pension-start-age", type=int, default=None, help=f"年金受給開始年齢（60-85, default: {d['pension_start_age']}）")
    parser.add_argument("--work-after-pension", action="store_true", default=None, help="年金受給開始後も働く（在職老齢年金）")
    parser.add_argument("--inflation", type=float, default=None, help=f"インフレ率（%%/年）(default: {d['inflation']})")
    parser.add_argument("--education-inflation", type=float, default=None, help=f"教育費上昇率（%%/年）(default: {d['education_inflation']})")
    parser.add_argument("--investment-return", type=float, default=None, help=f"運用利回り（%%/年）(default: {d['investment_return']})")
    parser.add_argument("--investment-ratio", type=float, default=None, help=f"収入の投資割合（%%）(default: {d['investment_ratio']})")
    parser.add_argument("--max-investment", type=float, default=None, help=f"年間投資上限（万円）(default: {d['max_investment']:.0f})")
    parser.add_argument("--life-events", type=str, default=None, help="ライフイベント（年度:income|expense:カテゴリ:金額:内容 のカンマ区切り、例: 2030:expense:旅行:50:海外旅行）")
    return parser


def resolve(args: argparse.Namespace, config: dict) -> dict:
    """Resolve values with priority: CLI flag > config.toml > hardcoded default."""
    resolved = {}
    for key, default in DEFAULTS.items():
        cli_val = getattr(args, key, None)
        resolved[key] = cli_val if cli_val is not None else config.get(key, default)
    return resolved


def parse_int_list(s) -> list[int]:
    """"5,8" → [5, 8]. Empty/none → []."""
    s = str(s).strip().lower()
    if not s or s == "none":
        return []
    return [int(x) for x in s.split(",") if x.strip()]


def parse_life_events(s: str) -> list[LifeEvent]:
    """Parse "year:type:category:amount:description,..." → [LifeEvent, ...]."""
    if not s or not str(s).strip():
        return []
    events = []
    for part in str(s).split(","):
        part = part.strip()
        if not part:
            continue
        fields = part.split(":", 4)
        if len(fields) != 5:
            raise ValueError(f"ライフイベント「{part}」は 年度:種別:カテゴリ:金額:内容 の形式で指定してください")
        year, event_type, category, amount, description = (f.strip() for f in fields)
        events.append(LifeEvent(
            year=int(year),
            description=description,
            type=event_type,
            category=category,
            amount=float(amount),
        ))
    return events


def education_private_from(stage: str, field: str = "文系") -> EducationPlan:
    """Education plan that is public until `stage` and private from there on."""
    if field not in ("文系", "理系"):
        raise ValueError(f"大学の系統「{field}」は不正です（文系, 理系）")
    if stage and stage not in PRIVATE_FROM_STAGES:
        raise ValueError(f"私立切替段階「{stage}」は不正です（{', '.join(PRIVATE_FROM_STAGES)}）")
    switch = PRIVATE_FROM_STAGES.index(stage) if stage else len(PRIVATE_FROM_STAGES)
    choices = {
        name: SchoolChoice.PRIVATE if i >= switch else SchoolChoice.PUBLIC
        for i, name in enumerate(_PLAN_FIELDS)
    }
    kind = "私立" if switch <= len(_PLAN_FIELDS) else "公立"
    return EducationPlan(**choices, university=UniversityChoice(f"{kind}大学（{field}）"))


def build_profile(r: dict) -> Profile:
    plan = education_private_from(r["education_private_from"], r["education_field"])
    start_year = r["start_year"] or date.today().year
    housing_type = HousingType(r["housing"])
    if housing_type is HousingType.RENT:
        housing = HousingConfig(
            type=housing_type,
            rent=RentConfig(
                monthly_rent=r["rent"],
                annual_increase_rate=r["rent_increase"],
                renewal_fee=r["renewal_fee"],
                renewal_interval=r["renewal_interval"],
            ),
        )
    else:
        housing = HousingConfig(
            type=housing_type,
            rent=None,
            own=OwnConfig(
                purchase_year=start_year + r["purchase_in"],
                purchase_price=r["purchase_price"],
                loan_amount=r["loan_amount"],
                interest_rate=r["interest_rate"],
                loan_term_years=r["loan_term"],
                maintenance_cost_rate=r["maintenance_rate"],
            ),
        )

    marital_status = MaritalStatus(r["marital_status"])
    spouse = None
    if marital_status is not MaritalStatus.SINGLE:
        spouse = SpouseInfo(
            age=r["spouse_age"] if marital_status is MaritalStatus.PLANNING else None,
            current_age=r["spouse_age"] if marital_status is MaritalStatus.MARRIED else None,
            marriage_age=r["marriage_age"],
            occupation=r["spouse_occupation"] or None,
        )

    return Profile(
        current_age=r["age"],
        start_year=start_year,
        death_age=r["death_age"],
        gender=r["gender"],
        monthly_living_expense=r["living"],
        occupation=r["occupation"],
        marital_status=marital_status,
        housing=housing,
        spouse=spouse,
        children=[Child(current_age=a, education_plan=plan) for a in parse_int_list(r["children"])],
        planned_children=[
            PlannedChild(years_from_now=n, education_plan=plan)
            for n in parse_int_list(r["planned_children"])
        ],
        pension_start_age=r["pension_start_age"],
        work_after_pension=bool(r["work_after_pension"]),
    )


def build_params(r: dict) -> SimulationParams:
    """Build SimulationParams from resolved config dict."""
    return SimulationParams(
        inflation_rate=r["inflation"],
        education_cost_increase_rate=r["education_inflation"],
        investment_return=r["investment_return"],
        investment_ratio=r["investment_ratio"],
        max_investment_amount=r["max_investment"],
    )


def build_input(r: dict) -> SimulationInput:
    """Resolved config → SimulationInput with salary, savings and life events entered."""
    profile = build_profile(r)
    sim_input = initialize_form_data(SimulationInput(
        profile=profile,
        params=build_params(r),
        life_events=parse_life_events(r["life_events"]),
    ))

    last_work_year = min(profile.end_year, profile.start_year + (r["retirement_age"] - profile.current_age) - 1)
    for item in sim_input.income.personal:
        if item.category is IncomeCategory.SALARY and r["income"] > 0:
            fill_salary(item, profile.occupation, r["income"], profile.start_year,
                        last_work_year, r["income_raise"])
        elif item.category is IncomeCategory.SPOUSE_SALARY and r["spouse_income"] > 0:
            fill_salary(item, profile.spouse.occupation, r["spouse_income"],
                        profile.marriage_year or profile.start_year,
                        last_work_year, r["income_raise"])

    start = profile.start_year
    for item in sim_input.assets.personal:
        if item.category is AssetCategory.CASH:
            item.amounts[start] = r["savings"]
        elif item.is_investment and r["investments"]:
            item.amounts[start] = r["investments"]
            break
    return sim_input


def parse_args(
    description: str,
    add_args_fn: Callable[[argparse.ArgumentParser], None] | None = None,
    argv: list[str] | None = None,
) -> tuple[dict, argparse.Namespace]:
    """Parse CLI args, load config, resolve values.

    Returns (resolved_dict, namespace). namespace carries extra args added via add_args_fn.
    """
    parser = create_parser(description)
    if add_args_fn:
        add_args_fn(parser)
    args = parser.parse_args(argv)
    config = load_config(args.config)
    return resolve(args, config), args
