"""Public pension (老齢基礎年金・老齢厚生年金) calculations.

Three estimators live here:

- calculate_pension(): accrual-history engine (標準報酬月額表, 2003年4月の乗率改定,
  繰上げ/繰下げ, 在職老齢年金). Amounts in 円/年. Reported alongside the cash
  flow but never summed into it.
- pension_for_year() / spouse_pension_for_year(): flat per-year estimate
  (基礎年金78万 + 給与×18%) in 万円/年. This is what the cash-flow projection uses.
- estimate_annual_pension(): career-average estimate from a single annual
  income (万円/年). Kept for quick comparisons.
"""

import math
from dataclasses import dataclass, field

from lifeplan_sim_jp.models import (
    IncomeCategory,
    IncomeItem,
    MaritalStatus,
    Occupation,
    Profile,
    Section,
    WELFARE_PENSION_OCCUPATIONS,
    YearAmounts,
)
from lifeplan_sim_jp.params import round1, round_half_up

YEN_PER_MAN = 10_000

# 基礎年金（2025年度）
BASIC_PENSION_FULL_AMOUNT = 780_900  # 満額（円/年）
FULL_PENSION_MONTHS = 480            # 満額に必要な加入月数（40年）

# 厚生年金 報酬比例部分の乗率
WELFARE_PENSION_RATE_BEFORE_2003 = 0.007125  # 2003年3月以前
WELFARE_PENSION_RATE_AFTER_2003 = 0.005481   # 2003年4月以降
RATE_CHANGE_YEAR = 2003
RATE_CHANGE_MONTH = 4

# 受給開始年齢
STANDARD_PENSION_START_AGE = 65
MIN_CLAIM_AGE = 60
EARLY_PENSION_RATE_PER_MONTH = 0.004    # 繰上げ減額率（月あたり）
DELAYED_PENSION_RATE_PER_MONTH = 0.007  # 繰下げ増額率（月あたり）
MAX_DELAYED_INCREASE = 0.42

# 在職老齢年金の支給停止基準額（月額・円）
WORKING_PENSION_THRESHOLD_UNDER_65 = 470_000
WORKING_PENSION_THRESHOLD_65_AND_OVER = 510_000

# 標準賞与額の上限（円）
MAX_BONUS_PER_PAYMENT = 1_500_000
MAX_ANNUAL_BONUS = 5_730_000

DEFAULT_WORK_START_AGE = 22

# 標準報酬月額等級表: (等級, 標準報酬月額, 報酬月額下限, 報酬月額上限未満) 円
STANDARD_REMUNERATION_TABLE: tuple[tuple[int, int, float, float], ...] = (
    (1, 88_000, 0, 93_000),
    (2, 98_000, 93_000, 101_000),
    (3, 104_000, 101_000, 107_000),
    (4, 110_000, 107_000, 114_000),
    (5, 118_000, 114_000, 122_000),
    (6, 126_000, 122_000, 130_000),
    (7, 134_000, 130_000, 138_000),
    (8, 142_000, 138_000, 146_000),
    (9, 150_000, 146_000, 155_000),
    (10, 160_000, 155_000, 165_000),
    (11, 170_000, 165_000, 175_000),
    (12, 180_000, 175_000, 185_000),
    (13, 190_000, 185_000, 195_000),
    (14, 200_000, 195_000, 210_000),
    (15, 220_000, 210_000, 230_000),
    (16, 240_000, 230_000, 250_000),
    (17, 260_000, 250_000, 270_000),
    (18, 280_000, 270_000, 290_000),
    (19, 300_000, 290_000, 310_000),
    (20, 320_000, 310_000, 330_000),
    (21, 340_000, 330_000, 350_000),
    (22, 360_000, 350_000, 370_000),
    (23, 380_000, 370_000, 395_000),
    (24, 410_000, 395_000, 425_000),
    (25, 440_000, 425_000, 455_000),
    (26, 470_000, 455_000, 485_000),
    (27, 500_000, 485_000, 515_000),
    (28, 530_000, 515_000, 545_000),
    (29, 560_000, 545_000, 575_000),
    (30, 590_000, 575_000, 605_000),
    (31, 620_000, 605_000, 635_000),
    (32, 650_000, 635_000, float("inf")),
)

# 簡易推計（万円/年）
SIMPLE_BASIC_PENSION = 78.0      # 基礎年金 約78万円/年
SIMPLE_WELFARE_RATIO = 0.18      # 厚生年金 ≈ 当年給与 × 18%
SIMPLE_WELFARE_DEFAULT = 100.0   # 給与データがない場合の厚生年金（年100万円程度）

# 生涯平均推計
_ESTIMATE_FLAT_PENSION = 76.8         # 厚生年金なしの職業（万円/年 = 6.4万円/月）
_ESTIMATE_BASIC_PENSION_YEN = 768_000
_ESTIMATE_STANDARD_SALARY_CAP = 1_300_000
_ESTIMATE_PROPORTIONAL_COEFFICIENT = 0.217


def calc_standard_remuneration(monthly_income: float) -> int:
    """Map monthly pay (円) to its standard remuneration (標準報酬月額, 円).

    Pay outside the table clamps to grade 1 or grade 32.
    """
    for _, amount, lower, upper in STANDARD_REMUNERATION_TABLE:
        if lower <= monthly_income < upper:
            return amount
    if monthly_income < STANDARD_REMUNERATION_TABLE[0][2]:
        return STANDARD_REMUNERATION_TABLE[0][1]
    return STANDARD_REMUNERATION_TABLE[-1][1]


def calc_standard_bonus(bonus_amount: float) -> float:
    """Standard bonus (標準賞与額, 円) for one payment: capped at 150万円."""
    return min(bonus_amount, MAX_BONUS_PER_PAYMENT)


@dataclass(frozen=True)
class PensionMonths:
    welfare_months: int = 0
    welfare_months_before_2003: int = 0
    welfare_months_after_2003: int = 0
    national_months: int = 0
    category3_months: int = 0

    @property
    def total_months(self) -> int:
        """Months counted toward the basic pension (全区分の合計)."""
        return self.welfare_months + self.national_months + self.category3_months


def calc_pension_months(profile: Profile) -> PensionMonths:
    """Split contribution months up to the current age by pension category.

    Welfare months are further split at April 2003 (乗率改定).
    """
    work_start_age = profile.work_start_age or DEFAULT_WORK_START_AGE
    working_months = max(0, profile.current_age - work_start_age) * 12

    birth_year = profile.start_year - profile.current_age
    age_at_rate_change = RATE_CHANGE_YEAR - birth_year + RATE_CHANGE_MONTH / 12
    months_before = 0
    if age_at_rate_change >= work_start_age:
        months_before = int(round_half_up((age_at_rate_change - work_start_age) * 12))
        months_before = min(months_before, working_months)
    months_after = max(0, working_months - months_before)

    occupation = profile.occupation
    if occupation in WELFARE_PENSION_OCCUPATIONS:
        return PensionMonths(
            welfare_months=working_months,
            welfare_months_before_2003=months_before,
            welfare_months_after_2003=months_after,
        )
    if occupation in (Occupation.PART_TIME_WITHOUT_PENSION, Occupation.SELF_EMPLOYED):
        return PensionMonths(national_months=working_months)
    return PensionMonths(category3_months=working_months)


@dataclass(frozen=True)
class RemunerationHistory:
    standard_remuneration: dict[int, int] = field(default_factory=dict)
    standard_bonus: dict[int, float] = field(default_factory=dict)
    avg_standard_remuneration: int = 0


def calc_standard_remuneration_history(
    salary_amounts: YearAmounts,
    bonus_amounts: YearAmounts | None = None,
) -> RemunerationHistory:
    """Per-year standard remuneration from gross annual salary (万円/年).

    Years without a positive salary are skipped so they don't drag the
    average down to grade 1. Bonus is the annual total, capped at 573万円.
    """
    standard_remuneration: dict[int, int] = {}
    for year, amount in sorted(salary_amounts.items()):
        if amount <= 0:
            continue
        monthly_income = round_half_up(amount * YEN_PER_MAN / 12)
        standard_remuneration[year] = calc_standard_remuneration(monthly_income)

    standard_bonus: dict[int, float] = {}
    for year, amount in sorted((bonus_amounts or {}).items()):
        standard_bonus[year] = min(amount * YEN_PER_MAN, MAX_ANNUAL_BONUS)

    avg = 0
    if standard_remuneration:
        values = standard_remuneration.values()
        avg = int(round_half_up(sum(values) / len(values)))
    return RemunerationHistory(standard_remuneration, standard_bonus, avg)


def calc_basic_pension_amount(total_months: int) -> int:
    """老齢基礎年金 (円/年) = 780,900 × min(加入月数 / 480, 1), floored."""
    ratio = min(total_months / FULL_PENSION_MONTHS, 1)
    return math.floor(BASIC_PENSION_FULL_AMOUNT * ratio)


def calc_welfare_pension_amount(
    avg_standard_remuneration: float,
    months_before_2003: int,
    months_after_2003: int,
) -> int:
    """老齢厚生年金 報酬比例部分 (円/年), floored."""
    before = avg_standard_remuneration * WELFARE_PENSION_RATE_BEFORE_2003 * months_before_2003
    after = avg_standard_remuneration * WELFARE_PENSION_RATE_AFTER_2003 * months_after_2003
    return math.floor(before + after)


def calc_pension_adjustment_rate(pension_start_age: int) -> float:
    """Early/delayed claiming multiplier relative to age 65.

    繰上げ: −0.4%/月, at most 60 months (60歳で0.76).
    繰下げ: +0.7%/月, increase capped at 42%.
    """
    month_diff = (pension_start_age - STANDARD_PENSION_START_AGE) * 12
    if month_diff == 0:
        return 1.0
    if month_diff < 0:
        early_months = min(-month_diff, (STANDARD_PENSION_START_AGE - MIN_CLAIM_AGE) * 12)
        return 1.0 - early_months * EARLY_PENSION_RATE_PER_MONTH
    return 1.0 + min(month_diff * DELAYED_PENSION_RATE_PER_MONTH, MAX_DELAYED_INCREASE)


def adjust_pension_for_working(
    basic_pension: float,
    welfare_pension: float,
    monthly_income: float,
    age: int,
) -> tuple[float, int]:
    """Apply 在職老齢年金 suspension. Returns (basic_pension, welfare_pension) 円/年.

    Excess of (wage + monthly pension) over the age threshold suspends half
    of the excess from the welfare pension. Basic pension is never reduced.
    """
    monthly_basic = basic_pension / 12
    monthly_welfare = welfare_pension / 12
    threshold = (
        WORKING_PENSION_THRESHOLD_UNDER_65 if age < STANDARD_PENSION_START_AGE
        else WORKING_PENSION_THRESHOLD_65_AND_OVER
    )
    total_monthly = monthly_income + monthly_basic + monthly_welfare
    excess = max(0, total_monthly - threshold)
    suspension = min(monthly_welfare, excess / 2)
    return basic_pension, math.floor((monthly_welfare - suspension) * 12)


@dataclass(frozen=True)
class PensionBreakdown:
    months: PensionMonths
    history: RemunerationHistory
    basic_pension_amount: int
    welfare_pension_amount: int
    adjustment_rate: float

    @property
    def total_pension_amount(self) -> int:
        return self.basic_pension_amount + self.welfare_pension_amount

    @property
    def total_pension_man_yen(self) -> float:
        return round1(self.total_pension_amount / YEN_PER_MAN)


def _gross_by_category(
    income: Section[IncomeItem], category: IncomeCategory,
) -> YearAmounts:
    """Sum gross amounts of all personal items in a category, per year."""
    totals = YearAmounts()
    for item in income.personal:
        if item.category is not category:
            continue
        for year in set(item.amounts) | set(item.gross_amounts):
            totals[year] = totals[year] + item.gross_for(year)
    return totals


def calculate_pension(
    profile: Profile,
    income: Section[IncomeItem],
    bonus_amounts: YearAmounts | None = None,
) -> PensionBreakdown:
    """Full accrual-history pension estimate (円/年) at the pension start age."""
    months = calc_pension_months(profile)
    salary = _gross_by_category(income, IncomeCategory.SALARY)
    history = calc_standard_remuneration_history(salary, bonus_amounts)

    raw_basic = calc_basic_pension_amount(months.total_months)
    raw_welfare = calc_welfare_pension_amount(
        history.avg_standard_remuneration,
        months.welfare_months_before_2003,
        months.welfare_months_after_2003,
    )

    rate = calc_pension_adjustment_rate(profile.pension_start_age)
    basic = math.floor(raw_basic * rate)
    welfare = math.floor(raw_welfare * rate)

    if profile.work_after_pension:
        pension_start_year = profile.start_year + (profile.pension_start_age - profile.current_age)
        monthly_wage = salary[pension_start_year] * YEN_PER_MAN / 12
        basic, welfare = adjust_pension_for_working(
            basic, welfare, monthly_wage, profile.pension_start_age,
        )

    return PensionBreakdown(
        months=months,
        history=history,
        basic_pension_amount=basic,
        welfare_pension_amount=welfare,
        adjustment_rate=rate,
    )


def _simple_pension(occupation: Occupation, salary: float) -> float:
    amount = SIMPLE_BASIC_PENSION
    if occupation in WELFARE_PENSION_OCCUPATIONS:
        amount += salary * SIMPLE_WELFARE_RATIO if salary > 0 else SIMPLE_WELFARE_DEFAULT
    return round1(amount)


def pension_for_year(profile: Profile, income: Section[IncomeItem], year: int) -> float:
    """Simplified own pension (万円/年) for a calendar year; 0 before pension_start_age."""
    if profile.age_in(year) < profile.pension_start_age:
        return 0.0
    salary = _gross_by_category(income, IncomeCategory.SALARY)[year]
    return _simple_pension(profile.occupation, salary)


def spouse_age_in(profile: Profile, year: int) -> int | None:
    """Spouse's age in a calendar year, None when there is no spouse yet."""
    spouse = profile.spouse
    if spouse is None or profile.marital_status is MaritalStatus.SINGLE:
        return None
    if profile.marital_status is MaritalStatus.MARRIED:
        if spouse.current_age is None:
            return None
        return spouse.current_age + (year - profile.start_year)
    marriage_year = profile.marriage_year
    if marriage_year is None or spouse.age is None or year < marriage_year:
        return None
    return spouse.age + (year - marriage_year)


def spouse_pension_for_year(profile: Profile, income: Section[IncomeItem], year: int) -> float:
    """Simplified spouse pension (万円/年); spouse always claims at 65."""
    spouse_age = spouse_age_in(profile, year)
    if spouse_age is None or spouse_age < STANDARD_PENSION_START_AGE:
        return 0.0
    occupation = profile.spouse.occupation or Occupation.HOMEMAKER
    salary = _gross_by_category(income, IncomeCategory.SPOUSE_SALARY)[year]
    return _simple_pension(occupation, salary)


def estimate_annual_pension(
    annual_income: float,
    work_start_age: int,
    work_end_age: int,
    pension_start_age: int = STANDARD_PENSION_START_AGE,
    occupation: Occupation | str = Occupation.COMPANY_EMPLOYEE,
) -> float:
    """Career-average pension estimate (万円/年) from one gross annual income (万円).

    Occupations without welfare pension get a flat 76.8万円. Only delayed
    claiming is adjusted (+0.7%/月, capped at 42%).
    """
    if Occupation(occupation) not in WELFARE_PENSION_OCCUPATIONS:
        return _ESTIMATE_FLAT_PENSION

    average_monthly = annual_income * YEN_PER_MAN / 12
    standard_salary = min(average_monthly, _ESTIMATE_STANDARD_SALARY_CAP)
    ratio = min((work_end_age - work_start_age) * 12 / FULL_PENSION_MONTHS, 1)
    proportional = standard_salary * ratio * _ESTIMATE_PROPORTIONAL_COEFFICIENT * 12

    delayed_months = max(0, (pension_start_age - STANDARD_PENSION_START_AGE) * 12)
    increase = min(delayed_months * DELAYED_PENSION_RATE_PER_MONTH, MAX_DELAYED_INCREASE)
    total = (_ESTIMATE_BASIC_PENSION_YEN + proportional) * (1 + increase)
    return round1(total / YEN_PER_MAN)
