"""Salary deduction, income/resident tax and take-home pay calculations."""

import math
from dataclasses import dataclass

from lifeplan_sim_jp.models import Occupation

YEN_PER_MAN = 10_000

# 給与所得控除（円）
_SALARY_DEDUCTION_THRESHOLD = 8_500_000
_SALARY_DEDUCTION_RATE = 0.3
_SALARY_DEDUCTION_BASE = 80_000
_SALARY_DEDUCTION_MIN = 550_000
_SALARY_DEDUCTION_MAX = 1_950_000

# 所得税累進税率テーブル
# (上限課税所得・円, 税率, 控除額・円)
_INCOME_TAX_BRACKETS: tuple[tuple[float, float, float], ...] = (
    (1_950_000, 0.05, 0),
    (3_300_000, 0.10, 97_500),
    (6_950_000, 0.20, 427_500),
    (9_000_000, 0.23, 636_000),
    (18_000_000, 0.33, 1_536_000),
    (40_000_000, 0.40, 2_796_000),
    (float("inf"), 0.45, 4_796_000),
)

RESIDENT_TAX_RATE = 0.10  # 住民税率（一律10%）

# 社会保険料率（年収850万円未満/以上, 万円）
_SOCIAL_INSURANCE_THRESHOLD = 850
_SOCIAL_INSURANCE_RATE_LOW = 0.15
_SOCIAL_INSURANCE_RATE_HIGH = 0.077

# 控除なし（額面=手取り）の職業
_UNTAXED_OCCUPATIONS = frozenset({Occupation.SELF_EMPLOYED, Occupation.HOMEMAKER})
# 社会保険加入（＝入力時に手取り換算する）職業
_SOCIAL_INSURANCE_OCCUPATIONS = frozenset({
    Occupation.COMPANY_EMPLOYEE,
    Occupation.PART_TIME_WITH_PENSION,
})


def calc_salary_deduction(annual_income: float) -> float:
    """Return salary income deduction (給与所得控除, 万円) for gross annual income (万円).

    Computed in yen, clamped to 55万〜195万, truncated to whole 万円.
    """
    income_yen = annual_income * YEN_PER_MAN
    if income_yen <= _SALARY_DEDUCTION_THRESHOLD:
        deduction = min(
            max(income_yen * _SALARY_DEDUCTION_RATE + _SALARY_DEDUCTION_BASE, _SALARY_DEDUCTION_MIN),
            _SALARY_DEDUCTION_MAX,
        )
        return math.floor(deduction / YEN_PER_MAN)
    return _SALARY_DEDUCTION_MAX // YEN_PER_MAN


def calc_income_tax(taxable_income: float) -> float:
    """Return progressive income tax (所得税, 万円) for taxable income (万円).

    The first bracket whose upper limit covers the income is used;
    tax = floor(income × rate − deduction) in yen, then floored to 万円.
    """
    taxable_yen = taxable_income * YEN_PER_MAN
    for upper, rate, deduction in _INCOME_TAX_BRACKETS:
        if taxable_yen <= upper:
            tax_yen = math.floor(taxable_yen * rate - deduction)
            return math.floor(tax_yen / YEN_PER_MAN)
    return 0  # pragma: no cover


def calc_social_insurance_rate(annual_income: float) -> float:
    """Social insurance rate for gross annual income (万円): 15% under 850万, else 7.7%."""
    if annual_income < _SOCIAL_INSURANCE_THRESHOLD:
        return _SOCIAL_INSURANCE_RATE_LOW
    return _SOCIAL_INSURANCE_RATE_HIGH


def salary_is_taxed(occupation: Occupation | str) -> bool:
    """Whether salary for this occupation is converted to take-home in the cash flow."""
    return Occupation(occupation) not in _UNTAXED_OCCUPATIONS


def requires_net_conversion(occupation: Occupation | str) -> bool:
    """Whether an entered salary is stored as gross + net (社会保険加入の給与所得者)."""
    return Occupation(occupation) in _SOCIAL_INSURANCE_OCCUPATIONS


@dataclass(frozen=True)
class Deductions:
    salary_deduction: float = 0
    social_insurance: float = 0
    income_tax: float = 0
    resident_tax: float = 0
    total: float = 0


@dataclass(frozen=True)
class NetIncomeResult:
    gross_income: float
    net_income: float
    deductions: Deductions


def calc_net_income(annual_income: float, occupation: Occupation | str) -> NetIncomeResult:
    """Convert gross annual income (万円) to take-home pay with an itemized breakdown.

    - 自営業・専業主婦(夫): no deductions, net = gross.
    - 社会保険料 applies only to company employees and part-timers with pension.
    - 課税所得 = max(0, gross − 給与所得控除 − 社会保険料)
    - net = gross − (社会保険料 + 所得税 + 住民税)
    """
    occupation = Occupation(occupation)
    if occupation in _UNTAXED_OCCUPATIONS:
        return NetIncomeResult(
            gross_income=annual_income,
            net_income=annual_income,
            deductions=Deductions(),
        )

    salary_deduction = calc_salary_deduction(annual_income)
    social_insurance = 0
    if occupation in _SOCIAL_INSURANCE_OCCUPATIONS:
        social_insurance = math.floor(annual_income * calc_social_insurance_rate(annual_income))

    taxable_income = max(0, annual_income - (salary_deduction + social_insurance))
    income_tax = calc_income_tax(taxable_income)
    resident_tax = math.floor(taxable_income * RESIDENT_TAX_RATE)

    total = social_insurance + income_tax + resident_tax
    return NetIncomeResult(
        gross_income=annual_income,
        net_income=annual_income - total,
        deductions=Deductions(
            salary_deduction=salary_deduction,
            social_insurance=social_insurance,
            income_tax=income_tax,
            resident_tax=resident_tax,
            total=total,
        ),
    )


def calc_net_income_with_raise(
    base_annual_income: float,
    occupation: Occupation | str,
    raise_rate: float,
    year: int,
    start_year: int,
) -> float:
    """Take-home pay in `year` for a gross income raised by raise_rate %/年 since start_year."""
    raised = math.floor(base_annual_income * (1 + raise_rate / 100) ** (year - start_year))
    return calc_net_income(raised, occupation).net_income
