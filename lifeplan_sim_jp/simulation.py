"""Year-by-year cash-flow projection (個人・法人の収支と総資産)."""

import dataclasses
import logging
from dataclasses import dataclass, field

from lifeplan_sim_jp.models import (
    ExpenseCategory,
    IncomeCategory,
    IncomeItem,
    MaritalStatus,
    Profile,
    SimulationInput,
    YearAmounts,
)
from lifeplan_sim_jp.params import round1
from lifeplan_sim_jp.pension import pension_for_year, spouse_pension_for_year
from lifeplan_sim_jp.tax import calc_net_income, salary_is_taxed

logger = logging.getLogger(__name__)

# 個人収入の区分 → 台帳の列
_PERSONAL_INCOME_FIELDS = {
    IncomeCategory.SALARY: "main_income",
    IncomeCategory.BUSINESS: "business_income",
    IncomeCategory.SIDE: "side_income",
    IncomeCategory.OTHER: "side_income",
    IncomeCategory.REVENUE: "side_income",
    IncomeCategory.SPOUSE_SALARY: "spouse_income",
    IncomeCategory.PENSION: "pension_income",
    IncomeCategory.SPOUSE_PENSION: "spouse_pension_income",
}

_PERSONAL_EXPENSE_FIELDS = {
    ExpenseCategory.LIVING: "living_expense",
    ExpenseCategory.HOUSING: "housing_expense",
    ExpenseCategory.EDUCATION: "education_expense",
}


@dataclass(frozen=True)
class YearRecord:
    """One ledger row (万円). personal_assets is the prior year's ending total."""

    year: int
    age: int
    main_income: float = 0.0
    business_income: float = 0.0
    side_income: float = 0.0
    spouse_income: float = 0.0
    pension_income: float = 0.0
    spouse_pension_income: float = 0.0
    investment_income: float = 0.0
    living_expense: float = 0.0
    housing_expense: float = 0.0
    education_expense: float = 0.0
    other_expense: float = 0.0
    personal_assets: float = 0.0
    investment_amount: float = 0.0
    total_investment_assets: float = 0.0
    personal_balance: float = 0.0
    personal_total_assets: float = 0.0
    corporate_income: float = 0.0
    corporate_other_income: float = 0.0
    corporate_expense: float = 0.0
    corporate_other_expense: float = 0.0
    corporate_balance: float = 0.0
    corporate_total_assets: float = 0.0

    @property
    def total_personal_income(self) -> float:
        """All personal income columns, business_income (事業収入) included."""
        return (
            self.main_income + self.business_income + self.side_income
            + self.spouse_income + self.pension_income + self.spouse_pension_income
            + self.investment_income
        )

    @property
    def total_personal_expense(self) -> float:
        return self.living_expense + self.housing_expense + self.education_expense + self.other_expense

    def to_dict(self) -> dict:
        return dataclasses.asdict(self)


@dataclass(frozen=True)
class Projection:
    """Ledger keyed by calendar year, plus auto-calculated pension amounts per item id."""

    ledger: dict[int, YearRecord] = field(default_factory=dict)
    resolved_income: dict[str, YearAmounts] = field(default_factory=dict)

    @property
    def years(self) -> list[int]:
        return sorted(self.ledger)

    @property
    def records(self) -> list[YearRecord]:
        return [self.ledger[y] for y in self.years]

    def income_amount(self, item: IncomeItem, year: int) -> float:
        """Amount to display for an income item: resolved value if auto-calculated."""
        resolved = self.resolved_income.get(item.id)
        if resolved is not None:
            return resolved[year]
        return item.amounts[year]


def _resolve_salary(item: IncomeItem, profile: Profile, year: int) -> float:
    """Take-home salary for the year. Uses the recorded net figure when available."""
    if not salary_is_taxed(profile.occupation):
        return item.amounts[year]
    if year in item.net_amounts:
        return item.net_amounts[year]
    gross = item.amounts[year]
    if gross <= 0:
        return 0.0
    return calc_net_income(gross, profile.occupation).net_income


def _resolve_personal_income(
    item: IncomeItem,
    sim_input: SimulationInput,
    year: int,
    age: int,
) -> float:
    profile = sim_input.profile
    category = item.category
    if category is IncomeCategory.SALARY:
        return _resolve_salary(item, profile, year)
    if category is IncomeCategory.PENSION:
        if age < profile.pension_start_age:
            return 0.0
        if item.is_auto_calculated:
            return pension_for_year(profile, sim_input.income, year)
        return item.amounts[year]
    if category is IncomeCategory.SPOUSE_PENSION:
        if profile.marital_status is MaritalStatus.SINGLE:
            return 0.0
        if item.is_auto_calculated:
            return spouse_pension_for_year(profile, sim_input.income, year)
        return item.amounts[year]
    return item.amounts[year]


def _investment_contribution(item: IncomeItem, amount: float) -> float:
    """min(amount × ratio%, cap). A cap of 0 or less means no cap."""
    if amount <= 0 or item.investment_ratio <= 0:
        return 0.0
    contribution = amount * (item.investment_ratio / 100)
    if item.max_investment_amount > 0:
        contribution = min(contribution, item.max_investment_amount)
    return contribution


def _opening_balances(sim_input: SimulationInput) -> tuple[float, float, float]:
    """(personal net assets, corporate net assets, investment balance) at start_year."""
    start_year = sim_input.profile.start_year
    assets = sim_input.assets
    liabilities = sim_input.liabilities
    personal = (
        sum(a.amounts[start_year] for a in assets.personal)
        - sum(li.amounts[start_year] for li in liabilities.personal)
    )
    corporate = (
        sum(a.amounts[start_year] for a in assets.corporate)
        - sum(li.amounts[start_year] for li in liabilities.corporate)
    )
    investment = sum(a.amounts[start_year] for a in assets.personal if a.is_investment)
    return personal, corporate, investment


def project(sim_input: SimulationInput) -> Projection:
    """Roll the ledger forward from start_year to the death-age year.

    Pure: sim_input is not mutated. Every call rebuilds the whole ledger,
    since each year depends on the previous year's ending balances.
    """
    profile = sim_input.profile
    params = sim_input.params

    prev_personal, prev_corporate, prev_investment = _opening_balances(sim_input)

    auto_items = [
        item for item in sim_input.income.personal
        if item.is_auto_calculated
        and item.category in (IncomeCategory.PENSION, IncomeCategory.SPOUSE_PENSION)
    ]
    resolved_income = {item.id: YearAmounts() for item in auto_items}

    ledger: dict[int, YearRecord] = {}
    for year in profile.years:
        age = profile.age_in(year)

        income = dict.fromkeys(set(_PERSONAL_INCOME_FIELDS.values()), 0.0)
        investment_amount = 0.0
        for item in sim_input.income.personal:
            amount = _resolve_personal_income(item, sim_input, year, age)
            if item.id in resolved_income:
                resolved_income[item.id][year] = amount
            income[_PERSONAL_INCOME_FIELDS[item.category]] += amount
            investment_amount += _investment_contribution(item, amount)

        expense = dict.fromkeys(_PERSONAL_EXPENSE_FIELDS.values(), 0.0)
        other_expense = 0.0
        for item in sim_input.expense.personal:
            field_name = _PERSONAL_EXPENSE_FIELDS.get(item.category)
            if field_name is None:
                other_expense += item.amounts[year]
            else:
                expense[field_name] += item.amounts[year]

        corporate_income = corporate_other_income = 0.0
        for item in sim_input.income.corporate:
            if item.category is IncomeCategory.REVENUE:
                corporate_income += item.amounts[year]
            else:
                corporate_other_income += item.amounts[year]

        corporate_expense = corporate_other_expense = 0.0
        for item in sim_input.expense.corporate:
            if item.category is ExpenseCategory.BUSINESS:
                corporate_expense += item.amounts[year]
            else:
                corporate_other_expense += item.amounts[year]

        investment_income = round1(prev_investment * (params.investment_return / 100))
        total_income = sum(income.values()) + investment_income
        total_expense = sum(expense.values()) + other_expense
        personal_balance = total_income - total_expense
        corporate_balance = (
            corporate_income + corporate_other_income
            - (corporate_expense + corporate_other_expense)
        )
        total_investment = prev_investment + investment_amount + investment_income

        record = YearRecord(
            year=year,
            age=age,
            **income,
            investment_income=investment_income,
            **expense,
            other_expense=other_expense,
            personal_assets=prev_personal,
            investment_amount=investment_amount,
            total_investment_assets=total_investment,
            personal_balance=personal_balance,
            personal_total_assets=prev_personal + personal_balance,
            corporate_income=corporate_income,
            corporate_other_income=corporate_other_income,
            corporate_expense=corporate_expense,
            corporate_other_expense=corporate_other_expense,
            corporate_balance=corporate_balance,
            corporate_total_assets=prev_corporate + corporate_balance,
        )
        ledger[year] = record

        prev_personal = record.personal_total_assets
        prev_corporate = record.corporate_total_assets
        prev_investment = total_investment

    logger.debug("projected %d years (%d-%d)", len(ledger), profile.start_year, profile.end_year)
    return Projection(ledger=ledger, resolved_income=resolved_income)


def summarize(projection: Projection) -> dict:
    """Headline figures of a ledger: final assets, the low point and first shortfall."""
    records = projection.records
    if not records:
        return {}
    final = records[-1]
    lowest = min(records, key=lambda r: r.personal_total_assets)
    shortfall = next((r.year for r in records if r.personal_total_assets < 0), None)
    return {
        "final_year": final.year,
        "final_age": final.age,
        "final_personal_assets": final.personal_total_assets,
        "final_corporate_assets": final.corporate_total_assets,
        "final_investment_assets": final.total_investment_assets,
        "min_personal_assets": lowest.personal_total_assets,
        "min_personal_assets_year": lowest.year,
        "first_shortfall_year": shortfall,
        "total_income": sum(r.total_personal_income for r in records),
        "total_expense": sum(r.total_personal_expense for r in records),
    }
