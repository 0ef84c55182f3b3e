"""Default line items and form prefill derived from the profile."""

import copy
import dataclasses
import math

from lifeplan_sim_jp.education import calc_education_expense
from lifeplan_sim_jp.housing import calc_housing_expense
from lifeplan_sim_jp.models import (
    AssetCategory,
    AssetItem,
    ExpenseCategory,
    ExpenseItem,
    HousingType,
    IncomeCategory,
    IncomeItem,
    LiabilityCategory,
    LiabilityItem,
    MaritalStatus,
    Occupation,
    Profile,
    Section,
    SimulationInput,
)
from lifeplan_sim_jp.params import SimulationParams
from lifeplan_sim_jp.tax import calc_net_income, requires_net_conversion


def default_income_section(params: SimulationParams, profile: Profile) -> Section[IncomeItem]:
    """Income items for a profile. Pension items are auto-calculated."""
    ratio = params.investment_ratio
    cap = params.max_investment_amount

    def item(item_id: str, name: str, category: IncomeCategory, auto: bool = False) -> IncomeItem:
        return IncomeItem(
            id=item_id, name=name, category=category,
            investment_ratio=ratio, max_investment_amount=cap,
            is_auto_calculated=auto,
        )

    personal = [
        item("1", "給与収入", IncomeCategory.SALARY),
        item("2", "事業収入", IncomeCategory.BUSINESS),
        item("3", "副業収入", IncomeCategory.SIDE),
        item("4", "年金収入", IncomeCategory.PENSION, auto=True),
    ]
    if profile.marital_status is not MaritalStatus.SINGLE:
        personal.append(item("5", "配偶者年金収入", IncomeCategory.SPOUSE_PENSION, auto=True))
        spouse = profile.spouse
        if spouse is not None and spouse.occupation not in (None, Occupation.HOMEMAKER):
            personal.append(
                item(str(len(personal) + 1), "配偶者収入", IncomeCategory.SPOUSE_SALARY)
            )

    corporate = [
        item("1", "売上", IncomeCategory.REVENUE),
        item("2", "その他収入", IncomeCategory.OTHER),
    ]
    return Section(personal=personal, corporate=corporate)


def default_expense_section() -> Section[ExpenseItem]:
    return Section(
        personal=[
            ExpenseItem("1", "生活費", ExpenseCategory.LIVING),
            ExpenseItem("2", "住居費", ExpenseCategory.HOUSING),
            ExpenseItem("3", "教育費", ExpenseCategory.EDUCATION),
            ExpenseItem("4", "その他", ExpenseCategory.OTHER),
        ],
        corporate=[
            ExpenseItem("1", "事業経費", ExpenseCategory.BUSINESS),
            ExpenseItem("2", "その他経費", ExpenseCategory.OTHER),
        ],
    )


def default_asset_section() -> Section[AssetItem]:
    return Section(
        personal=[
            AssetItem("1", "現金・預金", AssetCategory.CASH),
            AssetItem("2", "株式", AssetCategory.INVESTMENT, is_investment=True),
            AssetItem("3", "投資信託", AssetCategory.INVESTMENT, is_investment=True),
            AssetItem("4", "不動産", AssetCategory.PROPERTY),
        ],
        corporate=[
            AssetItem("1", "現金預金", AssetCategory.CASH),
            AssetItem("2", "設備", AssetCategory.PROPERTY),
            AssetItem("3", "在庫", AssetCategory.OTHER),
        ],
    )


def default_liability_section() -> Section[LiabilityItem]:
    return Section(
        personal=[
            LiabilityItem("1", "ローン", LiabilityCategory.LOAN, interest_rate=1.0, term_years=35),
            LiabilityItem("2", "クレジット残高", LiabilityCategory.CREDIT),
        ],
        corporate=[
            LiabilityItem("1", "借入金", LiabilityCategory.LOAN, interest_rate=2.0, term_years=10),
            LiabilityItem("2", "未払金", LiabilityCategory.OTHER),
        ],
    )


def _first(items: list, category):
    return next((i for i in items if i.category is category), None)


def _salary_occupation(profile: Profile, item: IncomeItem) -> Occupation | None:
    if item.category is IncomeCategory.SALARY:
        return profile.occupation
    if item.category is IncomeCategory.SPOUSE_SALARY:
        spouse = profile.spouse
        return (spouse.occupation if spouse is not None else None) or Occupation.HOMEMAKER
    return None


def _restate_salary(previous: IncomeItem, item: IncomeItem, occupation: Occupation) -> None:
    """Re-derive a salary item from its gross figures for the current occupation."""
    convert = requires_net_conversion(occupation)
    for year in sorted(set(previous.amounts) | set(previous.gross_amounts)):
        gross = previous.gross_for(year)
        if convert:
            item.record_gross(year, gross, calc_net_income(gross, occupation).net_income)
        else:
            item.amounts[year] = gross


def _carry_over_income(old: Section[IncomeItem], new: Section[IncomeItem], profile: Profile) -> None:
    """Keep entered amounts of manual items whose category survives the rebuild.

    Salary items are restated from gross, so a changed occupation never keeps
    the previous occupation's take-home figure.
    """
    for side in ("personal", "corporate"):
        for item in new.side(side):
            if item.is_auto_calculated:
                continue
            previous = old.find(side, item.id)
            if previous is None or previous.category is not item.category:
                continue
            occupation = _salary_occupation(profile, item) if side == "personal" else None
            if occupation is None:
                item.amounts = previous.amounts.copy()
                item.gross_amounts = previous.gross_amounts.copy()
                item.net_amounts = previous.net_amounts.copy()
            else:
                _restate_salary(previous, item, occupation)
            item.investment_ratio = previous.investment_ratio
            item.max_investment_amount = previous.max_investment_amount


def initialize_form_data(sim_input: SimulationInput) -> SimulationInput:
    """Rebuild income items and prefill living, housing and education amounts.

    Returns a new SimulationInput; the argument is left untouched.
    - 生活費: monthly_living_expense × 12 every year (no inflation)
    - 住居費 / 教育費: from the housing and education calculators
    - 持ち家: property value and loan principal recorded at the purchase year
    """
    profile = sim_input.profile
    params = sim_input.params

    income = default_income_section(params, profile)
    _carry_over_income(sim_input.income, income, profile)

    expense = copy.deepcopy(sim_input.expense) if sim_input.expense.personal else default_expense_section()
    assets = copy.deepcopy(sim_input.assets) if sim_input.assets.personal else default_asset_section()
    liabilities = (
        copy.deepcopy(sim_input.liabilities) if sim_input.liabilities.personal
        else default_liability_section()
    )

    living = _first(expense.personal, ExpenseCategory.LIVING)
    housing = _first(expense.personal, ExpenseCategory.HOUSING)
    education = _first(expense.personal, ExpenseCategory.EDUCATION)
    for year in profile.years:
        if living is not None:
            living.amounts[year] = profile.monthly_living_expense * 12
        if housing is not None:
            housing.amounts[year] = calc_housing_expense(profile.housing, year, profile.start_year)
        if education is not None:
            education.amounts[year] = calc_education_expense(
                profile.children,
                profile.planned_children,
                year,
                profile.start_year,
                params.education_cost_increase_rate,
            )

    own = profile.housing.own
    if profile.housing.type is HousingType.OWN and own is not None:
        real_estate = _first(assets.personal, AssetCategory.PROPERTY)
        if real_estate is not None:
            real_estate.amounts[own.purchase_year] = own.purchase_price
        loan = _first(liabilities.personal, LiabilityCategory.LOAN)
        if loan is not None:
            loan.amounts[own.purchase_year] = own.loan_amount

    return dataclasses.replace(
        sim_input,
        income=income,
        expense=expense,
        assets=assets,
        liabilities=liabilities,
        life_events=list(sim_input.life_events),
    )


def fill_salary(
    item: IncomeItem,
    occupation: Occupation | str,
    base_gross: float,
    start_year: int,
    end_year: int,
    raise_rate: float = 0.0,
) -> None:
    """Enter a gross salary (万円/年) raised by raise_rate %/年 for start_year..end_year.

    Occupations with social insurance keep the gross figure and show take-home pay.
    """
    convert = requires_net_conversion(occupation)
    for year in range(start_year, end_year + 1):
        gross = math.floor(base_gross * (1 + raise_rate / 100) ** (year - start_year))
        if convert:
            item.record_gross(year, gross, calc_net_income(gross, occupation).net_income)
        else:
            item.amounts[year] = gross
