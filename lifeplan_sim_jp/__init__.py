"""Life-Plan Cash-Flow Simulation Package."""

from lifeplan_sim_jp.params import SimulationParams, round1, round_half_up
from lifeplan_sim_jp.models import (
    AssetItem,
    Child,
    EducationPlan,
    ExpenseItem,
    HousingConfig,
    IncomeItem,
    LiabilityItem,
    LifeEvent,
    OwnConfig,
    PlannedChild,
    Profile,
    RentConfig,
    Section,
    SimulationInput,
    SpouseInfo,
    YearAmounts,
)
from lifeplan_sim_jp.tax import calc_net_income, calc_income_tax, calc_salary_deduction
from lifeplan_sim_jp.housing import calc_housing_expense, calc_monthly_mortgage
from lifeplan_sim_jp.education import calc_education_expense
from lifeplan_sim_jp.pension import (
    calc_pension_adjustment_rate,
    calculate_pension,
    estimate_annual_pension,
    pension_for_year,
    spouse_pension_for_year,
)
from lifeplan_sim_jp.simulation import Projection, YearRecord, project, summarize
from lifeplan_sim_jp.store import SimulatorStore

__all__ = [
    "SimulationParams",
    "round1",
    "round_half_up",
    "AssetItem",
    "Child",
    "EducationPlan",
    "ExpenseItem",
    "HousingConfig",
    "IncomeItem",
    "LiabilityItem",
    "LifeEvent",
    "OwnConfig",
    "PlannedChild",
    "Profile",
    "RentConfig",
    "Section",
    "SimulationInput",
    "SpouseInfo",
    "YearAmounts",
    "calc_net_income",
    "calc_income_tax",
    "calc_salary_deduction",
    "calc_housing_expense",
    "calc_monthly_mortgage",
    "calc_education_expense",
    "calc_pension_adjustment_rate",
    "calculate_pension",
    "estimate_annual_pension",
    "pension_for_year",
    "spouse_pension_for_year",
    "Projection",
    "YearRecord",
    "project",
    "summarize",
    "SimulatorStore",
]
