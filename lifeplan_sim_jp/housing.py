"""Rent escalation and mortgage/maintenance housing cost calculations."""

import math

from lifeplan_sim_jp.models import HousingConfig, HousingType
from lifeplan_sim_jp.params import round1


def _calc_equal_payment(principal: float, monthly_rate: float, months: int) -> float:
    """Calculate monthly loan payment (元利均等返済)"""
    if monthly_rate == 0:
        return principal / months
    r = monthly_rate
    n = months
    return principal * r * (1 + r) ** n / ((1 + r) ** n - 1)


def calc_monthly_mortgage(loan_amount: float, annual_rate: float, term_years: int) -> float:
    """Monthly mortgage payment (万円/月) for an annual rate given in percent.

    Zero rate → principal / months exactly. Otherwise rounded to 0.1万円.
    """
    months = term_years * 12
    if months <= 0:
        return 0.0
    monthly_rate = annual_rate / 100 / 12
    payment = _calc_equal_payment(loan_amount, monthly_rate, months)
    if monthly_rate == 0:
        return payment
    return round1(payment)


def calc_housing_expense(housing: HousingConfig, year: int, start_year: int) -> float:
    """Annual housing cost (万円/年) in a calendar year.

    rent: monthly × 12 escalated by annual_increase_rate since start_year, plus the
    accumulated renewal fees (更新料) up to that year.
    own: 0 before purchase; mortgage + maintenance while the loan runs;
    maintenance only from loan_end_year.
    """
    if housing.type is HousingType.RENT and housing.rent is not None:
        rent = housing.rent
        years_since_start = year - start_year
        annual_rent = rent.monthly_rent * 12
        escalated = annual_rent * (1 + rent.annual_increase_rate / 100) ** years_since_start
        renewal_cost = 0.0
        if rent.renewal_interval > 0 and years_since_start > 0:
            renewal_count = math.floor(years_since_start / rent.renewal_interval)
            renewal_cost = renewal_count * rent.renewal_fee
        return round1(escalated + renewal_cost)

    if housing.type is HousingType.OWN and housing.own is not None:
        own = housing.own
        if year < own.purchase_year:
            return 0.0
        maintenance = own.purchase_price * (own.maintenance_cost_rate / 100)
        if year >= own.loan_end_year:
            return maintenance
        monthly = calc_monthly_mortgage(own.loan_amount, own.interest_rate, own.loan_term_years)
        return round1(monthly * 12 + maintenance)

    return 0.0
