"""Tests for mortgage and housing cost calculations."""

import pytest
from lifeplan_sim_jp.housing import calc_housing_expense, calc_monthly_mortgage
from lifeplan_sim_jp.models import HousingConfig, OwnConfig, RentConfig

START = 2025


class TestMonthlyMortgage:
    def test_zero_rate_is_exact_division(self):
        assert calc_monthly_mortgage(3000, 0, 35) == 3000 / (35 * 12)

    def test_zero_term(self):
        assert calc_monthly_mortgage(3000, 1.0, 0) == 0

    def test_typical(self):
        """3000万・1%・35年 → 約8.47万/月 → 8.5"""
        assert calc_monthly_mortgage(3000, 1.0, 35) == pytest.approx(8.5)

    def test_rounded_to_one_decimal(self):
        payment = calc_monthly_mortgage(4500, 0.8, 35)
        assert payment == pytest.approx(round(payment, 1))


class TestRentExpense:
    def setup_method(self):
        self.housing = HousingConfig(
            type="rent",
            rent=RentConfig(monthly_rent=10, annual_increase_rate=0, renewal_fee=10, renewal_interval=2),
        )

    def test_first_year(self):
        assert calc_housing_expense(self.housing, START, START) == pytest.approx(120)

    def test_before_first_renewal(self):
        assert calc_housing_expense(self.housing, START + 1, START) == pytest.approx(120)

    def test_accumulated_renewals_charged_every_year(self):
        """2年ごとの更新料は累計額が毎年加算される"""
        assert calc_housing_expense(self.housing, START + 2, START) == pytest.approx(130)
        assert calc_housing_expense(self.housing, START + 3, START) == pytest.approx(130)
        assert calc_housing_expense(self.housing, START + 4, START) == pytest.approx(140)

    def test_zero_interval_has_no_renewal(self):
        housing = HousingConfig(type="rent", rent=RentConfig(monthly_rent=10, renewal_fee=10, renewal_interval=0))
        assert calc_housing_expense(housing, START + 10, START) == pytest.approx(120)

    def test_escalation(self):
        """家賃上昇2%/年 → 1年後 122.4"""
        housing = HousingConfig(type="rent", rent=RentConfig(monthly_rent=10, annual_increase_rate=2.0))
        assert calc_housing_expense(housing, START + 1, START) == pytest.approx(122.4)


class TestOwnExpense:
    def setup_method(self):
        self.housing = HousingConfig(
            type="own",
            own=OwnConfig(
                purchase_year=START,
                purchase_price=4000,
                loan_amount=3000,
                interest_rate=1.0,
                loan_term_years=35,
                maintenance_cost_rate=1.0,
            ),
        )

    def test_before_purchase(self):
        assert calc_housing_expense(self.housing, START - 1, START - 1) == 0

    def test_during_loan(self):
        """返済 8.5×12 + 維持費 4000×1% = 142"""
        assert calc_housing_expense(self.housing, START, START) == pytest.approx(142)

    def test_last_loan_year(self):
        assert calc_housing_expense(self.housing, START + 34, START) == pytest.approx(142)

    def test_maintenance_only_after_loan_ends(self):
        assert calc_housing_expense(self.housing, START + 35, START) == pytest.approx(40)
        assert calc_housing_expense(self.housing, START + 40, START) == pytest.approx(40)

    def test_loan_end_year(self):
        assert self.housing.own.loan_end_year == START + 35
