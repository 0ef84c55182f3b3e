"""Tests for SimulatorStore."""

import logging

import pytest
from lifeplan_sim_jp.defaults import fill_salary
from lifeplan_sim_jp.models import (
    IncomeCategory,
    IncomeItem,
    LifeEvent,
    Profile,
    Section,
    SimulationInput,
    SpouseInfo,
)
from lifeplan_sim_jp.store import SimulatorStore
from lifeplan_sim_jp.tax import calc_net_income

START = 2025


def _store(**profile_kwargs) -> SimulatorStore:
    profile_kwargs.setdefault("current_age", 30)
    profile_kwargs.setdefault("start_year", START)
    profile_kwargs.setdefault("monthly_living_expense", 20)
    return SimulatorStore(SimulationInput(profile=Profile(**profile_kwargs)))


class TestInitialState:
    def test_default_store(self):
        store = _store()
        assert len(store.ledger) == 51
        assert store.ledger[START].living_expense == 240
        assert store.history == []
        assert store.life_events == []

    def test_without_initialize(self):
        store = SimulatorStore(SimulationInput(profile=Profile(start_year=START)), initialize=False)
        assert store.sim_input.income.personal == []
        assert len(store.ledger) == 51

    def test_no_argument(self):
        store = SimulatorStore()
        assert len(store.ledger) == store.sim_input.profile.horizon_years


class TestCommitIncomeAmount:
    def test_employee_salary_converted(self):
        store = _store()
        assert store.commit_income_amount("1", START, 500)
        item = store.sim_input.income.find("personal", "1")
        assert item.gross_amounts[START] == 500
        assert item.amounts[START] == 383
        assert store.ledger[START].main_income == 383

    def test_self_employed_stored_raw(self):
        store = _store(occupation="self_employed")
        store.commit_income_amount("1", START, 500)
        item = store.sim_input.income.find("personal", "1")
        assert item.amounts[START] == 500
        assert START not in item.gross_amounts
        assert store.ledger[START].main_income == 500

    def test_side_income_stored_raw(self):
        store = _store()
        store.commit_income_amount("3", START, 100)
        assert store.ledger[START].side_income == 100

    def test_spouse_salary_uses_spouse_occupation(self):
        store = _store(
            marital_status="married",
            spouse=SpouseInfo(current_age=30, occupation="company_employee"),
        )
        spouse_item = next(
            i for i in store.sim_input.income.personal if i.category is IncomeCategory.SPOUSE_SALARY
        )
        store.commit_income_amount(spouse_item.id, START, 500)
        assert spouse_item.gross_amounts[START] == 500
        assert store.ledger[START].spouse_income == 383

    def test_history_recorded(self):
        store = _store()
        store.commit_income_amount("1", START, 500)
        store.set_amount("expense", "personal", "4", START, 30)
        assert [(h.kind, h.item_id, h.value) for h in store.history] == [
            ("income", "1", 500), ("expense", "4", 30),
        ]
        store.clear_history()
        assert store.history == []

    def test_raw_edit_replaces_recorded_net(self):
        store = _store()
        store.commit_income_amount("1", START, 500)
        store.set_amount("income", "personal", "1", START, 800)
        item = store.sim_input.income.find("personal", "1")
        assert START not in item.gross_amounts
        assert START not in item.net_amounts
        assert store.ledger[START].main_income == calc_net_income(800, "company_employee").net_income

    def test_corporate_income(self):
        store = _store()
        store.commit_income_amount("1", START, 1000, side="corporate")
        assert store.ledger[START].corporate_income == 1000


class TestItemLookup:
    def test_unknown_kind(self):
        with pytest.raises(ValueError, match="項目種別"):
            _store().set_amount("budget", "personal", "1", START, 10)

    def test_unknown_id(self):
        with pytest.raises(KeyError):
            _store().set_amount("asset", "personal", "99", START, 10)

    def test_unknown_side(self):
        with pytest.raises(ValueError):
            _store().set_amount("asset", "household", "1", START, 10)

    def test_asset_amount_changes_opening_balance(self):
        store = _store()
        store.set_amount("asset", "personal", "1", START, 500)
        assert store.ledger[START].personal_assets == 500


class TestRecompute:
    def test_failure_keeps_previous_ledger(self, monkeypatch, caplog):
        store = _store()
        before = store.ledger

        def broken(sim_input):
            raise RuntimeError("boom")

        monkeypatch.setattr("lifeplan_sim_jp.store.project", broken)
        with caplog.at_level(logging.ERROR, logger="lifeplan_sim_jp.store"):
            assert store.set_parameters(investment_return=5.0) is False
        assert store.ledger is before
        assert "recompute failed" in caplog.text
        assert store.sim_input.params.investment_return == 5.0

    def test_set_parameters(self):
        store = _store()
        store.set_amount("asset", "personal", "2", START, 1000)
        store.set_parameters(investment_return=3.0)
        assert store.ledger[START].investment_income == pytest.approx(30)


class TestSetProfile:
    def test_marriage_adds_spouse_items(self):
        store = _store()
        assert len(store.sim_input.income.personal) == 4
        store.set_profile(
            marital_status="married",
            spouse=SpouseInfo(current_age=28, occupation="part_time_with_pension"),
        )
        categories = [i.category for i in store.sim_input.income.personal]
        assert IncomeCategory.SPOUSE_PENSION in categories
        assert IncomeCategory.SPOUSE_SALARY in categories

    def test_manual_amounts_survive(self):
        store = _store()
        store.commit_income_amount("1", START, 500)
        store.set_profile(monthly_living_expense=25)
        assert store.ledger[START].living_expense == 300
        assert store.ledger[START].main_income == 383

    def _store_with_salary(self) -> SimulatorStore:
        store = _store()
        fill_salary(store.sim_input.income.find("personal", "1"), "company_employee", 500, START, START + 1)
        store.recompute()
        assert store.ledger[START].main_income == 383
        return store

    def test_switch_to_self_employed_uses_gross(self):
        store = self._store_with_salary()
        store.set_profile(occupation="self_employed")
        item = store.sim_input.income.find("personal", "1")
        assert item.amounts[START] == 500
        assert item.net_amounts == {}
        assert store.ledger[START].main_income == 500
        assert store.ledger[START + 1].main_income == 500

    def test_switch_to_part_time_without_pension(self):
        """額面500万・社保なし: 所得税25 + 住民税34 → 手取り441"""
        store = self._store_with_salary()
        store.set_profile(occupation="part_time_without_pension")
        assert store.ledger[START].main_income == 441

    def test_switch_back_to_employee_restates_net(self):
        store = self._store_with_salary()
        store.set_profile(occupation="self_employed")
        store.set_profile(occupation="company_employee")
        item = store.sim_input.income.find("personal", "1")
        assert item.gross_amounts[START] == 500
        assert store.ledger[START].main_income == 383

    def test_shorter_horizon(self):
        store = _store()
        store.set_profile(death_age=70)
        assert max(store.ledger) == START + 40

    def test_invalid_profile_raises(self):
        store = _store()
        with pytest.raises(ValueError):
            store.set_profile(pension_start_age=90)
        assert store.sim_input.profile.pension_start_age == 65


class TestSetSections:
    def test_replace_income(self):
        store = _store()
        store.set_income(Section(personal=[IncomeItem("1", "給与収入", "salary", amounts={START: 100})]))
        # 社保15 + 所得税1 + 住民税3
        assert store.ledger[START].main_income == 81

    def test_replace_assets_and_liabilities(self):
        store = _store()
        store.set_assets(Section())
        store.set_liabilities(Section())
        assert store.ledger[START].personal_assets == 0


class TestLifeEvents:
    def test_add_and_remove(self):
        store = _store()
        event = LifeEvent(year=2030, description="家族旅行", type="expense", category="旅行", amount=80)
        assert store.add_life_event(event)
        assert store.life_events == [event]
        assert store.remove_life_event(0)
        assert store.life_events == []

    def test_events_do_not_change_ledger(self):
        store = _store()
        before = dict(store.ledger)
        store.add_life_event(LifeEvent(2030, "退職金", "income", "その他", 1500))
        assert store.ledger == before


class TestSnapshot:
    def test_round_trip(self, tmp_path):
        store = _store()
        store.commit_income_amount("1", START, 500)
        store.add_life_event(LifeEvent(2030, "家族旅行", "expense", "旅行", 80))
        path = store.save_snapshot(tmp_path / "snap.json")

        restored = SimulatorStore(initialize=False)
        assert restored.load_snapshot(path)
        assert restored.ledger == store.ledger
        assert restored.life_events == store.life_events
        item = restored.sim_input.income.find("personal", "1")
        assert item.gross_amounts[START] == 500

    def test_missing_file_leaves_state(self, tmp_path):
        store = _store()
        before = store.sim_input
        assert store.load_snapshot(tmp_path / "none.json") is False
        assert store.sim_input is before

    def test_malformed_file_leaves_state(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        store = _store()
        before = store.sim_input
        assert store.load_snapshot(path) is False
        assert store.sim_input is before
