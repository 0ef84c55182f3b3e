"""Tests for JSON snapshot save/load."""

import json
import logging

import pytest
from lifeplan_sim_jp import snapshot
from lifeplan_sim_jp.defaults import fill_salary, initialize_form_data
from lifeplan_sim_jp.models import (
    Child,
    EducationPlan,
    HousingConfig,
    LifeEvent,
    OwnConfig,
    PlannedChild,
    Profile,
    SimulationInput,
    SpouseInfo,
)
from lifeplan_sim_jp.params import SimulationParams
from lifeplan_sim_jp.simulation import project

START = 2025


@pytest.fixture
def sim_input():
    profile = Profile(
        current_age=35, start_year=START, death_age=90, monthly_living_expense=25,
        marital_status="planning",
        spouse=SpouseInfo(age=33, marriage_age=37, occupation="part_time_with_pension"),
        housing=HousingConfig(type="own", own=OwnConfig(purchase_year=2027, purchase_price=5000, loan_amount=4500)),
        children=[Child(current_age=3, education_plan=EducationPlan(high_school="私立"))],
        planned_children=[PlannedChild(years_from_now=2)],
        pension_start_age=67,
    )
    sim_input = initialize_form_data(SimulationInput(
        profile=profile,
        params=SimulationParams(investment_return=3.0),
        life_events=[LifeEvent(2045, "退職金", "income", "その他", 1500)],
    ))
    fill_salary(sim_input.income.personal[0], "company_employee", 600, START, 2054, raise_rate=1.0)
    return sim_input


class TestToDict:
    def test_top_level_keys(self, sim_input):
        data = snapshot.to_dict(sim_input)
        assert list(data) == ["profile", "parameters", "income", "expense", "assets", "liabilities", "life_events"]

    def test_plain_values(self, sim_input):
        data = snapshot.to_dict(sim_input)
        assert data["profile"]["occupation"] == "company_employee"
        assert data["profile"]["housing"]["type"] == "own"
        salary = data["income"]["personal"][0]
        assert salary["category"] == "salary"
        assert salary["gross_amounts"]["2025"] == 600
        assert data["life_events"][0]["type"] == "income"

    def test_json_serializable(self, sim_input):
        json.dumps(snapshot.to_dict(sim_input), ensure_ascii=False)


class TestRoundTrip:
    def test_from_dict_restores_input(self, sim_input):
        restored = snapshot.from_dict(snapshot.to_dict(sim_input))
        assert restored == sim_input

    def test_save_and_load(self, sim_input, tmp_path):
        path = snapshot.save(tmp_path / "nested" / "snap.json", sim_input)
        restored = snapshot.load(path)
        assert restored == sim_input
        assert project(restored).ledger == project(sim_input).ledger

    def test_japanese_kept_readable(self, sim_input, tmp_path):
        path = snapshot.save(tmp_path / "snap.json", sim_input)
        assert "給与収入" in path.read_text(encoding="utf-8")

    def test_unknown_fields_ignored(self, sim_input):
        data = snapshot.to_dict(sim_input)
        data["profile"]["nickname"] = "x"
        data["income"]["personal"][0]["color"] = "red"
        restored = snapshot.from_dict(data)
        assert restored.profile == sim_input.profile

    def test_missing_sections_default_empty(self):
        restored = snapshot.from_dict({"profile": {"current_age": 40, "start_year": START}})
        assert restored.profile.current_age == 40
        assert restored.income.personal == []
        assert restored.life_events == []


class TestLoadFailures:
    def test_missing_file(self, tmp_path):
        assert snapshot.load(tmp_path / "none.json") is None

    def test_malformed_json(self, tmp_path, caplog):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with caplog.at_level(logging.WARNING, logger="lifeplan_sim_jp.snapshot"):
            assert snapshot.load(path) is None
        assert "unreadable" in caplog.text

    def test_missing_profile(self, tmp_path):
        path = tmp_path / "snap.json"
        path.write_text(json.dumps({"income": {}}), encoding="utf-8")
        assert snapshot.load(path) is None

    def test_invalid_enum(self, sim_input, tmp_path):
        data = snapshot.to_dict(sim_input)
        data["profile"]["occupation"] = "astronaut"
        path = tmp_path / "snap.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        assert snapshot.load(path) is None

    def test_wrong_shape(self, tmp_path):
        path = tmp_path / "snap.json"
        path.write_text("[1, 2, 3]", encoding="utf-8")
        assert snapshot.load(path) is None
