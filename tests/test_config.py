"""Tests for config loading, CLI resolution and input building."""

import argparse

import pytest
from lifeplan_sim_jp.config import (
    DEFAULTS,
    build_input,
    build_params,
    build_profile,
    education_private_from,
    load_config,
    parse_args,
    parse_int_list,
    parse_life_events,
    resolve,
)
from lifeplan_sim_jp.models import (
    AssetCategory,
    HousingType,
    IncomeCategory,
    SchoolChoice,
    UniversityChoice,
)
from lifeplan_sim_jp.simulation import project

START = 2025


def _resolved(**overrides) -> dict:
    r = dict(DEFAULTS, start_year=START)
    r.update(overrides)
    return r


class TestLoadConfig:
    def test_missing_file(self, tmp_path):
        assert load_config(tmp_path / "config.toml") == {}

    def test_lists_normalized(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text(
            'age = 35\n'
            'children = [5, 8]\n'
            'planned_children = [2]\n'
            'life_events = [[2030, "expense", "旅行", 50, "海外旅行"], [2045, "income", "その他", 1500, "退職金"]]\n',
            encoding="utf-8",
        )
        config = load_config(path)
        assert config["age"] == 35
        assert config["children"] == "5,8"
        assert config["planned_children"] == "2"
        assert config["life_events"] == "2030:expense:旅行:50:海外旅行,2045:income:その他:1500:退職金"

    def test_false_means_empty(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text("children = false\n", encoding="utf-8")
        assert load_config(path)["children"] == ""

    def test_malformed_exits(self, tmp_path, capsys):
        path = tmp_path / "config.toml"
        path.write_text("age = \n", encoding="utf-8")
        with pytest.raises(SystemExit) as exc:
            load_config(path)
        assert exc.value.code == 1
        assert "設定ファイルの読み込みに失敗" in capsys.readouterr().err

    def test_example_file_loads(self):
        from pathlib import Path
        example = Path(__file__).resolve().parent.parent / "config.toml.example"
        config = load_config(example)
        assert config["housing"] == "own"
        assert config["children"] == "3"


class TestResolve:
    def test_priority(self):
        args = argparse.Namespace(age=40, living=None)
        r = resolve(args, {"age": 35, "living": 30.0})
        assert r["age"] == 40
        assert r["living"] == 30.0
        assert r["income"] == DEFAULTS["income"]

    def test_all_keys_present(self):
        r = resolve(argparse.Namespace(), {})
        assert set(r) == set(DEFAULTS)


class TestParseHelpers:
    @pytest.mark.parametrize("text,expected", [
        ("5,8", [5, 8]),
        ("3", [3]),
        ("", []),
        ("none", []),
        ("5, 8,", [5, 8]),
    ])
    def test_parse_int_list(self, text, expected):
        assert parse_int_list(text) == expected

    def test_parse_life_events(self):
        events = parse_life_events("2030:expense:旅行:50:海外旅行, 2045:income:その他:1500:退職金")
        assert [(e.year, e.type.value, e.category, e.amount, e.description) for e in events] == [
            (2030, "expense", "旅行", 50.0, "海外旅行"),
            (2045, "income", "その他", 1500.0, "退職金"),
        ]

    def test_description_may_contain_colon(self):
        events = parse_life_events("2030:expense:旅行:50:旅行: 北海道")
        assert events[0].description == "旅行: 北海道"

    def test_parse_life_events_empty(self):
        assert parse_life_events("") == []

    def test_parse_life_events_bad_shape(self):
        with pytest.raises(ValueError, match="形式"):
            parse_life_events("2030:expense:50")

    def test_parse_life_events_bad_category(self):
        with pytest.raises(ValueError, match="カテゴリ"):
            parse_life_events("2030:income:旅行:50:旅行")


class TestEducationPrivateFrom:
    def test_all_public(self):
        plan = education_private_from("")
        assert plan.nursery is SchoolChoice.PUBLIC
        assert plan.high_school is SchoolChoice.PUBLIC
        assert plan.university is UniversityChoice.PUBLIC_HUMANITIES

    def test_from_high_school(self):
        plan = education_private_from("高校", "理系")
        assert plan.junior_high is SchoolChoice.PUBLIC
        assert plan.high_school is SchoolChoice.PRIVATE
        assert plan.university is UniversityChoice.PRIVATE_SCIENCE

    def test_university_only(self):
        plan = education_private_from("大学")
        assert plan.high_school is SchoolChoice.PUBLIC
        assert plan.university is UniversityChoice.PRIVATE_HUMANITIES

    def test_invalid_stage(self):
        with pytest.raises(ValueError, match="私立切替段階"):
            education_private_from("大学院")

    def test_invalid_field(self):
        with pytest.raises(ValueError, match="系統"):
            education_private_from("", "芸術")


class TestBuildProfile:
    def test_defaults(self):
        profile = build_profile(_resolved())
        assert profile.current_age == 30
        assert profile.start_year == START
        assert profile.housing.type is HousingType.RENT
        assert profile.housing.rent.monthly_rent == 10.0
        assert profile.spouse is None

    def test_own_purchase_year(self):
        profile = build_profile(_resolved(housing="own", purchase_in=3))
        assert profile.housing.own.purchase_year == START + 3
        assert profile.housing.rent is None

    def test_married_spouse(self):
        profile = build_profile(_resolved(marital_status="married", spouse_age=28))
        assert profile.spouse.current_age == 28
        assert profile.spouse.age is None
        assert profile.spouse.occupation is None

    def test_children(self):
        profile = build_profile(_resolved(children="5,8", planned_children="2", education_private_from="中学"))
        assert [c.current_age for c in profile.children] == [5, 8]
        assert profile.planned_children[0].years_from_now == 2
        assert profile.children[0].education_plan.junior_high is SchoolChoice.PRIVATE

    def test_invalid_occupation(self):
        with pytest.raises(ValueError, match="職業"):
            build_profile(_resolved(occupation="astronaut"))

    def test_start_year_defaults_to_today(self):
        from datetime import date
        assert build_profile(dict(DEFAULTS)).start_year == date.today().year


class TestBuildParams:
    def test_mapping(self):
        params = build_params(_resolved(inflation=2.0, investment_return=4.0, max_investment=0.0))
        assert params.inflation_rate == 2.0
        assert params.investment_return == 4.0
        assert params.max_investment_amount == 0.0


class TestBuildInput:
    def test_defaults(self):
        sim_input = build_input(_resolved())
        salary = sim_input.income.find("personal", "1")
        assert salary.gross_amounts[START] == 500
        assert salary.amounts[START] == 383
        assert 2059 in salary.amounts
        assert 2060 not in salary.amounts
        cash = next(a for a in sim_input.assets.personal if a.category is AssetCategory.CASH)
        assert cash.amounts[START] == 500

    def test_salary_raise(self):
        salary = build_input(_resolved(income_raise=2.0)).income.find("personal", "1")
        assert salary.gross_amounts[START + 1] == 510

    def test_investments_on_first_investment_asset(self):
        sim_input = build_input(_resolved(investments=300.0))
        investments = [a for a in sim_input.assets.personal if a.is_investment]
        assert investments[0].amounts[START] == 300
        assert START not in investments[1].amounts

    def test_spouse_salary_from_marriage(self):
        sim_input = build_input(_resolved(
            marital_status="planning", spouse_age=30, marriage_age=32,
            spouse_occupation="part_time_with_pension", spouse_income=150.0,
        ))
        spouse = next(i for i in sim_input.income.personal if i.category is IncomeCategory.SPOUSE_SALARY)
        assert START + 1 not in spouse.gross_amounts
        assert spouse.gross_amounts[START + 2] == 150

    def test_life_events(self):
        sim_input = build_input(_resolved(life_events="2030:expense:旅行:50:海外旅行"))
        assert sim_input.life_events[0].year == 2030

    def test_projects(self):
        projection = project(build_input(_resolved()))
        r = projection.ledger[START]
        assert r.personal_assets == 500
        assert r.main_income == 383
        assert r.housing_expense == 120


class TestParseArgs:
    def test_cli_overrides(self, tmp_path):
        config = tmp_path / "config.toml"
        config.write_text("age = 35\nliving = 25.0\n", encoding="utf-8")
        r, _ = parse_args("test", argv=["--config", str(config), "--age", "40"])
        assert r["age"] == 40
        assert r["living"] == 25.0
        assert r["income"] == 500.0

    def test_extra_args(self, tmp_path):
        def add(parser):
            parser.add_argument("--csv", type=str, default=None)

        r, args = parse_args("test", add, argv=["--config", str(tmp_path / "none.toml"), "--csv", "out.csv"])
        assert args.csv == "out.csv"
        assert r["age"] == 30

    def test_store_true_flag(self, tmp_path):
        r, _ = parse_args("test", argv=["--config", str(tmp_path / "none.toml"), "--work-after-pension"])
        assert r["work_after_pension"] is True
