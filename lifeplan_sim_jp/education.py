"""Per-child schooling cost schedule (保育園〜大学)."""

from lifeplan_sim_jp.models import (
    Child,
    EducationPlan,
    PlannedChild,
    SchoolChoice,
    UniversityChoice,
)
from lifeplan_sim_jp.params import round1

# 段階別の年間教育費（万円/年）: 公立, 私立
_SCHOOL_COSTS: dict[str, dict[SchoolChoice, float]] = {
    "nursery":     {SchoolChoice.PUBLIC: 23.3, SchoolChoice.PRIVATE: 50},
    "preschool":   {SchoolChoice.PUBLIC: 58.3, SchoolChoice.PRIVATE: 100},
    "elementary":  {SchoolChoice.PUBLIC: 41.7, SchoolChoice.PRIVATE: 83.3},
    "junior_high": {SchoolChoice.PUBLIC: 66.7, SchoolChoice.PRIVATE: 133.3},
    "high_school": {SchoolChoice.PUBLIC: 83.3, SchoolChoice.PRIVATE: 250},
}

# 大学（学部4年）の年間費用（万円/年）
_UNIVERSITY_COSTS: dict[UniversityChoice, float] = {
    UniversityChoice.PUBLIC_HUMANITIES: 325,
    UniversityChoice.PUBLIC_SCIENCE: 375,
    UniversityChoice.PRIVATE_HUMANITIES: 550,
    UniversityChoice.PRIVATE_SCIENCE: 650,
}

# (開始年齢, 終了年齢, 段階)
EDUCATION_STAGES: tuple[tuple[int, int, str], ...] = (
    (0, 2, "nursery"),
    (3, 5, "preschool"),
    (6, 11, "elementary"),
    (12, 14, "junior_high"),
    (15, 17, "high_school"),
    (18, 21, "university"),
)


def education_stage(child_age: int) -> str | None:
    """Return the schooling stage for a child's age, None outside 0〜21."""
    for lo, hi, stage in EDUCATION_STAGES:
        if lo <= child_age <= hi:
            return stage
    return None


def calc_child_education_cost(plan: EducationPlan, child_age: int) -> float:
    """Annual cost (万円/年, start-year prices) for one child at the given age."""
    stage = education_stage(child_age)
    if stage is None:
        return 0.0
    choice = getattr(plan, stage)
    if stage == "university":
        return _UNIVERSITY_COSTS.get(choice, 0.0)
    return _SCHOOL_COSTS[stage].get(choice, 0.0)


def calc_education_expense(
    children: list[Child],
    planned_children: list[PlannedChild],
    year: int,
    start_year: int,
    increase_rate: float,
) -> float:
    """Total education expense (万円/年) across all children in a calendar year.

    Existing children age from their current age; planned children are born
    years_from_now after start_year. Costs are inflated by
    (1 + increase_rate/100) ** years since start_year.
    """
    years_since_start = year - start_year
    multiplier = (1 + increase_rate / 100) ** years_since_start

    total = 0.0
    for child in children:
        child_age = child.current_age + years_since_start
        total += calc_child_education_cost(child.education_plan, child_age) * multiplier
    for planned in planned_children:
        if years_since_start < planned.years_from_now:
            continue
        child_age = years_since_start - planned.years_from_now
        total += calc_child_education_cost(planned.education_plan, child_age) * multiplier
    return round1(total)
