"""JSON snapshot of the full input state (profile, parameters, sections, life events)."""

import dataclasses
import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any

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
from lifeplan_sim_jp.params import SimulationParams

logger = logging.getLogger(__name__)

_SECTION_ITEMS = {
    "income": IncomeItem,
    "expense": ExpenseItem,
    "assets": AssetItem,
    "liabilities": LiabilityItem,
}


def _plain(value: Any) -> Any:
    """Convert dataclasses, enums and year maps into JSON-ready values."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, YearAmounts):
        return {str(year): amount for year, amount in sorted(value.items())}
    if dataclasses.is_dataclass(value):
        return {f.name: _plain(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, dict):
        return {str(k): _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def to_dict(sim_input: SimulationInput) -> dict[str, Any]:
    return {
        "profile": _plain(sim_input.profile),
        "parameters": _plain(sim_input.params),
        "income": _plain(sim_input.income),
        "expense": _plain(sim_input.expense),
        "assets": _plain(sim_input.assets),
        "liabilities": _plain(sim_input.liabilities),
        "life_events": _plain(sim_input.life_events),
    }


def _known(cls, data: dict[str, Any]) -> dict[str, Any]:
    """Drop keys cls does not declare."""
    names = {f.name for f in dataclasses.fields(cls)}
    return {k: v for k, v in data.items() if k in names}


def _education_plan(data: dict[str, Any] | None) -> EducationPlan:
    return EducationPlan(**_known(EducationPlan, data or {}))


def _profile(data: dict[str, Any]) -> Profile:
    fields = _known(Profile, data)

    housing = fields.pop("housing", None)
    if housing is not None:
        rent = housing.get("rent")
        own = housing.get("own")
        fields["housing"] = HousingConfig(
            type=housing.get("type", "rent"),
            rent=RentConfig(**_known(RentConfig, rent)) if rent else None,
            own=OwnConfig(**_known(OwnConfig, own)) if own else None,
        )

    spouse = fields.pop("spouse", None)
    if spouse is not None:
        fields["spouse"] = SpouseInfo(**_known(SpouseInfo, spouse))

    fields["children"] = [
        Child(current_age=c["current_age"], education_plan=_education_plan(c.get("education_plan")))
        for c in fields.get("children", [])
    ]
    fields["planned_children"] = [
        PlannedChild(
            years_from_now=c["years_from_now"],
            education_plan=_education_plan(c.get("education_plan")),
        )
        for c in fields.get("planned_children", [])
    ]
    return Profile(**fields)


def _section(item_cls, data: dict[str, Any] | None) -> Section:
    data = data or {}
    return Section(
        personal=[item_cls(**_known(item_cls, d)) for d in data.get("personal", [])],
        corporate=[item_cls(**_known(item_cls, d)) for d in data.get("corporate", [])],
    )


def from_dict(data: dict[str, Any]) -> SimulationInput:
    """Rebuild a SimulationInput. Raises KeyError/TypeError/ValueError on invalid content."""
    sections = {key: _section(cls, data.get(key)) for key, cls in _SECTION_ITEMS.items()}
    return SimulationInput(
        profile=_profile(data["profile"]),
        params=SimulationParams(**_known(SimulationParams, data.get("parameters", {}))),
        life_events=[LifeEvent(**_known(LifeEvent, e)) for e in data.get("life_events", [])],
        **sections,
    )


def save(path: str | Path, sim_input: SimulationInput) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(to_dict(sim_input), f, ensure_ascii=False, indent=2)
    return path


def load(path: str | Path) -> SimulationInput | None:
    """Load a snapshot. Missing or malformed files yield None (all-or-nothing)."""
    path = Path(path)
    if not path.exists():
        logger.info("snapshot not found: %s", path)
        return None
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        return from_dict(data)
    except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError) as e:
        logger.warning("snapshot %s is unreadable, skipped: %s", path, e)
        return None
