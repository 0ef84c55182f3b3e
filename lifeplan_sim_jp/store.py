"""Simulation state owner: holds the input, recomputes the ledger on every change."""

import dataclasses
import logging
import time
from dataclasses import dataclass
from pathlib import Path

from lifeplan_sim_jp import snapshot
from lifeplan_sim_jp.defaults import initialize_form_data
from lifeplan_sim_jp.models import (
    AssetItem,
    ExpenseItem,
    IncomeCategory,
    IncomeItem,
    LiabilityItem,
    LifeEvent,
    Occupation,
    Section,
    SimulationInput,
)
from lifeplan_sim_jp.simulation import Projection, YearRecord, project
from lifeplan_sim_jp.tax import calc_net_income, requires_net_conversion

logger = logging.getLogger(__name__)

_SECTION_ATTRS = {
    "income": "income",
    "expense": "expense",
    "asset": "assets",
    "liability": "liabilities",
}


@dataclass(frozen=True)
class HistoryEntry:
    timestamp: float
    kind: str
    section: str
    item_id: str
    year: int
    value: float


class SimulatorStore:
    """Single-caller state store.

    Every mutation triggers recompute(): the ledger is rebuilt into a fresh
    Projection and swapped in only on success. On failure the error is logged
    and the previous ledger stays in place.
    """

    def __init__(self, sim_input: SimulationInput | None = None, initialize: bool = True):
        self.sim_input = sim_input if sim_input is not None else SimulationInput()
        if initialize:
            self.sim_input = initialize_form_data(self.sim_input)
        self.projection = Projection()
        self.history: list[HistoryEntry] = []
        self.recompute()

    @property
    def ledger(self) -> dict[int, YearRecord]:
        return self.projection.ledger

    @property
    def life_events(self) -> list[LifeEvent]:
        return self.sim_input.life_events

    def recompute(self) -> bool:
        try:
            projection = project(self.sim_input)
        except Exception:
            logger.exception("ledger recompute failed; keeping previous ledger")
            return False
        self.projection = projection
        return True

    # -- profile / parameters -------------------------------------------------

    def set_profile(self, **changes) -> bool:
        """Update profile fields and re-derive the prefilled form data."""
        profile = dataclasses.replace(self.sim_input.profile, **changes)
        self.sim_input = initialize_form_data(dataclasses.replace(self.sim_input, profile=profile))
        return self.recompute()

    def set_parameters(self, **changes) -> bool:
        params = dataclasses.replace(self.sim_input.params, **changes)
        self.sim_input = dataclasses.replace(self.sim_input, params=params)
        return self.recompute()

    # -- sections ---------------------------------------------------------------

    def set_income(self, section: Section[IncomeItem]) -> bool:
        self.sim_input = dataclasses.replace(self.sim_input, income=section)
        return self.recompute()

    def set_expenses(self, section: Section[ExpenseItem]) -> bool:
        self.sim_input = dataclasses.replace(self.sim_input, expense=section)
        return self.recompute()

    def set_assets(self, section: Section[AssetItem]) -> bool:
        self.sim_input = dataclasses.replace(self.sim_input, assets=section)
        return self.recompute()

    def set_liabilities(self, section: Section[LiabilityItem]) -> bool:
        self.sim_input = dataclasses.replace(self.sim_input, liabilities=section)
        return self.recompute()

    def _item(self, kind: str, side: str, item_id: str):
        if kind not in _SECTION_ATTRS:
            raise ValueError(f"項目種別「{kind}」は不正です（{', '.join(_SECTION_ATTRS)}）")
        section = getattr(self.sim_input, _SECTION_ATTRS[kind])
        item = section.find(side, item_id)
        if item is None:
            raise KeyError(f"{kind}/{side} に項目ID {item_id} がありません")
        return item

    def _record(self, kind: str, side: str, item_id: str, year: int, value: float) -> None:
        self.history.append(HistoryEntry(
            timestamp=time.time(), kind=kind, section=side, item_id=item_id, year=year, value=value,
        ))

    def set_amount(self, kind: str, side: str, item_id: str, year: int, value: float) -> bool:
        """Set one raw amount (万円) and record it in the history.

        For income items this replaces any gross/net pair recorded for the year.
        """
        item = self._item(kind, side, item_id)
        if kind == "income":
            item.gross_amounts.pop(year, None)
            item.net_amounts.pop(year, None)
        item.amounts[year] = value
        self._record(kind, side, item_id, year, value)
        return self.recompute()

    def commit_income_amount(self, item_id: str, year: int, gross: float, side: str = "personal") -> bool:
        """Enter an income amount as typed on the form.

        Salary (own or spouse) for an occupation with social insurance is kept
        as gross and shown as take-home pay; anything else is stored as entered.
        """
        item = self._item("income", side, item_id)
        occupation = self._occupation_for(item) if side == "personal" else None
        if occupation is not None and requires_net_conversion(occupation):
            net = calc_net_income(gross, occupation).net_income
            item.record_gross(year, gross, net)
            logger.debug("%s %d: gross %.1f -> net %.1f", item.name, year, gross, net)
        else:
            item.amounts[year] = gross
        self._record("income", side, item_id, year, gross)
        return self.recompute()

    def _occupation_for(self, item: IncomeItem) -> Occupation | None:
        profile = self.sim_input.profile
        if item.category is IncomeCategory.SALARY:
            return profile.occupation
        if item.category is IncomeCategory.SPOUSE_SALARY and profile.spouse is not None:
            return profile.spouse.occupation
        return None

    def clear_history(self) -> None:
        self.history.clear()

    # -- life events ------------------------------------------------------------

    def add_life_event(self, event: LifeEvent) -> bool:
        self.sim_input.life_events.append(event)
        return self.recompute()

    def remove_life_event(self, index: int) -> bool:
        del self.sim_input.life_events[index]
        return self.recompute()

    # -- snapshot ---------------------------------------------------------------

    def save_snapshot(self, path: str | Path) -> Path:
        return snapshot.save(path, self.sim_input)

    def load_snapshot(self, path: str | Path) -> bool:
        """Replace the whole input from a snapshot. Leaves state untouched if unreadable."""
        sim_input = snapshot.load(path)
        if sim_input is None:
            return False
        self.sim_input = sim_input
        self.recompute()
        return True
