"""Simulation parameters and shared rounding helpers."""

import math
from dataclasses import dataclass


@dataclass
class SimulationParams:
    """Economic parameters applied uniformly unless overridden per item.

    All rates are percentages (1.0 = 1%/年), amounts in 万円.
    """

    inflation_rate: float = 1.0
    education_cost_increase_rate: float = 1.0
    investment_return: float = 1.0
    # 収入項目ごとの投資割合・年間投資上限の初期値
    investment_ratio: float = 10.0
    max_investment_amount: float = 100.0

    def inflation_factor(self, years: float) -> float:
        """Cumulative price level multiplier after `years` from the start year."""
        return (1 + self.inflation_rate / 100) ** years

    def education_factor(self, years: float) -> float:
        """Cumulative education cost multiplier after `years` from the start year."""
        return (1 + self.education_cost_increase_rate / 100) ** years


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with .5 always going up (toward +inf): 2.5 → 3, -2.5 → -2.

    round() is banker's rounding, so ledger figures don't use it.
    """
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale


def round1(value: float) -> float:
    """Round to one decimal place (0.1万円 = 1,000円)."""
    return round_half_up(value, 1)
