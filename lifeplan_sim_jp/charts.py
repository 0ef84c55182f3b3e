"""Chart generation for projection ledgers."""

import platform
from pathlib import Path

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import matplotlib.ticker as ticker

from lifeplan_sim_jp.models import EventType, LifeEvent
from lifeplan_sim_jp.params import SimulationParams
from lifeplan_sim_jp.simulation import Projection, summarize

SERIES_COLORS = {
    "personal": "#1f77b4",    # blue
    "corporate": "#2ca02c",   # green
    "investment": "#ff7f0e",  # orange
    "real": "#7f7f7f",        # gray
}

COLOR_EXPENSE = "#c0392b"
COLOR_INCOME = "#27ae60"


def _setup_japanese_font():
    """Configure matplotlib to use a Japanese font."""
    system = platform.system()
    if system == "Darwin":
        font_family = "Hiragino Sans"
    elif system == "Linux":
        font_family = "Noto Sans CJK JP"
    else:
        font_family = "sans-serif"
    plt.rcParams["font.family"] = font_family
    plt.rcParams["axes.unicode_minus"] = False


def _format_oku_axis(ax: plt.Axes):
    """Add 億円 labels on Y axis (secondary tick labels)."""
    ax.yaxis.set_major_formatter(
        ticker.FuncFormatter(lambda x, _: f"{x:,.0f}")
    )
    ax_right = ax.secondary_yaxis("right")
    ax_right.yaxis.set_major_formatter(
        ticker.FuncFormatter(lambda x, _: f"{x / 10000:.1f}億" if x != 0 else "0")
    )
    ax_right.set_ylabel("")


def _save(fig, output_path: Path, stem: str, name: str) -> Path:
    output_path.mkdir(parents=True, exist_ok=True)
    suffix = f"-{name}" if name else ""
    filepath = output_path / f"{stem}{suffix}.png"
    fig.tight_layout()
    fig.savefig(filepath, dpi=150)
    plt.close(fig)
    return filepath


def _draw_event_markers(ax: plt.Axes, markers: list[tuple[int, float, str]]):
    y_lo, y_hi = ax.get_ylim()
    drawn = set()
    for i, (year, amount, label) in enumerate(markers):
        color = COLOR_INCOME if amount > 0 else COLOR_EXPENSE
        if year not in drawn:
            ax.axvline(year, color="#888888", linewidth=0.7, linestyle=":", alpha=0.4, zorder=3)
            drawn.add(year)
        if amount > 0:
            text = f"+{label} {amount:,.0f}万"
        else:
            text = f"▲{label} {abs(amount):,.0f}万"
        y_pos = y_lo + (y_hi - y_lo) * (0.05 + 0.07 * (i % 4))
        ax.annotate(
            text,
            xy=(year, y_pos),
            fontsize=11, color=color,
            ha="center", va="bottom",
            bbox=dict(boxstyle="round,pad=0.5", fc="white", ec=color, alpha=0.9, linewidth=0.8),
            zorder=10,
        )


def life_event_markers(life_events: list[LifeEvent]) -> list[tuple[int, float, str]]:
    """(year, signed amount, description); expenses are negative."""
    return [
        (e.year, e.amount if e.type is EventType.INCOME else -e.amount, e.description)
        for e in sorted(life_events, key=lambda e: e.year)
    ]


def plot_asset_trajectory(
    projection: Projection,
    params: SimulationParams,
    output_path: Path,
    name: str = "",
    event_markers: list[tuple[int, float, str]] | None = None,
) -> Path:
    """Line chart of personal/corporate total assets and the investment balance.

    The dashed gray line deflates personal assets by params.inflation_rate
    (start-year purchasing power).

    Returns:
        Path to the generated PNG file.
    """
    records = projection.records
    if not records:
        raise ValueError("No ledger rows for asset chart")
    _setup_japanese_font()

    years = [r.year for r in records]
    start_year = years[0]
    personal = [r.personal_total_assets for r in records]
    real = [v / params.inflation_factor(y - start_year) for y, v in zip(years, personal)]

    fig, ax = plt.subplots(figsize=(14, 8))
    ax.plot(years, personal, label="個人総資産", color=SERIES_COLORS["personal"], linewidth=2)
    ax.plot(years, real, label="個人総資産（実質）", color=SERIES_COLORS["real"],
            linewidth=1.5, linestyle="--")
    ax.plot(years, [r.total_investment_assets for r in records], label="運用資産",
            color=SERIES_COLORS["investment"], linewidth=1.8)
    corporate = [r.corporate_total_assets for r in records]
    if any(corporate):
        ax.plot(years, corporate, label="法人総資産", color=SERIES_COLORS["corporate"], linewidth=2)

    ax.axhline(0, color="black", linewidth=1.0, zorder=5)
    shortfall = summarize(projection)["first_shortfall_year"]
    if shortfall is not None:
        ax.axvline(shortfall, color=COLOR_EXPENSE, linewidth=2, linestyle=":")
        ax.annotate(
            f"{shortfall}年 資産マイナス",
            xy=(shortfall, ax.get_ylim()[1] * 0.85),
            fontsize=11, fontweight="bold", color=COLOR_EXPENSE,
            ha="right",
            bbox=dict(boxstyle="round,pad=0.3", fc="white", ec=COLOR_EXPENSE, alpha=0.9),
        )

    ax.set_xlabel("年度")
    ax.set_ylabel("資産（万円）")
    ax.set_title("資産推移")
    ax.legend(loc="upper left")
    ax.grid(True, alpha=0.3)
    _format_oku_axis(ax)

    if event_markers:
        _draw_event_markers(ax, event_markers)

    return _save(fig, output_path, "assets", name)


def plot_cashflow_stack(projection: Projection, output_path: Path, name: str = "") -> Path:
    """Stacked annual expenses against total personal income."""
    records = projection.records
    if not records:
        raise ValueError("No ledger rows for cashflow chart")
    _setup_japanese_font()

    years = [r.year for r in records]
    fig, ax = plt.subplots(figsize=(14, 7))
    ax.stackplot(
        years,
        [r.housing_expense for r in records],
        [r.education_expense for r in records],
        [r.living_expense for r in records],
        [r.other_expense for r in records],
        labels=["住居費", "教育費", "生活費", "その他"],
        colors=["#8da0cb", "#fc8d62", "#66c2a5", "#e5c494"],
        alpha=0.75,
    )
    ax.plot(years, [r.total_personal_income for r in records],
            color="#1f77b4", linewidth=2, label="個人収入（手取り）")
    ax.plot(years, [r.pension_income + r.spouse_pension_income for r in records],
            color="#9467bd", linewidth=1.5, linestyle="--", label="うち年金")

    ax.set_xlim(years[0], years[-1])
    ax.set_xlabel("年度")
    ax.set_ylabel("年間キャッシュフロー（万円）")
    ax.set_title("収入と支出の内訳")
    ax.axhline(0, color="black", linewidth=2.0, linestyle="-", zorder=5)
    ax.legend(loc="upper right")
    ax.grid(True, alpha=0.3)

    return _save(fig, output_path, "cashflow", name)
