"""CSV export of the ledger (UTF-8 with BOM so Excel opens it correctly)."""

import csv
import io
import logging
from pathlib import Path

from lifeplan_sim_jp.events import describe_year, format_amount
from lifeplan_sim_jp.models import EventSource, SimulationInput
from lifeplan_sim_jp.simulation import Projection

logger = logging.getLogger(__name__)

CSV_ENCODING = "utf-8-sig"

_TOTAL_HEADERS = ("個人収支（万円）", "個人総資産（万円）", "法人収支（万円）", "法人総資産（万円）")


def csv_headers(sim_input: SimulationInput) -> list[str]:
    income = sim_input.income
    expense = sim_input.expense
    items = income.personal + income.corporate + expense.personal + expense.corporate
    return [
        "年度", "年齢", "イベント（個人）", "イベント（法人）",
        *(f"{item.name}（万円）" for item in items),
        *_TOTAL_HEADERS,
    ]


def csv_rows(sim_input: SimulationInput, projection: Projection) -> list[list[str]]:
    profile = sim_input.profile
    income = sim_input.income
    expense = sim_input.expense
    rows = []
    for record in projection.records:
        year = record.year
        row = [
            str(year),
            str(record.age),
            describe_year(year, profile, sim_input.life_events, EventSource.PERSONAL),
            describe_year(year, profile, sim_input.life_events, EventSource.CORPORATE),
        ]
        row += [format_amount(projection.income_amount(i, year)) for i in income.personal]
        row += [format_amount(i.amounts[year]) for i in income.corporate]
        row += [format_amount(e.amounts[year]) for e in expense.personal + expense.corporate]
        row += [
            format_amount(record.personal_balance),
            format_amount(record.personal_total_assets),
            format_amount(record.corporate_balance),
            format_amount(record.corporate_total_assets),
        ]
        rows.append(row)
    return rows


def render_csv(sim_input: SimulationInput, projection: Projection) -> str:
    """All cells quoted, '\\n' line endings. No BOM; write_csv adds it."""
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(csv_headers(sim_input))
    writer.writerows(csv_rows(sim_input, projection))
    return buf.getvalue()


def write_csv(path: str | Path, sim_input: SimulationInput, projection: Projection) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding=CSV_ENCODING, newline="") as f:
        f.write(render_csv(sim_input, projection))
    logger.info("wrote %d rows to %s", len(projection.ledger), path)
    return path
