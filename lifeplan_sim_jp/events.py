"""Per-year event text for the ledger table and CSV (結婚・出産・ライフイベント)."""

from lifeplan_sim_jp.models import EventSource, EventType, LifeEvent, Profile

EVENT_SEPARATOR = "、"


def format_amount(value: float) -> str:
    """Man-yen figure without a trailing .0 (500.0 → '500', 12.34 → '12.3')."""
    text = f"{value:.1f}"
    if text.endswith(".0"):
        text = text[:-2]
    return "0" if text == "-0" else text


def birth_years(profile: Profile) -> list[int]:
    """Birth year of every child, existing children first, then planned ones."""
    years = [profile.start_year - c.current_age for c in profile.children]
    years += [profile.start_year + c.years_from_now for c in profile.planned_children]
    return years


def describe_life_event(event: LifeEvent) -> str:
    sign = "+" if event.type is EventType.INCOME else "-"
    return f"{event.description}（{sign}{format_amount(event.amount)}万円）"


def describe_year(
    year: int,
    profile: Profile,
    life_events: list[LifeEvent],
    source: EventSource | str = EventSource.PERSONAL,
) -> str:
    """Join the events of one calendar year. Family events appear on the personal side only."""
    source = EventSource(source)
    texts: list[str] = []
    if source is EventSource.PERSONAL:
        if profile.marriage_year == year:
            texts.append("結婚")
        for n, birth_year in enumerate(birth_years(profile), start=1):
            if birth_year == year:
                texts.append(f"第{n}子誕生")
    for event in life_events:
        if event.year == year and event.source is source:
            texts.append(describe_life_event(event))
    return EVENT_SEPARATOR.join(texts)
