"""Calendar-driven macro events shown next to the recommendation.

These are heuristics about scheduled events that tend to move AUD/INR:
central bank meetings, data releases, and seasonal remittance demand. They
are informational only and never feed the numeric decision.
"""

import calendar
from datetime import date, timedelta

from remitiq.intelligence.models import EventImpact, MacroEvent

#: Events further out than this are not reported.
EVENT_WINDOW_DAYS = 45
MAX_EVENTS = 5

# RBA meets on the first Tuesday of the month; no January or July meeting.
_RBA_MONTHS = (2, 3, 4, 5, 6, 8, 9, 10, 11, 12)
# RBI monetary policy committee, bi-monthly.
_RBI_MONTHS = (2, 4, 6, 8, 10, 12)
_RBI_DAY = 6
# Australian quarterly national accounts.
_GDP_MONTHS = (3, 6, 9, 12)
_GDP_DAY = 10


def _first_weekday(year: int, month: int, weekday: int) -> date:
    first = date(year, month, 1)
    return first + timedelta(days=(weekday - first.weekday()) % 7)


def _scheduled_events(year: int) -> list[tuple[date, str, EventImpact, str]]:
    events: list[tuple[date, str, EventImpact, str]] = []

    for month in _RBA_MONTHS:
        events.append((
            _first_weekday(year, month, calendar.TUESDAY),
            "RBA Interest Rate Decision",
            EventImpact.NEUTRAL,
            "Reserve Bank of Australia monetary policy meeting. "
            "Rate decisions directly impact AUD strength.",
        ))

    for month in _RBI_MONTHS:
        events.append((
            date(year, month, _RBI_DAY),
            "RBI Monetary Policy",
            EventImpact.NEUTRAL,
            "Reserve Bank of India policy review. INR strength depends on rate decisions.",
        ))

    for month in _GDP_MONTHS:
        events.append((
            date(year, month, _GDP_DAY),
            "Australian GDP Release",
            EventImpact.NEUTRAL,
            "Quarterly GDP data release. Strong GDP is AUD bullish.",
        ))

    events.append((
        date(year, 6, 30),
        "Australian Tax Year End",
        EventImpact.POSITIVE,
        "Year-end repatriation flows can temporarily boost AUD demand.",
    ))

    return events


def _in_diwali_season(today: date) -> bool:
    return today.month == 10 or (today.month == 11 and today.day < 15)


def get_upcoming_macro_events(
    today: date,
    window_days: int = EVENT_WINDOW_DAYS,
    limit: int = MAX_EVENTS,
) -> list[MacroEvent]:
    """List scheduled events within ``window_days`` after ``today``.

    Scheduled events strictly after today and at most ``window_days`` away
    are included, looking into next year so December queries still see
    February meetings. During the Diwali remittance season an ongoing
    season event dated today is added.

    Args:
        today: Reference date. Passed in so results are reproducible.
        window_days: How far ahead to look.
        limit: Maximum number of events returned.

    Returns:
        Up to ``limit`` MacroEvent sorted by date, then name.
    """
    events: list[MacroEvent] = []

    for year in (today.year, today.year + 1):
        for when, name, impact, description in _scheduled_events(year):
            days_away = (when - today).days
            if 0 < days_away <= window_days:
                events.append(MacroEvent(
                    date=when,
                    name=name,
                    impact=impact,
                    days_away=days_away,
                    description=description,
                ))

    if _in_diwali_season(today):
        events.append(MacroEvent(
            date=today,
            name="Diwali Season",
            impact=EventImpact.NEGATIVE,
            days_away=0,
            description=(
                "Peak remittance season. High demand for INR can slightly "
                "pressure the AUD/INR rate."
            ),
        ))

    events.sort(key=lambda e: (e.date, e.name))
    return events[:limit]
