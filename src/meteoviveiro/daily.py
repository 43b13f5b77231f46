"""
Grouping of forecast points into calendar days.
"""

from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional
from zoneinfo import ZoneInfo

from .models import DailyAggregate, ForecastPoint

DEFAULT_TIMEZONE = "Europe/Madrid"
MAX_DAYS = 4

WEEKDAY_ABBREVIATIONS = ["lun", "mar", "mié", "jue", "vie", "sáb", "dom"]


def _local(timestamp: datetime, tz: ZoneInfo) -> datetime:
    # naive timestamps are already local wall time
    if timestamp.tzinfo is None:
        return timestamp
    return timestamp.astimezone(tz)


def _is_morning(hour: int) -> bool:
    return 6 <= hour < 12


def _is_afternoon(hour: int) -> bool:
    return 12 <= hour < 20


def _is_night(hour: int) -> bool:
    return hour >= 20 or hour < 6


def day_label(index: int, day: date, today: Optional[date] = None) -> str:
    """
    'Hoy', 'Mañana', then the Spanish weekday abbreviation.

    Without today the first grouped day is 'Hoy' and the second 'Mañana'.
    With today the label follows the calendar, so a forecast starting
    tomorrow opens with 'Mañana'.
    """
    if today is not None:
        if day == today:
            return "Hoy"
        if day == today + timedelta(days=1):
            return "Mañana"
        return WEEKDAY_ABBREVIATIONS[day.weekday()]

    if index == 0:
        return "Hoy"
    if index == 1:
        return "Mañana"
    return WEEKDAY_ABBREVIATIONS[day.weekday()]


def group_by_day(
    points: Iterable[ForecastPoint],
    tz: str = DEFAULT_TIMEZONE,
    max_days: int = MAX_DAYS,
    today: Optional[date] = None,
) -> List[DailyAggregate]:
    """
    Summarize forecast points per local calendar day.

    Points are sorted by timestamp first. For every day the first point in
    the morning [6, 12), afternoon [12, 20) and night [20, 24) or [0, 6)
    is kept as that period's representative; temp_max and temp_min cover all
    points of the day.

    Args:
        points: Forecast points, in any order
        tz: Time zone defining the calendar day
        max_days: Number of days to return
        today: Local date used for the day labels (position based if None)

    Returns:
        Up to max_days DailyAggregate objects in chronological order
    """
    zone = ZoneInfo(tz)
    localized = sorted(
        ((_local(p.timestamp, zone), p) for p in points), key=lambda item: item[0]
    )

    days: Dict[date, List[tuple]] = {}
    for local_time, point in localized:
        days.setdefault(local_time.date(), []).append((local_time, point))

    result = []
    for index, (day, entries) in enumerate(days.items()):
        if index >= max_days:
            break

        morning: Optional[ForecastPoint] = None
        afternoon: Optional[ForecastPoint] = None
        night: Optional[ForecastPoint] = None
        for local_time, point in entries:
            hour = local_time.hour
            if morning is None and _is_morning(hour):
                morning = point
            elif afternoon is None and _is_afternoon(hour):
                afternoon = point
            elif night is None and _is_night(hour):
                night = point

        temperatures = [point.temperature for _, point in entries]
        result.append(
            DailyAggregate(
                label=day_label(index, day, today),
                date=day,
                morning=morning,
                afternoon=afternoon,
                night=night,
                temp_max=max(temperatures),
                temp_min=min(temperatures),
            )
        )

    return result
