"""Dashboard statistics derived from a sequence of activity events."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, Optional, Sequence

from .models import Category, LogEvent

TOP_APPS_LIMIT = 5
PRODUCTIVE_CATEGORIES = (Category.PRODUCTIVITY, Category.DEVELOPMENT)


@dataclass(frozen=True, slots=True)
class AppUsage:
    name: str
    minutes: int

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "minutes": self.minutes}


@dataclass(frozen=True, slots=True)
class CategoryUsage:
    category: Category
    seconds: int

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.category.value, "seconds": self.seconds}


@dataclass(frozen=True, slots=True)
class DayActivity:
    date: str
    hours: float

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.date, "hours": self.hours}


@dataclass(frozen=True, slots=True)
class Statistics:
    """Aggregated view of a non-empty event sequence."""

    total_seconds: int
    total_hours: float
    top_apps: tuple[AppUsage, ...]
    categories: tuple[CategoryUsage, ...]
    daily_activity: tuple[DayActivity, ...]
    productivity_score: int
    unique_apps: int

    @property
    def total_hours_label(self) -> str:
        return f"{self.total_hours:.1f}"

    @property
    def top_app(self) -> Optional[AppUsage]:
        return self.top_apps[0] if self.top_apps else None

    def to_dict(self) -> Dict[str, Any]:
        top = self.top_app
        return {
            "total_seconds": self.total_seconds,
            "total_hours": self.total_hours_label,
            "productivity_score": self.productivity_score,
            "unique_apps": self.unique_apps,
            "top_app": (
                {
                    "name": top.name,
                    "minutes": top.minutes,
                    "hours_part": top.minutes // 60,
                    "minutes_part": top.minutes % 60,
                }
                if top
                else None
            ),
            "top_apps": [app.to_dict() for app in self.top_apps],
            "categories": [entry.to_dict() for entry in self.categories],
            "daily_activity": [day.to_dict() for day in self.daily_activity],
        }


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with halves going away from zero, unlike the built-in ``round``."""
    exponent = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(exponent, rounding=ROUND_HALF_UP))


def aggregate(events: Sequence[LogEvent]) -> Optional[Statistics]:
    """Compute dashboard statistics, or ``None`` when there is nothing to show."""
    if not events:
        return None

    total_seconds = sum(event.duration_seconds for event in events)
    app_totals = seconds_by_application(events)
    category_totals = seconds_by_category(events)

    top_apps = tuple(
        sorted(
            (AppUsage(name, seconds // 60) for name, seconds in app_totals.items()),
            key=lambda usage: usage.minutes,
            reverse=True,
        )[:TOP_APPS_LIMIT]
    )
    categories = tuple(
        CategoryUsage(category, seconds)
        for category, seconds in sorted(
            category_totals.items(), key=lambda item: item[1], reverse=True
        )
    )

    return Statistics(
        total_seconds=total_seconds,
        total_hours=round_half_up(total_seconds / 3600, 1),
        top_apps=top_apps,
        categories=categories,
        daily_activity=daily_activity(events),
        productivity_score=productivity_score(category_totals, total_seconds),
        unique_apps=len(app_totals) if category_totals else 0,
    )


def seconds_by_application(events: Iterable[LogEvent]) -> dict[str, int]:
    """Total seconds per application, keyed in first-encountered order."""
    totals: defaultdict[str, int] = defaultdict(int)
    for event in events:
        totals[event.application] += event.duration_seconds
    return dict(totals)


def seconds_by_category(events: Iterable[LogEvent]) -> dict[Category, int]:
    totals: defaultdict[Category, int] = defaultdict(int)
    for event in events:
        totals[event.category] += event.duration_seconds
    return dict(totals)


def daily_activity(events: Iterable[LogEvent]) -> tuple[DayActivity, ...]:
    """Hours per calendar date, oldest first.

    Dates are taken verbatim from each timestamp, so events recorded with
    different UTC offsets are bucketed by their own local date.
    """
    totals: defaultdict[str, int] = defaultdict(int)
    for event in events:
        totals[event.date] += event.duration_seconds
    return tuple(
        DayActivity(date, round_half_up(seconds / 3600, 1))
        for date, seconds in sorted(totals.items())
    )


def productivity_score(category_totals: dict[Category, int], total_seconds: int) -> int:
    if total_seconds <= 0:
        return 0
    productive = sum(category_totals.get(category, 0) for category in PRODUCTIVE_CATEGORIES)
    score = int(round_half_up(100 * productive / total_seconds))
    return max(0, min(100, score))
