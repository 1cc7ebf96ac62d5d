from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from typing import List, Optional, Tuple
from zoneinfo import ZoneInfo

from src.core.config import get_settings
from src.core.errors import BadRequestError

WINDOW_KINDS = ("today", "weekly", "monthly", "yearly")
MONTH_LABELS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


@dataclass(frozen=True)
class TimeWindow:
    start: datetime
    end: datetime

    @property
    def start_date(self) -> date:
        return self.start.date()

    @property
    def end_date(self) -> date:
        return self.end.date()

    def contains_date(self, value: date) -> bool:
        return self.start_date <= value <= self.end_date

    def contains_instant(self, value: datetime) -> bool:
        if value.tzinfo is None:
            value = value.replace(tzinfo=self.start.tzinfo)
        return self.start <= value <= self.end

    def describe(self) -> str:
        return f"{self.start_date.isoformat()}..{self.end_date.isoformat()}"


def business_timezone() -> tzinfo:
    return ZoneInfo(get_settings().business_timezone)


def business_now() -> datetime:
    return datetime.now(business_timezone())


def business_today() -> date:
    return business_now().date()


def start_of_day(value: date, zone: Optional[tzinfo]) -> datetime:
    return datetime.combine(value, time.min, tzinfo=zone)


def end_of_day(value: date, zone: Optional[tzinfo]) -> datetime:
    return datetime.combine(value, time.max, tzinfo=zone)


def shift_months(value: date, months: int) -> date:
    """Move by whole months, clamping the day to the target month's length."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(value.day, last_day))


def _shift_instant_months(value: datetime, months: int) -> datetime:
    shifted = shift_months(value.date(), months)
    return datetime.combine(shifted, value.timetz())


def resolve_rolling_window(kind: str, now: datetime) -> TimeWindow:
    zone = now.tzinfo
    today = now.date()
    if kind == "today":
        return TimeWindow(start=start_of_day(today, zone), end=now)
    if kind == "weekly":
        return TimeWindow(start=start_of_day(today - timedelta(days=7), zone), end=now)
    if kind == "monthly":
        return TimeWindow(start=start_of_day(shift_months(today, -1), zone), end=now)
    if kind == "yearly":
        first_of_month = today.replace(day=1)
        return TimeWindow(start=start_of_day(shift_months(first_of_month, -12), zone), end=now)
    raise BadRequestError(f"Unsupported time window: {kind}")


def previous_window(kind: str, window: TimeWindow) -> TimeWindow:
    zone = window.start.tzinfo
    if kind == "today":
        yesterday = window.start_date - timedelta(days=1)
        return TimeWindow(start=start_of_day(yesterday, zone), end=end_of_day(yesterday, zone))
    if kind == "weekly":
        return TimeWindow(start=window.start - timedelta(days=7), end=window.end - timedelta(days=7))
    if kind == "monthly":
        return TimeWindow(
            start=_shift_instant_months(window.start, -1),
            end=_shift_instant_months(window.end, -1),
        )
    if kind == "yearly":
        return TimeWindow(
            start=_shift_instant_months(window.start, -12),
            end=_shift_instant_months(window.end, -12),
        )
    raise BadRequestError(f"Unsupported time window: {kind}")


def calendar_month_window(month: int, year: int, zone: Optional[tzinfo]) -> TimeWindow:
    if month < 1 or month > 12:
        raise BadRequestError("Month must be between 1 and 12")
    if year < 2000 or year > 3000:
        raise BadRequestError("Year must be between 2000 and 3000")
    last_day = calendar.monthrange(year, month)[1]
    return TimeWindow(
        start=start_of_day(date(year, month, 1), zone),
        end=end_of_day(date(year, month, last_day), zone),
    )


def _daily_buckets(window: TimeWindow, label_format: str) -> List[Tuple[str, TimeWindow]]:
    zone = window.start.tzinfo
    buckets: List[Tuple[str, TimeWindow]] = []
    day = window.start_date
    while day <= window.end_date:
        bucket_end = min(end_of_day(day, zone), window.end)
        label = f"{day.strftime('%a')} {day.day}" if label_format == "weekday" else str(day.day)
        buckets.append((label, TimeWindow(start=start_of_day(day, zone), end=bucket_end)))
        day += timedelta(days=1)
    return buckets


def _monthly_buckets(window: TimeWindow) -> List[Tuple[str, TimeWindow]]:
    zone = window.start.tzinfo
    buckets: List[Tuple[str, TimeWindow]] = []
    month_start = window.start_date.replace(day=1)
    while month_start <= window.end_date:
        last_day = calendar.monthrange(month_start.year, month_start.month)[1]
        bucket_end = min(end_of_day(month_start.replace(day=last_day), zone), window.end)
        buckets.append(
            (
                MONTH_LABELS[month_start.month - 1],
                TimeWindow(start=start_of_day(month_start, zone), end=bucket_end),
            )
        )
        month_start = shift_months(month_start, 1)
    return buckets


def chart_buckets(kind: str, now: datetime) -> List[Tuple[str, TimeWindow]]:
    """Sub-periods plotted for a dashboard window; today shares the weekly axis."""
    if kind in ("today", "weekly"):
        return _daily_buckets(resolve_rolling_window("weekly", now), "weekday")
    if kind == "monthly":
        return _daily_buckets(resolve_rolling_window("monthly", now), "day")
    if kind == "yearly":
        return _monthly_buckets(resolve_rolling_window("yearly", now))
    raise BadRequestError(f"Unsupported time window: {kind}")
