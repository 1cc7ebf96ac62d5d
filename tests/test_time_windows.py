from __future__ import annotations

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from src.core.errors import BadRequestError
from src.shared.time import (
    calendar_month_window,
    chart_buckets,
    previous_window,
    resolve_rolling_window,
    shift_months,
)

UTC = ZoneInfo("UTC")
NOW = datetime(2026, 10, 22, 15, 30, tzinfo=UTC)


@pytest.mark.parametrize(
    "kind, start",
    [
        ("today", datetime(2026, 10, 22, tzinfo=UTC)),
        ("weekly", datetime(2026, 10, 15, tzinfo=UTC)),
        ("monthly", datetime(2026, 9, 22, tzinfo=UTC)),
        ("yearly", datetime(2025, 10, 1, tzinfo=UTC)),
    ],
)
def test_rolling_windows_end_now(kind, start):
    window = resolve_rolling_window(kind, NOW)

    assert window.start == start
    assert window.end == NOW


def test_previous_today_is_all_of_yesterday():
    previous = previous_window("today", resolve_rolling_window("today", NOW))

    assert previous.start == datetime(2026, 10, 21, tzinfo=UTC)
    assert previous.end_date == date(2026, 10, 21)
    assert previous.contains_instant(datetime(2026, 10, 21, 23, 59, tzinfo=UTC))
    assert not previous.contains_instant(datetime(2026, 10, 22, 0, 0, tzinfo=UTC))


def test_previous_windows_shift_by_their_period():
    weekly = previous_window("weekly", resolve_rolling_window("weekly", NOW))
    monthly = previous_window("monthly", resolve_rolling_window("monthly", NOW))
    yearly = previous_window("yearly", resolve_rolling_window("yearly", NOW))

    assert weekly.start == datetime(2026, 10, 8, tzinfo=UTC)
    assert weekly.end == NOW - timedelta(days=7)
    assert monthly.start == datetime(2026, 8, 22, tzinfo=UTC)
    assert monthly.end == datetime(2026, 9, 22, 15, 30, tzinfo=UTC)
    assert yearly.start == datetime(2024, 10, 1, tzinfo=UTC)


def test_shift_months_clamps_day():
    assert shift_months(date(2026, 3, 31), -1) == date(2026, 2, 28)
    assert shift_months(date(2028, 3, 31), -1) == date(2028, 2, 29)
    assert shift_months(date(2026, 1, 15), -12) == date(2025, 1, 15)


def test_calendar_month_window_covers_whole_month():
    window = calendar_month_window(2, 2028, UTC)

    assert window.start_date == date(2028, 2, 1)
    assert window.end_date == date(2028, 2, 29)


@pytest.mark.parametrize("month, year", [(0, 2026), (13, 2026), (5, 1999)])
def test_calendar_month_window_rejects_bad_period(month, year):
    with pytest.raises(BadRequestError):
        calendar_month_window(month, year, UTC)


def test_unknown_window_kind_is_rejected():
    with pytest.raises(BadRequestError):
        resolve_rolling_window("hourly", NOW)


def test_naive_instants_take_window_timezone():
    window = resolve_rolling_window("today", NOW)

    assert window.contains_instant(datetime(2026, 10, 22, 9, 0))
    assert not window.contains_instant(datetime(2026, 10, 22, 16, 0))


def test_weekly_chart_has_one_point_per_day():
    buckets = chart_buckets("weekly", NOW)

    assert len(buckets) == 8
    assert buckets[0][0] == "Thu 15"
    assert buckets[-1][0] == "Thu 22"
    assert buckets[-1][1].end == NOW


def test_today_chart_shares_weekly_axis():
    assert [label for label, _ in chart_buckets("today", NOW)] == [
        label for label, _ in chart_buckets("weekly", NOW)
    ]


def test_monthly_chart_labels_days():
    buckets = chart_buckets("monthly", NOW)

    assert len(buckets) == 31
    assert buckets[0][0] == "22"
    assert buckets[0][1].start_date == date(2026, 9, 22)
    assert buckets[-1][1].start_date == date(2026, 10, 22)


def test_yearly_chart_has_one_point_per_month():
    buckets = chart_buckets("yearly", NOW)

    assert len(buckets) == 13
    assert buckets[0][0] == "Oct"
    assert buckets[0][1].start_date == date(2025, 10, 1)
    assert buckets[0][1].end_date == date(2025, 10, 31)
    assert buckets[-1][0] == "Oct"
    assert buckets[-1][1].end == NOW


def test_business_today_follows_configured_zone(monkeypatch):
    from src.core.config import get_settings
    from src.shared.time import business_timezone, business_today

    monkeypatch.setenv("BUSINESS_TIMEZONE", "Etc/GMT-14")
    get_settings.cache_clear()
    try:
        assert business_timezone() == ZoneInfo("Etc/GMT-14")
        assert business_today() == datetime.now(ZoneInfo("Etc/GMT-14")).date()
    finally:
        get_settings.cache_clear()
