from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Annotated, List, Literal, Optional, Union

from pydantic import Field

from src.schemas.leaderboard import LeaderboardEntry
from src.shared.base import BaseSchema

ChangeType = Literal["increase", "decrease", "no-change"]
DashboardFilter = Literal["today", "weekly", "monthly", "yearly"]


class MetricTotals(BaseSchema):
    number: int
    amount: Optional[Decimal] = None


class PercentageChange(BaseSchema):
    change: float
    change_type: ChangeType


class RevenueChange(PercentageChange):
    current: Decimal
    previous: Decimal


class IndividualPerformance(PercentageChange):
    current: int
    previous: int
    period_label: str


class PendingBreakdown(BaseSchema):
    initial: Decimal
    before_visa: Decimal
    after_visa: Decimal
    submitted_visa: Decimal


class PendingAmount(BaseSchema):
    pending_amount: Decimal
    expected_total: Decimal
    paid_total: Decimal
    breakdown: PendingBreakdown


class ChartPoint(BaseSchema):
    label: str
    period_start: date
    period_end: date
    core_sale: MetricTotals
    core_product: MetricTotals
    other_product: MetricTotals
    revenue: Optional[Decimal] = None
    total_count: int


class ChartSummary(BaseSchema):
    total: Union[int, Decimal]
    point_count: int


class ChartData(BaseSchema):
    filter: DashboardFilter
    points: List[ChartPoint]
    summary: ChartSummary


class AdminDashboardStats(BaseSchema):
    view: Literal["admin"] = "admin"
    filter: DashboardFilter
    period_start: date
    period_end: date
    new_enrollment_count: int
    core_sale: MetricTotals
    core_product: MetricTotals
    other_product: MetricTotals
    revenue: Decimal
    revenue_change: RevenueChange
    total_pending_amount: PendingAmount
    leaderboard: List[LeaderboardEntry]
    chart_data: ChartData


class CounsellorDashboardStats(BaseSchema):
    view: Literal["counsellor"] = "counsellor"
    filter: DashboardFilter
    period_start: date
    period_end: date
    new_enrollment_count: int
    total_clients: int
    core_sale: MetricTotals
    core_product: MetricTotals
    other_product: MetricTotals
    total_pending_amount: PendingAmount
    individual_performance: IndividualPerformance
    leaderboard: List[LeaderboardEntry]
    chart_data: ChartData


DashboardStats = Annotated[
    Union[AdminDashboardStats, CounsellorDashboardStats], Field(discriminator="view")
]
