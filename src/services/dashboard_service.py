from __future__ import annotations

from datetime import datetime
from typing import List

from src.analytics.revenue import (
    LedgerSnapshot,
    PeriodMetrics,
    RevenueClassification,
    build_chart_series,
    calculate_percentage_change,
    compute_outstanding_balance,
    compute_period_metrics,
)
from src.core.errors import BadRequestError
from src.models.access import Principal
from src.models.products import UserRole
from src.schemas.dashboard import (
    AdminDashboardStats,
    CounsellorDashboardStats,
    DashboardStats,
    IndividualPerformance,
    MetricTotals,
    PendingAmount,
    RevenueChange,
)
from src.schemas.leaderboard import LeaderboardEntry
from src.services.access_service import AccessService
from src.services.leaderboard_service import LeaderboardService
from src.services.ledger_loader import LedgerLoader
from src.shared.time import (
    WINDOW_KINDS,
    TimeWindow,
    business_now,
    previous_window,
    resolve_rolling_window,
)

PERIOD_LABELS = {
    "today": "Today vs Yesterday",
    "weekly": "This Week vs Last Week",
    "monthly": "This Month vs Last Month",
    "yearly": "This Year vs Last Year",
}


class DashboardService:
    def __init__(
        self,
        access_service: AccessService,
        ledger_loader: LedgerLoader,
        leaderboard_service: LeaderboardService,
        classification: RevenueClassification,
    ) -> None:
        self.access_service = access_service
        self.ledger_loader = ledger_loader
        self.leaderboard_service = leaderboard_service
        self.classification = classification

    def get_dashboard_stats(self, window_kind: str, principal: Principal) -> DashboardStats:
        if window_kind not in WINDOW_KINDS:
            raise BadRequestError(f"Unsupported time window: {window_kind}")
        now = self._now()
        window = resolve_rolling_window(window_kind, now)
        scope = self.access_service.resolve_scope(principal)
        snapshot = self.ledger_loader.load(scope)

        current = compute_period_metrics(window, snapshot, self.classification)
        previous = compute_period_metrics(
            previous_window(window_kind, window), snapshot, self.classification
        )
        pending = compute_outstanding_balance(snapshot.staged_payments)
        leaderboard = self.leaderboard_service.get_leaderboard(now.month, now.year).entries

        if principal.role == UserRole.COUNSELLOR:
            return self._counsellor_stats(
                window_kind, window, now, snapshot, current, previous, pending, leaderboard
            )

        change = calculate_percentage_change(current.revenue, previous.revenue)
        return AdminDashboardStats(
            filter=window_kind,
            period_start=window.start_date,
            period_end=window.end_date,
            new_enrollment_count=current.new_enrollments,
            core_sale=MetricTotals(number=current.core_sale_count, amount=current.core_sale_amount),
            core_product=MetricTotals(
                number=current.core_product_count, amount=current.core_product_amount
            ),
            other_product=MetricTotals(
                number=current.other_product_count, amount=current.other_product_amount
            ),
            revenue=current.revenue,
            revenue_change=RevenueChange(
                change=change.change,
                change_type=change.change_type,
                current=current.revenue,
                previous=previous.revenue,
            ),
            total_pending_amount=pending,
            leaderboard=leaderboard,
            chart_data=build_chart_series(window_kind, now, snapshot, self.classification),
        )

    def _counsellor_stats(
        self,
        window_kind: str,
        window: TimeWindow,
        now: datetime,
        snapshot: LedgerSnapshot,
        current: PeriodMetrics,
        previous: PeriodMetrics,
        pending: PendingAmount,
        leaderboard: List[LeaderboardEntry],
    ) -> CounsellorDashboardStats:
        change = calculate_percentage_change(current.core_sale_count, previous.core_sale_count)
        return CounsellorDashboardStats(
            filter=window_kind,
            period_start=window.start_date,
            period_end=window.end_date,
            new_enrollment_count=current.new_enrollments,
            total_clients=len(snapshot.clients),
            core_sale=MetricTotals(number=current.core_sale_count),
            core_product=MetricTotals(number=current.core_product_count),
            other_product=MetricTotals(number=current.other_product_count),
            total_pending_amount=pending,
            individual_performance=IndividualPerformance(
                current=current.core_sale_count,
                previous=previous.core_sale_count,
                change=change.change,
                change_type=change.change_type,
                period_label=PERIOD_LABELS[window_kind],
            ),
            leaderboard=leaderboard,
            chart_data=build_chart_series(
                window_kind, now, snapshot, self.classification, include_amounts=False
            ),
        )

    def _now(self) -> datetime:
        return business_now()
