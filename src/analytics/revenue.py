from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, FrozenSet, Iterable, List, Optional

from src.core.config import Settings, get_settings
from src.models.clients import ClientRecord
from src.models.payments import ProductLine, StagedPaymentRecord
from src.models.products import REVENUE_STAGES, PaymentStage, ProductType
from src.schemas.dashboard import (
    ChartData,
    ChartPoint,
    ChartSummary,
    MetricTotals,
    PendingAmount,
    PendingBreakdown,
    PercentageChange,
)
from src.shared.time import TimeWindow, chart_buckets

ZERO = Decimal("0")


@dataclass(frozen=True)
class RevenueClassification:
    core_product: ProductType
    count_only_products: FrozenSet[ProductType]

    def counts_amount(self, product: ProductType) -> bool:
        return product not in self.count_only_products


def get_revenue_classification(settings: Optional[Settings] = None) -> RevenueClassification:
    settings = settings or get_settings()
    try:
        core_product = ProductType(settings.core_product_type.strip())
        count_only = frozenset(
            ProductType(value.strip())
            for value in settings.count_only_product_types.split(",")
            if value.strip()
        )
    except ValueError as exc:
        raise ValueError(f"Unknown product type in revenue classification settings: {exc}") from exc
    return RevenueClassification(core_product=core_product, count_only_products=count_only)


@dataclass
class LedgerSnapshot:
    """Active clients in scope with their staged payments and resolved product lines."""

    clients: List[ClientRecord] = field(default_factory=list)
    staged_payments: List[StagedPaymentRecord] = field(default_factory=list)
    product_lines: List[ProductLine] = field(default_factory=list)

    def for_counsellor(self, counsellor_id: int) -> "LedgerSnapshot":
        clients = [client for client in self.clients if client.counsellor_id == counsellor_id]
        client_ids = {client.client_id for client in clients}
        return LedgerSnapshot(
            clients=clients,
            staged_payments=[row for row in self.staged_payments if row.client_id in client_ids],
            product_lines=[line for line in self.product_lines if line.client_id in client_ids],
        )


@dataclass
class PeriodMetrics:
    new_enrollments: int = 0
    core_sale_count: int = 0
    core_sale_amount: Decimal = ZERO
    core_product_count: int = 0
    core_product_amount: Decimal = ZERO
    other_product_count: int = 0
    other_product_amount: Decimal = ZERO

    @property
    def revenue(self) -> Decimal:
        return self.core_sale_amount + self.core_product_amount + self.other_product_amount

    @property
    def total_count(self) -> int:
        return self.core_sale_count + self.core_product_count + self.other_product_count


def is_in_window(
    payment_date: Optional[date], created_at: Optional[datetime], window: TimeWindow
) -> bool:
    if payment_date is not None:
        return window.contains_date(payment_date)
    if created_at is not None:
        return window.contains_instant(created_at)
    return False


def compute_period_metrics(
    window: TimeWindow,
    snapshot: LedgerSnapshot,
    classification: RevenueClassification,
) -> PeriodMetrics:
    metrics = PeriodMetrics()
    metrics.new_enrollments = sum(
        1
        for client in snapshot.clients
        if client.enrollment_date is not None and window.contains_date(client.enrollment_date)
    )

    core_sale_clients = set()
    for row in snapshot.staged_payments:
        if row.stage not in REVENUE_STAGES or not is_in_window(row.payment_date, row.created_at, window):
            continue
        core_sale_clients.add(row.client_id)
        metrics.core_sale_amount += row.amount or ZERO
    metrics.core_sale_count = len(core_sale_clients)

    for line in snapshot.product_lines:
        if not is_in_window(line.payment_date, line.created_at, window):
            continue
        if line.product_name == classification.core_product:
            metrics.core_product_count += 1
            metrics.core_product_amount += line.amount
            continue
        metrics.other_product_count += 1
        if classification.counts_amount(line.product_name):
            metrics.other_product_amount += line.amount
    return metrics


def compute_outstanding_balance(staged_payments: Iterable[StagedPaymentRecord]) -> PendingAmount:
    expected_by_client: Dict[int, Decimal] = {}
    by_stage: Dict[PaymentStage, Decimal] = defaultdict(lambda: ZERO)
    for row in staged_payments:
        # Every stage row repeats the client's total; the first one seen wins.
        if row.client_id not in expected_by_client:
            expected_by_client[row.client_id] = row.total_payment or ZERO
        by_stage[row.stage] += row.amount or ZERO

    expected = sum(expected_by_client.values(), ZERO)
    paid = sum((by_stage[stage] for stage in REVENUE_STAGES), ZERO)
    return PendingAmount(
        pending_amount=max(ZERO, expected - paid),
        expected_total=expected,
        paid_total=paid,
        breakdown=PendingBreakdown(
            initial=by_stage[PaymentStage.INITIAL],
            before_visa=by_stage[PaymentStage.BEFORE_VISA],
            after_visa=by_stage[PaymentStage.AFTER_VISA],
            submitted_visa=by_stage[PaymentStage.SUBMITTED_VISA],
        ),
    )


def calculate_percentage_change(current: Decimal | int, previous: Decimal | int) -> PercentageChange:
    current_value = Decimal(str(current))
    previous_value = Decimal(str(previous))
    if previous_value == 0:
        if current_value > 0:
            return PercentageChange(change=100.0, change_type="increase")
        return PercentageChange(change=0.0, change_type="no-change")

    change = round(float((current_value - previous_value) / previous_value * 100), 2)
    if change > 0:
        change_type = "increase"
    elif change < 0:
        change_type = "decrease"
    else:
        change_type = "no-change"
    return PercentageChange(change=abs(change), change_type=change_type)


def build_chart_series(
    kind: str,
    now: datetime,
    snapshot: LedgerSnapshot,
    classification: RevenueClassification,
    include_amounts: bool = True,
) -> ChartData:
    points: List[ChartPoint] = []
    for label, bucket in chart_buckets(kind, now):
        metrics = compute_period_metrics(bucket, snapshot, classification)
        points.append(
            ChartPoint(
                label=label,
                period_start=bucket.start_date,
                period_end=bucket.end_date,
                core_sale=_totals(metrics.core_sale_count, metrics.core_sale_amount, include_amounts),
                core_product=_totals(
                    metrics.core_product_count, metrics.core_product_amount, include_amounts
                ),
                other_product=_totals(
                    metrics.other_product_count, metrics.other_product_amount, include_amounts
                ),
                revenue=metrics.revenue if include_amounts else None,
                total_count=metrics.total_count,
            )
        )

    if include_amounts:
        total: Decimal | int = sum((point.revenue or ZERO for point in points), ZERO)
    else:
        total = sum(point.total_count for point in points)
    return ChartData(
        filter=kind,
        points=points,
        summary=ChartSummary(total=total, point_count=len(points)),
    )


def _totals(count: int, amount: Decimal, include_amounts: bool) -> MetricTotals:
    return MetricTotals(number=count, amount=amount if include_amounts else None)
