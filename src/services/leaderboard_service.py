from __future__ import annotations

import logging
from decimal import Decimal
from typing import Dict, List, Optional

from src.analytics.revenue import RevenueClassification, compute_period_metrics
from src.core.errors import NotFoundError, ValidationFailedError
from src.models.access import ClientScope
from src.models.products import UserRole
from src.repositories.clients_repository import ClientsRepository
from src.repositories.leaderboard_repository import LeaderboardRepository
from src.schemas.leaderboard import (
    LeaderboardEntry,
    LeaderboardResponse,
    LeaderboardSummary,
    LeaderboardTarget,
    LeaderboardTargetRequest,
    LeaderboardTargetSaveResult,
)
from src.services.ledger_loader import LedgerLoader
from src.shared.time import business_timezone, calendar_month_window

logger = logging.getLogger(__name__)


class LeaderboardService:
    def __init__(
        self,
        repository: LeaderboardRepository,
        clients_repository: ClientsRepository,
        ledger_loader: LedgerLoader,
        classification: RevenueClassification,
    ) -> None:
        self.repository = repository
        self.clients_repository = clients_repository
        self.ledger_loader = ledger_loader
        self.classification = classification

    def get_leaderboard(self, month: int, year: int) -> LeaderboardResponse:
        return LeaderboardResponse(month=month, year=year, entries=self._standings(month, year))

    def get_leaderboard_summary(self, month: int, year: int) -> LeaderboardSummary:
        entries = self._standings(month, year)
        return LeaderboardSummary(
            month=month,
            year=year,
            total_counsellors=len(entries),
            total_enrollments=sum(entry.enrollments for entry in entries),
            total_revenue=sum((entry.revenue for entry in entries), Decimal("0")),
        )

    def set_target(self, request: LeaderboardTargetRequest) -> LeaderboardTargetSaveResult:
        if request.target <= 0:
            raise ValidationFailedError("target must be greater than 0", field="target")
        counsellor = self.clients_repository.get_user(request.counsellor_id)
        if counsellor is None:
            raise NotFoundError(f"Counsellor {request.counsellor_id} not found")
        if counsellor.role != UserRole.COUNSELLOR:
            raise ValidationFailedError(
                f"User {request.counsellor_id} is not a counsellor", field="counsellorId"
            )
        manager = self.clients_repository.get_user(request.manager_id)
        if manager is None or manager.role != UserRole.MANAGER:
            raise NotFoundError(f"Manager {request.manager_id} not found")

        standing = self._standing_for(request.counsellor_id, request.month, request.year)
        existing = self.repository.find_target(request.counsellor_id, request.month, request.year)
        values = {
            "manager_id": request.manager_id,
            "target": request.target,
            "achieved_target": standing.enrollments if standing else 0,
            "rank": standing.rank if standing else None,
        }
        if existing is not None:
            record = self.repository.update_target(existing.id, values)
            action = "UPDATED"
        else:
            record = self.repository.insert_target(
                {
                    **values,
                    "counsellor_id": request.counsellor_id,
                    "period_month": request.month,
                    "period_year": request.year,
                }
            )
            action = "CREATED"
        logger.info(
            "%s leaderboard target id=%s counsellor=%s period=%s-%02d target=%s",
            action.capitalize(),
            record.id,
            request.counsellor_id,
            request.year,
            request.month,
            request.target,
        )
        return LeaderboardTargetSaveResult(action=action, target=LeaderboardTarget.from_record(record))

    def update_target(self, target_id: int, target: int) -> LeaderboardTarget:
        if target <= 0:
            raise ValidationFailedError("target must be greater than 0", field="target")
        existing = self.repository.get_target(target_id)
        if existing is None:
            raise NotFoundError(f"Leaderboard target {target_id} not found")
        standing = self._standing_for(
            existing.counsellor_id, existing.period_month, existing.period_year
        )
        record = self.repository.update_target(
            target_id,
            {
                "target": target,
                "achieved_target": standing.enrollments if standing else 0,
                "rank": standing.rank if standing else None,
            },
        )
        return LeaderboardTarget.from_record(record)

    def snapshot_targets(self, month: int, year: int) -> List[LeaderboardTarget]:
        standings = {entry.counsellor_id: entry for entry in self._standings(month, year)}
        updated: List[LeaderboardTarget] = []
        for existing in self.repository.list_targets(month, year):
            standing = standings.get(existing.counsellor_id)
            record = self.repository.update_target(
                existing.id,
                {
                    "achieved_target": standing.enrollments if standing else 0,
                    "rank": standing.rank if standing else None,
                },
            )
            updated.append(LeaderboardTarget.from_record(record))
        logger.info("Snapshot leaderboard targets period=%s-%02d rows=%s", year, month, len(updated))
        return updated

    def _standing_for(self, counsellor_id: int, month: int, year: int) -> Optional[LeaderboardEntry]:
        for entry in self._standings(month, year):
            if entry.counsellor_id == counsellor_id:
                return entry
        return None

    def _standings(self, month: int, year: int) -> List[LeaderboardEntry]:
        window = calendar_month_window(month, year, business_timezone())
        counsellors = self.clients_repository.list_users_by_role(UserRole.COUNSELLOR)
        if not counsellors:
            return []
        snapshot = self.ledger_loader.load(
            ClientScope(counsellor_ids=frozenset(user.id for user in counsellors))
        )
        targets = {target.counsellor_id: target for target in self.repository.list_targets(month, year)}

        rows: List[Dict] = []
        for counsellor in counsellors:
            metrics = compute_period_metrics(
                window, snapshot.for_counsellor(counsellor.id), self.classification
            )
            rows.append(
                {
                    "counsellor": counsellor,
                    "enrollments": metrics.new_enrollments,
                    "revenue": metrics.revenue,
                }
            )
        # Ties keep counsellor id order.
        rows = sorted(rows, key=lambda row: (row["enrollments"], row["revenue"]), reverse=True)

        entries: List[LeaderboardEntry] = []
        for index, row in enumerate(rows, start=1):
            counsellor = row["counsellor"]
            target = targets.get(counsellor.id)
            entries.append(
                LeaderboardEntry(
                    rank=index,
                    counsellor_id=counsellor.id,
                    full_name=counsellor.full_name,
                    emp_id=counsellor.emp_id,
                    designation=counsellor.designation,
                    enrollments=row["enrollments"],
                    revenue=row["revenue"],
                    target=target.target if target else 0,
                    achieved_target=row["enrollments"],
                    target_id=target.id if target else None,
                )
            )
        return entries
