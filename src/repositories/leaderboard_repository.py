from __future__ import annotations

from typing import Any, Dict, List, Optional

from src.core.supabase import SupabaseClient
from src.models.leaderboard import LeaderboardTargetRecord

TARGET_COLUMNS = (
    "id,manager_id,counsellor_id,target,achieved_target,rank,period_month,period_year,created_at"
)


class LeaderboardRepository:
    def __init__(self) -> None:
        self.client = SupabaseClient()

    def get_target(self, target_id: int) -> Optional[LeaderboardTargetRecord]:
        rows, _ = self.client.select(
            table="leaderboard_targets",
            select=TARGET_COLUMNS,
            filters=[("id", f"eq.{target_id}")],
            limit=1,
        )
        return LeaderboardTargetRecord.model_validate(rows[0]) if rows else None

    def find_target(
        self, counsellor_id: int, month: int, year: int
    ) -> Optional[LeaderboardTargetRecord]:
        rows, _ = self.client.select(
            table="leaderboard_targets",
            select=TARGET_COLUMNS,
            filters=[
                ("counsellor_id", f"eq.{counsellor_id}"),
                ("period_month", f"eq.{month}"),
                ("period_year", f"eq.{year}"),
            ],
            limit=1,
            order="created_at.desc",
        )
        return LeaderboardTargetRecord.model_validate(rows[0]) if rows else None

    def list_targets(self, month: int, year: int) -> List[LeaderboardTargetRecord]:
        rows = self.client.select_all(
            table="leaderboard_targets",
            select=TARGET_COLUMNS,
            filters=[("period_month", f"eq.{month}"), ("period_year", f"eq.{year}")],
            order="created_at.asc,id.asc",
        )
        return [LeaderboardTargetRecord.model_validate(row) for row in rows]

    def insert_target(self, payload: Dict[str, Any]) -> LeaderboardTargetRecord:
        rows = self.client.insert(table="leaderboard_targets", payload=payload)
        return LeaderboardTargetRecord.model_validate(rows[0])

    def update_target(self, target_id: int, payload: Dict[str, Any]) -> LeaderboardTargetRecord:
        rows = self.client.update(
            table="leaderboard_targets",
            payload=payload,
            filters=[("id", f"eq.{target_id}")],
        )
        return LeaderboardTargetRecord.model_validate(rows[0])
