from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import Field

from src.models.leaderboard import LeaderboardTargetRecord
from src.shared.base import BaseSchema


class LeaderboardEntry(BaseSchema):
    rank: int
    counsellor_id: int
    full_name: str
    emp_id: Optional[str] = None
    designation: Optional[str] = None
    enrollments: int
    revenue: Decimal
    target: int = 0
    achieved_target: int
    target_id: Optional[int] = None


class LeaderboardResponse(BaseSchema):
    month: int
    year: int
    entries: List[LeaderboardEntry]


class LeaderboardSummary(BaseSchema):
    month: int
    year: int
    total_counsellors: int
    total_enrollments: int
    total_revenue: Decimal


class LeaderboardTargetRequest(BaseSchema):
    counsellor_id: int
    manager_id: int
    target: int = Field(gt=0)
    month: int = Field(ge=1, le=12)
    year: int = Field(ge=2000, le=3000)


class LeaderboardTargetUpdateRequest(BaseSchema):
    target: int = Field(gt=0)


class LeaderboardTarget(BaseSchema):
    id: int
    manager_id: int
    counsellor_id: int
    target: int
    achieved_target: int
    rank: Optional[int] = None
    period_month: int
    period_year: int
    created_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: LeaderboardTargetRecord) -> "LeaderboardTarget":
        return cls.model_validate(record.model_dump())


class LeaderboardTargetSaveResult(BaseSchema):
    action: Literal["CREATED", "UPDATED"]
    target: LeaderboardTarget
