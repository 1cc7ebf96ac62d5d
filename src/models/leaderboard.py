from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class LeaderboardTargetRecord(BaseModel):
    id: int
    manager_id: int
    counsellor_id: int
    target: int
    achieved_target: int = 0
    rank: Optional[int] = None
    period_month: int
    period_year: int
    created_at: Optional[datetime] = None
