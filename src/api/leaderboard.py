from __future__ import annotations

from typing import Optional, Tuple

from fastapi import APIRouter, Depends, Query

from src.api.dependencies import get_leaderboard_service
from src.schemas.leaderboard import (
    LeaderboardResponse,
    LeaderboardSummary,
    LeaderboardTarget,
    LeaderboardTargetRequest,
    LeaderboardTargetSaveResult,
    LeaderboardTargetUpdateRequest,
)
from src.services.leaderboard_service import LeaderboardService
from src.shared.response import ResponseEnvelope, build_meta
from src.shared.time import business_now

router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])


def _resolve_period(month: Optional[int], year: Optional[int]) -> Tuple[int, int]:
    now = business_now()
    return month if month is not None else now.month, year if year is not None else now.year


@router.get("")
def leaderboard(
    month: Optional[int] = Query(default=None),
    year: Optional[int] = Query(default=None),
    service: LeaderboardService = Depends(get_leaderboard_service),
) -> ResponseEnvelope[LeaderboardResponse]:
    month, year = _resolve_period(month, year)
    data = service.get_leaderboard(month, year)
    return ResponseEnvelope(
        data=data,
        pagination=None,
        meta=build_meta("users,client_information,leaderboard_targets", f"{year}-{month:02d}"),
    )


@router.get("/summary")
def leaderboard_summary(
    month: Optional[int] = Query(default=None),
    year: Optional[int] = Query(default=None),
    service: LeaderboardService = Depends(get_leaderboard_service),
) -> ResponseEnvelope[LeaderboardSummary]:
    month, year = _resolve_period(month, year)
    data = service.get_leaderboard_summary(month, year)
    return ResponseEnvelope(
        data=data,
        pagination=None,
        meta=build_meta("users,client_information", f"{year}-{month:02d}"),
    )


@router.post("/targets")
def leaderboard_set_target(
    request: LeaderboardTargetRequest,
    service: LeaderboardService = Depends(get_leaderboard_service),
) -> ResponseEnvelope[LeaderboardTargetSaveResult]:
    result = service.set_target(request)
    return ResponseEnvelope(data=result, pagination=None, meta=build_meta("leaderboard_targets"))


@router.patch("/targets/{target_id}")
def leaderboard_update_target(
    target_id: int,
    request: LeaderboardTargetUpdateRequest,
    service: LeaderboardService = Depends(get_leaderboard_service),
) -> ResponseEnvelope[LeaderboardTarget]:
    result = service.update_target(target_id, request.target)
    return ResponseEnvelope(data=result, pagination=None, meta=build_meta("leaderboard_targets"))
