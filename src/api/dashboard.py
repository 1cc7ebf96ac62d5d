from __future__ import annotations


from fastapi import APIRouter, Depends, Query

from src.api.dependencies import get_dashboard_service, get_principal
from src.models.access import Principal
from src.schemas.dashboard import DashboardStats
from src.services.dashboard_service import DashboardService
from src.shared.response import ResponseEnvelope, build_meta

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats")
def dashboard_stats(
    filter: str = Query(default="today"),
    principal: Principal = Depends(get_principal),
    service: DashboardService = Depends(get_dashboard_service),
) -> ResponseEnvelope[DashboardStats]:
    data = service.get_dashboard_stats(filter, principal)
    meta = build_meta("client_information,client_payments,client_product_payments", filter)
    return ResponseEnvelope(data=data, pagination=None, meta=meta)
