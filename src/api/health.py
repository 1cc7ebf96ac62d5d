from __future__ import annotations

from typing import Dict

from fastapi import APIRouter

from src.core.config import get_settings
from src.shared.response import ResponseEnvelope, build_meta

router = APIRouter(tags=["health"])


@router.get("/health")
def health_check() -> ResponseEnvelope[Dict[str, str]]:
    settings = get_settings()
    meta = build_meta("system", "now")
    data = {
        "status": "ok",
        "service": settings.app_name,
        "environment": settings.environment,
        "businessTimezone": settings.business_timezone,
    }
    return ResponseEnvelope(data=data, meta=meta)
