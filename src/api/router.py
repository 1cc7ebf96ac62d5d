from __future__ import annotations

from fastapi import APIRouter

from src.api.client_payments import router as client_payments_router
from src.api.clients import router as clients_router
from src.api.dashboard import router as dashboard_router
from src.api.health import router as health_router
from src.api.leaderboard import router as leaderboard_router
from src.api.product_payments import router as product_payments_router


api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(dashboard_router)
api_router.include_router(leaderboard_router)
api_router.include_router(clients_router)
api_router.include_router(client_payments_router)
api_router.include_router(product_payments_router)
