from __future__ import annotations

from functools import lru_cache

from fastapi import Header

from src.analytics.revenue import RevenueClassification, get_revenue_classification
from src.core.errors import BadRequestError
from src.models.access import Principal
from src.models.products import UserRole
from src.repositories.clients_repository import ClientsRepository
from src.repositories.leaderboard_repository import LeaderboardRepository
from src.repositories.product_payments_repository import ProductPaymentsRepository
from src.repositories.staged_payments_repository import StagedPaymentsRepository
from src.services.access_service import AccessService
from src.services.clients_service import ClientsService
from src.services.dashboard_service import DashboardService
from src.services.entity_resolver import EntityResolver
from src.services.leaderboard_service import LeaderboardService
from src.services.ledger_loader import LedgerLoader
from src.services.product_payments_service import ProductPaymentsService
from src.services.staged_payments_service import StagedPaymentsService


def get_principal(
    x_user_id: int = Header(),
    x_user_role: str = Header(),
) -> Principal:
    try:
        role = UserRole(x_user_role.strip().lower())
    except ValueError as exc:
        raise BadRequestError(f"Unsupported role: {x_user_role}") from exc
    return Principal(user_id=x_user_id, role=role)


@lru_cache
def get_classification() -> RevenueClassification:
    return get_revenue_classification()


@lru_cache
def get_clients_repository() -> ClientsRepository:
    return ClientsRepository()


@lru_cache
def get_staged_payments_repository() -> StagedPaymentsRepository:
    return StagedPaymentsRepository()


@lru_cache
def get_product_payments_repository() -> ProductPaymentsRepository:
    return ProductPaymentsRepository()


@lru_cache
def get_leaderboard_repository() -> LeaderboardRepository:
    return LeaderboardRepository()


def get_entity_resolver() -> EntityResolver:
    return EntityResolver(repository=get_product_payments_repository())


def get_access_service() -> AccessService:
    return AccessService(clients_repository=get_clients_repository())


def get_ledger_loader() -> LedgerLoader:
    return LedgerLoader(
        clients_repository=get_clients_repository(),
        staged_payments_repository=get_staged_payments_repository(),
        product_payments_repository=get_product_payments_repository(),
        entity_resolver=get_entity_resolver(),
    )


def get_leaderboard_service() -> LeaderboardService:
    return LeaderboardService(
        repository=get_leaderboard_repository(),
        clients_repository=get_clients_repository(),
        ledger_loader=get_ledger_loader(),
        classification=get_classification(),
    )


def get_dashboard_service() -> DashboardService:
    return DashboardService(
        access_service=get_access_service(),
        ledger_loader=get_ledger_loader(),
        leaderboard_service=get_leaderboard_service(),
        classification=get_classification(),
    )


def get_staged_payments_service() -> StagedPaymentsService:
    return StagedPaymentsService(
        repository=get_staged_payments_repository(),
        clients_repository=get_clients_repository(),
    )


def get_product_payments_service() -> ProductPaymentsService:
    return ProductPaymentsService(
        repository=get_product_payments_repository(),
        clients_repository=get_clients_repository(),
    )


def get_clients_service() -> ClientsService:
    return ClientsService(
        clients_repository=get_clients_repository(),
        staged_payments_repository=get_staged_payments_repository(),
        entity_resolver=get_entity_resolver(),
        access_service=get_access_service(),
    )
