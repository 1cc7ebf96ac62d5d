from __future__ import annotations

import itertools
import os
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional
from zoneinfo import ZoneInfo

os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-role-key")

import httpx
import pytest
from fastapi.testclient import TestClient

from src.analytics.revenue import RevenueClassification
from src.api.dependencies import (
    get_clients_service,
    get_dashboard_service,
    get_leaderboard_service,
    get_product_payments_service,
    get_staged_payments_service,
)
from src.main import create_app
from src.models.clients import ClientRecord, UserRecord
from src.models.leaderboard import LeaderboardTargetRecord
from src.models.payments import ProductPaymentRecord, StagedPaymentRecord
from src.models.products import ProductType, UserRole
from src.services.access_service import AccessService
from src.services.clients_service import ClientsService
from src.services.dashboard_service import DashboardService
from src.services.entity_resolver import EntityResolver
from src.services.leaderboard_service import LeaderboardService
from src.services.ledger_loader import LedgerLoader
from src.services.product_payments_service import ProductPaymentsService
from src.services.staged_payments_service import StagedPaymentsService


def _now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryClientsRepository:
    def __init__(self) -> None:
        self.clients: Dict[int, ClientRecord] = {}
        self.users: Dict[int, UserRecord] = {}
        self.sale_type_ids = {1, 2}

    def add_user(self, user_id: int, role: UserRole, **fields: Any) -> UserRecord:
        fields.setdefault("full_name", f"User {user_id}")
        self.users[user_id] = UserRecord(id=user_id, role=role, **fields)
        return self.users[user_id]

    def add_client(self, client_id: int, counsellor_id: int, **fields: Any) -> ClientRecord:
        fields.setdefault("full_name", f"Client {client_id}")
        self.clients[client_id] = ClientRecord(
            client_id=client_id, counsellor_id=counsellor_id, **fields
        )
        return self.clients[client_id]

    def get_client(self, client_id: int) -> Optional[ClientRecord]:
        return self.clients.get(client_id)

    def list_active_clients(self, counsellor_ids: Optional[Iterable[int]] = None) -> List[ClientRecord]:
        allowed = set(counsellor_ids) if counsellor_ids is not None else None
        return [
            client
            for client in sorted(self.clients.values(), key=lambda item: item.client_id)
            if not client.archived and (allowed is None or client.counsellor_id in allowed)
        ]

    def list_archived_clients(self, counsellor_ids: Optional[Iterable[int]] = None) -> List[ClientRecord]:
        allowed = set(counsellor_ids) if counsellor_ids is not None else None
        return [
            client
            for client in sorted(self.clients.values(), key=lambda item: item.client_id)
            if client.archived and (allowed is None or client.counsellor_id in allowed)
        ]

    def insert_client(self, payload: Dict[str, Any]) -> ClientRecord:
        client_id = max(self.clients, default=0) + 1
        self.clients[client_id] = ClientRecord(client_id=client_id, created_at=_now(), **payload)
        return self.clients[client_id]

    def update_client(self, client_id: int, payload: Dict[str, Any]) -> ClientRecord:
        self.clients[client_id] = self.clients[client_id].model_copy(update=payload)
        return self.clients[client_id]

    def sale_type_exists(self, sale_type_id: int) -> bool:
        return sale_type_id in self.sale_type_ids

    def get_user(self, user_id: int) -> Optional[UserRecord]:
        return self.users.get(user_id)

    def list_users_by_role(self, role: UserRole) -> List[UserRecord]:
        return [user for user in sorted(self.users.values(), key=lambda item: item.id) if user.role == role]

    def list_counsellors_for_manager(self, manager_id: int) -> List[UserRecord]:
        return [
            user
            for user in self.list_users_by_role(UserRole.COUNSELLOR)
            if user.manager_id == manager_id
        ]


class InMemoryStagedPaymentsRepository:
    def __init__(self) -> None:
        self.rows: Dict[int, Dict[str, Any]] = {}
        self._ids = itertools.count(1)

    def get_payment(self, payment_id: int) -> Optional[StagedPaymentRecord]:
        row = self.rows.get(payment_id)
        return StagedPaymentRecord.model_validate(row) if row else None

    def list_by_client(self, client_id: int) -> List[StagedPaymentRecord]:
        return self.list_by_clients([client_id])

    def list_by_clients(self, client_ids: Iterable[int]) -> List[StagedPaymentRecord]:
        wanted = set(client_ids)
        return [
            StagedPaymentRecord.model_validate(row)
            for _, row in sorted(self.rows.items())
            if row["client_id"] in wanted
        ]

    def find_by_invoice(
        self, invoice_no: str, exclude_id: Optional[int] = None
    ) -> Optional[StagedPaymentRecord]:
        for payment_id, row in self.rows.items():
            if row.get("invoice_no") == invoice_no and payment_id != exclude_id:
                return StagedPaymentRecord.model_validate(row)
        return None

    def insert_payment(self, payload: Dict[str, Any]) -> StagedPaymentRecord:
        payment_id = next(self._ids)
        self.rows[payment_id] = {"created_at": _now(), **payload, "id": payment_id}
        return StagedPaymentRecord.model_validate(self.rows[payment_id])

    def update_payment(self, payment_id: int, payload: Dict[str, Any]) -> StagedPaymentRecord:
        self.rows[payment_id].update(payload)
        return StagedPaymentRecord.model_validate(self.rows[payment_id])

    def align_total_payment(self, client_id: int, total_payment: Any, exclude_id: int) -> int:
        aligned = 0
        for payment_id, row in self.rows.items():
            if row["client_id"] == client_id and payment_id != exclude_id:
                if row.get("total_payment") != total_payment:
                    row["total_payment"] = total_payment
                    aligned += 1
        return aligned


class InMemoryProductPaymentsRepository:
    def __init__(self) -> None:
        self.ledger: Dict[int, Dict[str, Any]] = {}
        self.tables: Dict[str, Dict[int, Dict[str, Any]]] = defaultdict(dict)
        self._ledger_ids = itertools.count(1)
        self._entity_ids = itertools.count(100)
        self.fail_ledger_writes = False
        self.failing_tables: set[str] = set()
        self.entity_fetches: List[str] = []

    def get_product_payment(self, product_payment_id: int) -> Optional[ProductPaymentRecord]:
        row = self.ledger.get(product_payment_id)
        return ProductPaymentRecord.model_validate(row) if row else None

    def list_by_client(self, client_id: int) -> List[ProductPaymentRecord]:
        return self.list_by_clients([client_id])

    def list_by_clients(self, client_ids: Iterable[int]) -> List[ProductPaymentRecord]:
        wanted = set(client_ids)
        return [
            ProductPaymentRecord.model_validate(row)
            for _, row in sorted(self.ledger.items())
            if row["client_id"] in wanted
        ]

    def insert_product_payment(self, payload: Dict[str, Any]) -> ProductPaymentRecord:
        if self.fail_ledger_writes:
            raise httpx.HTTPError("ledger unavailable")
        row_id = next(self._ledger_ids)
        self.ledger[row_id] = {"created_at": _now(), **payload, "id": row_id}
        return ProductPaymentRecord.model_validate(self.ledger[row_id])

    def update_product_payment(
        self, product_payment_id: int, payload: Dict[str, Any]
    ) -> ProductPaymentRecord:
        if self.fail_ledger_writes:
            raise httpx.HTTPError("ledger unavailable")
        self.ledger[product_payment_id].update(payload)
        return ProductPaymentRecord.model_validate(self.ledger[product_payment_id])

    def get_entity(self, table: str, entity_id: int) -> Optional[Dict[str, Any]]:
        row = self.tables[table].get(entity_id)
        return dict(row) if row else None

    def list_entities(self, table: str, entity_ids: Iterable[int]) -> List[Dict[str, Any]]:
        self.entity_fetches.append(table)
        if table in self.failing_tables:
            raise httpx.HTTPError(f"{table} unavailable")
        return [dict(self.tables[table][entity_id]) for entity_id in entity_ids if entity_id in self.tables[table]]

    def find_entity_by_field(
        self, table: str, field: str, value: str, exclude_id: Optional[int] = None
    ) -> Optional[Dict[str, Any]]:
        for entity_id, row in self.tables[table].items():
            if entity_id != exclude_id and row.get(field) is not None and str(row.get(field)) == value:
                return {"id": entity_id}
        return None

    def insert_entity(self, table: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        entity_id = next(self._entity_ids)
        self.tables[table][entity_id] = {"created_at": _now(), **payload, "id": entity_id}
        return dict(self.tables[table][entity_id])

    def update_entity(self, table: str, entity_id: int, payload: Dict[str, Any]) -> Dict[str, Any]:
        self.tables[table][entity_id].update(payload)
        return dict(self.tables[table][entity_id])

    def delete_entity(self, table: str, entity_id: int) -> None:
        self.tables[table].pop(entity_id, None)


class InMemoryLeaderboardRepository:
    def __init__(self) -> None:
        self.rows: Dict[int, Dict[str, Any]] = {}
        self._ids = itertools.count(1)

    def get_target(self, target_id: int) -> Optional[LeaderboardTargetRecord]:
        row = self.rows.get(target_id)
        return LeaderboardTargetRecord.model_validate(row) if row else None

    def find_target(self, counsellor_id: int, month: int, year: int) -> Optional[LeaderboardTargetRecord]:
        for target in self.list_targets(month, year):
            if target.counsellor_id == counsellor_id:
                return target
        return None

    def list_targets(self, month: int, year: int) -> List[LeaderboardTargetRecord]:
        return [
            LeaderboardTargetRecord.model_validate(row)
            for _, row in sorted(self.rows.items())
            if row["period_month"] == month and row["period_year"] == year
        ]

    def insert_target(self, payload: Dict[str, Any]) -> LeaderboardTargetRecord:
        target_id = next(self._ids)
        self.rows[target_id] = {"created_at": _now(), **payload, "id": target_id}
        return LeaderboardTargetRecord.model_validate(self.rows[target_id])

    def update_target(self, target_id: int, payload: Dict[str, Any]) -> LeaderboardTargetRecord:
        self.rows[target_id].update(payload)
        return LeaderboardTargetRecord.model_validate(self.rows[target_id])


@pytest.fixture()
def clients_repository() -> InMemoryClientsRepository:
    return InMemoryClientsRepository()


@pytest.fixture()
def staged_repository() -> InMemoryStagedPaymentsRepository:
    return InMemoryStagedPaymentsRepository()


@pytest.fixture()
def product_repository() -> InMemoryProductPaymentsRepository:
    return InMemoryProductPaymentsRepository()


@pytest.fixture()
def leaderboard_repository() -> InMemoryLeaderboardRepository:
    return InMemoryLeaderboardRepository()


@pytest.fixture()
def classification() -> RevenueClassification:
    return RevenueClassification(
        core_product=ProductType.ALL_FINANCE_EMPLOYEMENT,
        count_only_products=frozenset(
            {
                ProductType.LOAN_DETAILS,
                ProductType.FOREX_CARD,
                ProductType.TUTION_FEES,
                ProductType.CREDIT_CARD,
                ProductType.SIM_CARD_ACTIVATION,
                ProductType.INSURANCE,
                ProductType.BEACON_ACCOUNT,
                ProductType.AIR_TICKET,
            }
        ),
    )


@pytest.fixture()
def client() -> TestClient:
    return TestClient(create_app())


@pytest.fixture()
def api_client(
    clients_repository,
    staged_repository,
    product_repository,
    leaderboard_repository,
    classification,
) -> TestClient:
    resolver = EntityResolver(product_repository)
    access = AccessService(clients_repository)
    loader = LedgerLoader(clients_repository, staged_repository, product_repository, resolver)
    leaderboard = LeaderboardService(leaderboard_repository, clients_repository, loader, classification)

    app = create_app()
    app.dependency_overrides[get_leaderboard_service] = lambda: leaderboard
    app.dependency_overrides[get_dashboard_service] = lambda: DashboardService(
        access, loader, leaderboard, classification
    )
    app.dependency_overrides[get_staged_payments_service] = lambda: StagedPaymentsService(
        staged_repository, clients_repository
    )
    app.dependency_overrides[get_product_payments_service] = lambda: ProductPaymentsService(
        product_repository, clients_repository
    )
    app.dependency_overrides[get_clients_service] = lambda: ClientsService(
        clients_repository, staged_repository, resolver, access
    )
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def business_clock(monkeypatch):
    """Pins the business clock to the first minutes of a day far east of UTC."""
    from src.core.config import get_settings
    from src.shared import time as business_time

    zone = ZoneInfo("Etc/GMT-14")
    now = datetime(2031, 1, 1, 0, 30, tzinfo=zone)
    monkeypatch.setenv("BUSINESS_TIMEZONE", "Etc/GMT-14")
    get_settings.cache_clear()
    monkeypatch.setattr(business_time, "business_now", lambda: now)
    yield now
    get_settings.cache_clear()
