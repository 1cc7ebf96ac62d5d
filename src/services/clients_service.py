from __future__ import annotations

import logging
from typing import List, Optional

from src.core.errors import BadRequestError, ForbiddenError, NotFoundError, ValidationFailedError
from src.models.access import ClientScope, Principal
from src.models.clients import ClientRecord
from src.models.products import UserRole
from src.repositories.clients_repository import ClientsRepository
from src.repositories.staged_payments_repository import StagedPaymentsRepository
from src.schemas.clients import (
    ClientArchiveResult,
    ClientDetail,
    ClientSaveRequest,
    ClientSaveResult,
    ClientSummary,
    ClientTransferResult,
)
from src.schemas.payments import ProductPayment, StagedPayment
from src.services.access_service import AccessService
from src.services.entity_resolver import EntityResolver

logger = logging.getLogger(__name__)


class ClientsService:
    """Client records and the read projections a caller re-fetches after any write."""

    def __init__(
        self,
        clients_repository: ClientsRepository,
        staged_payments_repository: StagedPaymentsRepository,
        entity_resolver: EntityResolver,
        access_service: AccessService,
    ) -> None:
        self.clients_repository = clients_repository
        self.staged_payments_repository = staged_payments_repository
        self.entity_resolver = entity_resolver
        self.access_service = access_service

    def list_visible_clients(self, principal: Principal) -> List[ClientSummary]:
        scope = self.access_service.resolve_scope(principal)
        if _is_empty(scope):
            return []
        clients = self.clients_repository.list_active_clients(scope.counsellor_ids)
        return [ClientSummary.from_record(client) for client in clients]

    def list_archived_clients(self, principal: Principal) -> List[ClientSummary]:
        scope = self.access_service.resolve_scope(principal)
        if _is_empty(scope):
            return []
        clients = self.clients_repository.list_archived_clients(scope.counsellor_ids)
        return [ClientSummary.from_record(client) for client in clients]

    def get_client_detail(self, client_id: int, principal: Optional[Principal] = None) -> ClientDetail:
        client = self._get_visible_client(client_id, principal)
        payments = self.staged_payments_repository.list_by_client(client_id)
        return ClientDetail(
            client=ClientSummary.from_record(client),
            payments=[StagedPayment.from_record(row) for row in payments],
            product_payments=self.entity_resolver.get_by_client(client_id),
        )

    def list_payments(self, client_id: int, principal: Optional[Principal] = None) -> List[StagedPayment]:
        self._get_visible_client(client_id, principal)
        rows = self.staged_payments_repository.list_by_client(client_id)
        return [StagedPayment.from_record(row) for row in rows]

    def list_product_payments(
        self, client_id: int, principal: Optional[Principal] = None
    ) -> List[ProductPayment]:
        self._get_visible_client(client_id, principal)
        return self.entity_resolver.get_by_client(client_id)

    def save_client(self, request: ClientSaveRequest, principal: Principal) -> ClientSaveResult:
        full_name = request.full_name.strip()
        if not full_name:
            raise ValidationFailedError("Full name is required", field="fullName")
        if self.clients_repository.get_user(principal.user_id) is None:
            raise BadRequestError(f"Invalid counsellor: {principal.user_id}")
        if not self.clients_repository.sale_type_exists(request.sale_type_id):
            raise ValidationFailedError(
                f"Invalid sale type: {request.sale_type_id}", field="saleTypeId"
            )

        values = {
            "full_name": full_name,
            "enrollment_date": request.enrollment_date,
            "sale_type_id": request.sale_type_id,
            "lead_type_id": request.lead_type_id,
        }
        if request.client_id is not None:
            self._get_visible_client(request.client_id, principal)
            client = self.clients_repository.update_client(request.client_id, values)
            logger.info("Updated client id=%s by user=%s", client.client_id, principal.user_id)
            return ClientSaveResult(action="UPDATED", client=ClientSummary.from_record(client))

        client = self.clients_repository.insert_client(
            {**values, "counsellor_id": principal.user_id}
        )
        logger.info("Created client id=%s counsellor=%s", client.client_id, client.counsellor_id)
        return ClientSaveResult(action="CREATED", client=ClientSummary.from_record(client))

    def set_archived(self, client_id: int, archived: bool, principal: Principal) -> ClientArchiveResult:
        client = self._get_managed_client(client_id, principal, "archive/unarchive")
        updated = self.clients_repository.update_client(client_id, {"archived": archived})
        action = "ARCHIVED" if archived else "UNARCHIVED"
        logger.info(
            "Client %s id=%s by user=%s previous=%s",
            action.lower(),
            client_id,
            principal.user_id,
            client.archived,
        )
        return ClientArchiveResult(
            action=action,
            client=ClientSummary.from_record(updated),
            previous_archived=client.archived,
        )

    def transfer_client(
        self, client_id: int, counsellor_id: int, principal: Principal
    ) -> ClientTransferResult:
        client = self._get_managed_client(client_id, principal, "transfer")
        counsellor = self.clients_repository.get_user(counsellor_id)
        if counsellor is None or counsellor.role != UserRole.COUNSELLOR:
            raise NotFoundError(f"Counsellor {counsellor_id} not found")

        updated = self.clients_repository.update_client(client_id, {"counsellor_id": counsellor.id})
        logger.info(
            "Transferred client id=%s from counsellor=%s to counsellor=%s by user=%s",
            client_id,
            client.counsellor_id,
            counsellor.id,
            principal.user_id,
        )
        return ClientTransferResult(
            client=ClientSummary.from_record(updated),
            previous_counsellor_id=client.counsellor_id,
        )

    def _get_visible_client(self, client_id: int, principal: Optional[Principal]) -> ClientRecord:
        client = self.clients_repository.get_client(client_id)
        if client is None:
            raise NotFoundError(f"Client {client_id} not found")
        if principal is not None:
            scope = self.access_service.resolve_scope(principal)
            if client.archived or not scope.allows(client.counsellor_id):
                raise NotFoundError(f"Client {client_id} not found")
        return client

    def _get_managed_client(self, client_id: int, principal: Principal, verb: str) -> ClientRecord:
        # Archived clients stay manageable so they can be restored.
        client = self.clients_repository.get_client(client_id)
        if client is None:
            raise NotFoundError(f"Client {client_id} not found")
        scope = self.access_service.resolve_scope(principal)
        if not scope.allows(client.counsellor_id):
            raise ForbiddenError(f"You do not have permission to {verb} this client")
        return client


def _is_empty(scope: ClientScope) -> bool:
    return scope.counsellor_ids is not None and not scope.counsellor_ids
