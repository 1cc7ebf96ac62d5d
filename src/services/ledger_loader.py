from __future__ import annotations

from src.analytics.revenue import LedgerSnapshot
from src.models.access import ClientScope
from src.repositories.clients_repository import ClientsRepository
from src.repositories.product_payments_repository import ProductPaymentsRepository
from src.repositories.staged_payments_repository import StagedPaymentsRepository
from src.services.entity_resolver import EntityResolver


class LedgerLoader:
    """Reads everything the aggregation engine needs for one client scope."""

    def __init__(
        self,
        clients_repository: ClientsRepository,
        staged_payments_repository: StagedPaymentsRepository,
        product_payments_repository: ProductPaymentsRepository,
        entity_resolver: EntityResolver,
    ) -> None:
        self.clients_repository = clients_repository
        self.staged_payments_repository = staged_payments_repository
        self.product_payments_repository = product_payments_repository
        self.entity_resolver = entity_resolver

    def load(self, scope: ClientScope) -> LedgerSnapshot:
        if scope.counsellor_ids is not None and not scope.counsellor_ids:
            return LedgerSnapshot()
        clients = self.clients_repository.list_active_clients(scope.counsellor_ids)
        client_ids = [client.client_id for client in clients]
        if not client_ids:
            return LedgerSnapshot()
        staged_payments = self.staged_payments_repository.list_by_clients(client_ids)
        product_rows = self.product_payments_repository.list_by_clients(client_ids)
        return LedgerSnapshot(
            clients=clients,
            staged_payments=staged_payments,
            product_lines=self.entity_resolver.resolve_lines(product_rows),
        )
