from __future__ import annotations

from src.core.errors import BadRequestError, NotFoundError
from src.models.access import ClientScope, Principal
from src.models.products import UserRole
from src.repositories.clients_repository import ClientsRepository


class AccessService:
    def __init__(self, clients_repository: ClientsRepository) -> None:
        self.clients_repository = clients_repository

    def resolve_scope(self, principal: Principal) -> ClientScope:
        if principal.role == UserRole.ADMIN:
            return ClientScope()
        if principal.role == UserRole.COUNSELLOR:
            return ClientScope(counsellor_ids=frozenset({principal.user_id}))
        if principal.role == UserRole.MANAGER:
            manager = self.clients_repository.get_user(principal.user_id)
            if manager is None or manager.role != UserRole.MANAGER:
                raise NotFoundError(f"Manager {principal.user_id} not found")
            if manager.is_supervisor:
                return ClientScope()
            counsellors = self.clients_repository.list_counsellors_for_manager(manager.id)
            return ClientScope(counsellor_ids=frozenset(user.id for user in counsellors))
        raise BadRequestError(f"Unsupported role: {principal.role}")
