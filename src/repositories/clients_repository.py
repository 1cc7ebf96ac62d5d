from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from src.core.supabase import SupabaseClient, chunk_values
from src.models.clients import ClientRecord, UserRecord
from src.models.products import UserRole

CLIENT_TABLE = "client_information"
CLIENT_COLUMNS = (
    "client_id,counsellor_id,full_name,enrollment_date,sale_type_id,lead_type_id,archived,created_at"
)
USER_COLUMNS = "id,full_name,email,emp_id,role,manager_id,designation,is_supervisor"


class ClientsRepository:
    def __init__(self) -> None:
        self.client = SupabaseClient()

    def get_client(self, client_id: int) -> Optional[ClientRecord]:
        rows, _ = self.client.select(
            table=CLIENT_TABLE,
            select=CLIENT_COLUMNS,
            filters=[("client_id", f"eq.{client_id}")],
            limit=1,
        )
        return ClientRecord.model_validate(rows[0]) if rows else None

    def list_active_clients(
        self, counsellor_ids: Optional[Iterable[int]] = None
    ) -> List[ClientRecord]:
        return self._list_clients(archived=False, counsellor_ids=counsellor_ids)

    def list_archived_clients(
        self, counsellor_ids: Optional[Iterable[int]] = None
    ) -> List[ClientRecord]:
        return self._list_clients(archived=True, counsellor_ids=counsellor_ids)

    def _list_clients(
        self, archived: bool, counsellor_ids: Optional[Iterable[int]]
    ) -> List[ClientRecord]:
        base_filters = [("archived", f"eq.{str(archived).lower()}")]
        if counsellor_ids is None:
            rows = self.client.select_all(
                table=CLIENT_TABLE,
                select=CLIENT_COLUMNS,
                filters=base_filters,
                order="client_id.asc",
            )
            return [ClientRecord.model_validate(row) for row in rows]

        normalized_ids = sorted({int(value) for value in counsellor_ids})
        records: List[ClientRecord] = []
        for chunk in chunk_values(normalized_ids):
            in_filter = ",".join(str(value) for value in chunk)
            rows = self.client.select_all(
                table=CLIENT_TABLE,
                select=CLIENT_COLUMNS,
                filters=[*base_filters, ("counsellor_id", f"in.({in_filter})")],
                order="client_id.asc",
            )
            records.extend(ClientRecord.model_validate(row) for row in rows)
        return sorted(records, key=lambda record: record.client_id)

    def insert_client(self, payload: Dict[str, Any]) -> ClientRecord:
        rows = self.client.insert(table=CLIENT_TABLE, payload=payload)
        return ClientRecord.model_validate(rows[0])

    def update_client(self, client_id: int, payload: Dict[str, Any]) -> ClientRecord:
        rows = self.client.update(
            table=CLIENT_TABLE,
            payload=payload,
            filters=[("client_id", f"eq.{client_id}")],
        )
        return ClientRecord.model_validate(rows[0])

    def sale_type_exists(self, sale_type_id: int) -> bool:
        rows, _ = self.client.select(
            table="sale_type",
            select="sale_type_id",
            filters=[("sale_type_id", f"eq.{sale_type_id}")],
            limit=1,
        )
        return bool(rows)

    def get_user(self, user_id: int) -> Optional[UserRecord]:
        rows, _ = self.client.select(
            table="users",
            select=USER_COLUMNS,
            filters=[("id", f"eq.{user_id}")],
            limit=1,
        )
        return UserRecord.model_validate(rows[0]) if rows else None

    def list_users_by_role(self, role: UserRole) -> List[UserRecord]:
        rows = self.client.select_all(
            table="users",
            select=USER_COLUMNS,
            filters=[("role", f"eq.{UserRole(role).value}")],
            order="id.asc",
        )
        return [UserRecord.model_validate(row) for row in rows]

    def list_counsellors_for_manager(self, manager_id: int) -> List[UserRecord]:
        rows = self.client.select_all(
            table="users",
            select=USER_COLUMNS,
            filters=[
                ("role", f"eq.{UserRole.COUNSELLOR.value}"),
                ("manager_id", f"eq.{manager_id}"),
            ],
            order="id.asc",
        )
        return [UserRecord.model_validate(row) for row in rows]
