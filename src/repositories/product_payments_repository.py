from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from src.core.supabase import SupabaseClient, chunk_values
from src.models.payments import ProductPaymentRecord

LEDGER_TABLE = "client_product_payments"
LEDGER_COLUMNS = (
    "id,client_id,product_name,entity_type,entity_id,amount,payment_date,"
    "invoice_no,remarks,created_at"
)


class ProductPaymentsRepository:
    """Ledger rows plus the satellite tables they point at."""

    def __init__(self) -> None:
        self.client = SupabaseClient()

    def get_product_payment(self, product_payment_id: int) -> Optional[ProductPaymentRecord]:
        rows, _ = self.client.select(
            table=LEDGER_TABLE,
            select=LEDGER_COLUMNS,
            filters=[("id", f"eq.{product_payment_id}")],
            limit=1,
        )
        return ProductPaymentRecord.model_validate(rows[0]) if rows else None

    def list_by_client(self, client_id: int) -> List[ProductPaymentRecord]:
        rows = self.client.select_all(
            table=LEDGER_TABLE,
            select=LEDGER_COLUMNS,
            filters=[("client_id", f"eq.{client_id}")],
            order="created_at.asc,id.asc",
        )
        return [ProductPaymentRecord.model_validate(row) for row in rows]

    def list_by_clients(self, client_ids: Iterable[int]) -> List[ProductPaymentRecord]:
        normalized_ids = sorted({int(value) for value in client_ids})
        records: List[ProductPaymentRecord] = []
        for chunk in chunk_values(normalized_ids):
            in_filter = ",".join(str(value) for value in chunk)
            rows = self.client.select_all(
                table=LEDGER_TABLE,
                select=LEDGER_COLUMNS,
                filters=[("client_id", f"in.({in_filter})")],
                order="created_at.asc,id.asc",
            )
            records.extend(ProductPaymentRecord.model_validate(row) for row in rows)
        return records

    def insert_product_payment(self, payload: Dict[str, Any]) -> ProductPaymentRecord:
        rows = self.client.insert(table=LEDGER_TABLE, payload=payload)
        return ProductPaymentRecord.model_validate(rows[0])

    def update_product_payment(
        self, product_payment_id: int, payload: Dict[str, Any]
    ) -> ProductPaymentRecord:
        rows = self.client.update(
            table=LEDGER_TABLE,
            payload=payload,
            filters=[("id", f"eq.{product_payment_id}")],
        )
        return ProductPaymentRecord.model_validate(rows[0])

    def get_entity(self, table: str, entity_id: int) -> Optional[Dict[str, Any]]:
        rows, _ = self.client.select(
            table=table,
            select="*",
            filters=[("id", f"eq.{entity_id}")],
            limit=1,
        )
        return rows[0] if rows else None

    def list_entities(self, table: str, entity_ids: Iterable[int]) -> List[Dict[str, Any]]:
        normalized_ids = sorted({int(value) for value in entity_ids})
        found: List[Dict[str, Any]] = []
        for chunk in chunk_values(normalized_ids):
            in_filter = ",".join(str(value) for value in chunk)
            rows, _ = self.client.select(
                table=table,
                select="*",
                filters=[("id", f"in.({in_filter})")],
                limit=len(chunk),
            )
            found.extend(rows)
        return found

    def find_entity_by_field(
        self, table: str, field: str, value: str, exclude_id: Optional[int] = None
    ) -> Optional[Dict[str, Any]]:
        filters = [(field, f"eq.{value}")]
        if exclude_id is not None:
            filters.append(("id", f"neq.{exclude_id}"))
        rows, _ = self.client.select(table=table, select="id", filters=filters, limit=1)
        return rows[0] if rows else None

    def insert_entity(self, table: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        rows = self.client.insert(table=table, payload=payload)
        return rows[0]

    def update_entity(self, table: str, entity_id: int, payload: Dict[str, Any]) -> Dict[str, Any]:
        rows = self.client.update(table=table, payload=payload, filters=[("id", f"eq.{entity_id}")])
        return rows[0]

    def delete_entity(self, table: str, entity_id: int) -> None:
        self.client.delete(table=table, filters=[("id", f"eq.{entity_id}")])
