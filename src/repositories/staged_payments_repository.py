from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from src.core.supabase import SupabaseClient, chunk_values
from src.models.payments import StagedPaymentRecord

PAYMENT_COLUMNS = (
    "id,client_id,total_payment,stage,amount,payment_date,invoice_no,remarks,created_at"
)


class StagedPaymentsRepository:
    def __init__(self) -> None:
        self.client = SupabaseClient()

    def get_payment(self, payment_id: int) -> Optional[StagedPaymentRecord]:
        rows, _ = self.client.select(
            table="client_payments",
            select=PAYMENT_COLUMNS,
            filters=[("id", f"eq.{payment_id}")],
            limit=1,
        )
        return StagedPaymentRecord.model_validate(rows[0]) if rows else None

    def list_by_client(self, client_id: int) -> List[StagedPaymentRecord]:
        rows = self.client.select_all(
            table="client_payments",
            select=PAYMENT_COLUMNS,
            filters=[("client_id", f"eq.{client_id}")],
            order="created_at.asc,id.asc",
        )
        return [StagedPaymentRecord.model_validate(row) for row in rows]

    def list_by_clients(self, client_ids: Iterable[int]) -> List[StagedPaymentRecord]:
        normalized_ids = sorted({int(value) for value in client_ids})
        records: List[StagedPaymentRecord] = []
        for chunk in chunk_values(normalized_ids):
            in_filter = ",".join(str(value) for value in chunk)
            rows = self.client.select_all(
                table="client_payments",
                select=PAYMENT_COLUMNS,
                filters=[("client_id", f"in.({in_filter})")],
                order="created_at.asc,id.asc",
            )
            records.extend(StagedPaymentRecord.model_validate(row) for row in rows)
        return records

    def find_by_invoice(
        self, invoice_no: str, exclude_id: Optional[int] = None
    ) -> Optional[StagedPaymentRecord]:
        filters = [("invoice_no", f"eq.{invoice_no}")]
        if exclude_id is not None:
            filters.append(("id", f"neq.{exclude_id}"))
        rows, _ = self.client.select(
            table="client_payments",
            select=PAYMENT_COLUMNS,
            filters=filters,
            limit=1,
        )
        return StagedPaymentRecord.model_validate(rows[0]) if rows else None

    def insert_payment(self, payload: Dict[str, Any]) -> StagedPaymentRecord:
        rows = self.client.insert(table="client_payments", payload=payload)
        return StagedPaymentRecord.model_validate(rows[0])

    def update_payment(self, payment_id: int, payload: Dict[str, Any]) -> StagedPaymentRecord:
        rows = self.client.update(
            table="client_payments",
            payload=payload,
            filters=[("id", f"eq.{payment_id}")],
        )
        return StagedPaymentRecord.model_validate(rows[0])

    def align_total_payment(self, client_id: int, total_payment: Any, exclude_id: int) -> int:
        rows = self.client.update(
            table="client_payments",
            payload={"total_payment": total_payment},
            filters=[
                ("client_id", f"eq.{client_id}"),
                ("id", f"neq.{exclude_id}"),
                ("total_payment", f"neq.{total_payment}"),
            ],
        )
        return len(rows)
