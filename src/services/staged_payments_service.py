from __future__ import annotations

import logging
from typing import Optional
from uuid import uuid4

from src.core.errors import ConflictError, NotFoundError, ValidationFailedError
from src.repositories.clients_repository import ClientsRepository
from src.repositories.staged_payments_repository import StagedPaymentsRepository
from src.schemas.payments import StagedPayment, StagedPaymentSaveRequest, StagedPaymentSaveResult
from src.shared.time import business_today

logger = logging.getLogger(__name__)


def generate_invoice_number() -> str:
    return f"INV-{business_today():%Y%m%d}-{uuid4().hex[:8].upper()}"


class StagedPaymentsService:
    def __init__(
        self,
        repository: StagedPaymentsRepository,
        clients_repository: ClientsRepository,
    ) -> None:
        self.repository = repository
        self.clients_repository = clients_repository

    def save_payment(self, request: StagedPaymentSaveRequest) -> StagedPaymentSaveResult:
        if self.clients_repository.get_client(request.client_id) is None:
            raise NotFoundError(f"Client {request.client_id} not found")

        remarks = request.remarks.strip() if request.remarks else None
        invoice_no = request.invoice_no.strip() if request.invoice_no else None

        if request.payment_id is not None:
            existing = self.repository.get_payment(request.payment_id)
            if existing is None:
                raise NotFoundError(f"Payment {request.payment_id} not found")
            if existing.client_id != request.client_id:
                raise ValidationFailedError(
                    f"Payment {existing.id} does not belong to client {request.client_id}",
                    field="clientId",
                )
            invoice_no = invoice_no or existing.invoice_no or generate_invoice_number()
            if invoice_no != existing.invoice_no:
                self._ensure_unique_invoice(invoice_no, exclude_id=existing.id)
            payment = self.repository.update_payment(
                existing.id,
                {
                    "total_payment": request.total_payment,
                    "stage": request.stage.value,
                    "amount": request.amount,
                    "payment_date": request.payment_date or existing.payment_date or business_today(),
                    "invoice_no": invoice_no,
                    "remarks": remarks,
                },
            )
            action = "UPDATED"
        else:
            invoice_no = invoice_no or generate_invoice_number()
            self._ensure_unique_invoice(invoice_no)
            payment = self.repository.insert_payment(
                {
                    "client_id": request.client_id,
                    "total_payment": request.total_payment,
                    "stage": request.stage.value,
                    "amount": request.amount,
                    "payment_date": request.payment_date or business_today(),
                    "invoice_no": invoice_no,
                    "remarks": remarks,
                }
            )
            action = "CREATED"

        # Every stage row of a client carries the same expected total.
        aligned = self.repository.align_total_payment(
            request.client_id, request.total_payment, exclude_id=payment.id
        )
        logger.info(
            "%s staged payment id=%s client=%s stage=%s aligned_rows=%s",
            action.capitalize(),
            payment.id,
            request.client_id,
            request.stage.value,
            aligned,
        )
        return StagedPaymentSaveResult(action=action, payment=StagedPayment.from_record(payment))

    def _ensure_unique_invoice(self, invoice_no: str, exclude_id: Optional[int] = None) -> None:
        if self.repository.find_by_invoice(invoice_no, exclude_id=exclude_id) is not None:
            raise ConflictError(
                f'Invoice number "{invoice_no}" already exists. Please use a different invoice number.',
                value=invoice_no,
            )
