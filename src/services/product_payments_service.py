from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Callable, Optional

import httpx

from src.core.errors import ConflictError, NotFoundError, ValidationFailedError
from src.models.entities import EntityRecord
from src.models.payments import ProductPaymentRecord
from src.models.products import EntityKind, ProductType, entity_kind_for
from src.repositories.clients_repository import ClientsRepository
from src.repositories.product_payments_repository import ProductPaymentsRepository
from src.schemas.entities import normalize_entity_data, validate_entity_payload
from src.schemas.payments import (
    ProductPayment,
    ProductPaymentSaveRequest,
    ProductPaymentSaveResult,
)
from src.services.entity_kinds import EntityKindSpec, get_entity_kind_spec
from src.shared.time import business_today

logger = logging.getLogger(__name__)

# Keys that describe the ledger row itself and never belong on a satellite row.
LEDGER_ONLY_FIELDS = frozenset(
    {"id", "productPaymentId", "productName", "paymentDate", "clientId", "entityId", "entityType"}
)


class ProductPaymentsService:
    def __init__(
        self,
        repository: ProductPaymentsRepository,
        clients_repository: ClientsRepository,
    ) -> None:
        self.repository = repository
        self.clients_repository = clients_repository

    def save_product_payment(self, request: ProductPaymentSaveRequest) -> ProductPaymentSaveResult:
        product = self._parse_product(request.product_name)
        kind = entity_kind_for(product)
        if self.clients_repository.get_client(request.client_id) is None:
            raise NotFoundError(f"Client {request.client_id} not found")
        if request.product_payment_id is not None:
            return self._update(request, product, kind)
        return self._create(request, product, kind)

    def _create(
        self, request: ProductPaymentSaveRequest, product: ProductType, kind: EntityKind
    ) -> ProductPaymentSaveResult:
        if kind == EntityKind.MASTER_ONLY:
            amount = self._require_amount(request.amount, product)
            record = self.repository.insert_product_payment(
                {
                    "client_id": request.client_id,
                    "product_name": product.value,
                    "entity_type": kind.value,
                    "entity_id": None,
                    "amount": amount,
                    "payment_date": request.payment_date or business_today(),
                    "invoice_no": request.invoice_no,
                    "remarks": request.remarks,
                }
            )
            logger.info(
                "Created product payment id=%s product=%s client=%s",
                record.id,
                product.value,
                request.client_id,
            )
            return ProductPaymentSaveResult(action="CREATED", record=ProductPayment.from_record(record))

        spec = get_entity_kind_spec(kind)
        if request.entity_data is None:
            raise ValidationFailedError(
                f"entityData is required for {product.value}", field="entityData"
            )
        data = normalize_entity_data(spec.payload_model, request.entity_data)
        # Ledger-level values fill satellite fields the entity data leaves out.
        fallbacks = {
            "amount": request.amount,
            "payment_date": request.payment_date,
            "invoice_no": request.invoice_no,
            "remarks": request.remarks,
        }
        for field, value in fallbacks.items():
            if value is not None and field in spec.payload_model.model_fields and data.get(field) is None:
                data[field] = value
        payload = validate_entity_payload(spec.payload_model, data)
        values = payload.model_dump()
        self._ensure_unique(spec, values.get(spec.unique_field) if spec.unique_field else None)

        entity = spec.record_model.model_validate(self.repository.insert_entity(spec.table, values))
        try:
            record = self.repository.insert_product_payment(
                {
                    "client_id": request.client_id,
                    "product_name": product.value,
                    "entity_type": kind.value,
                    "entity_id": entity.id,
                    "amount": None,
                    "payment_date": None,
                    "invoice_no": None,
                    "remarks": None,
                }
            )
        except Exception:
            logger.error(
                "Ledger insert failed, removing %s row id=%s client=%s",
                spec.table,
                entity.id,
                request.client_id,
            )
            self._compensate(lambda: self.repository.delete_entity(spec.table, entity.id))
            raise
        logger.info(
            "Created product payment id=%s product=%s client=%s entity=%s:%s",
            record.id,
            product.value,
            request.client_id,
            kind.value,
            entity.id,
        )
        return ProductPaymentSaveResult(
            action="CREATED", record=ProductPayment.from_record(record, entity)
        )

    def _update(
        self, request: ProductPaymentSaveRequest, product: ProductType, kind: EntityKind
    ) -> ProductPaymentSaveResult:
        existing = self.repository.get_product_payment(request.product_payment_id)
        if existing is None:
            raise NotFoundError(f"Product payment {request.product_payment_id} not found")
        if existing.product_name != product:
            raise ValidationFailedError(
                f"productName cannot change from {existing.product_name.value} to {product.value}",
                field="productName",
            )
        if existing.client_id != request.client_id:
            raise ValidationFailedError(
                f"Product payment {existing.id} does not belong to client {request.client_id}",
                field="clientId",
            )

        if kind == EntityKind.MASTER_ONLY:
            amount = self._require_amount(
                request.amount if request.amount is not None else existing.amount, product
            )
            record = self.repository.update_product_payment(
                existing.id,
                {
                    "entity_type": kind.value,
                    "entity_id": None,
                    "amount": amount,
                    "payment_date": request.payment_date or existing.payment_date,
                    "invoice_no": request.invoice_no
                    if request.invoice_no is not None
                    else existing.invoice_no,
                    "remarks": request.remarks if request.remarks is not None else existing.remarks,
                },
            )
            logger.info("Updated product payment id=%s product=%s", record.id, product.value)
            return ProductPaymentSaveResult(action="UPDATED", record=ProductPayment.from_record(record))

        spec = get_entity_kind_spec(kind)
        current = self._load_entity(spec, existing)
        incoming = {
            key: value
            for key, value in (request.entity_data or {}).items()
            if key not in LEDGER_ONLY_FIELDS
        }
        changes = normalize_entity_data(spec.payload_model, incoming)
        if (
            request.payment_date is not None
            and "payment_date" in spec.payload_model.model_fields
            and "payment_date" not in changes
        ):
            changes["payment_date"] = request.payment_date
        current_values = {
            key: value
            for key, value in current.model_dump(include=set(spec.payload_model.model_fields)).items()
            if value is not None
        }
        payload = validate_entity_payload(spec.payload_model, {**current_values, **changes})
        values = payload.model_dump(include=set(changes))
        if spec.unique_field and spec.unique_field in values:
            new_value = values[spec.unique_field]
            if new_value != getattr(current, spec.unique_field):
                self._ensure_unique(spec, new_value, exclude_id=current.id)

        entity = current
        if values:
            entity = spec.record_model.model_validate(
                self.repository.update_entity(spec.table, current.id, values)
            )
        try:
            record = self.repository.update_product_payment(
                existing.id,
                {
                    "entity_type": kind.value,
                    "entity_id": current.id,
                    "amount": None,
                    "payment_date": None,
                    "invoice_no": None,
                    "remarks": None,
                },
            )
        except Exception:
            if values:
                snapshot = current.model_dump(include=set(values))
                logger.error(
                    "Ledger update failed, restoring %s row id=%s fields=%s",
                    spec.table,
                    current.id,
                    sorted(snapshot),
                )
                self._compensate(
                    lambda: self.repository.update_entity(spec.table, current.id, snapshot)
                )
            raise
        logger.info(
            "Updated product payment id=%s product=%s entity=%s:%s fields=%s",
            record.id,
            product.value,
            kind.value,
            current.id,
            sorted(values),
        )
        return ProductPaymentSaveResult(
            action="UPDATED", record=ProductPayment.from_record(record, entity)
        )

    def _load_entity(self, spec: EntityKindSpec, existing: ProductPaymentRecord) -> EntityRecord:
        if existing.entity_id is None:
            raise NotFoundError(f"Product payment {existing.id} has no {spec.table} record")
        row = self.repository.get_entity(spec.table, existing.entity_id)
        if row is None:
            raise NotFoundError(f"{spec.table} record {existing.entity_id} not found")
        return spec.record_model.model_validate(row)

    def _ensure_unique(
        self, spec: EntityKindSpec, value: Optional[Any], exclude_id: Optional[int] = None
    ) -> None:
        if not spec.unique_field or value is None or value == "":
            return
        duplicate = self.repository.find_entity_by_field(
            spec.table, spec.unique_field, str(value), exclude_id=exclude_id
        )
        if duplicate is not None:
            raise ConflictError(spec.duplicate_message(str(value)), value=str(value))

    @staticmethod
    def _compensate(action: Callable[[], Any]) -> None:
        try:
            action()
        except httpx.HTTPError:
            logger.exception("Compensating write failed; ledger and satellite may disagree")

    @staticmethod
    def _parse_product(product_name: str) -> ProductType:
        try:
            return ProductType(product_name)
        except ValueError as exc:
            raise ValidationFailedError(
                f"Invalid productName: {product_name}", field="productName"
            ) from exc

    @staticmethod
    def _require_amount(amount: Optional[Decimal], product: ProductType) -> Decimal:
        if amount is None:
            raise ValidationFailedError(f"amount is required for {product.value}", field="amount")
        value = Decimal(str(amount))
        if not value.is_finite() or value <= 0:
            raise ValidationFailedError("amount must be a positive number", field="amount")
        return value
