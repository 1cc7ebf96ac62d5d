from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Literal, Optional

from pydantic import Field

from src.models.entities import EntityRecord
from src.models.payments import ProductPaymentRecord, StagedPaymentRecord
from src.models.products import EntityKind, PaymentStage, ProductType
from src.shared.base import BaseSchema, to_camel

SaveAction = Literal["CREATED", "UPDATED"]


class StagedPaymentSaveRequest(BaseSchema):
    payment_id: Optional[int] = None
    client_id: int = Field(gt=0)
    stage: PaymentStage
    amount: Decimal = Field(gt=0, allow_inf_nan=False)
    total_payment: Decimal = Field(gt=0, allow_inf_nan=False)
    payment_date: Optional[date] = None
    invoice_no: Optional[str] = None
    remarks: Optional[str] = None


class StagedPayment(BaseSchema):
    id: int
    client_id: int
    total_payment: Optional[Decimal] = None
    stage: PaymentStage
    amount: Optional[Decimal] = None
    payment_date: Optional[date] = None
    invoice_no: Optional[str] = None
    remarks: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: StagedPaymentRecord) -> "StagedPayment":
        return cls.model_validate(record.model_dump())


class StagedPaymentSaveResult(BaseSchema):
    action: SaveAction
    payment: StagedPayment


class ProductPaymentSaveRequest(BaseSchema):
    product_payment_id: Optional[int] = None
    client_id: int = Field(gt=0)
    product_name: str
    amount: Optional[Decimal] = Field(default=None, allow_inf_nan=False)
    payment_date: Optional[date] = None
    invoice_no: Optional[str] = None
    remarks: Optional[str] = None
    entity_data: Optional[Dict[str, Any]] = None


class ProductPayment(BaseSchema):
    id: int
    client_id: int
    product_name: ProductType
    entity_type: EntityKind
    entity_id: Optional[int] = None
    amount: Optional[Decimal] = None
    payment_date: Optional[date] = None
    invoice_no: Optional[str] = None
    remarks: Optional[str] = None
    created_at: Optional[datetime] = None
    entity: Optional[Dict[str, Any]] = None

    @classmethod
    def from_record(
        cls, record: ProductPaymentRecord, entity: Optional[EntityRecord] = None
    ) -> "ProductPayment":
        return cls.model_validate(
            {**record.model_dump(), "entity": entity_to_camel(entity) if entity else None}
        )


class ProductPaymentSaveResult(BaseSchema):
    action: SaveAction
    record: ProductPayment


def entity_to_camel(entity: EntityRecord) -> Dict[str, Any]:
    return {to_camel(key): value for key, value in entity.model_dump(mode="json").items()}
