from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from src.models.products import EntityKind, PaymentStage, ProductType


class ProductPaymentRecord(BaseModel):
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


class StagedPaymentRecord(BaseModel):
    id: int
    client_id: int
    total_payment: Optional[Decimal] = None
    stage: PaymentStage
    amount: Optional[Decimal] = None
    payment_date: Optional[date] = None
    invoice_no: Optional[str] = None
    remarks: Optional[str] = None
    created_at: Optional[datetime] = None


class ProductLine(BaseModel):
    """A ledger row with its effective amount and date resolved from the satellite row."""

    id: int
    client_id: int
    product_name: ProductType
    amount: Decimal = Decimal("0")
    payment_date: Optional[date] = None
    created_at: Optional[datetime] = None
