from __future__ import annotations

from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import Field, StrictBool

from src.models.clients import ClientRecord
from src.schemas.payments import ProductPayment, StagedPayment
from src.shared.base import BaseSchema


class ClientSummary(BaseSchema):
    client_id: int
    counsellor_id: int
    full_name: str
    enrollment_date: Optional[date] = None
    sale_type_id: Optional[int] = None
    lead_type_id: Optional[int] = None
    archived: bool = False
    created_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: ClientRecord) -> "ClientSummary":
        return cls.model_validate(record.model_dump())


class ClientDetail(BaseSchema):
    client: ClientSummary
    payments: List[StagedPayment]
    product_payments: List[ProductPayment]


class ClientSaveRequest(BaseSchema):
    """Creates a client for the calling counsellor, or edits one when clientId is set."""

    client_id: Optional[int] = Field(default=None, gt=0)
    full_name: str = Field(min_length=1)
    enrollment_date: date
    sale_type_id: int = Field(gt=0)
    lead_type_id: int = Field(gt=0)


class ClientSaveResult(BaseSchema):
    action: Literal["CREATED", "UPDATED"]
    client: ClientSummary


class ClientArchiveRequest(BaseSchema):
    archived: StrictBool


class ClientArchiveResult(BaseSchema):
    action: Literal["ARCHIVED", "UNARCHIVED"]
    client: ClientSummary
    previous_archived: bool


class ClientTransferRequest(BaseSchema):
    counsellor_id: int = Field(gt=0)


class ClientTransferResult(BaseSchema):
    client: ClientSummary
    previous_counsellor_id: int
