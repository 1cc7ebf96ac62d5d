from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, ClassVar, Dict, Literal, Optional, Type
from uuid import uuid4

from pydantic import ConfigDict, Field, ValidationError, field_validator

from src.core.errors import ValidationFailedError
from src.shared.base import BaseSchema, to_camel
from src.shared.time import business_today


def generate_ticket_number() -> str:
    return f"TKT-{uuid4().hex[:12].upper()}"


class EntityPayload(BaseSchema):
    """Validated body of one satellite row; unknown keys are dropped."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    # Extra input spellings accepted for a field, applied only when the field itself is absent.
    input_fallbacks: ClassVar[Dict[str, str]] = {}

    remarks: Optional[str] = None


class SimCardPayload(EntityPayload):
    activated_status: bool = False
    simcard_plan: Optional[str] = None
    sim_card_giving_date: Optional[date] = None
    sim_activation_date: Optional[date] = None


class AirTicketPayload(EntityPayload):
    is_ticket_booked: bool = False
    amount: Decimal = Field(gt=0, allow_inf_nan=False)
    air_ticket_number: str = Field(default_factory=generate_ticket_number)
    ticket_date: date = Field(default_factory=business_today)

    @field_validator("air_ticket_number", mode="before")
    @classmethod
    def default_ticket_number(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return generate_ticket_number()
        return value


class IeltsPayload(EntityPayload):
    enrolled_status: bool = False
    amount: Decimal = Field(gt=0, allow_inf_nan=False)
    enrollment_date: Optional[date] = None


class LoanPayload(EntityPayload):
    amount: Decimal = Field(gt=0, allow_inf_nan=False)
    disbursment_date: date = Field(default_factory=business_today)


class ForexCardPayload(EntityPayload):
    forex_card_status: Optional[str] = None
    card_date: Optional[date] = None


class ForexFeesPayload(EntityPayload):
    side: Literal["PI", "TP"]
    amount: Decimal = Field(gt=0, allow_inf_nan=False)
    fee_date: Optional[date] = None


class TutionFeesPayload(EntityPayload):
    tution_fees_status: Literal["paid", "pending"]
    fee_date: Optional[date] = None


class InsurancePayload(EntityPayload):
    amount: Decimal = Field(gt=0, allow_inf_nan=False)
    policy_number: Optional[str] = None
    insurance_date: date = Field(default_factory=business_today)


class BeaconAccountPayload(EntityPayload):
    input_fallbacks: ClassVar[Dict[str, str]] = {
        "fundingAmount": "amount",
        "funding_amount": "amount",
    }

    amount: Decimal = Field(gt=0, allow_inf_nan=False)
    opening_date: Optional[date] = None
    funding_date: Optional[date] = None


class CreditCardPayload(EntityPayload):
    amount: Optional[Decimal] = Field(default=None, ge=0, allow_inf_nan=False)
    card_date: Optional[date] = None


class NewSellPayload(EntityPayload):
    service_name: str = Field(min_length=1)
    service_information: Optional[str] = None
    amount: Decimal = Field(gt=0, allow_inf_nan=False)
    sell_date: date = Field(default_factory=business_today)
    invoice_no: Optional[str] = None


class VisaExtensionPayload(EntityPayload):
    type: str = Field(min_length=1)
    amount: Decimal = Field(gt=0, allow_inf_nan=False)
    extension_date: date = Field(default_factory=business_today)
    invoice_no: Optional[str] = None


class AllFinancePayload(EntityPayload):
    amount: Decimal = Field(gt=0, allow_inf_nan=False)
    payment_date: date = Field(default_factory=business_today)
    invoice_no: Optional[str] = None


def normalize_entity_data(model: Type[EntityPayload], data: Dict[str, Any]) -> Dict[str, Any]:
    """Key incoming camelCase or snake_case data by the model's field names."""
    lookup: Dict[str, str] = {}
    for name, field in model.model_fields.items():
        lookup[name] = name
        lookup[field.alias or to_camel(name)] = name
    normalized: Dict[str, Any] = {}
    for key, value in data.items():
        name = lookup.get(key)
        if name is not None:
            normalized[name] = value
    for key, target in model.input_fallbacks.items():
        if key in data and normalized.get(target) is None:
            normalized[target] = data[key]
    return normalized


def validate_entity_payload(model: Type[EntityPayload], data: Dict[str, Any]) -> EntityPayload:
    """Validate field-name keyed data, surfacing the first failure as entityData.<field>."""
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        first = exc.errors()[0]
        location = first.get("loc") or ()
        field = to_camel(str(location[0])) if location else None
        path = f"entityData.{field}" if field else "entityData"
        raise ValidationFailedError(f"{path}: {first.get('msg', 'invalid value')}", field=path) from exc
