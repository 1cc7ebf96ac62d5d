from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


class EntityRecord(BaseModel):
    id: int
    remarks: Optional[str] = None
    created_at: Optional[datetime] = None


class SimCardRecord(EntityRecord):
    activated_status: Optional[bool] = None
    simcard_plan: Optional[str] = None
    sim_card_giving_date: Optional[date] = None
    sim_activation_date: Optional[date] = None


class AirTicketRecord(EntityRecord):
    is_ticket_booked: Optional[bool] = None
    amount: Optional[Decimal] = None
    air_ticket_number: Optional[str] = None
    ticket_date: Optional[date] = None


class IeltsRecord(EntityRecord):
    enrolled_status: Optional[bool] = None
    amount: Optional[Decimal] = None
    enrollment_date: Optional[date] = None


class LoanRecord(EntityRecord):
    amount: Optional[Decimal] = None
    disbursment_date: Optional[date] = None


class ForexCardRecord(EntityRecord):
    forex_card_status: Optional[str] = None
    card_date: Optional[date] = None


class ForexFeesRecord(EntityRecord):
    side: Optional[str] = None
    amount: Optional[Decimal] = None
    fee_date: Optional[date] = None


class TutionFeesRecord(EntityRecord):
    tution_fees_status: Optional[str] = None
    fee_date: Optional[date] = None


class InsuranceRecord(EntityRecord):
    amount: Optional[Decimal] = None
    policy_number: Optional[str] = None
    insurance_date: Optional[date] = None


class BeaconAccountRecord(EntityRecord):
    amount: Optional[Decimal] = None
    opening_date: Optional[date] = None
    funding_date: Optional[date] = None


class CreditCardRecord(EntityRecord):
    amount: Optional[Decimal] = None
    card_date: Optional[date] = None


class NewSellRecord(EntityRecord):
    service_name: Optional[str] = None
    service_information: Optional[str] = None
    amount: Optional[Decimal] = None
    sell_date: Optional[date] = None
    invoice_no: Optional[str] = None


class VisaExtensionRecord(EntityRecord):
    type: Optional[str] = None
    amount: Optional[Decimal] = None
    extension_date: Optional[date] = None
    invoice_no: Optional[str] = None


class AllFinanceRecord(EntityRecord):
    amount: Optional[Decimal] = None
    payment_date: Optional[date] = None
    invoice_no: Optional[str] = None
