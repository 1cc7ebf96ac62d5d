from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Type

from src.models.entities import (
    AirTicketRecord,
    AllFinanceRecord,
    BeaconAccountRecord,
    CreditCardRecord,
    EntityRecord,
    ForexCardRecord,
    ForexFeesRecord,
    IeltsRecord,
    InsuranceRecord,
    LoanRecord,
    NewSellRecord,
    SimCardRecord,
    TutionFeesRecord,
    VisaExtensionRecord,
)
from src.models.products import EntityKind
from src.schemas.entities import (
    AirTicketPayload,
    AllFinancePayload,
    BeaconAccountPayload,
    CreditCardPayload,
    EntityPayload,
    ForexCardPayload,
    ForexFeesPayload,
    IeltsPayload,
    InsurancePayload,
    LoanPayload,
    NewSellPayload,
    SimCardPayload,
    TutionFeesPayload,
    VisaExtensionPayload,
)


@dataclass(frozen=True)
class EntityKindSpec:
    kind: EntityKind
    table: str
    record_model: Type[EntityRecord]
    payload_model: Type[EntityPayload]
    amount_field: Optional[str] = None
    date_field: Optional[str] = None
    unique_field: Optional[str] = None
    unique_label: Optional[str] = None
    unique_noun: Optional[str] = None

    def duplicate_message(self, value: str) -> str:
        return (
            f'{self.unique_label} "{value}" already exists. '
            f"Please use a different {self.unique_noun}."
        )


ENTITY_KIND_SPECS: Dict[EntityKind, EntityKindSpec] = {
    spec.kind: spec
    for spec in (
        EntityKindSpec(
            kind=EntityKind.SIM_CARD,
            table="sim_card",
            record_model=SimCardRecord,
            payload_model=SimCardPayload,
            date_field="sim_activation_date",
        ),
        EntityKindSpec(
            kind=EntityKind.AIR_TICKET,
            table="air_ticket",
            record_model=AirTicketRecord,
            payload_model=AirTicketPayload,
            amount_field="amount",
            date_field="ticket_date",
            unique_field="air_ticket_number",
            unique_label="Air ticket number",
            unique_noun="ticket number",
        ),
        EntityKindSpec(
            kind=EntityKind.IELTS,
            table="ielts",
            record_model=IeltsRecord,
            payload_model=IeltsPayload,
            amount_field="amount",
            date_field="enrollment_date",
        ),
        EntityKindSpec(
            kind=EntityKind.LOAN,
            table="loan",
            record_model=LoanRecord,
            payload_model=LoanPayload,
            amount_field="amount",
            date_field="disbursment_date",
        ),
        EntityKindSpec(
            kind=EntityKind.FOREX_CARD,
            table="forex_card",
            record_model=ForexCardRecord,
            payload_model=ForexCardPayload,
            date_field="card_date",
        ),
        EntityKindSpec(
            kind=EntityKind.FOREX_FEES,
            table="forex_fees",
            record_model=ForexFeesRecord,
            payload_model=ForexFeesPayload,
            amount_field="amount",
            date_field="fee_date",
        ),
        EntityKindSpec(
            kind=EntityKind.TUTION_FEES,
            table="tution_fees",
            record_model=TutionFeesRecord,
            payload_model=TutionFeesPayload,
            date_field="fee_date",
        ),
        EntityKindSpec(
            kind=EntityKind.INSURANCE,
            table="insurance",
            record_model=InsuranceRecord,
            payload_model=InsurancePayload,
            amount_field="amount",
            date_field="insurance_date",
        ),
        EntityKindSpec(
            kind=EntityKind.BEACON_ACCOUNT,
            table="beacon_account",
            record_model=BeaconAccountRecord,
            payload_model=BeaconAccountPayload,
            amount_field="amount",
            date_field="funding_date",
        ),
        EntityKindSpec(
            kind=EntityKind.CREDIT_CARD,
            table="credit_card",
            record_model=CreditCardRecord,
            payload_model=CreditCardPayload,
            amount_field="amount",
            date_field="card_date",
        ),
        EntityKindSpec(
            kind=EntityKind.NEW_SELL,
            table="new_sell",
            record_model=NewSellRecord,
            payload_model=NewSellPayload,
            amount_field="amount",
            date_field="sell_date",
            unique_field="invoice_no",
            unique_label="Invoice number",
            unique_noun="invoice number",
        ),
        EntityKindSpec(
            kind=EntityKind.VISA_EXTENSION,
            table="visa_extension",
            record_model=VisaExtensionRecord,
            payload_model=VisaExtensionPayload,
            amount_field="amount",
            date_field="extension_date",
            unique_field="invoice_no",
            unique_label="Invoice number",
            unique_noun="invoice number",
        ),
        EntityKindSpec(
            kind=EntityKind.ALL_FINANCE,
            table="all_finance",
            record_model=AllFinanceRecord,
            payload_model=AllFinancePayload,
            amount_field="amount",
            date_field="payment_date",
        ),
    )
}


def get_entity_kind_spec(kind: EntityKind) -> EntityKindSpec:
    return ENTITY_KIND_SPECS[EntityKind(kind)]
