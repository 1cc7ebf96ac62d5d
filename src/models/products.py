from __future__ import annotations

from enum import Enum
from typing import Dict


class ProductType(str, Enum):
    ALL_FINANCE_EMPLOYEMENT = "ALL_FINANCE_EMPLOYEMENT"
    INDIAN_SIDE_EMPLOYEMENT = "INDIAN_SIDE_EMPLOYEMENT"
    NOC_LEVEL_JOB_ARRANGEMENT = "NOC_LEVEL_JOB_ARRANGEMENT"
    LAWYER_REFUSAL_CHARGE = "LAWYER_REFUSAL_CHARGE"
    ONSHORE_PART_TIME_EMPLOYEMENT = "ONSHORE_PART_TIME_EMPLOYEMENT"
    TRV_WORK_PERMIT_EXT_STUDY_PERMIT_EXTENSION = "TRV_WORK_PERMIT_EXT_STUDY_PERMIT_EXTENSION"
    MARRIAGE_PHOTO_FOR_COURT_MARRIAGE = "MARRIAGE_PHOTO_FOR_COURT_MARRIAGE"
    MARRIAGE_PHOTO_CERTIFICATE = "MARRIAGE_PHOTO_CERTIFICATE"
    RECENTE_MARRIAGE_RELATIONSHIP_AFFIDAVIT = "RECENTE_MARRIAGE_RELATIONSHIP_AFFIDAVIT"
    JUDICAL_REVIEW_CHARGE = "JUDICAL_REVIEW_CHARGE"
    SIM_CARD_ACTIVATION = "SIM_CARD_ACTIVATION"
    INSURANCE = "INSURANCE"
    BEACON_ACCOUNT = "BEACON_ACCOUNT"
    AIR_TICKET = "AIR_TICKET"
    OTHER_NEW_SELL = "OTHER_NEW_SELL"
    SPONSOR_CHARGES = "SPONSOR_CHARGES"
    FINANCE_EMPLOYEMENT = "FINANCE_EMPLOYEMENT"
    IELTS_ENROLLMENT = "IELTS_ENROLLMENT"
    LOAN_DETAILS = "LOAN_DETAILS"
    FOREX_CARD = "FOREX_CARD"
    FOREX_FEES = "FOREX_FEES"
    TUTION_FEES = "TUTION_FEES"
    CREDIT_CARD = "CREDIT_CARD"
    VISA_EXTENSION = "VISA_EXTENSION"


class EntityKind(str, Enum):
    SIM_CARD = "simCard_id"
    AIR_TICKET = "airTicket_id"
    IELTS = "ielts_id"
    LOAN = "loan_id"
    FOREX_CARD = "forexCard_id"
    FOREX_FEES = "forexFees_id"
    TUTION_FEES = "tutionFees_id"
    INSURANCE = "insurance_id"
    BEACON_ACCOUNT = "beaconAccount_id"
    CREDIT_CARD = "creditCard_id"
    NEW_SELL = "newSell_id"
    VISA_EXTENSION = "visaextension_id"
    ALL_FINANCE = "allFinance_id"
    MASTER_ONLY = "master_only"


# Stored entity_type is always derived from this table, never taken from input.
PRODUCT_ENTITY_KIND: Dict[ProductType, EntityKind] = {
    ProductType.SIM_CARD_ACTIVATION: EntityKind.SIM_CARD,
    ProductType.AIR_TICKET: EntityKind.AIR_TICKET,
    ProductType.IELTS_ENROLLMENT: EntityKind.IELTS,
    ProductType.LOAN_DETAILS: EntityKind.LOAN,
    ProductType.FOREX_CARD: EntityKind.FOREX_CARD,
    ProductType.FOREX_FEES: EntityKind.FOREX_FEES,
    ProductType.TUTION_FEES: EntityKind.TUTION_FEES,
    ProductType.INSURANCE: EntityKind.INSURANCE,
    ProductType.BEACON_ACCOUNT: EntityKind.BEACON_ACCOUNT,
    ProductType.CREDIT_CARD: EntityKind.CREDIT_CARD,
    ProductType.OTHER_NEW_SELL: EntityKind.NEW_SELL,
    ProductType.VISA_EXTENSION: EntityKind.VISA_EXTENSION,
    ProductType.ALL_FINANCE_EMPLOYEMENT: EntityKind.ALL_FINANCE,
    ProductType.INDIAN_SIDE_EMPLOYEMENT: EntityKind.MASTER_ONLY,
    ProductType.NOC_LEVEL_JOB_ARRANGEMENT: EntityKind.MASTER_ONLY,
    ProductType.LAWYER_REFUSAL_CHARGE: EntityKind.MASTER_ONLY,
    ProductType.ONSHORE_PART_TIME_EMPLOYEMENT: EntityKind.MASTER_ONLY,
    ProductType.TRV_WORK_PERMIT_EXT_STUDY_PERMIT_EXTENSION: EntityKind.MASTER_ONLY,
    ProductType.MARRIAGE_PHOTO_FOR_COURT_MARRIAGE: EntityKind.MASTER_ONLY,
    ProductType.MARRIAGE_PHOTO_CERTIFICATE: EntityKind.MASTER_ONLY,
    ProductType.RECENTE_MARRIAGE_RELATIONSHIP_AFFIDAVIT: EntityKind.MASTER_ONLY,
    ProductType.JUDICAL_REVIEW_CHARGE: EntityKind.MASTER_ONLY,
    ProductType.SPONSOR_CHARGES: EntityKind.MASTER_ONLY,
    ProductType.FINANCE_EMPLOYEMENT: EntityKind.MASTER_ONLY,
}


def entity_kind_for(product_name: ProductType) -> EntityKind:
    return PRODUCT_ENTITY_KIND[ProductType(product_name)]


class PaymentStage(str, Enum):
    INITIAL = "INITIAL"
    BEFORE_VISA = "BEFORE_VISA"
    AFTER_VISA = "AFTER_VISA"
    SUBMITTED_VISA = "SUBMITTED_VISA"


# SUBMITTED_VISA is tracked but never counted as revenue or as paid.
REVENUE_STAGES = frozenset({PaymentStage.INITIAL, PaymentStage.BEFORE_VISA, PaymentStage.AFTER_VISA})


class UserRole(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    COUNSELLOR = "counsellor"
