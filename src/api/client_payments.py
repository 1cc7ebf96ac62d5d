from __future__ import annotations


from fastapi import APIRouter, Depends

from src.api.dependencies import get_staged_payments_service
from src.schemas.payments import StagedPaymentSaveRequest, StagedPaymentSaveResult
from src.services.staged_payments_service import StagedPaymentsService
from src.shared.response import ResponseEnvelope, build_meta

router = APIRouter(prefix="/client-payments", tags=["client-payments"])


@router.post("")
def save_client_payment(
    request: StagedPaymentSaveRequest,
    service: StagedPaymentsService = Depends(get_staged_payments_service),
) -> ResponseEnvelope[StagedPaymentSaveResult]:
    result = service.save_payment(request)
    meta = build_meta("client_payments")
    return ResponseEnvelope(data=result, pagination=None, meta=meta)
