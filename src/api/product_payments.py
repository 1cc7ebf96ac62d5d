from __future__ import annotations


from fastapi import APIRouter, Depends

from src.api.dependencies import get_product_payments_service
from src.schemas.payments import ProductPaymentSaveRequest, ProductPaymentSaveResult
from src.services.product_payments_service import ProductPaymentsService
from src.shared.response import ResponseEnvelope, build_meta

router = APIRouter(prefix="/client-product-payments", tags=["client-product-payments"])


@router.post("")
def save_client_product_payment(
    request: ProductPaymentSaveRequest,
    service: ProductPaymentsService = Depends(get_product_payments_service),
) -> ResponseEnvelope[ProductPaymentSaveResult]:
    result = service.save_product_payment(request)
    meta = build_meta("client_product_payments")
    return ResponseEnvelope(data=result, pagination=None, meta=meta)
