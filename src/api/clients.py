from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query

from src.api.dependencies import get_clients_service, get_principal
from src.models.access import Principal
from src.schemas.clients import (
    ClientArchiveRequest,
    ClientArchiveResult,
    ClientDetail,
    ClientSaveRequest,
    ClientSaveResult,
    ClientSummary,
    ClientTransferRequest,
    ClientTransferResult,
)
from src.schemas.payments import ProductPayment, StagedPayment
from src.services.clients_service import ClientsService
from src.shared.response import ResponseEnvelope, build_meta, paginate_list

router = APIRouter(prefix="/clients", tags=["clients"])


@router.get("")
def list_clients(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=100, ge=1, le=500),
    principal: Principal = Depends(get_principal),
    service: ClientsService = Depends(get_clients_service),
) -> ResponseEnvelope[List[ClientSummary]]:
    clients = service.list_visible_clients(principal)
    data, pagination = paginate_list(clients, page, page_size)
    return ResponseEnvelope(data=data, pagination=pagination, meta=build_meta("client_information"))


@router.post("")
def save_client(
    request: ClientSaveRequest,
    principal: Principal = Depends(get_principal),
    service: ClientsService = Depends(get_clients_service),
) -> ResponseEnvelope[ClientSaveResult]:
    result = service.save_client(request, principal)
    return ResponseEnvelope(data=result, pagination=None, meta=build_meta("client_information"))


@router.get("/archived")
def list_archived_clients(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=100, ge=1, le=500),
    principal: Principal = Depends(get_principal),
    service: ClientsService = Depends(get_clients_service),
) -> ResponseEnvelope[List[ClientSummary]]:
    clients = service.list_archived_clients(principal)
    data, pagination = paginate_list(clients, page, page_size)
    return ResponseEnvelope(data=data, pagination=pagination, meta=build_meta("client_information"))


@router.get("/{client_id}")
def client_detail(
    client_id: int,
    principal: Principal = Depends(get_principal),
    service: ClientsService = Depends(get_clients_service),
) -> ResponseEnvelope[ClientDetail]:
    data = service.get_client_detail(client_id, principal)
    return ResponseEnvelope(
        data=data,
        pagination=None,
        meta=build_meta("client_information,client_payments,client_product_payments"),
    )


@router.get("/{client_id}/payments")
def client_payments(
    client_id: int,
    principal: Principal = Depends(get_principal),
    service: ClientsService = Depends(get_clients_service),
) -> ResponseEnvelope[List[StagedPayment]]:
    data = service.list_payments(client_id, principal)
    return ResponseEnvelope(data=data, pagination=None, meta=build_meta("client_payments"))


@router.get("/{client_id}/product-payments")
def client_product_payments(
    client_id: int,
    principal: Principal = Depends(get_principal),
    service: ClientsService = Depends(get_clients_service),
) -> ResponseEnvelope[List[ProductPayment]]:
    data = service.list_product_payments(client_id, principal)
    return ResponseEnvelope(
        data=data, pagination=None, meta=build_meta("client_product_payments")
    )


@router.patch("/{client_id}/archive")
def archive_client(
    client_id: int,
    request: ClientArchiveRequest,
    principal: Principal = Depends(get_principal),
    service: ClientsService = Depends(get_clients_service),
) -> ResponseEnvelope[ClientArchiveResult]:
    result = service.set_archived(client_id, request.archived, principal)
    return ResponseEnvelope(data=result, pagination=None, meta=build_meta("client_information"))


@router.patch("/{client_id}/transfer")
def transfer_client(
    client_id: int,
    request: ClientTransferRequest,
    principal: Principal = Depends(get_principal),
    service: ClientsService = Depends(get_clients_service),
) -> ResponseEnvelope[ClientTransferResult]:
    result = service.transfer_client(client_id, request.counsellor_id, principal)
    return ResponseEnvelope(data=result, pagination=None, meta=build_meta("client_information"))
