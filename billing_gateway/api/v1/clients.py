"""/v1/clients - client management and postal code lookup"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from billing_gateway.api.dependencies import get_billing_service, get_request_id
from billing_gateway.api.v1.schemas import (
    AddressLookupResponse,
    AddressSchema,
    ClientRequest,
    ClientResponse,
    DeletionResponse,
)
from billing_gateway.domain.exceptions import InvalidInputError, NotFoundError
from billing_gateway.domain.models import AddressFound, ClientAddress
from billing_gateway.services.billing import BillingService, ClientInput, DocumentUpload

router = APIRouter()


def to_client_input(body: ClientRequest) -> ClientInput:
    return ClientInput(
        name=body.name,
        email=body.email,
        phone=body.phone,
        rate=body.rate,
        address=ClientAddress(**body.address.model_dump()) if body.address else None,
        documents=[
            DocumentUpload(name=doc.name, content=doc.content(), content_type=doc.content_type)
            for doc in body.documents
        ],
        photo=(
            DocumentUpload(name=body.photo.name, content=body.photo.content(), content_type=body.photo.content_type)
            if body.photo
            else None
        ),
        remove_photo=body.remove_photo,
    )


@router.get("/clients", response_model=List[ClientResponse])
def list_clients(service: BillingService = Depends(get_billing_service)):
    return [ClientResponse.model_validate(c) for c in service.list_clients()]


@router.post("/clients", response_model=ClientResponse, status_code=201)
def create_client(body: ClientRequest, service: BillingService = Depends(get_billing_service)):
    try:
        client = service.add_client(to_client_input(body))
    except InvalidInputError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return ClientResponse.model_validate(client)


@router.get("/clients/{client_id}", response_model=ClientResponse)
def get_client(client_id: str, service: BillingService = Depends(get_billing_service)):
    try:
        return ClientResponse.model_validate(service.get_client(client_id))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.put("/clients/{client_id}", response_model=ClientResponse)
def update_client(
    client_id: str,
    body: ClientRequest,
    service: BillingService = Depends(get_billing_service),
):
    """Replace client details; uploaded documents are appended to the existing list"""
    try:
        client = service.update_client(client_id, to_client_input(body))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidInputError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return ClientResponse.model_validate(client)


@router.delete("/clients/{client_id}", response_model=DeletionResponse)
def delete_client(
    client_id: str,
    request: Request,
    service: BillingService = Depends(get_billing_service),
):
    """
    Delete a client together with its contracts and their invoices.

    Returns:
        Number of clients, contracts and invoices removed
    """
    try:
        summary = service.delete_client(client_id)
    except NotFoundError as e:
        logging.warning(f"Delete failed: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=404, detail=str(e))
    return DeletionResponse.model_validate(summary)


@router.delete("/clients/{client_id}/documents", response_model=ClientResponse)
def delete_client_document(
    client_id: str,
    url: str = Query(..., description="URL of the document to remove"),
    service: BillingService = Depends(get_billing_service),
):
    try:
        client = service.delete_client_document(client_id, url)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return ClientResponse.model_validate(client)


@router.get("/address/{postal_code}", response_model=AddressLookupResponse)
async def lookup_address(
    postal_code: str,
    request: Request,
    service: BillingService = Depends(get_billing_service),
):
    """
    Resolve a CEP to street, district, city and state.

    Errors:
        400 malformed postal code, 404 unknown postal code, 502 lookup service down
    """
    result = await service.lookup_address(postal_code)
    if isinstance(result, AddressFound):
        return AddressLookupResponse(
            postal_code=result.address.postal_code,
            address=AddressSchema.model_validate(result.address),
        )

    status_code = {"invalid": 400, "not_found": 404}.get(result.reason, 502)
    if status_code == 502:
        logging.error(f"Address lookup failed: {result.message}", extra={"request_id": get_request_id(request)})
    raise HTTPException(status_code=status_code, detail=result.message)
