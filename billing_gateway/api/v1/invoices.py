"""/v1/invoices - invoice listing, status changes and interest"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from billing_gateway.api.dependencies import get_billing_service
from billing_gateway.api.v1.contracts import parse_statuses
from billing_gateway.api.v1.schemas import InterestResponse, InvoiceResponse, StatusUpdateRequest
from billing_gateway.domain.exceptions import InvalidInputError, NotFoundError
from billing_gateway.services.billing import BillingService

router = APIRouter()


@router.get("/invoices", response_model=List[InvoiceResponse])
def list_invoices(
    contract_id: Optional[str] = Query(None),
    client_id: Optional[str] = Query(None),
    status: Optional[str] = Query(None, description="Comma separated statuses"),
    service: BillingService = Depends(get_billing_service),
):
    invoices = service.list_invoices(
        contract_id=contract_id, client_id=client_id, statuses=parse_statuses(status)
    )
    return [InvoiceResponse.model_validate(inv) for inv in invoices]


@router.get("/invoices/{invoice_id}", response_model=InvoiceResponse)
def get_invoice(invoice_id: str, service: BillingService = Depends(get_billing_service)):
    try:
        return InvoiceResponse.model_validate(service.get_invoice(invoice_id))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.patch("/invoices/{invoice_id}/status", response_model=InvoiceResponse)
def update_invoice_status(
    invoice_id: str,
    body: StatusUpdateRequest,
    service: BillingService = Depends(get_billing_service),
):
    try:
        invoice = service.update_invoice_status(invoice_id, body.status)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidInputError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return InvoiceResponse.model_validate(invoice)


@router.delete("/invoices/{invoice_id}", status_code=204)
def delete_invoice(invoice_id: str, service: BillingService = Depends(get_billing_service)):
    try:
        service.delete_invoice(invoice_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return Response(status_code=204)


@router.get("/invoices/{invoice_id}/interest", response_model=InterestResponse)
def get_invoice_interest(invoice_id: str, service: BillingService = Depends(get_billing_service)):
    """
    Overdue interest for display.

    Uses the contract's monthly rate, or the client's default rate when the
    contract has none. The stored amount is never changed.
    """
    try:
        invoice = service.get_invoice(invoice_id)
        interest = service.invoice_interest(invoice_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    if interest is None:
        return InterestResponse(applicable=False, total_amount=invoice.amount)
    return InterestResponse(
        applicable=True,
        interest=interest.interest,
        total_amount=interest.total_amount,
        days_overdue=interest.days_overdue,
    )
