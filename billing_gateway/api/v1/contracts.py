"""/v1/contracts - contracts, their status and invoice generation"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from billing_gateway.api.dependencies import get_billing_service, get_request_id
from billing_gateway.api.v1.schemas import (
    ContractRequest,
    ContractResponse,
    DeletionResponse,
    GenerationResponse,
    InterestResponse,
    InvoiceResponse,
    StatusUpdateRequest,
)
from billing_gateway.domain.exceptions import (
    InvalidInputError,
    InvoicesAlreadyGeneratedError,
    NotFoundError,
)
from billing_gateway.domain.models import PaymentStatus
from billing_gateway.services.billing import BillingService, ContractInput

router = APIRouter()


def parse_statuses(raw: Optional[str]) -> Optional[List[PaymentStatus]]:
    """Comma separated status filter ("pending,overdue")"""
    if not raw:
        return None
    try:
        return [PaymentStatus(part.strip()) for part in raw.split(",") if part.strip()]
    except ValueError:
        raise HTTPException(status_code=422, detail=f"Invalid status filter: {raw}")


@router.get("/contracts", response_model=List[ContractResponse])
def list_contracts(
    status: Optional[str] = Query(None, description="Comma separated statuses"),
    client_id: Optional[str] = Query(None),
    due_today: bool = Query(False, description="Only contracts due today"),
    service: BillingService = Depends(get_billing_service),
):
    contracts = service.list_contracts(
        statuses=parse_statuses(status), client_id=client_id, due_today=due_today
    )
    return [ContractResponse.model_validate(c) for c in contracts]


@router.post("/contracts", response_model=ContractResponse, status_code=201)
def create_contract(body: ContractRequest, service: BillingService = Depends(get_billing_service)):
    """
    Create a contract for an existing client.

    Issue date is today; the contract starts overdue when its due date has
    already passed, pending otherwise.
    """
    try:
        contract = service.add_contract(
            ContractInput(
                client_id=body.client_id,
                amount=body.amount,
                due_date=body.due_date,
                type=body.type,
                interest_rate=body.interest_rate,
                installments=body.installments,
            )
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidInputError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return ContractResponse.model_validate(contract)


@router.post("/contracts/invoices", response_model=GenerationResponse)
def generate_all_invoices(request: Request, service: BillingService = Depends(get_billing_service)):
    """Generate invoices for every pending or overdue contract that has none yet"""
    try:
        invoices = service.generate_invoices_for_active_contracts()
    except InvalidInputError as e:
        logging.error(f"Bulk generation failed: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=422, detail=str(e))
    return GenerationResponse(
        generated_count=len(invoices),
        invoices=[InvoiceResponse.model_validate(inv) for inv in invoices],
    )


@router.get("/contracts/{contract_id}", response_model=ContractResponse)
def get_contract(contract_id: str, service: BillingService = Depends(get_billing_service)):
    try:
        return ContractResponse.model_validate(service.get_contract(contract_id))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.patch("/contracts/{contract_id}/status", response_model=ContractResponse)
def update_contract_status(
    contract_id: str,
    body: StatusUpdateRequest,
    service: BillingService = Depends(get_billing_service),
):
    """
    Set a contract's status.

    Paid stamps today's payment date, anything else clears it; pending on a
    past-due contract comes back as overdue.
    """
    try:
        contract = service.update_contract_status(contract_id, body.status)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidInputError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return ContractResponse.model_validate(contract)


@router.delete("/contracts/{contract_id}", response_model=DeletionResponse)
def delete_contract(contract_id: str, service: BillingService = Depends(get_billing_service)):
    try:
        summary = service.delete_contract(contract_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return DeletionResponse.model_validate(summary)


@router.post("/contracts/{contract_id}/invoices", response_model=GenerationResponse, status_code=201)
def generate_contract_invoices(
    contract_id: str,
    request: Request,
    service: BillingService = Depends(get_billing_service),
):
    """
    Generate the invoice set of one contract.

    Errors:
        404 unknown contract, 409 invoices already generated
    """
    request_id = get_request_id(request)
    try:
        invoices = service.generate_invoices_for_contract(contract_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvoicesAlreadyGeneratedError as e:
        logging.warning(f"Duplicate generation: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=409, detail=str(e))
    except InvalidInputError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return GenerationResponse(
        generated_count=len(invoices),
        invoices=[InvoiceResponse.model_validate(inv) for inv in invoices],
    )


@router.get("/contracts/{contract_id}/interest", response_model=InterestResponse)
def get_contract_interest(contract_id: str, service: BillingService = Depends(get_billing_service)):
    try:
        contract = service.get_contract(contract_id)
        interest = service.contract_interest(contract_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    if interest is None:
        return InterestResponse(applicable=False, total_amount=contract.amount)
    return InterestResponse(
        applicable=True,
        interest=interest.interest,
        total_amount=interest.total_amount,
        days_overdue=interest.days_overdue,
    )
