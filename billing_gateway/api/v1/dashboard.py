"""GET /v1/dashboard and POST /v1/reports/revenue"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from billing_gateway.api.dependencies import get_billing_service, get_request_id
from billing_gateway.api.v1.schemas import DashboardResponse, ReportResponse
from billing_gateway.domain.exceptions import ReportGenerationError
from billing_gateway.services.billing import BillingService

router = APIRouter()


@router.get("/dashboard", response_model=DashboardResponse)
def get_dashboard(service: BillingService = Depends(get_billing_service)):
    """
    Headline figures over contracts.

    Returns:
        Paid and outstanding revenue, clients with pending contracts, contracts
        due today, the five most recent contracts and revenue per payment month
    """
    return DashboardResponse.model_validate(service.dashboard_summary())


@router.post("/reports/revenue", response_model=ReportResponse)
async def generate_revenue_report(
    request: Request,
    service: BillingService = Depends(get_billing_service),
):
    """Narrative revenue projection from the external report service"""
    try:
        report = await service.revenue_report()
    except ReportGenerationError as e:
        logging.error(f"Report generation failed: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=502, detail="Report generation failed")
    return ReportResponse(report=report)
