"""Dependency injection for FastAPI endpoints"""

from fastapi import Request

from billing_gateway.services.billing import BillingService


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_billing_service(request: Request) -> BillingService:
    """Provide the application's billing service (one store per app instance)"""
    return request.app.state.billing_service
