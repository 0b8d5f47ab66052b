"""FastAPI application factory"""

import logging

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from billing_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from billing_gateway.api.v1 import clients, contracts, dashboard, invoices
from billing_gateway.infrastructure.observability.logging import setup_logging
from billing_gateway.infrastructure.store.fixtures import demo_clients, demo_contracts, demo_invoices
from billing_gateway.services.billing import BillingService
from billing_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app(billing_service: BillingService | None = None) -> FastAPI:
    """
    Create and configure FastAPI application.

    Each app owns one BillingService; pass one in to control its store,
    clock and external clients.
    """
    app = FastAPI(
        title="Billing Gateway",
        description="Clients, contracts, invoice generation and receivables lifecycle",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    if billing_service is None:
        billing_service = BillingService()
        if settings.seed_demo_data:
            billing_service.load(demo_clients(), demo_contracts(), demo_invoices())
            logging.info("Demo data loaded")
    app.state.billing_service = billing_service

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(clients.router, prefix="/v1", tags=["clients"])
    app.include_router(contracts.router, prefix="/v1", tags=["contracts"])
    app.include_router(invoices.router, prefix="/v1", tags=["invoices"])
    app.include_router(dashboard.router, prefix="/v1", tags=["dashboard"])

    return app


app = create_app()
