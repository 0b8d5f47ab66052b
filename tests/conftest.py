"""Pytest fixtures for testing"""

import pytest
from datetime import date
from decimal import Decimal
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock

from billing_gateway.api.main import create_app
from billing_gateway.domain.clock import FixedClock
from billing_gateway.domain.models import ContractType
from billing_gateway.infrastructure.clients.address import AddressClient
from billing_gateway.infrastructure.clients.reports import ReportClient
from billing_gateway.services.billing import BillingService, ClientInput, ContractInput


TODAY = date(2024, 5, 1)


@pytest.fixture
def clock() -> FixedClock:
    """Clock pinned to 2024-05-01"""
    return FixedClock(TODAY)


@pytest.fixture
def address_client() -> AddressClient:
    client = AddressClient(base_url="http://address.test")
    client.lookup = AsyncMock()
    return client


@pytest.fixture
def report_client() -> ReportClient:
    client = ReportClient(url="http://reports.test/revenue")
    client.generate_revenue_report = AsyncMock(return_value="Revenue is stable.")
    return client


@pytest.fixture
def service(clock: FixedClock, address_client: AddressClient, report_client: ReportClient) -> BillingService:
    """Empty billing service with stubbed external clients"""
    return BillingService(clock=clock, address_client=address_client, report_client=report_client)


@pytest.fixture
def client(service: BillingService) -> TestClient:
    """Create FastAPI test client bound to the test service"""
    app = create_app(billing_service=service)
    return TestClient(app)


@pytest.fixture
def acme(service: BillingService):
    """Client with a 3% default monthly rate"""
    return service.add_client(ClientInput(name="Acme Ltda", email="billing@acme.com", rate=Decimal("3")))


@pytest.fixture
def make_contract(service: BillingService, acme):
    """Factory for contracts of the acme client"""

    def _make(
        amount: str = "1200.00",
        due_date: date = date(2024, 6, 1),
        type: ContractType = ContractType.SINGLE,
        installments: int | None = None,
        interest_rate: str = "0",
        client_id: str | None = None,
    ):
        return service.add_contract(
            ContractInput(
                client_id=client_id or acme.id,
                amount=Decimal(amount),
                due_date=due_date,
                type=type,
                interest_rate=Decimal(interest_rate),
                installments=installments,
            )
        )

    return _make
