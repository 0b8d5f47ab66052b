"""Demo data loaded at startup when BILLING_SEED_DEMO_DATA is set"""

from datetime import date
from decimal import Decimal
from typing import List

from billing_gateway.domain.models import (
    Client,
    ClientAddress,
    Contract,
    ContractType,
    Invoice,
    PaymentStatus,
)

PLACEHOLDER = "https://placehold.co/40x40/E2E8F0/475569?text="


def demo_clients() -> List[Client]:
    return [
        Client(
            id="1",
            name="Innovate Inc.",
            email="contact@innovate.com",
            avatar_url=PLACEHOLDER + "II",
            phone="123-456-7890",
            rate=Decimal("1.5"),
            address=ClientAddress(postal_code="12345", street="123 Innovation Dr", city="Techville", state="CA"),
        ),
        Client(
            id="2",
            name="Solutions Co.",
            email="hello@solutions.co",
            avatar_url=PLACEHOLDER + "SC",
            phone="234-567-8901",
            rate=Decimal("2.0"),
            address=ClientAddress(postal_code="67890", street="456 Solutions Ave", city="Business City", state="NY"),
        ),
        Client(
            id="3",
            name="Apex Enterprises",
            email="support@apex.com",
            avatar_url=PLACEHOLDER + "AE",
            phone="345-678-9012",
            rate=Decimal("1.2"),
            address=ClientAddress(postal_code="24680", street="789 Apex St", city="Summit Peak", state="CO"),
        ),
        Client(
            id="4",
            name="Quantum Dynamics",
            email="info@quantum.dev",
            avatar_url=PLACEHOLDER + "QD",
            phone="456-789-0123",
            rate=Decimal("2.5"),
            address=ClientAddress(postal_code="13579", street="101 Quantum Blvd", city="Particle Park", state="TX"),
        ),
        Client(
            id="5",
            name="Stellar Group",
            email="admin@stellar.org",
            avatar_url=PLACEHOLDER + "SG",
            phone="567-890-1234",
            rate=Decimal("1.8"),
            address=ClientAddress(postal_code="97531", street="222 Stellar Rd", city="Galaxy Heights", state="FL"),
        ),
    ]


def demo_contracts() -> List[Contract]:
    return [
        Contract(
            id="CON001",
            client_id="1",
            client_name="Innovate Inc.",
            client_email="contact@innovate.com",
            amount=Decimal("2500.00"),
            issue_date=date(2024, 5, 1),
            due_date=date(2024, 6, 1),
            status=PaymentStatus.PAID,
            interest_rate=Decimal("1.5"),
            type=ContractType.SINGLE,
            payment_date=date(2024, 5, 28),
        ),
        Contract(
            id="CON002",
            client_id="2",
            client_name="Solutions Co.",
            client_email="hello@solutions.co",
            amount=Decimal("1500.00"),
            issue_date=date(2024, 5, 5),
            due_date=date(2024, 6, 5),
            status=PaymentStatus.PENDING,
            interest_rate=Decimal("2.0"),
            type=ContractType.INSTALLMENT,
            installments=3,
        ),
        Contract(
            id="CON003",
            client_id="3",
            client_name="Apex Enterprises",
            client_email="support@apex.com",
            amount=Decimal("3500.00"),
            issue_date=date(2024, 4, 10),
            due_date=date(2024, 5, 10),
            status=PaymentStatus.PENDING,
            interest_rate=Decimal("1.2"),
            type=ContractType.SINGLE,
        ),
    ]


def demo_invoices() -> List[Invoice]:
    return [
        Invoice(
            id="INV001",
            contract_id="CON001",
            client_id="1",
            client_name="Innovate Inc.",
            client_email="contact@innovate.com",
            amount=Decimal("2500.00"),
            issue_date=date(2024, 5, 1),
            due_date=date(2024, 6, 1),
            status=PaymentStatus.PAID,
            payment_date=date(2024, 5, 28),
        ),
        Invoice(
            id="INV002",
            contract_id="CON003",
            client_id="3",
            client_name="Apex Enterprises",
            client_email="support@apex.com",
            amount=Decimal("3500.00"),
            issue_date=date(2024, 4, 10),
            due_date=date(2024, 5, 10),
            status=PaymentStatus.OVERDUE,
            payment_date=None,
        ),
    ]
