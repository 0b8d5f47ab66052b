"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Union


class PaymentStatus(str, Enum):
    """Lifecycle status shared by contracts and invoices"""

    PAID = "paid"
    PENDING = "pending"
    OVERDUE = "overdue"
    WRITTEN_OFF = "written-off"


class ContractType(str, Enum):
    """How a contract is billed"""

    SINGLE = "single"
    INSTALLMENT = "installment"


@dataclass
class ClientAddress:
    """Postal address as returned by the CEP lookup plus manual fields"""

    postal_code: Optional[str] = None
    street: Optional[str] = None
    number: Optional[str] = None
    district: Optional[str] = None
    reference: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None


@dataclass
class ClientDocument:
    """Reference to a stored client attachment"""

    name: str
    url: str


@dataclass
class Client:
    """Billed party"""

    id: str
    name: str
    email: str
    avatar_url: str
    phone: Optional[str] = None
    rate: Optional[Decimal] = None  # default monthly interest, percent
    address: Optional[ClientAddress] = None
    documents: List[ClientDocument] = field(default_factory=list)


@dataclass
class Contract:
    """Agreement to be billed as one invoice or a series of installments"""

    id: str
    client_id: str
    client_name: str
    client_email: str
    amount: Decimal
    issue_date: date
    due_date: date  # first due date for installment contracts
    status: PaymentStatus
    interest_rate: Decimal  # monthly, percent
    type: ContractType
    installments: Optional[int] = None
    payment_date: Optional[date] = None


@dataclass
class Invoice:
    """Single billable amount generated from a contract"""

    id: str
    contract_id: str
    client_id: str
    client_name: str
    client_email: str
    amount: Decimal
    issue_date: date
    due_date: date
    status: PaymentStatus
    payment_date: Optional[date] = None
    installment_number: Optional[int] = None
    total_installments: Optional[int] = None


@dataclass
class OverdueInterest:
    """Display-only interest accrued on an overdue balance"""

    interest: Decimal
    total_amount: Decimal
    days_overdue: int


@dataclass
class DeletionSummary:
    """Number of records removed by a cascading delete"""

    clients: int = 0
    contracts: int = 0
    invoices: int = 0


@dataclass
class MonthlyRevenue:
    month: str  # YYYY-MM
    total: Decimal


@dataclass
class DashboardSummary:
    """Headline figures for the dashboard"""

    total_revenue: Decimal
    outstanding_revenue: Decimal
    clients_with_pending: int
    total_contracts: int
    due_today: List[Contract]
    recent_contracts: List[Contract]
    monthly_revenue: List[MonthlyRevenue]


@dataclass
class AddressFound:
    """Successful postal code lookup"""

    address: ClientAddress


@dataclass
class AddressLookupFailed:
    """Postal code lookup that produced no address"""

    reason: str  # "invalid" | "not_found" | "unavailable"
    message: str


AddressLookupResult = Union[AddressFound, AddressLookupFailed]
