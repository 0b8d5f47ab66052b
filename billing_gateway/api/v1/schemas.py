"""Pydantic schemas for API request/response validation"""

import base64
import binascii
from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from billing_gateway.domain.invoices import CENT, MAX_INSTALLMENTS
from billing_gateway.domain.models import ContractType, PaymentStatus


# ==================== Shared ====================


class AddressSchema(BaseModel):
    """Structured client address"""

    model_config = ConfigDict(from_attributes=True)

    postal_code: Optional[str] = None
    street: Optional[str] = None
    number: Optional[str] = None
    district: Optional[str] = None
    reference: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None


class DocumentSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    url: str


class FileUpload(BaseModel):
    """File sent inline as base64"""

    name: str = Field(..., min_length=1)
    content_type: str = "application/octet-stream"
    data: str = Field(..., description="Base64-encoded file content")

    @field_validator("data")
    @classmethod
    def check_base64(cls, value: str) -> str:
        try:
            base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValueError("data must be valid base64") from e
        return value

    def content(self) -> bytes:
        return base64.b64decode(self.data)


class StatusUpdateRequest(BaseModel):
    """Body for PATCH .../status"""

    status: PaymentStatus


class DeletionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    clients: int
    contracts: int
    invoices: int


class InterestResponse(BaseModel):
    """Display-only overdue interest; applicable is false when nothing accrues"""

    applicable: bool
    interest: Decimal = Decimal("0")
    total_amount: Decimal
    days_overdue: int = 0


# ==================== Clients ====================


class ClientRequest(BaseModel):
    """Body for POST /v1/clients and PUT /v1/clients/{id}"""

    name: str = Field(..., min_length=2, description="Client name")
    email: EmailStr
    phone: Optional[str] = None
    rate: Optional[Decimal] = Field(None, ge=0, description="Default monthly interest rate, percent")
    address: Optional[AddressSchema] = None
    documents: List[FileUpload] = Field(default_factory=list)
    photo: Optional[FileUpload] = None
    remove_photo: bool = False


class ClientResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    phone: Optional[str] = None
    rate: Optional[Decimal] = None
    address: Optional[AddressSchema] = None
    documents: List[DocumentSchema]
    avatar_url: str


class AddressLookupResponse(BaseModel):
    postal_code: str
    address: AddressSchema


# ==================== Contracts ====================


class ContractRequest(BaseModel):
    """Body for POST /v1/contracts"""

    client_id: str = Field(..., min_length=1)
    amount: Decimal = Field(..., ge=Decimal("0.01"), decimal_places=2)
    due_date: date
    interest_rate: Decimal = Field(Decimal("0"), ge=0, description="Monthly interest rate, percent")
    type: ContractType
    installments: Optional[int] = Field(None, gt=1, le=MAX_INSTALLMENTS)

    @model_validator(mode="after")
    def check_installments(self) -> "ContractRequest":
        if self.type == ContractType.INSTALLMENT:
            if self.installments is None or self.installments <= 1:
                raise ValueError("installment contracts need more than one installment")
            if self.amount < CENT * self.installments:
                raise ValueError("amount must cover at least one cent per installment")
        elif self.installments is not None:
            raise ValueError("single payment contracts cannot have installments")
        return self


class ContractResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    client_id: str
    client_name: str
    client_email: str
    amount: Decimal
    issue_date: date
    due_date: date
    status: PaymentStatus
    interest_rate: Decimal
    type: ContractType
    installments: Optional[int] = None
    payment_date: Optional[date] = None


# ==================== Invoices ====================


class InvoiceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

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


class GenerationResponse(BaseModel):
    """Result of an invoice generation run"""

    generated_count: int
    invoices: List[InvoiceResponse]


# ==================== Dashboard & reports ====================


class MonthlyRevenueSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    month: str
    total: Decimal


class DashboardResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_revenue: Decimal
    outstanding_revenue: Decimal
    clients_with_pending: int
    total_contracts: int
    due_today: List[ContractResponse]
    recent_contracts: List[ContractResponse]
    monthly_revenue: List[MonthlyRevenueSchema]


class ReportResponse(BaseModel):
    report: str
