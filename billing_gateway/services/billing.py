"""Billing lifecycle: clients, contracts and invoices over an injected store"""

import functools
import logging
import threading
from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Optional, Set

from email_validator import EmailNotValidError, validate_email

from billing_gateway.config import settings
from billing_gateway.domain.clock import Clock, SystemClock
from billing_gateway.domain.dashboard import build_dashboard
from billing_gateway.domain.exceptions import (
    ClientNotFoundError,
    ContractNotFoundError,
    DocumentNotFoundError,
    InvalidInputError,
    InvoiceNotFoundError,
)
from billing_gateway.domain.interest import calculate_overdue_interest
from billing_gateway.domain.invoices import check_installments, generate_invoices
from billing_gateway.domain.models import (
    AddressLookupResult,
    Client,
    ClientAddress,
    ClientDocument,
    Contract,
    ContractType,
    DashboardSummary,
    DeletionSummary,
    Invoice,
    OverdueInterest,
    PaymentStatus,
)
from billing_gateway.domain.status import apply_transition, derive_status, initial_status
from billing_gateway.infrastructure.clients.address import AddressClient
from billing_gateway.infrastructure.clients.reports import ReportClient
from billing_gateway.infrastructure.observability.logging import log_cascade_delete, log_invoice_generation
from billing_gateway.infrastructure.observability.metrics import (
    record_deletion,
    record_invoice_generation,
    record_status_transition,
)
from billing_gateway.infrastructure.storage import (
    DocumentStorage,
    SimulatedDocumentStorage,
    placeholder_avatar_url,
    to_data_uri,
)
from billing_gateway.infrastructure.store.memory import IdSequence, InMemoryStore, Store

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
ACTIVE_STATUSES = (PaymentStatus.PENDING, PaymentStatus.OVERDUE)
NO_INVOICES_REPORT = "No invoice data available to generate a report."


def synchronized(method):
    """Run a service method while holding the service lock"""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            return method(self, *args, **kwargs)

    return wrapper


@dataclass
class DocumentUpload:
    """Raw file handed over by the presentation layer"""

    name: str
    content: bytes
    content_type: str = "application/octet-stream"


@dataclass
class ClientInput:
    """Fields accepted when creating or updating a client"""

    name: str
    email: str
    phone: Optional[str] = None
    rate: Optional[Decimal] = None
    address: Optional[ClientAddress] = None
    documents: List[DocumentUpload] = field(default_factory=list)
    photo: Optional[DocumentUpload] = None
    remove_photo: bool = False


@dataclass
class ContractInput:
    """Fields accepted when creating a contract"""

    client_id: str
    amount: Decimal
    due_date: date
    type: ContractType
    interest_rate: Decimal = Decimal("0")
    installments: Optional[int] = None


class BillingService:
    """
    Lifecycle operations over clients, contracts and invoices.

    Every read re-derives pending/overdue against today and writes the
    reclassification back. All lookups and validations run before the first
    store mutation of an operation.

    Sync endpoints run on worker threads, so each public operation holds a
    reentrant service lock for its whole check-then-write sequence.
    """

    def __init__(
        self,
        clients: Store[Client] | None = None,
        contracts: Store[Contract] | None = None,
        invoices: Store[Invoice] | None = None,
        clock: Clock | None = None,
        storage: DocumentStorage | None = None,
        address_client: AddressClient | None = None,
        report_client: ReportClient | None = None,
    ):
        self.clients = clients if clients is not None else InMemoryStore()
        self.contracts = contracts if contracts is not None else InMemoryStore(prepend=True)
        self.invoices = invoices if invoices is not None else InMemoryStore(prepend=True)
        self.clock = clock or SystemClock(settings.timezone)
        self.storage = storage or SimulatedDocumentStorage()
        self.address_client = address_client or AddressClient()
        self.report_client = report_client or ReportClient()

        self.client_ids = IdSequence()
        self.contract_ids = IdSequence("CON", width=3)
        self.invoice_ids = IdSequence("INV", width=3)
        self._lock = threading.RLock()

    @synchronized
    def load(
        self,
        clients: Iterable[Client] = (),
        contracts: Iterable[Contract] = (),
        invoices: Iterable[Invoice] = (),
    ) -> None:
        """Insert pre-built records keeping their listing order and ids"""
        for store, records, sequence in (
            (self.clients, list(clients), self.client_ids),
            (self.contracts, list(contracts), self.contract_ids),
            (self.invoices, list(invoices), self.invoice_ids),
        ):
            ordered = reversed(records) if getattr(store, "prepend", False) else records
            for record in ordered:
                store.insert(record)
                sequence.advance_past(record.id)

    # ==================== Clients ====================

    @synchronized
    def list_clients(self) -> List[Client]:
        return self.clients.list()

    @synchronized
    def get_client(self, client_id: str) -> Client:
        client = self.clients.get(client_id)
        if client is None:
            raise ClientNotFoundError(client_id)
        return client

    @synchronized
    def add_client(self, data: ClientInput) -> Client:
        self._validate_client(data)

        client_id = self.client_ids()
        client = Client(
            id=client_id,
            name=data.name.strip(),
            email=data.email.strip(),
            phone=data.phone,
            rate=data.rate,
            address=data.address,
            avatar_url=placeholder_avatar_url(data.name),
            documents=self._upload_documents(client_id, data.documents),
        )
        if data.photo is not None:
            client.avatar_url = to_data_uri(data.photo.content, data.photo.content_type)

        self.clients.insert(client)
        logger.info("Client created", extra={"client_id": client_id})
        return client

    @synchronized
    def update_client(self, client_id: str, data: ClientInput) -> Client:
        """Replace the client's details; new documents are appended to the existing ones"""
        existing = self.get_client(client_id)
        self._validate_client(data)

        avatar_url = existing.avatar_url
        if data.remove_photo:
            avatar_url = placeholder_avatar_url(data.name)
        elif data.photo is not None:
            avatar_url = to_data_uri(data.photo.content, data.photo.content_type)

        return self.clients.update(
            client_id,
            {
                "name": data.name.strip(),
                "email": data.email.strip(),
                "phone": data.phone,
                "rate": data.rate,
                "address": data.address,
                "avatar_url": avatar_url,
                "documents": existing.documents + self._upload_documents(client_id, data.documents),
            },
        )

    @synchronized
    def delete_client(self, client_id: str) -> DeletionSummary:
        """Remove a client with all of its contracts and their invoices"""
        self.get_client(client_id)

        contract_ids: Set[str] = {c.id for c in self.contracts.list() if c.client_id == client_id}
        invoice_ids = [
            inv.id
            for inv in self.invoices.list()
            if inv.contract_id in contract_ids or inv.client_id == client_id
        ]

        self.clients.delete(client_id)
        for contract_id in contract_ids:
            self.contracts.delete(contract_id)
        for invoice_id in invoice_ids:
            self.invoices.delete(invoice_id)

        summary = DeletionSummary(clients=1, contracts=len(contract_ids), invoices=len(invoice_ids))
        record_deletion(summary.clients, summary.contracts, summary.invoices)
        log_cascade_delete("client", client_id, summary.contracts, summary.invoices)
        return summary

    @synchronized
    def delete_client_document(self, client_id: str, document_url: str) -> Client:
        client = self.get_client(client_id)
        remaining = [doc for doc in client.documents if doc.url != document_url]
        if len(remaining) == len(client.documents):
            raise DocumentNotFoundError(document_url)
        return self.clients.update(client_id, {"documents": remaining})

    async def lookup_address(self, postal_code: str) -> AddressLookupResult:
        return await self.address_client.lookup(postal_code)

    # ==================== Contracts ====================

    @synchronized
    def list_contracts(
        self,
        statuses: Optional[Iterable[PaymentStatus]] = None,
        client_id: Optional[str] = None,
        due_today: bool = False,
    ) -> List[Contract]:
        today = self.clock.today()
        contracts = [self._refresh(self.contracts, c, today) for c in self.contracts.list()]

        if statuses:
            wanted = {PaymentStatus(s) for s in statuses}
            contracts = [c for c in contracts if c.status in wanted]
        if client_id is not None:
            contracts = [c for c in contracts if c.client_id == client_id]
        if due_today:
            contracts = [c for c in contracts if c.due_date == today]
        return contracts

    @synchronized
    def get_contract(self, contract_id: str) -> Contract:
        contract = self.contracts.get(contract_id)
        if contract is None:
            raise ContractNotFoundError(contract_id)
        return self._refresh(self.contracts, contract, self.clock.today())

    @synchronized
    def add_contract(self, data: ContractInput) -> Contract:
        client = self.get_client(data.client_id)
        amount, interest_rate = self._validate_contract(data)

        issue_date = self.clock.today()
        contract = Contract(
            id=self.contract_ids(),
            client_id=client.id,
            client_name=client.name,
            client_email=client.email,
            amount=amount,
            issue_date=issue_date,
            due_date=data.due_date,
            status=initial_status(data.due_date, issue_date),
            interest_rate=interest_rate,
            type=ContractType(data.type),
            installments=data.installments if data.type == ContractType.INSTALLMENT else None,
            payment_date=None,
        )
        self.contracts.insert(contract)
        logger.info(
            "Contract created",
            extra={"contract_id": contract.id, "client_id": client.id, "contract_type": contract.type.value},
        )
        return contract

    @synchronized
    def update_contract_status(self, contract_id: str, status: PaymentStatus) -> Contract:
        contract = self.get_contract(contract_id)
        new_status, payment_date = apply_transition(contract, status, self.clock.today())
        updated = self.contracts.update(contract_id, {"status": new_status, "payment_date": payment_date})
        record_status_transition("contract", new_status.value)
        return updated

    @synchronized
    def delete_contract(self, contract_id: str) -> DeletionSummary:
        """Remove a contract and its invoices"""
        self.get_contract(contract_id)
        invoice_ids = [inv.id for inv in self.invoices.list() if inv.contract_id == contract_id]

        self.contracts.delete(contract_id)
        for invoice_id in invoice_ids:
            self.invoices.delete(invoice_id)

        summary = DeletionSummary(contracts=1, invoices=len(invoice_ids))
        record_deletion(contracts=summary.contracts, invoices=summary.invoices)
        log_cascade_delete("contract", contract_id, summary.contracts, summary.invoices)
        return summary

    @synchronized
    def generate_invoices_for_contract(self, contract_id: str) -> List[Invoice]:
        """
        Create the invoice set of a contract.

        Raises:
            ContractNotFoundError: Unknown contract
            InvoicesAlreadyGeneratedError: The contract already has invoices
        """
        contract = self.get_contract(contract_id)
        invoices = generate_invoices(
            contract,
            self.invoices.list(),
            issue_date=self.clock.today(),
            next_id=self.invoice_ids,
        )

        # Prepend in reverse so installment 1 lists first among the new invoices
        for invoice in reversed(invoices):
            self.invoices.insert(invoice)

        record_invoice_generation(contract.type.value, len(invoices))
        log_invoice_generation(contract.id, contract.type.value, [inv.id for inv in invoices])
        return invoices

    @synchronized
    def generate_invoices_for_active_contracts(self) -> List[Invoice]:
        """Generate invoices for every pending or overdue contract that has none yet"""
        billed = {inv.contract_id for inv in self.invoices.list()}
        generated: List[Invoice] = []
        for contract in self.list_contracts(statuses=ACTIVE_STATUSES):
            if contract.id in billed:
                continue
            generated.extend(self.generate_invoices_for_contract(contract.id))

        logger.info("Bulk invoice generation finished", extra={"invoice_count": len(generated)})
        return generated

    @synchronized
    def contract_interest(self, contract_id: str) -> Optional[OverdueInterest]:
        contract = self.get_contract(contract_id)
        client = self.clients.get(contract.client_id)
        rate = self._select_rate(contract.interest_rate, client)
        return calculate_overdue_interest(contract, rate, self.clock.today())

    # ==================== Invoices ====================

    @synchronized
    def list_invoices(
        self,
        contract_id: Optional[str] = None,
        client_id: Optional[str] = None,
        statuses: Optional[Iterable[PaymentStatus]] = None,
    ) -> List[Invoice]:
        today = self.clock.today()
        invoices = [self._refresh(self.invoices, inv, today) for inv in self.invoices.list()]

        if contract_id is not None:
            invoices = [inv for inv in invoices if inv.contract_id == contract_id]
        if client_id is not None:
            invoices = [inv for inv in invoices if inv.client_id == client_id]
        if statuses:
            wanted = {PaymentStatus(s) for s in statuses}
            invoices = [inv for inv in invoices if inv.status in wanted]
        return invoices

    @synchronized
    def get_invoice(self, invoice_id: str) -> Invoice:
        invoice = self.invoices.get(invoice_id)
        if invoice is None:
            raise InvoiceNotFoundError(invoice_id)
        return self._refresh(self.invoices, invoice, self.clock.today())

    @synchronized
    def update_invoice_status(self, invoice_id: str, status: PaymentStatus) -> Invoice:
        invoice = self.get_invoice(invoice_id)
        new_status, payment_date = apply_transition(invoice, status, self.clock.today())
        updated = self.invoices.update(invoice_id, {"status": new_status, "payment_date": payment_date})
        record_status_transition("invoice", new_status.value)
        return updated

    @synchronized
    def delete_invoice(self, invoice_id: str) -> None:
        self.get_invoice(invoice_id)
        self.invoices.delete(invoice_id)
        record_deletion(invoices=1)

    @synchronized
    def invoice_interest(self, invoice_id: str) -> Optional[OverdueInterest]:
        """Interest at the contract's rate, or the client's default rate when the contract has none"""
        invoice = self.get_invoice(invoice_id)
        contract = self.contracts.get(invoice.contract_id)
        client = self.clients.get(invoice.client_id)
        contract_rate = contract.interest_rate if contract is not None else None
        rate = self._select_rate(contract_rate, client)
        return calculate_overdue_interest(invoice, rate, self.clock.today())

    # ==================== Reporting ====================

    @synchronized
    def dashboard_summary(self) -> DashboardSummary:
        return build_dashboard(self.list_contracts(), self.clock.today())

    async def revenue_report(self) -> str:
        invoices = self.list_invoices()
        if not invoices:
            return NO_INVOICES_REPORT
        return await self.report_client.generate_revenue_report(invoices)

    # ==================== Helpers ====================

    def _refresh(self, store: Store, record, today: date):
        """Write back a pending -> overdue reclassification"""
        status = derive_status(record, today)
        if status != record.status:
            return store.update(record.id, {"status": status})
        return record

    def _upload_documents(self, client_id: str, uploads: List[DocumentUpload]) -> List[ClientDocument]:
        return [
            ClientDocument(
                name=upload.name,
                url=self.storage.store(client_id, upload.name, upload.content, upload.content_type),
            )
            for upload in uploads
        ]

    @staticmethod
    def _select_rate(contract_rate: Optional[Decimal], client: Optional[Client]) -> Optional[Decimal]:
        if contract_rate is not None and contract_rate > 0:
            return contract_rate
        return client.rate if client is not None else None

    @staticmethod
    def _validate_client(data: ClientInput) -> None:
        if not data.name or len(data.name.strip()) < 2:
            raise InvalidInputError("Client name must have at least 2 characters")
        try:
            validate_email((data.email or "").strip(), check_deliverability=False)
        except EmailNotValidError as e:
            raise InvalidInputError(f"Invalid email address {data.email!r}: {e}") from e
        if data.rate is not None and data.rate < 0:
            raise InvalidInputError("Interest rate cannot be negative")
        for upload in data.documents:
            if not upload.name:
                raise InvalidInputError("Document name is required")

    @staticmethod
    def _validate_contract(data: ContractInput) -> tuple[Decimal, Decimal]:
        """Check contract invariants; returns (amount, interest_rate) normalized to Decimal"""
        if data.due_date is None:
            raise InvalidInputError("Due date is required")

        amount = Decimal(str(data.amount)).quantize(CENT, rounding=ROUND_HALF_UP)
        if amount <= 0:
            raise InvalidInputError("Amount must be greater than zero")

        interest_rate = Decimal(str(data.interest_rate or 0))
        if interest_rate < 0:
            raise InvalidInputError("Interest rate cannot be negative")

        try:
            contract_type = ContractType(data.type)
        except ValueError as e:
            raise InvalidInputError(f"Unknown contract type: {data.type!r}") from e

        if contract_type == ContractType.INSTALLMENT:
            check_installments(amount, data.installments)
        elif data.installments is not None:
            raise InvalidInputError("Single payment contracts cannot have installments")

        return amount, interest_rate
