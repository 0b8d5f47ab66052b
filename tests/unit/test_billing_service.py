"""Unit tests for the billing lifecycle service"""

import asyncio
import threading
import pytest
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from decimal import Decimal
from billing_gateway.domain.clock import FixedClock
from billing_gateway.domain.exceptions import (
    ClientNotFoundError,
    ContractNotFoundError,
    DocumentNotFoundError,
    InvalidInputError,
    InvoiceNotFoundError,
    InvoicesAlreadyGeneratedError,
    ReportGenerationError,
)
from billing_gateway.domain.models import ClientAddress, Contract, ContractType, PaymentStatus
from billing_gateway.infrastructure.store.fixtures import demo_clients, demo_contracts, demo_invoices
from billing_gateway.services.billing import (
    NO_INVOICES_REPORT,
    BillingService,
    ClientInput,
    ContractInput,
    DocumentUpload,
)


# ==================== Clients ====================


def test_add_client_assigns_sequential_ids(service: BillingService):
    first = service.add_client(ClientInput(name="Acme Ltda", email="a@acme.com"))
    second = service.add_client(ClientInput(name="Beta SA", email="b@beta.com"))

    assert (first.id, second.id) == ("1", "2")
    assert first.avatar_url.endswith("?text=AL")
    assert first.documents == []


def test_client_ids_not_reused_after_delete(service: BillingService):
    first = service.add_client(ClientInput(name="Acme Ltda", email="a@acme.com"))
    service.delete_client(first.id)

    assert service.add_client(ClientInput(name="Beta SA", email="b@beta.com")).id == "2"


def test_add_client_stores_documents_and_address(service: BillingService):
    client = service.add_client(
        ClientInput(
            name="Acme Ltda",
            email="a@acme.com",
            address=ClientAddress(postal_code="01001000", city="São Paulo", state="SP"),
            documents=[DocumentUpload(name="contract.pdf", content=b"%PDF", content_type="application/pdf")],
        )
    )

    assert client.address.city == "São Paulo"
    assert [(d.name, d.url) for d in client.documents] == [("contract.pdf", "/documents/1/contract.pdf")]


@pytest.mark.parametrize(
    "data",
    [
        ClientInput(name="A", email="a@acme.com"),
        ClientInput(name="Acme", email="not-an-email"),
        ClientInput(name="Bad Mail", email="x@y..z"),
        ClientInput(name="Acme", email="a@acme.com", rate=Decimal("-1")),
    ],
)
def test_add_client_validation(service: BillingService, data: ClientInput):
    with pytest.raises(InvalidInputError):
        service.add_client(data)
    assert service.list_clients() == []


def test_update_client_appends_documents_and_sets_photo(service: BillingService, acme):
    service.update_client(
        acme.id,
        ClientInput(name="Acme Ltda", email="billing@acme.com", documents=[DocumentUpload(name="a.pdf", content=b"1")]),
    )
    updated = service.update_client(
        acme.id,
        ClientInput(
            name="Acme Group",
            email="finance@acme.com",
            rate=Decimal("2"),
            documents=[DocumentUpload(name="b.pdf", content=b"2")],
            photo=DocumentUpload(name="me.png", content=b"png", content_type="image/png"),
        ),
    )

    assert updated.name == "Acme Group"
    assert updated.email == "finance@acme.com"
    assert updated.rate == Decimal("2")
    assert [d.name for d in updated.documents] == ["a.pdf", "b.pdf"]
    assert updated.avatar_url == "data:image/png;base64,cG5n"


def test_update_client_remove_photo_restores_placeholder(service: BillingService, acme):
    service.update_client(
        acme.id,
        ClientInput(name="Acme Ltda", email="billing@acme.com", photo=DocumentUpload(name="p.png", content=b"x")),
    )
    updated = service.update_client(
        acme.id, ClientInput(name="Zeta Corp", email="billing@acme.com", remove_photo=True)
    )

    assert updated.avatar_url.endswith("?text=ZC")


def test_update_unknown_client(service: BillingService):
    with pytest.raises(ClientNotFoundError):
        service.update_client("99", ClientInput(name="Acme", email="a@acme.com"))


def test_delete_client_document(service: BillingService):
    client = service.add_client(
        ClientInput(
            name="Acme Ltda",
            email="a@acme.com",
            documents=[DocumentUpload(name="a.pdf", content=b"1"), DocumentUpload(name="b.pdf", content=b"2")],
        )
    )

    updated = service.delete_client_document(client.id, "/documents/1/a.pdf")
    assert [d.name for d in updated.documents] == ["b.pdf"]

    with pytest.raises(DocumentNotFoundError):
        service.delete_client_document(client.id, "/documents/1/a.pdf")


# ==================== Contracts ====================


def test_add_contract_snapshots_client(service: BillingService, acme, make_contract):
    contract = make_contract()

    assert contract.id == "CON001"
    assert contract.client_name == "Acme Ltda"
    assert contract.client_email == "billing@acme.com"
    assert contract.issue_date == date(2024, 5, 1)
    assert contract.status == PaymentStatus.PENDING
    assert contract.payment_date is None


def test_add_contract_past_due_starts_overdue(make_contract):
    assert make_contract(due_date=date(2024, 4, 1)).status == PaymentStatus.OVERDUE


def test_add_contract_unknown_client(service: BillingService):
    with pytest.raises(ClientNotFoundError):
        service.add_contract(
            ContractInput(client_id="42", amount=Decimal("10"), due_date=date(2024, 6, 1), type=ContractType.SINGLE)
        )
    assert service.list_contracts() == []


@pytest.mark.parametrize(
    "amount,type,installments",
    [
        ("0", ContractType.SINGLE, None),
        ("-5", ContractType.SINGLE, None),
        ("100", ContractType.INSTALLMENT, None),
        ("100", ContractType.INSTALLMENT, 1),
        ("100", ContractType.SINGLE, 3),
        ("100000", ContractType.INSTALLMENT, 361),
        ("100000", ContractType.INSTALLMENT, 100000),
        ("0.02", ContractType.INSTALLMENT, 3),
    ],
)
def test_add_contract_validation(service: BillingService, acme, amount, type, installments):
    with pytest.raises(InvalidInputError):
        service.add_contract(
            ContractInput(
                client_id=acme.id,
                amount=Decimal(amount),
                due_date=date(2024, 6, 1),
                type=type,
                installments=installments,
            )
        )
    assert service.list_contracts() == []


def test_contracts_listed_most_recent_first(service: BillingService, make_contract):
    first = make_contract()
    second = make_contract()

    assert (first.id, second.id) == ("CON001", "CON002")
    assert [c.id for c in service.list_contracts()] == ["CON002", "CON001"]


def test_list_contracts_reclassifies_stale_pending(service: BillingService, clock: FixedClock, make_contract):
    contract = make_contract(due_date=date(2024, 5, 10))
    clock.set(date(2024, 5, 11))

    listed = service.list_contracts()
    assert listed[0].status == PaymentStatus.OVERDUE
    # Written back, not only computed
    assert service.contracts.get(contract.id).status == PaymentStatus.OVERDUE


def test_list_contracts_filters(service: BillingService, clock: FixedClock, make_contract):
    due_today = make_contract(due_date=date(2024, 5, 1))
    later = make_contract(due_date=date(2024, 7, 1))
    service.update_contract_status(later.id, PaymentStatus.PAID)

    assert [c.id for c in service.list_contracts(statuses=[PaymentStatus.PAID])] == [later.id]
    assert [c.id for c in service.list_contracts(due_today=True)] == [due_today.id]
    assert service.list_contracts(client_id="nobody") == []


def test_update_contract_status_paid_and_back(service: BillingService, clock: FixedClock, make_contract):
    contract = make_contract(due_date=date(2024, 5, 10))

    paid = service.update_contract_status(contract.id, PaymentStatus.PAID)
    assert paid.status == PaymentStatus.PAID
    assert paid.payment_date == date(2024, 5, 1)

    clock.set(date(2024, 5, 20))
    reopened = service.update_contract_status(contract.id, PaymentStatus.PENDING)
    assert reopened.status == PaymentStatus.OVERDUE
    assert reopened.payment_date is None


def test_update_unknown_contract_status(service: BillingService):
    with pytest.raises(ContractNotFoundError):
        service.update_contract_status("CON999", PaymentStatus.PAID)


# ==================== Invoice generation ====================


def test_generate_invoices_for_installment_contract(service: BillingService, make_contract):
    contract = make_contract(type=ContractType.INSTALLMENT, installments=3)
    invoices = service.generate_invoices_for_contract(contract.id)

    assert [inv.id for inv in invoices] == ["INV001", "INV002", "INV003"]
    assert [inv.id for inv in service.list_invoices()] == ["INV001", "INV002", "INV003"]
    assert sum(inv.amount for inv in invoices) == Decimal("1200.00")


def test_generation_is_single_shot(service: BillingService, make_contract):
    contract = make_contract()
    service.generate_invoices_for_contract(contract.id)

    with pytest.raises(InvoicesAlreadyGeneratedError):
        service.generate_invoices_for_contract(contract.id)
    assert len(service.list_invoices(contract_id=contract.id)) == 1


def test_generation_unknown_contract(service: BillingService):
    with pytest.raises(ContractNotFoundError):
        service.generate_invoices_for_contract("CON404")


def test_concurrent_generation_bills_contract_once(service: BillingService, make_contract):
    """Parallel requests for the same contract yield a single invoice set"""
    contract = make_contract(type=ContractType.INSTALLMENT, installments=300)
    workers = 8
    barrier = threading.Barrier(workers)

    def generate():
        barrier.wait()
        try:
            return service.generate_invoices_for_contract(contract.id)
        except InvoicesAlreadyGeneratedError as e:
            return e

    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(pool.map(lambda _: generate(), range(workers)))

    generated = [r for r in results if isinstance(r, list)]
    rejected = [r for r in results if isinstance(r, InvoicesAlreadyGeneratedError)]
    assert len(generated) == 1
    assert len(rejected) == workers - 1
    invoices = service.list_invoices(contract_id=contract.id)
    assert len(invoices) == 300
    assert len({inv.id for inv in invoices}) == 300
    assert service.invoice_ids() == "INV301"


def test_concurrent_client_creation_gets_distinct_ids(service: BillingService):
    workers = 8
    barrier = threading.Barrier(workers)

    def create(i: int):
        barrier.wait()
        return service.add_client(ClientInput(name=f"Client {i}", email=f"c{i}@acme.com")).id

    with ThreadPoolExecutor(max_workers=workers) as pool:
        ids = list(pool.map(create, range(workers)))

    assert sorted(ids, key=int) == [str(i) for i in range(1, workers + 1)]
    assert len(service.list_clients()) == workers


def test_invalid_installment_plan_consumes_no_ids(service: BillingService, make_contract):
    """A stored contract with an unbillable plan fails as invalid input"""
    service.load(
        contracts=[
            Contract(
                id="CON900",
                client_id="1",
                client_name="Acme Ltda",
                client_email="billing@acme.com",
                amount=Decimal("100000.00"),
                issue_date=date(2024, 5, 1),
                due_date=date(2024, 6, 1),
                status=PaymentStatus.PENDING,
                interest_rate=Decimal("0"),
                type=ContractType.INSTALLMENT,
                installments=100000,
            )
        ]
    )

    with pytest.raises(InvalidInputError):
        service.generate_invoices_for_contract("CON900")

    assert service.list_invoices() == []
    assert service.generate_invoices_for_contract(make_contract().id)[0].id == "INV001"


def test_invoice_ids_are_global_and_newest_first(service: BillingService, make_contract):
    first = make_contract()
    second = make_contract(type=ContractType.INSTALLMENT, installments=2)
    service.generate_invoices_for_contract(first.id)
    service.generate_invoices_for_contract(second.id)

    assert [inv.id for inv in service.list_invoices()] == ["INV002", "INV003", "INV001"]


def test_generate_for_active_contracts_skips_billed_and_closed(service: BillingService, make_contract):
    billed = make_contract()
    service.generate_invoices_for_contract(billed.id)
    paid = make_contract()
    service.update_contract_status(paid.id, PaymentStatus.PAID)
    open_single = make_contract()
    open_installment = make_contract(type=ContractType.INSTALLMENT, installments=4)

    generated = service.generate_invoices_for_active_contracts()

    assert len(generated) == 5
    assert {inv.contract_id for inv in generated} == {open_single.id, open_installment.id}
    assert service.generate_invoices_for_active_contracts() == []


# ==================== Invoices ====================


def test_update_invoice_status_sets_and_clears_payment_date(service: BillingService, make_contract):
    contract = make_contract()
    invoice = service.generate_invoices_for_contract(contract.id)[0]

    paid = service.update_invoice_status(invoice.id, PaymentStatus.PAID)
    assert (paid.status, paid.payment_date) == (PaymentStatus.PAID, date(2024, 5, 1))

    written_off = service.update_invoice_status(invoice.id, PaymentStatus.WRITTEN_OFF)
    assert (written_off.status, written_off.payment_date) == (PaymentStatus.WRITTEN_OFF, None)


def test_get_invoice_reclassifies(service: BillingService, clock: FixedClock, make_contract):
    invoice = service.generate_invoices_for_contract(make_contract().id)[0]
    clock.set(date(2024, 6, 2))

    assert service.get_invoice(invoice.id).status == PaymentStatus.OVERDUE


def test_delete_invoice(service: BillingService, make_contract):
    invoice = service.generate_invoices_for_contract(make_contract().id)[0]
    service.delete_invoice(invoice.id)

    with pytest.raises(InvoiceNotFoundError):
        service.get_invoice(invoice.id)


def test_invoice_interest_uses_client_rate_when_contract_has_none(
    service: BillingService, clock: FixedClock, make_contract
):
    """1000 due 2024-05-10, client at 3%, evaluated 2024-05-20"""
    contract = make_contract(amount="1000.00", due_date=date(2024, 5, 10))
    invoice = service.generate_invoices_for_contract(contract.id)[0]
    clock.set(date(2024, 5, 20))

    interest = service.invoice_interest(invoice.id)

    assert interest.days_overdue == 10
    assert interest.interest == Decimal("10.00")
    assert interest.total_amount == Decimal("1010.00")
    assert service.get_invoice(invoice.id).amount == Decimal("1000.00")


def test_invoice_interest_prefers_contract_rate(service: BillingService, clock: FixedClock, make_contract):
    contract = make_contract(amount="1000.00", due_date=date(2024, 5, 10), interest_rate="6")
    invoice = service.generate_invoices_for_contract(contract.id)[0]
    clock.set(date(2024, 5, 20))

    assert service.invoice_interest(invoice.id).interest == Decimal("20.00")


def test_contract_interest_none_when_not_overdue(service: BillingService, make_contract):
    assert service.contract_interest(make_contract(interest_rate="2").id) is None


# ==================== Cascade deletion ====================


def test_delete_client_cascades(service: BillingService, acme, make_contract):
    """Client with 2 contracts each with 1 invoice -> 1 + 2 + 2 removed"""
    other = service.add_client(ClientInput(name="Other Co", email="x@other.com"))
    for contract in (make_contract(), make_contract()):
        service.generate_invoices_for_contract(contract.id)
    untouched = make_contract(client_id=other.id)
    service.generate_invoices_for_contract(untouched.id)

    summary = service.delete_client(acme.id)

    assert (summary.clients, summary.contracts, summary.invoices) == (1, 2, 2)
    assert [c.id for c in service.list_clients()] == [other.id]
    assert [c.id for c in service.list_contracts()] == [untouched.id]
    assert [inv.contract_id for inv in service.list_invoices()] == [untouched.id]
    assert not any(c.client_id == acme.id for c in service.list_contracts())


def test_delete_unknown_client_changes_nothing(service: BillingService, acme, make_contract):
    make_contract()
    with pytest.raises(ClientNotFoundError):
        service.delete_client("404")
    assert len(service.list_clients()) == 1
    assert len(service.list_contracts()) == 1


def test_delete_contract_cascades_to_invoices(service: BillingService, make_contract):
    kept = make_contract()
    removed = make_contract(type=ContractType.INSTALLMENT, installments=3)
    service.generate_invoices_for_contract(kept.id)
    service.generate_invoices_for_contract(removed.id)

    summary = service.delete_contract(removed.id)

    assert (summary.contracts, summary.invoices) == (1, 3)
    assert [inv.contract_id for inv in service.list_invoices()] == [kept.id]
    with pytest.raises(ContractNotFoundError):
        service.delete_contract(removed.id)


# ==================== Reporting ====================


def test_dashboard_summary(service: BillingService, clock: FixedClock, make_contract):
    paid = make_contract(amount="2500.00")
    service.update_contract_status(paid.id, PaymentStatus.PAID)
    make_contract(amount="1500.00", due_date=date(2024, 5, 1))
    make_contract(amount="3500.00", due_date=date(2024, 4, 10))

    summary = service.dashboard_summary()

    assert summary.total_revenue == Decimal("2500.00")
    assert summary.outstanding_revenue == Decimal("5000.00")
    assert summary.clients_with_pending == 1
    assert summary.total_contracts == 3
    assert [c.amount for c in summary.due_today] == [Decimal("1500.00")]
    assert [(m.month, m.total) for m in summary.monthly_revenue] == [("2024-05", Decimal("2500.00"))]


def test_revenue_report_without_invoices(service: BillingService, report_client):
    assert asyncio.run(service.revenue_report()) == NO_INVOICES_REPORT
    report_client.generate_revenue_report.assert_not_called()


def test_revenue_report_passes_invoices(service: BillingService, report_client, make_contract):
    service.generate_invoices_for_contract(make_contract().id)

    assert asyncio.run(service.revenue_report()) == "Revenue is stable."
    (invoices,), _ = report_client.generate_revenue_report.call_args
    assert [inv.id for inv in invoices] == ["INV001"]


def test_revenue_report_failure_propagates(service: BillingService, report_client, make_contract):
    service.generate_invoices_for_contract(make_contract().id)
    report_client.generate_revenue_report.side_effect = ReportGenerationError("down")

    with pytest.raises(ReportGenerationError):
        asyncio.run(service.revenue_report())


# ==================== Demo data ====================


def test_load_demo_data_continues_sequences(address_client, report_client):
    fresh = BillingService(
        clock=FixedClock(date(2024, 5, 20)), address_client=address_client, report_client=report_client
    )
    fresh.load(demo_clients(), demo_contracts(), demo_invoices())

    assert [c.id for c in fresh.list_contracts()] == ["CON001", "CON002", "CON003"]
    assert fresh.get_contract("CON003").status == PaymentStatus.OVERDUE
    assert fresh.add_client(ClientInput(name="New Co", email="n@new.co")).id == "6"
    assert fresh.contract_ids() == "CON004"
    assert fresh.invoice_ids() == "INV003"
