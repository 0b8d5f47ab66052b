"""Invoice generation from contracts"""

from datetime import date
from decimal import Decimal
from typing import Callable, Iterable, List, Optional

from billing_gateway.domain.exceptions import InvalidInputError, InvoicesAlreadyGeneratedError
from billing_gateway.domain.models import Contract, ContractType, Invoice
from billing_gateway.domain.status import initial_status
from billing_gateway.utils.date_utils import add_months

CENT = Decimal("0.01")
# 30 years of monthly installments
MAX_INSTALLMENTS = 360


def split_amount(amount: Decimal, parts: int) -> List[Decimal]:
    """
    Split an amount into equal parts at cent precision.

    The last part absorbs the rounding remainder so the parts always sum to
    the original amount.

    Example:
        1000.00 / 3 -> [333.33, 333.33, 333.34]
    """
    if parts < 1:
        raise InvalidInputError("Cannot split an amount into fewer than one part")

    total_cents = int((amount / CENT).to_integral_value())
    base_cents, remainder = divmod(total_cents, parts)

    amounts = []
    for i in range(parts):
        cents = base_cents + (remainder if i == parts - 1 else 0)
        amounts.append(Decimal(cents) * CENT)
    return amounts


def check_installments(amount: Decimal, installments: Optional[int]) -> None:
    """
    Validate an installment plan before anything is billed.

    Raises:
        InvalidInputError: Fewer than 2 or more than MAX_INSTALLMENTS
            installments, or an amount that cannot give every installment
            at least one cent
    """
    if installments is None or installments <= 1:
        raise InvalidInputError("Installment contracts need more than one installment")
    if installments > MAX_INSTALLMENTS:
        raise InvalidInputError(f"Installment contracts allow at most {MAX_INSTALLMENTS} installments")
    if amount < CENT * installments:
        raise InvalidInputError(
            f"Amount {amount} is too small for {installments} installments of at least {CENT}"
        )


def generate_invoices(
    contract: Contract,
    existing_invoices: Iterable[Invoice],
    issue_date: date,
    next_id: Callable[[], str],
) -> List[Invoice]:
    """
    Expand a contract into its invoices.

    Requirements:
    - At most one invoice set per contract
    - Single contracts yield one invoice for the full amount
    - Installment contracts yield one invoice per month starting at the
      contract's first due date
    - Each invoice starts pending, or overdue when already past due on issue

    Args:
        contract: Contract to bill
        existing_invoices: Invoices already stored, checked for this contract
        issue_date: Issue date stamped on every invoice (today)
        next_id: Invoice id sequence, called once per invoice in order

    Raises:
        InvoicesAlreadyGeneratedError: Some invoice already references the contract
        InvalidInputError: Invalid installment plan; no ids are consumed
    """
    if any(inv.contract_id == contract.id for inv in existing_invoices):
        raise InvoicesAlreadyGeneratedError(contract.id)

    if contract.type == ContractType.SINGLE:
        return [
            _build_invoice(contract, next_id(), contract.amount, issue_date, contract.due_date)
        ]

    check_installments(contract.amount, contract.installments)

    total = contract.installments
    try:
        due_dates = [add_months(contract.due_date, i) for i in range(total)]
    except (ValueError, OverflowError) as e:
        raise InvalidInputError(f"Installment schedule of {contract.id} runs past the last supported date") from e

    invoices = []
    for i, (amount, due_date) in enumerate(zip(split_amount(contract.amount, total), due_dates)):
        invoice = _build_invoice(contract, next_id(), amount, issue_date, due_date)
        invoice.installment_number = i + 1
        invoice.total_installments = total
        invoices.append(invoice)

    return invoices


def _build_invoice(
    contract: Contract,
    invoice_id: str,
    amount: Decimal,
    issue_date: date,
    due_date: date,
) -> Invoice:
    return Invoice(
        id=invoice_id,
        contract_id=contract.id,
        client_id=contract.client_id,
        client_name=contract.client_name,
        client_email=contract.client_email,
        amount=amount,
        issue_date=issue_date,
        due_date=due_date,
        status=initial_status(due_date, issue_date),
        payment_date=None,
    )
