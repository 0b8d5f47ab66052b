"""Payment status derivation and transitions for contracts and invoices"""

from datetime import date
from typing import Dict, FrozenSet, Optional, Protocol, Tuple

from billing_gateway.domain.exceptions import InvalidInputError
from billing_gateway.domain.models import PaymentStatus


class Billable(Protocol):
    status: PaymentStatus
    due_date: date


# Every status is reachable from every other by explicit action. The deriver
# additionally moves pending -> overdue on its own.
ALLOWED_TRANSITIONS: Dict[PaymentStatus, FrozenSet[PaymentStatus]] = {
    source: frozenset(PaymentStatus) for source in PaymentStatus
}


def is_past_due(due_date: date, today: date) -> bool:
    return due_date < today


def initial_status(due_date: date, issue_date: date) -> PaymentStatus:
    """Status of a freshly issued contract or invoice"""
    return PaymentStatus.OVERDUE if is_past_due(due_date, issue_date) else PaymentStatus.PENDING


def derive_status(record: Billable, today: date) -> PaymentStatus:
    """
    Reclassify a stale pending record as overdue.

    Only pending records move; every other status is returned unchanged,
    so applying the derivation twice gives the same result as once.
    """
    if record.status == PaymentStatus.PENDING and is_past_due(record.due_date, today):
        return PaymentStatus.OVERDUE
    return record.status


def apply_transition(
    record: Billable,
    target: PaymentStatus,
    today: date,
) -> Tuple[PaymentStatus, Optional[date]]:
    """
    Resolve an explicit status change.

    Returns the (status, payment_date) pair to store:
    - entering paid stamps payment_date with today
    - any other target clears payment_date
    - the result is re-derived, so pending on a past-due record lands on overdue
    """
    target = PaymentStatus(target)
    if target not in ALLOWED_TRANSITIONS[record.status]:
        raise InvalidInputError(f"Cannot move from {record.status.value} to {target.value}")

    payment_date = today if target == PaymentStatus.PAID else None
    if target == PaymentStatus.PENDING and is_past_due(record.due_date, today):
        target = PaymentStatus.OVERDUE
    return target, payment_date
