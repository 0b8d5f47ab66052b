"""Overdue interest, simple daily accrual on a 30-day commercial month"""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Protocol

from billing_gateway.domain.models import OverdueInterest, PaymentStatus
from billing_gateway.domain.status import Billable
from billing_gateway.utils.date_utils import days_between

DAYS_PER_MONTH = 30
CENT = Decimal("0.01")


class InterestBearing(Billable, Protocol):
    amount: Decimal


def calculate_overdue_interest(
    record: InterestBearing,
    rate: Optional[Decimal],
    today: date,
) -> Optional[OverdueInterest]:
    """
    Interest accrued on an overdue record, for display only.

    daily_rate = rate / 100 / 30; interest = amount * daily_rate * days_overdue.
    Not compounded. The record's amount is never modified.

    Returns None unless the record is overdue, the rate is positive and at
    least one day has passed since the due date.

    Example:
        1000.00 due 2024-05-10 at 3% a month, on 2024-05-20
        -> daily 0.001, 10 days, interest 10.00, total 1010.00
    """
    if record.status != PaymentStatus.OVERDUE:
        return None
    if rate is None or rate <= 0:
        return None

    days_overdue = days_between(record.due_date, today)
    if days_overdue <= 0:
        return None

    daily_rate = Decimal(str(rate)) / Decimal(100) / Decimal(DAYS_PER_MONTH)
    interest = (record.amount * daily_rate * days_overdue).quantize(CENT, rounding=ROUND_HALF_UP)

    return OverdueInterest(
        interest=interest,
        total_amount=record.amount + interest,
        days_overdue=days_overdue,
    )
