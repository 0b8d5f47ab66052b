"""Dashboard aggregates over contracts"""

from datetime import date
from decimal import Decimal
from typing import Dict, List

from billing_gateway.domain.models import Contract, DashboardSummary, MonthlyRevenue, PaymentStatus

RECENT_CONTRACTS_LIMIT = 5
OUTSTANDING = (PaymentStatus.PENDING, PaymentStatus.OVERDUE)


def monthly_revenue(contracts: List[Contract]) -> List[MonthlyRevenue]:
    """Paid contract amounts grouped by payment month, oldest month first"""
    totals: Dict[str, Decimal] = {}
    for contract in contracts:
        if contract.status != PaymentStatus.PAID or contract.payment_date is None:
            continue
        month = contract.payment_date.strftime("%Y-%m")
        totals[month] = totals.get(month, Decimal("0")) + contract.amount

    return [MonthlyRevenue(month=month, total=totals[month]) for month in sorted(totals)]


def build_dashboard(contracts: List[Contract], today: date) -> DashboardSummary:
    """
    Summarize contracts for the dashboard.

    Contracts are expected with statuses already derived for today and in
    collection order (most recent first).
    """
    total_revenue = sum(
        (c.amount for c in contracts if c.status == PaymentStatus.PAID), Decimal("0")
    )
    outstanding_revenue = sum(
        (c.amount for c in contracts if c.status in OUTSTANDING), Decimal("0")
    )
    clients_with_pending = len({c.client_id for c in contracts if c.status in OUTSTANDING})
    due_today = [
        c for c in contracts if c.due_date == today and c.status != PaymentStatus.PAID
    ]

    return DashboardSummary(
        total_revenue=total_revenue,
        outstanding_revenue=outstanding_revenue,
        clients_with_pending=clients_with_pending,
        total_contracts=len(contracts),
        due_today=due_today,
        recent_contracts=contracts[:RECENT_CONTRACTS_LIMIT],
        monthly_revenue=monthly_revenue(contracts),
    )
