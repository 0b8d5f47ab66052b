"""Revenue projection report client"""

import logging
from typing import Any, Dict, List

import httpx

from billing_gateway.config import settings
from billing_gateway.domain.exceptions import ReportGenerationError
from billing_gateway.domain.models import Invoice
from billing_gateway.infrastructure.observability.metrics import external_failure_counter

logger = logging.getLogger(__name__)


def report_payload(invoices: List[Invoice]) -> Dict[str, Any]:
    """Invoice tuples in the shape the report service expects"""
    return {
        "invoices": [
            {
                "invoiceId": inv.id,
                "clientId": inv.client_id,
                "amount": float(inv.amount),
                "dueDate": inv.due_date.isoformat(),
                "paymentDate": inv.payment_date.isoformat() if inv.payment_date else None,
            }
            for inv in invoices
        ]
    }


class ReportClient:
    """Client for the LLM-backed revenue report service"""

    def __init__(
        self,
        url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = url or settings.report_api_url
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def generate_revenue_report(self, invoices: List[Invoice]) -> str:
        """
        Ask the report service for a narrative revenue projection.

        Raises:
            ReportGenerationError: On timeout, HTTP errors, or a response without a report
        """
        try:
            return await self._request_report(invoices)
        except ReportGenerationError as e:
            external_failure_counter.labels(service="report").inc()
            logger.warning(f"Report generation failed: {e}", extra={"invoice_count": len(invoices)})
            raise

    async def _request_report(self, invoices: List[Invoice]) -> str:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.post(self.url, json=report_payload(invoices))
                response.raise_for_status()
                report = response.json()["report"]
                if not isinstance(report, str):
                    raise TypeError("report is not a string")
                return report

            except httpx.TimeoutException as e:
                raise ReportGenerationError(f"Report service timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise ReportGenerationError(f"Report service error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise ReportGenerationError(f"Report service unreachable: {e}") from e
            except (KeyError, ValueError, TypeError) as e:
                raise ReportGenerationError(f"Invalid report response: {e}") from e
