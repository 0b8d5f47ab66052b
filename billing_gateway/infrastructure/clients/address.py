"""ViaCEP client for Brazilian postal code lookup"""

import logging
import re

import httpx

from billing_gateway.config import settings
from billing_gateway.domain.models import (
    AddressFound,
    AddressLookupFailed,
    AddressLookupResult,
    ClientAddress,
)
from billing_gateway.infrastructure.observability.metrics import external_failure_counter

logger = logging.getLogger(__name__)


def normalize_postal_code(raw: str) -> str:
    """Strip everything but digits ("01001-000" -> "01001000")"""
    return re.sub(r"\D", "", raw or "")


class AddressClient:
    """Client for the external postal code service"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.address_api_base).rstrip("/")
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def lookup(self, postal_code: str) -> AddressLookupResult:
        """
        Resolve an 8-digit CEP to street, district, city and state.

        Never raises: every failure comes back as AddressLookupFailed so a
        form can show the reason and keep going.
        """
        cep = normalize_postal_code(postal_code)
        if len(cep) != 8:
            return AddressLookupFailed(reason="invalid", message="Postal code must have 8 digits")

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(f"{self.base_url}/ws/{cep}/json/")
                response.raise_for_status()
                data = response.json()

                if data.get("erro"):
                    return AddressLookupFailed(reason="not_found", message="Postal code not found")

                return AddressFound(
                    address=ClientAddress(
                        postal_code=cep,
                        street=data.get("logradouro"),
                        district=data.get("bairro"),
                        city=data.get("localidade"),
                        state=data.get("uf"),
                    )
                )

            except httpx.TimeoutException:
                external_failure_counter.labels(service="address").inc()
                logger.warning("Address lookup timeout", extra={"postal_code": cep})
                return AddressLookupFailed(
                    reason="unavailable", message=f"Address service timeout after {self.timeout}s"
                )
            except httpx.HTTPError as e:
                external_failure_counter.labels(service="address").inc()
                logger.warning(f"Address lookup failed: {e}", extra={"postal_code": cep})
                return AddressLookupFailed(reason="unavailable", message="Could not fetch the address")
            except (ValueError, AttributeError) as e:
                external_failure_counter.labels(service="address").inc()
                logger.warning(f"Invalid address payload: {e}", extra={"postal_code": cep})
                return AddressLookupFailed(reason="unavailable", message="Could not fetch the address")
