# app/integrations/invoiced_client.py
"""REST client for the hosted invoicing service (Invoiced.com)."""

from typing import Any, AsyncGenerator, Dict, List, Optional

import httpx

from app.core.config import INVOICED_API_KEY, INVOICED_BASE_URL, INVOICED_PAYMENT_TERMS
from app.core.exceptions import AppException, UpstreamServiceError
from app.constants.error_codes import ErrorCode
from app.utils.logger import get_logger

logger = get_logger(__name__)

SERVICE_NAME = "invoiced"


class InvoicedClient:
    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = INVOICED_BASE_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 15.0,
    ):
        # basic auth: api key as username, empty password
        self._http = httpx.AsyncClient(
            base_url=base_url,
            auth=(api_key, ""),
            headers={"Content-Type": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        logger.info("Invoiced request", extra={"method": method, "endpoint": endpoint})

        try:
            response = await self._http.request(method, endpoint, params=params, json=json)
        except httpx.HTTPError as e:
            logger.error(
                "Invoiced transport error",
                extra={"method": method, "endpoint": endpoint, "error": str(e)},
            )
            raise UpstreamServiceError(SERVICE_NAME, f"Request failed: {e}") from e

        if response.is_error:
            body = response.text
            try:
                data = response.json()
            except ValueError:
                data = None
            message = (data.get("message") if isinstance(data, dict) else None) or body
            logger.error(
                "Invoiced API error",
                extra={
                    "method": method,
                    "endpoint": endpoint,
                    "status_code": response.status_code,
                    "body": body,
                },
            )
            raise UpstreamServiceError(
                SERVICE_NAME,
                message,
                status_code=response.status_code,
                body=body,
            )

        if response.status_code == 204 or not response.content:
            return {}

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamServiceError(
                SERVICE_NAME,
                "Received invalid JSON response",
                status_code=response.status_code,
                body=response.text,
            ) from e

    # =====================================================
    # CUSTOMERS
    # =====================================================
    async def find_customer_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        results = await self._request(
            "GET", "/customers", params={"filter[email]": email}
        )
        if isinstance(results, list) and results and results[0].get("id"):
            return results[0]
        return None

    async def create_customer(
        self,
        name: str,
        email: str,
        metadata: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        customer = await self._request(
            "POST",
            "/customers",
            json={"name": name, "email": email, "metadata": metadata or {}},
        )
        if not customer.get("id"):
            raise UpstreamServiceError(SERVICE_NAME, "Customer response is missing an id")
        return customer

    # =====================================================
    # INVOICES
    # =====================================================
    async def create_invoice(
        self,
        customer_id,
        items: List[Dict[str, Any]],
        *,
        payment_terms: str = INVOICED_PAYMENT_TERMS,
    ) -> Dict[str, Any]:
        """Create a finalized invoice; the service emails it to the customer."""
        invoice = await self._request(
            "POST",
            "/invoices",
            json={
                "customer": customer_id,
                "draft": False,
                "payment_terms": payment_terms,
                "items": items,
            },
        )
        if not invoice.get("id"):
            raise UpstreamServiceError(SERVICE_NAME, "Invoice response is missing an id")
        return invoice


async def get_invoiced_client() -> AsyncGenerator[InvoicedClient, None]:
    if not INVOICED_API_KEY:
        logger.error("INVOICED_API_KEY is not configured")
        raise AppException(
            500,
            "Invoicing service is not configured",
            ErrorCode.CONFIGURATION_ERROR,
        )

    client = InvoicedClient(INVOICED_API_KEY)
    try:
        yield client
    finally:
        await client.aclose()
