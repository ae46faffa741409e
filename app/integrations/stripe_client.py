# app/integrations/stripe_client.py
"""Thin async facade over the Stripe SDK.

The SDK is synchronous, so every call is pushed to the threadpool. SDK errors
surface as ``UpstreamServiceError`` so services can map them to HTTP codes.
"""

from typing import Any, Dict, Optional

import stripe
from starlette.concurrency import run_in_threadpool

from app.core.config import STRIPE_SECRET_KEY
from app.core.exceptions import AppException, UpstreamServiceError
from app.constants.error_codes import ErrorCode
from app.utils.logger import get_logger

logger = get_logger(__name__)

SERVICE_NAME = "stripe"


class PaymentGateway:
    def __init__(self, api_key: str):
        self.api_key = api_key

    async def _call(self, operation: str, func, **params) -> Any:
        logger.info("Stripe request", extra={"operation": operation})
        try:
            return await run_in_threadpool(func, api_key=self.api_key, **params)
        except stripe.StripeError as e:
            logger.error(
                "Stripe request failed",
                extra={
                    "operation": operation,
                    "http_status": e.http_status,
                    "stripe_code": e.code,
                },
            )
            raise UpstreamServiceError(
                SERVICE_NAME,
                e.user_message or str(e),
                status_code=e.http_status,
            ) from e

    async def create_payment_intent(
        self,
        amount: int,
        currency: str,
        metadata: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        intent = await self._call(
            "payment_intent.create",
            stripe.PaymentIntent.create,
            amount=amount,
            currency=currency,
            automatic_payment_methods={"enabled": True},
            metadata=metadata or {},
        )
        return {
            "id": intent["id"],
            "client_secret": intent["client_secret"],
            "amount": intent["amount"],
            "currency": intent["currency"],
        }

    async def retrieve_payment_intent(self, payment_intent_id: str) -> Dict[str, Any]:
        intent = await self._call(
            "payment_intent.retrieve",
            stripe.PaymentIntent.retrieve,
            id=payment_intent_id,
        )
        return {
            "id": intent["id"],
            "status": intent["status"],
            "amount": intent["amount"],
            "currency": intent["currency"],
            "metadata": dict(intent.get("metadata") or {}),
        }

    async def create_customer(
        self,
        email: str,
        name: str,
        metadata: Optional[Dict[str, str]] = None,
    ) -> str:
        customer = await self._call(
            "customer.create",
            stripe.Customer.create,
            email=email,
            name=name,
            metadata=metadata or {},
        )
        return customer["id"]

    async def create_setup_intent(
        self,
        customer_id: str,
        metadata: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        intent = await self._call(
            "setup_intent.create",
            stripe.SetupIntent.create,
            customer=customer_id,
            payment_method_types=["card"],
            metadata=metadata or {},
        )
        return {"id": intent["id"], "client_secret": intent["client_secret"]}


def get_payment_gateway() -> PaymentGateway:
    if not STRIPE_SECRET_KEY:
        logger.error("STRIPE_SECRET_KEY is not configured")
        raise AppException(
            500,
            "Payment processing is not configured",
            ErrorCode.CONFIGURATION_ERROR,
        )
    return PaymentGateway(STRIPE_SECRET_KEY)
