# app/services/payments/payment_service.py

from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AppException, UpstreamServiceError
from app.constants.error_codes import ErrorCode
from app.integrations.stripe_client import PaymentGateway
from app.models.orders.order_models import Order
from app.models.users.user_models import User
from app.utils.logger import get_logger

logger = get_logger(__name__)

SUCCEEDED = "succeeded"


# =====================================================
# ERROR MAPPING
# =====================================================
def provider_error(exc: UpstreamServiceError) -> AppException:
    return AppException(
        502,
        "Payment provider request failed",
        ErrorCode.PAYMENT_PROVIDER_ERROR,
        details=exc.message,
    )


# =====================================================
# PAYMENT INTENT
# =====================================================
def _validate_amount(amount: Any, currency: Any) -> None:
    # bool is an int subclass; "true" is not an amount
    valid_amount = isinstance(amount, int) and not isinstance(amount, bool) and amount > 0
    valid_currency = isinstance(currency, str) and bool(currency.strip())
    if not valid_amount or not valid_currency:
        raise AppException(
            400,
            "Invalid amount or currency.",
            ErrorCode.PAYMENT_INVALID_AMOUNT,
        )


async def create_payment_intent(
    gateway: PaymentGateway,
    *,
    amount: Any,
    currency: Any,
    metadata: dict | None = None,
) -> dict:
    """Create an intent for ``amount`` minor units and return its client secret."""
    _validate_amount(amount, currency)

    try:
        intent = await gateway.create_payment_intent(
            amount, currency.strip().lower(), metadata=metadata
        )
    except UpstreamServiceError as e:
        raise provider_error(e)

    logger.info(
        "Payment intent created",
        extra={"payment_intent_id": intent["id"], "amount": amount},
    )
    return intent


async def verify_payment_succeeded(
    gateway: PaymentGateway,
    payment_intent_id: str | None,
    *,
    expected_amount: int | None = None,
    expected_metadata: dict | None = None,
) -> dict:
    """Check the intent is paid, for the expected amount, and was created for
    the thing being bought (``expected_metadata`` keys must match exactly).
    """
    if not payment_intent_id:
        raise AppException(
            400,
            "Payment has not been initialized",
            ErrorCode.PAYMENT_NOT_COMPLETED,
        )

    try:
        intent = await gateway.retrieve_payment_intent(payment_intent_id)
    except UpstreamServiceError as e:
        raise provider_error(e)

    if intent["status"] != SUCCEEDED:
        logger.warning(
            "Payment not completed",
            extra={"payment_intent_id": payment_intent_id, "intent_status": intent["status"]},
        )
        raise AppException(
            402,
            "Payment has not been completed",
            ErrorCode.PAYMENT_NOT_COMPLETED,
            details={"status": intent["status"]},
        )

    if expected_amount is not None and intent["amount"] != expected_amount:
        logger.error(
            "Payment amount mismatch",
            extra={
                "payment_intent_id": payment_intent_id,
                "paid": intent["amount"],
                "expected": expected_amount,
            },
        )
        raise AppException(
            400,
            "Payment amount does not match the order total",
            ErrorCode.PAYMENT_INVALID_AMOUNT,
            details={"paid": intent["amount"], "expected": expected_amount},
        )

    metadata = intent.get("metadata") or {}
    for key, value in (expected_metadata or {}).items():
        if metadata.get(key) != value:
            logger.error(
                "Payment intent belongs to another purchase",
                extra={"payment_intent_id": payment_intent_id, "key": key},
            )
            raise AppException(
                400,
                "Payment does not belong to this purchase",
                ErrorCode.PAYMENT_INTENT_MISMATCH,
                details={"field": key},
            )

    return intent


async def ensure_payment_unused(db: AsyncSession, payment_intent_id: str) -> None:
    existing = await db.scalar(
        select(Order.id).where(Order.payment_intent_id == payment_intent_id)
    )
    if existing:
        raise payment_already_used(existing)


def payment_already_used(order_id=None) -> AppException:
    return AppException(
        409,
        "An order has already been recorded for this payment",
        ErrorCode.PAYMENT_ALREADY_USED,
        details={"order_id": str(order_id)} if order_id else None,
    )


# =====================================================
# SETUP INTENT (saved card)
# =====================================================
async def create_setup_intent(
    db: AsyncSession,
    gateway: PaymentGateway,
    user: User,
) -> str:
    customer_id = user.stripe_customer_id

    try:
        if not customer_id:
            customer_id = await gateway.create_customer(
                email=user.email,
                name=user.full_name,
                metadata={"user_id": str(user.id)},
            )
            logger.info(
                "Payment customer created",
                extra={"user_id": str(user.id), "customer_id": customer_id},
            )

            user.stripe_customer_id = customer_id
            try:
                await db.commit()
            except SQLAlchemyError:
                # not fatal: the customer is recreated on the next setup intent
                await db.rollback()
                logger.exception(
                    "Failed to store payment customer id",
                    extra={"user_id": str(user.id), "customer_id": customer_id},
                )

        intent = await gateway.create_setup_intent(
            customer_id,
            metadata={"user_id": str(user.id)},
        )
    except UpstreamServiceError as e:
        raise provider_error(e)

    logger.info(
        "Setup intent created",
        extra={"setup_intent_id": intent["id"], "customer_id": customer_id},
    )
    return intent["client_secret"]
