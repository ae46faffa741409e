# app/services/checkout/pricing.py
"""Price table for checkout orders, in whole USD."""

from decimal import Decimal

from app.core.exceptions import AppException
from app.constants.error_codes import ErrorCode
from app.models.enums.service_type import ServiceType
from app.schemas.checkout.checkout_schemas import CheckoutState
from app.utils.decimal_utils import to_cents, to_decimal

DOCUMENT_PRICES = {
    "standard": Decimal("50"),
    "certificate": Decimal("75"),
    "legal": Decimal("100"),
    "medical": Decimal("120"),
    "technical": Decimal("90"),
}

SERVICE_PRICES = {
    "standard": Decimal("0"),
    "expedited": Decimal("30"),
    "certified": Decimal("50"),
}

DELIVERY_PRICES = {
    "digital": Decimal("0"),
    "physical": Decimal("20"),
    "expedited-physical": Decimal("35"),
}

EVALUATION_PRICES = {
    "course-by-course": Decimal("150"),
    "document-by-document": Decimal("85"),
}

PROCESSING_PRICES = {
    "standard": Decimal("0"),
    "expedited": Decimal("50"),
}


def _price_unavailable(message: str, **details) -> AppException:
    return AppException(
        400,
        f"Cannot calculate price: {message}",
        ErrorCode.CHECKOUT_PRICE_UNAVAILABLE,
        details=details or None,
    )


def _lookup(table: dict, option: str | None, label: str) -> Decimal:
    if option not in table:
        raise _price_unavailable(f"unknown {label} '{option}'", option=option, allowed=sorted(table))
    return table[option]


def _evaluation_amount(state: CheckoutState) -> Decimal:
    details = state.evaluation_details
    if not details or not details.evaluation_type or not details.processing_time:
        raise _price_unavailable("Missing evaluation options.")

    return (
        _lookup(EVALUATION_PRICES, details.evaluation_type, "evaluation type")
        + _lookup(PROCESSING_PRICES, details.processing_time, "processing time")
    )


def _translation_amount(state: CheckoutState) -> Decimal:
    details = state.translation_details
    document_type = details and details.document_language and details.document_language.document_type
    service_id = details and details.service_options and details.service_options.service_id
    delivery_id = details and details.delivery_options and details.delivery_options.delivery_id

    if not document_type or not service_id or not delivery_id:
        raise _price_unavailable("Missing translation options.")

    return (
        _lookup(DOCUMENT_PRICES, document_type, "document type")
        + _lookup(SERVICE_PRICES, service_id, "service level")
        + _lookup(DELIVERY_PRICES, delivery_id, "delivery method")
    )


def calculate_amount(state: CheckoutState) -> Decimal:
    """Order total in dollars for the selections held in ``state``."""
    if state.service_type == ServiceType.credential_evaluation:
        amount = _evaluation_amount(state)
    elif state.service_type == ServiceType.certified_translation:
        amount = _translation_amount(state)
    else:
        raise _price_unavailable("Service type or required details missing.")

    return to_decimal(amount)


def calculate_amount_cents(state: CheckoutState) -> int:
    cents = to_cents(calculate_amount(state))
    if cents <= 0:
        raise AppException(
            400,
            "Calculated amount is invalid.",
            ErrorCode.PAYMENT_INVALID_AMOUNT,
        )
    return cents
