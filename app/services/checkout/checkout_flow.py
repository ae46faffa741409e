# app/services/checkout/checkout_flow.py
"""Server side of the multi-step checkout.

The client holds the partial order (``CheckoutState``) and posts it back with
each step. Every step is validated here, merged into the state and answered
with the step that follows. Two paths branch off service selection:

    credential-evaluation:  evaluation-options -> evaluation-documents -> payment
    certified-translation:  [contact-info] -> translation-document-language
                            -> translation-service -> translation-delivery -> payment

contact-info is only visited by logged-out customers.
"""

import uuid
from decimal import Decimal
from typing import Any, Dict, Tuple

from email_validator import validate_email, EmailNotValidError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import CHECKOUT_CURRENCY
from app.core.exceptions import AppException, UpstreamServiceError
from app.constants.error_codes import ErrorCode
from app.constants.activity_codes import ActivityCode
from app.integrations.stripe_client import PaymentGateway
from app.integrations.email_client import EmailClient
from app.models.enums.order_status import OrderStatus
from app.models.enums.service_type import ServiceType
from app.models.orders.order_models import Order
from app.models.users.user_models import User
from app.schemas.checkout.checkout_schemas import (
    CheckoutState,
    CheckoutStep,
    ContactInfo,
    EvaluationDetails,
    TranslationDetails,
    DocumentLanguage,
    ServiceOptions,
    DeliveryOptions,
    CheckoutCompleteOut,
)
from app.services.checkout.pricing import (
    EVALUATION_PRICES,
    PROCESSING_PRICES,
    calculate_amount_cents,
)
from app.services.notifications.email_service import send_order_confirmation
from app.services.payments.payment_service import (
    ensure_payment_unused,
    payment_already_used,
    provider_error,
    verify_payment_succeeded,
)
from app.utils.activity_helpers import emit_user_activity
from app.utils.decimal_utils import from_cents
from app.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_EVALUATION_TYPE = "course-by-course"
DEFAULT_PROCESSING_TIME = "standard"
MIN_FULL_NAME_LENGTH = 2

EVALUATION_PATH = {
    CheckoutStep.evaluation_options,
    CheckoutStep.evaluation_documents,
}

TRANSLATION_PATH = {
    CheckoutStep.contact_info,
    CheckoutStep.translation_document_language,
    CheckoutStep.translation_service,
    CheckoutStep.translation_delivery,
}


# =====================================================
# HELPERS
# =====================================================
def _incomplete(message: str, **details) -> AppException:
    return AppException(
        400,
        message,
        ErrorCode.CHECKOUT_STEP_INCOMPLETE,
        details=details or None,
    )


def _invalid_step(message: str, step: CheckoutStep) -> AppException:
    return AppException(
        400,
        message,
        ErrorCode.CHECKOUT_STEP_INVALID,
        details={"step": step.value},
    )


def parse_step(raw: str) -> CheckoutStep:
    try:
        return CheckoutStep(raw)
    except ValueError:
        raise AppException(
            400,
            f"Unknown checkout step '{raw}'",
            ErrorCode.CHECKOUT_STEP_INVALID,
            details={"allowed": [s.value for s in CheckoutStep]},
        )


def _text(data: Dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise _incomplete(f"'{key}' must be a string", field=key)
    return value.strip() or None


def _paths(data: Dict[str, Any], key: str) -> list[str]:
    value = data.get(key) or []
    if not isinstance(value, list) or not all(isinstance(p, str) and p.strip() for p in value):
        raise _incomplete(f"'{key}' must be a list of uploaded file paths", field=key)
    return [p.strip() for p in value]


def _check_path(state: CheckoutState, step: CheckoutStep) -> None:
    if step == CheckoutStep.service_selection:
        return

    if step in (CheckoutStep.payment, CheckoutStep.success):
        raise _invalid_step(f"Step '{step.value}' cannot be submitted here", step)

    if state.service_type is None:
        raise _incomplete("Please select a service first", step=step.value)

    path = EVALUATION_PATH if state.service_type == ServiceType.credential_evaluation else TRANSLATION_PATH
    if step not in path:
        raise _invalid_step(
            f"Step '{step.value}' is not part of the {state.service_type.value} checkout",
            step,
        )


def _translation(state: CheckoutState) -> TranslationDetails:
    if state.translation_details is None:
        state.translation_details = TranslationDetails()
    return state.translation_details


# =====================================================
# STEP HANDLERS
# =====================================================
def _service_selection(state: CheckoutState, data: Dict[str, Any], logged_in: bool) -> CheckoutStep:
    raw = _text(data, "service_type")
    if not raw:
        raise _incomplete("Please select a service to continue", field="service_type")

    try:
        service_type = ServiceType(raw)
    except ValueError:
        raise _incomplete(
            f"Unknown service '{raw}'",
            field="service_type",
            allowed=[s.value for s in ServiceType],
        )

    if state.service_type is not None and state.service_type != service_type:
        # switching paths drops the other path's selections
        state.evaluation_details = None
        state.translation_details = None
        state.payment_intent_id = None
        state.client_secret = None

    state.service_type = service_type

    if service_type == ServiceType.credential_evaluation:
        return CheckoutStep.evaluation_options
    if not logged_in:
        return CheckoutStep.contact_info
    return CheckoutStep.translation_document_language


def _contact_info(state: CheckoutState, data: Dict[str, Any], logged_in: bool) -> CheckoutStep:
    full_name = _text(data, "full_name")
    email = _text(data, "email")

    if not full_name or len(full_name) < MIN_FULL_NAME_LENGTH:
        raise _incomplete(
            f"Full name must be at least {MIN_FULL_NAME_LENGTH} characters",
            field="full_name",
        )

    if not email:
        raise _incomplete("Email is required", field="email")
    try:
        email = validate_email(email, check_deliverability=False).normalized
    except EmailNotValidError as e:
        raise _incomplete(f"Invalid email address: {e}", field="email")

    state.contact_info = ContactInfo(full_name=full_name, email=email)
    return CheckoutStep.translation_document_language


def _evaluation_options(state: CheckoutState, data: Dict[str, Any], logged_in: bool) -> CheckoutStep:
    evaluation_type = _text(data, "evaluation_type") or DEFAULT_EVALUATION_TYPE
    processing_time = _text(data, "processing_time") or DEFAULT_PROCESSING_TIME

    if evaluation_type not in EVALUATION_PRICES:
        raise _incomplete(
            f"Unknown evaluation type '{evaluation_type}'",
            field="evaluation_type",
            allowed=sorted(EVALUATION_PRICES),
        )
    if processing_time not in PROCESSING_PRICES:
        raise _incomplete(
            f"Unknown processing time '{processing_time}'",
            field="processing_time",
            allowed=sorted(PROCESSING_PRICES),
        )

    docs = state.evaluation_details.evaluation_docs if state.evaluation_details else []
    state.evaluation_details = EvaluationDetails(
        evaluation_type=evaluation_type,
        processing_time=processing_time,
        evaluation_docs=docs,
    )
    return CheckoutStep.evaluation_documents


def _evaluation_documents(state: CheckoutState, data: Dict[str, Any], logged_in: bool) -> CheckoutStep:
    docs = _paths(data, "evaluation_docs")
    if not docs:
        raise _incomplete("Please upload at least one document", field="evaluation_docs")

    if state.evaluation_details is None:
        state.evaluation_details = EvaluationDetails(
            evaluation_type=DEFAULT_EVALUATION_TYPE,
            processing_time=DEFAULT_PROCESSING_TIME,
        )
    state.evaluation_details.evaluation_docs = docs
    return CheckoutStep.payment


def _translation_document_language(state: CheckoutState, data: Dict[str, Any], logged_in: bool) -> CheckoutStep:
    document_type = _text(data, "document_type")
    source_language = _text(data, "source_language")
    target_language = _text(data, "target_language")

    missing = [
        name
        for name, value in (
            ("document_type", document_type),
            ("source_language", source_language),
            ("target_language", target_language),
        )
        if not value
    ]
    if missing:
        raise _incomplete(
            "Document type, source language and target language are required",
            missing=missing,
        )

    if source_language == target_language:
        raise _incomplete(
            "Source and target languages cannot be the same",
            field="target_language",
        )

    _translation(state).document_language = DocumentLanguage(
        document_type=document_type,
        source_language=source_language,
        target_language=target_language,
        files=_paths(data, "files"),
    )
    return CheckoutStep.translation_service


def _translation_service(state: CheckoutState, data: Dict[str, Any], logged_in: bool) -> CheckoutStep:
    service_id = _text(data, "service_id")
    if not service_id:
        raise _incomplete("Please select a service level", field="service_id")

    _translation(state).service_options = ServiceOptions(service_id=service_id)
    return CheckoutStep.translation_delivery


def _translation_delivery(state: CheckoutState, data: Dict[str, Any], logged_in: bool) -> CheckoutStep:
    delivery_id = _text(data, "delivery_id")
    if not delivery_id:
        raise _incomplete("Please select a delivery method", field="delivery_id")

    _translation(state).delivery_options = DeliveryOptions(delivery_id=delivery_id)
    return CheckoutStep.payment


STEP_HANDLERS = {
    CheckoutStep.service_selection: _service_selection,
    CheckoutStep.contact_info: _contact_info,
    CheckoutStep.evaluation_options: _evaluation_options,
    CheckoutStep.evaluation_documents: _evaluation_documents,
    CheckoutStep.translation_document_language: _translation_document_language,
    CheckoutStep.translation_service: _translation_service,
    CheckoutStep.translation_delivery: _translation_delivery,
}


# =====================================================
# NAVIGATION
# =====================================================
def advance(
    state: CheckoutState,
    step: CheckoutStep,
    data: Dict[str, Any],
    logged_in: bool,
) -> Tuple[CheckoutState, CheckoutStep]:
    """Validate ``data`` for ``step``, merge it and return ``(new_state, next_step)``.

    The incoming state is never mutated.
    """
    new_state = state.model_copy(deep=True)
    _check_path(new_state, step)

    next_step = STEP_HANDLERS[step](new_state, data or {}, logged_in)

    # any change before payment invalidates a previously created intent
    new_state.payment_intent_id = None
    new_state.client_secret = None

    logger.debug(
        "Checkout step accepted",
        extra={"step": step.value, "next_step": next_step.value},
    )
    return new_state, next_step


def previous_step(
    state: CheckoutState,
    step: CheckoutStep,
    logged_in: bool,
) -> CheckoutStep | None:
    """Back navigation; ``None`` means leaving the checkout."""
    if step == CheckoutStep.service_selection:
        return None

    if step == CheckoutStep.translation_document_language:
        return CheckoutStep.service_selection if logged_in else CheckoutStep.contact_info

    if step == CheckoutStep.payment:
        if state.service_type == ServiceType.credential_evaluation:
            return CheckoutStep.evaluation_documents
        if state.service_type == ServiceType.certified_translation:
            return CheckoutStep.translation_delivery
        return CheckoutStep.service_selection

    return {
        CheckoutStep.contact_info: CheckoutStep.service_selection,
        CheckoutStep.evaluation_options: CheckoutStep.service_selection,
        CheckoutStep.evaluation_documents: CheckoutStep.evaluation_options,
        CheckoutStep.translation_service: CheckoutStep.translation_document_language,
        CheckoutStep.translation_delivery: CheckoutStep.translation_service,
        CheckoutStep.success: None,
    }[step]


def ensure_ready_for_payment(state: CheckoutState) -> None:
    if state.service_type == ServiceType.credential_evaluation:
        details = state.evaluation_details
        if not details or not details.evaluation_docs:
            raise _incomplete(
                "Please upload at least one document",
                step=CheckoutStep.evaluation_documents.value,
            )
    elif state.service_type == ServiceType.certified_translation:
        details = state.translation_details
        if not details or not details.document_language:
            raise _incomplete(
                "Document type, source language and target language are required",
                step=CheckoutStep.translation_document_language.value,
            )
    else:
        raise _incomplete("Please select a service first", step=CheckoutStep.service_selection.value)


# =====================================================
# PAYMENT HANDOFF
# =====================================================
async def initialize_payment(
    state: CheckoutState,
    gateway: PaymentGateway,
) -> Tuple[CheckoutState, CheckoutStep, int]:
    ensure_ready_for_payment(state)
    amount_cents = calculate_amount_cents(state)

    try:
        intent = await gateway.create_payment_intent(
            amount_cents,
            CHECKOUT_CURRENCY,
            metadata={"service_type": state.service_type.value},
        )
    except UpstreamServiceError as e:
        raise provider_error(e)

    new_state = state.model_copy(deep=True)
    new_state.payment_intent_id = intent["id"]
    new_state.client_secret = intent["client_secret"]

    logger.info(
        "Checkout payment initialized",
        extra={
            "payment_intent_id": intent["id"],
            "amount_cents": amount_cents,
            "service_type": state.service_type.value,
        },
    )
    return new_state, CheckoutStep.payment, amount_cents


def _build_order(state: CheckoutState, user: User, amount: Decimal) -> Order:
    contact = state.contact_info or ContactInfo()

    order = Order(
        order_number=str(uuid.uuid4()),
        user_id=user.id,
        email=contact.email or user.email,
        full_name=contact.full_name or user.full_name or None,
        order_type=state.service_type,
        status=OrderStatus.pending,
        subtotal=amount,
        tax=Decimal("0.00"),
        total=amount,
        payment_intent_id=state.payment_intent_id,
    )

    if state.service_type == ServiceType.credential_evaluation:
        details = state.evaluation_details
        order.evaluation_type = details.evaluation_type
        order.processing_time = details.processing_time
        order.document_paths = list(details.evaluation_docs)
    else:
        details = state.translation_details
        language = details.document_language
        order.document_type = language.document_type
        order.source_language = language.source_language
        order.target_language = language.target_language
        order.document_paths = list(language.files)
        order.service_level = details.service_options.service_id if details.service_options else None
        order.delivery_method = details.delivery_options.delivery_id if details.delivery_options else None

    return order


async def complete_checkout(
    db: AsyncSession,
    state: CheckoutState,
    user: User | None,
    gateway: PaymentGateway,
    email_client: EmailClient,
) -> CheckoutCompleteOut:
    """Record the order once the payment processor reports the intent as paid."""
    if user is None:
        raise AppException(401, "Please log in to complete your order", ErrorCode.UNAUTHORIZED)

    ensure_ready_for_payment(state)
    amount_cents = calculate_amount_cents(state)

    await verify_payment_succeeded(
        gateway,
        state.payment_intent_id,
        expected_amount=amount_cents,
        expected_metadata={"service_type": state.service_type.value},
    )
    await ensure_payment_unused(db, state.payment_intent_id)

    order = _build_order(state, user, from_cents(amount_cents))
    db.add(order)
    try:
        await db.flush()
    except IntegrityError:
        # a concurrent completion recorded the same payment first
        await db.rollback()
        raise payment_already_used()

    await emit_user_activity(
        db,
        user,
        ActivityCode.PLACE_ORDER,
        order_type=order.order_type.value,
        target_name=order.order_number,
        total=order.total,
    )

    await db.commit()
    await db.refresh(order)

    logger.info(
        "Checkout order recorded",
        extra={
            "order_id": str(order.id),
            "order_number": order.order_number,
            "payment_intent_id": order.payment_intent_id,
        },
    )

    await send_order_confirmation(email_client, order)

    return CheckoutCompleteOut(
        order_id=str(order.id),
        order_number=order.order_number,
        status=order.status.value,
        total=str(order.total),
        next_step=CheckoutStep.success,
    )
