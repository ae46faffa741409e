# app/services/quotes/quote_service.py

import uuid
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select, func, desc, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import CHECKOUT_CURRENCY
from app.core.exceptions import AppException, UpstreamServiceError
from app.constants.error_codes import ErrorCode
from app.constants.activity_codes import ActivityCode
from app.integrations.stripe_client import PaymentGateway
from app.integrations.email_client import EmailClient
from app.models.enums.order_status import OrderStatus
from app.models.enums.quote_status import QuoteStatus
from app.models.enums.service_type import ServiceType
from app.models.orders.order_models import Order
from app.models.quotes.quote_models import Quote
from app.models.users.user_models import User
from app.schemas.quotes.quote_schemas import (
    QuoteCreate,
    QuoteOut,
    QuoteListData,
    QuotePaymentOut,
    QuoteConvertOut,
)
from app.services.notifications.email_service import send_quote_ready
from app.services.orders.document_service import find_document_by_path
from app.services.payments.payment_service import (
    ensure_payment_unused,
    payment_already_used,
    provider_error,
    verify_payment_succeeded,
)
from app.utils.activity_helpers import emit_user_activity
from app.utils.decimal_utils import to_cents, to_decimal
from app.utils.logger import get_logger

logger = get_logger(__name__)

# statuses from which staff may still price a quote
PRICEABLE = {QuoteStatus.pending, QuoteStatus.reviewed, QuoteStatus.quoted}


# =====================================================
# HELPERS
# =====================================================
async def _load_quote(db: AsyncSession, quote_id: UUID, *, owner_id: UUID | None = None) -> Quote:
    stmt = select(Quote).where(Quote.id == quote_id)
    if owner_id is not None:
        stmt = stmt.where(Quote.user_id == owner_id)

    quote = (await db.execute(stmt)).scalar_one_or_none()
    if not quote:
        raise AppException(404, "Quote not found", ErrorCode.QUOTE_NOT_FOUND)
    return quote


def _invalid_state(quote: Quote, action: str) -> AppException:
    return AppException(
        400,
        f"Cannot {action} a quote with status '{quote.status.value}'",
        ErrorCode.QUOTE_INVALID_STATE,
    )


async def _page(db: AsyncSession, base_query, page: int, page_size: int) -> QuoteListData:
    total = await db.scalar(select(func.count()).select_from(base_query.subquery()))
    quotes = (
        await db.execute(
            base_query
            .order_by(desc(Quote.created_at))
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
    ).scalars().all()

    return QuoteListData(
        total=total or 0,
        items=[QuoteOut.model_validate(q) for q in quotes],
    )


async def _commit_and_map(db: AsyncSession, quote: Quote) -> QuoteOut:
    await db.commit()
    await db.refresh(quote)
    return QuoteOut.model_validate(quote)


# =====================================================
# CUSTOMER
# =====================================================
async def create_quote(db: AsyncSession, user: User, payload: QuoteCreate) -> QuoteOut:
    quote = Quote(
        user_id=user.id,
        email=payload.email or user.email,
        full_name=payload.full_name or user.full_name or None,
        document_type=payload.document_type,
        source_language=payload.source_language,
        target_language=payload.target_language,
        document_paths=payload.document_paths,
        notes=payload.notes,
        status=QuoteStatus.pending,
    )
    db.add(quote)
    await db.flush()

    await emit_user_activity(
        db,
        user,
        ActivityCode.REQUEST_QUOTE,
        target_name=str(quote.id)[:8],
    )

    logger.info("Quote requested", extra={"quote_id": str(quote.id)})
    return await _commit_and_map(db, quote)


async def list_my_quotes(
    db: AsyncSession,
    user: User,
    *,
    page: int = 1,
    page_size: int = 20,
) -> QuoteListData:
    return await _page(db, select(Quote).where(Quote.user_id == user.id), page, page_size)


async def get_my_quote(db: AsyncSession, user: User, quote_id: UUID) -> QuoteOut:
    return QuoteOut.model_validate(await _load_quote(db, quote_id, owner_id=user.id))


# =====================================================
# ADMIN
# =====================================================
async def list_quotes(
    db: AsyncSession,
    *,
    status: QuoteStatus | None = None,
    page: int = 1,
    page_size: int = 20,
) -> QuoteListData:
    base_query = select(Quote)
    if status:
        base_query = base_query.where(Quote.status == status)
    return await _page(db, base_query, page, page_size)


async def get_quote(db: AsyncSession, quote_id: UUID) -> QuoteOut:
    return QuoteOut.model_validate(await _load_quote(db, quote_id))


async def mark_reviewed(db: AsyncSession, quote_id: UUID, admin: User) -> QuoteOut:
    quote = await _load_quote(db, quote_id)
    if quote.status != QuoteStatus.pending:
        raise _invalid_state(quote, "review")

    quote.status = QuoteStatus.reviewed
    await emit_user_activity(db, admin, ActivityCode.REVIEW_QUOTE, target_name=str(quote.id)[:8])
    return await _commit_and_map(db, quote)


async def set_price(
    db: AsyncSession,
    quote_id: UUID,
    price: Decimal,
    admin: User,
    email_client: EmailClient,
) -> QuoteOut:
    quote = await _load_quote(db, quote_id)
    if quote.status not in PRICEABLE:
        raise _invalid_state(quote, "price")

    quote.price = to_decimal(price)
    quote.status = QuoteStatus.quoted

    await emit_user_activity(
        db,
        admin,
        ActivityCode.PRICE_QUOTE,
        price=quote.price,
        target_name=str(quote.id)[:8],
    )
    result = await _commit_and_map(db, quote)

    logger.info("Quote priced", extra={"quote_id": str(quote.id), "price": str(quote.price)})
    await send_quote_ready(email_client, quote)
    return result


async def reject_quote(db: AsyncSession, quote_id: UUID, admin: User) -> QuoteOut:
    quote = await _load_quote(db, quote_id)
    if quote.status in (QuoteStatus.converted_to_order, QuoteStatus.rejected):
        raise _invalid_state(quote, "reject")

    quote.status = QuoteStatus.rejected
    await emit_user_activity(db, admin, ActivityCode.REJECT_QUOTE, target_name=str(quote.id)[:8])
    return await _commit_and_map(db, quote)


# =====================================================
# CUSTOMER: PAY + CONVERT
# =====================================================
async def pay_quote(
    db: AsyncSession,
    user: User,
    quote_id: UUID,
    gateway: PaymentGateway,
) -> QuotePaymentOut:
    quote = await _load_quote(db, quote_id, owner_id=user.id)
    if quote.status != QuoteStatus.quoted or quote.price is None:
        raise _invalid_state(quote, "pay for")

    amount_cents = to_cents(quote.price)
    try:
        intent = await gateway.create_payment_intent(
            amount_cents,
            CHECKOUT_CURRENCY,
            metadata={"quote_id": str(quote.id)},
        )
    except UpstreamServiceError as e:
        raise provider_error(e)

    logger.info(
        "Quote payment initialized",
        extra={"quote_id": str(quote.id), "payment_intent_id": intent["id"]},
    )
    return QuotePaymentOut(
        client_secret=intent["client_secret"],
        payment_intent_id=intent["id"],
        amount_cents=amount_cents,
    )


async def convert_quote_to_order(
    db: AsyncSession,
    user: User,
    quote_id: UUID,
    payment_intent_id: str,
    gateway: PaymentGateway,
) -> QuoteConvertOut:
    """Turn a paid quote into a processing order.

    The order insert and the quote status change are separate writes; when the
    second one fails the order stands and a warning is returned.
    """
    quote = await _load_quote(db, quote_id, owner_id=user.id)
    if quote.status != QuoteStatus.quoted or quote.price is None:
        raise _invalid_state(quote, "convert")

    await verify_payment_succeeded(
        gateway,
        payment_intent_id,
        expected_amount=to_cents(quote.price),
        expected_metadata={"quote_id": str(quote.id)},
    )
    await ensure_payment_unused(db, payment_intent_id)

    first_path = (quote.document_paths or [None])[0]
    document = await find_document_by_path(db, first_path) if first_path else None
    if not document:
        raise AppException(
            400,
            "No uploaded document found for this quote",
            ErrorCode.DOCUMENT_NOT_FOUND,
            details={"file_path": first_path},
        )

    price = to_decimal(quote.price)
    order = Order(
        order_number=str(uuid.uuid4()),
        user_id=user.id,
        email=quote.email,
        full_name=quote.full_name,
        order_type=ServiceType.certified_translation,
        status=OrderStatus.processing,
        document_type=quote.document_type,
        source_language=quote.source_language,
        target_language=quote.target_language,
        service_level="standard",
        delivery_method="digital",
        document_paths=list(quote.document_paths or []),
        subtotal=price,
        tax=Decimal("0.00"),
        total=price,
        quote_id=quote.id,
        document_id=document.id,
        payment_intent_id=payment_intent_id,
    )
    db.add(order)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise payment_already_used()

    await emit_user_activity(
        db,
        user,
        ActivityCode.CONVERT_QUOTE_TO_ORDER,
        target_name=str(quote.id)[:8],
        order_number=order.order_number,
    )
    await db.commit()

    # a rollback below expires instances, keep plain values
    order_id, order_number, quote_key = order.id, order.order_number, quote.id

    logger.info(
        "Quote converted to order",
        extra={"quote_id": str(quote_key), "order_id": str(order_id)},
    )

    warning = None
    quote_status = QuoteStatus.quoted
    try:
        await db.execute(
            update(Quote)
            .where(Quote.id == quote_key)
            .values(status=QuoteStatus.converted_to_order)
        )
        await db.commit()
        quote_status = QuoteStatus.converted_to_order
    except SQLAlchemyError:
        await db.rollback()
        logger.exception(
            "Order created but quote status update failed",
            extra={"quote_id": str(quote_key), "order_id": str(order_id)},
        )
        warning = "Order created, but the quote status could not be updated. Please contact support."

    return QuoteConvertOut(
        order_id=order_id,
        order_number=order_number,
        status=OrderStatus.processing,
        quote_status=quote_status,
        warning=warning,
    )
