from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.integrations.stripe_client import PaymentGateway, get_payment_gateway
from app.integrations.email_client import EmailClient, get_email_client
from app.models.enums.quote_status import QuoteStatus
from app.utils.check_roles import require_role
from app.utils.get_user import get_current_user
from app.utils.response import success_response, APIResponse

from app.services.quotes.quote_service import (
    create_quote,
    list_my_quotes,
    get_my_quote,
    pay_quote,
    convert_quote_to_order,
    list_quotes,
    get_quote,
    mark_reviewed,
    set_price,
    reject_quote,
)

from app.schemas.quotes.quote_schemas import (
    QuoteCreate,
    QuoteOut,
    QuoteListData,
    QuotePriceUpdate,
    QuotePaymentOut,
    QuoteConvertRequest,
    QuoteConvertOut,
)

router = APIRouter(
    prefix="/api/quotes",
    tags=["Quotes"],
)

admin_router = APIRouter(
    prefix="/api/admin/quotes",
    tags=["Admin Quotes"],
)


# =====================================================
# CUSTOMER: REQUEST QUOTE
# =====================================================
@router.post(
    "/",
    response_model=APIResponse[QuoteOut],
    status_code=201,
)
async def create_quote_api(
    payload: QuoteCreate,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    quote = await create_quote(db, user, payload)
    return success_response("Quote requested successfully", quote)


# =====================================================
# CUSTOMER: LIST / GET OWN
# =====================================================
@router.get(
    "/",
    response_model=APIResponse[QuoteListData],
)
async def list_my_quotes_api(
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
):
    data = await list_my_quotes(db, user, page=page, page_size=page_size)
    return success_response("Quotes retrieved successfully", data)


@router.get(
    "/{quote_id}",
    response_model=APIResponse[QuoteOut],
)
async def get_my_quote_api(
    quote_id: UUID,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    quote = await get_my_quote(db, user, quote_id)
    return success_response("Quote retrieved successfully", quote)


# =====================================================
# CUSTOMER: PAY / CONVERT
# =====================================================
@router.post(
    "/{quote_id}/pay",
    response_model=APIResponse[QuotePaymentOut],
)
async def pay_quote_api(
    quote_id: UUID,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    payment = await pay_quote(db, user, quote_id, gateway)
    return success_response("Quote payment initialized", payment)


@router.post(
    "/{quote_id}/convert",
    response_model=APIResponse[QuoteConvertOut],
    status_code=201,
)
async def convert_quote_api(
    quote_id: UUID,
    payload: QuoteConvertRequest,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    result = await convert_quote_to_order(db, user, quote_id, payload.payment_intent_id, gateway)
    message = result.warning or "Quote converted to order successfully"
    return success_response(message, result)


# =====================================================
# ADMIN
# =====================================================
@admin_router.get(
    "/",
    response_model=APIResponse[QuoteListData],
)
async def list_quotes_api(
    db: AsyncSession = Depends(get_db),
    _=Depends(require_role(["admin"])),
    status: QuoteStatus | None = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
):
    data = await list_quotes(db, status=status, page=page, page_size=page_size)
    return success_response("Quotes retrieved successfully", data)


@admin_router.get(
    "/{quote_id}",
    response_model=APIResponse[QuoteOut],
)
async def get_quote_api(
    quote_id: UUID,
    db: AsyncSession = Depends(get_db),
    _=Depends(require_role(["admin"])),
):
    quote = await get_quote(db, quote_id)
    return success_response("Quote retrieved successfully", quote)


@admin_router.post(
    "/{quote_id}/review",
    response_model=APIResponse[QuoteOut],
)
async def review_quote_api(
    quote_id: UUID,
    db: AsyncSession = Depends(get_db),
    admin=Depends(require_role(["admin"])),
):
    quote = await mark_reviewed(db, quote_id, admin)
    return success_response("Quote marked as reviewed", quote)


@admin_router.post(
    "/{quote_id}/price",
    response_model=APIResponse[QuoteOut],
)
async def price_quote_api(
    quote_id: UUID,
    payload: QuotePriceUpdate,
    db: AsyncSession = Depends(get_db),
    admin=Depends(require_role(["admin"])),
    email_client: EmailClient = Depends(get_email_client),
):
    quote = await set_price(db, quote_id, payload.price, admin, email_client)
    return success_response("Quote priced and customer notified", quote)


@admin_router.post(
    "/{quote_id}/reject",
    response_model=APIResponse[QuoteOut],
)
async def reject_quote_api(
    quote_id: UUID,
    db: AsyncSession = Depends(get_db),
    admin=Depends(require_role(["admin"])),
):
    quote = await reject_quote(db, quote_id, admin)
    return success_response("Quote rejected", quote)
