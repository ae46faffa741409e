from uuid import UUID
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.integrations.callback_transport import get_callback_transport
from app.models.enums.quote_status import ApiQuoteStatus
from app.models.partners.api_key_models import ApiKey
from app.utils.check_roles import require_role
from app.utils.get_user import get_api_key
from app.utils.response import success_response, APIResponse

from app.services.partners.api_quote_service import (
    create_api_quote_request,
    get_partner_quote_request,
    list_api_quote_requests,
    get_api_quote_request,
    submit_result,
    resend_callback,
)

from app.schemas.partners.api_quote_schemas import (
    ApiQuoteRequestCreate,
    ApiQuoteRequestCreated,
    ApiQuoteRequestStatus,
    ApiQuoteRequestOut,
    ApiQuoteRequestListData,
    ApiQuoteResultSubmit,
    ApiQuoteResultOut,
    CallbackOutcome,
)

# partner-facing contract: plain bodies, no envelope
router = APIRouter(
    prefix="/v1/quote-requests",
    tags=["Partner API"],
)

admin_router = APIRouter(
    prefix="/api/admin/api-quotes",
    tags=["Admin API Quotes"],
)


# =====================================================
# PARTNER: SUBMIT
# =====================================================
@router.post(
    "",
    response_model=ApiQuoteRequestCreated,
    status_code=201,
)
async def create_quote_request_api(
    payload: ApiQuoteRequestCreate,
    db: AsyncSession = Depends(get_db),
    api_key: ApiKey = Depends(get_api_key),
):
    return await create_api_quote_request(db, api_key, payload)


# =====================================================
# PARTNER: STATUS
# =====================================================
@router.get(
    "/{quote_request_id}",
    response_model=ApiQuoteRequestStatus,
)
async def get_quote_request_api(
    quote_request_id: UUID,
    db: AsyncSession = Depends(get_db),
    api_key: ApiKey = Depends(get_api_key),
):
    return await get_partner_quote_request(db, api_key, quote_request_id)


# =====================================================
# ADMIN: LIST / GET
# =====================================================
@admin_router.get(
    "/",
    response_model=APIResponse[ApiQuoteRequestListData],
)
async def list_api_quotes_api(
    db: AsyncSession = Depends(get_db),
    _=Depends(require_role(["admin"])),
    status: ApiQuoteStatus | None = Query(None),
    user_id: UUID | None = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
):
    data = await list_api_quote_requests(
        db, status=status, user_id=user_id, page=page, page_size=page_size
    )
    return success_response("API quote requests retrieved successfully", data)


@admin_router.get(
    "/{quote_request_id}",
    response_model=APIResponse[ApiQuoteRequestOut],
)
async def get_api_quote_api(
    quote_request_id: UUID,
    db: AsyncSession = Depends(get_db),
    _=Depends(require_role(["admin"])),
):
    data = await get_api_quote_request(db, quote_request_id)
    return success_response("API quote request retrieved successfully", data)


# =====================================================
# ADMIN: RESULT + CALLBACK
# =====================================================
@admin_router.post(
    "/{quote_request_id}/result",
    response_model=APIResponse[ApiQuoteResultOut],
)
async def submit_result_api(
    quote_request_id: UUID,
    payload: ApiQuoteResultSubmit,
    db: AsyncSession = Depends(get_db),
    admin=Depends(require_role(["admin"])),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_callback_transport),
):
    result = await submit_result(db, quote_request_id, payload, admin, transport=transport)
    message = "Result saved"
    if result.callback.attempted and not result.callback.delivered:
        message = f"Result saved. Callback warning: {result.callback.message}"
    return success_response(message, result)


@admin_router.post(
    "/{quote_request_id}/resend-callback",
    response_model=APIResponse[CallbackOutcome],
)
async def resend_callback_api(
    quote_request_id: UUID,
    db: AsyncSession = Depends(get_db),
    _=Depends(require_role(["admin"])),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_callback_transport),
):
    outcome = await resend_callback(db, quote_request_id, transport=transport)
    return success_response(outcome.message, outcome)
