# app/services/partners/api_quote_service.py

from typing import Optional
from uuid import UUID

import httpx
from sqlalchemy import select, func, desc
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import PARTNERS_WITHOUT_APPLICANT_NAME
from app.core.exceptions import AppException
from app.constants.error_codes import ErrorCode
from app.constants.activity_codes import ActivityCode
from app.integrations.partner_webhooks import send_partner_callback
from app.models.enums.quote_status import ApiQuoteStatus
from app.models.partners.api_key_models import ApiKey
from app.models.partners.api_quote_request_models import ApiQuoteRequest
from app.models.users.user_models import User
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
from app.utils.activity_helpers import emit_user_activity
from app.utils.logger import get_logger

logger = get_logger(__name__)

BASE_REQUIRED_FIELDS = ["applicant_name", "country_of_education", "degree_received"]

# outcomes a partner can be told about
NOTIFIABLE = {ApiQuoteStatus.completed, ApiQuoteStatus.rejected, ApiQuoteStatus.invoiced}


# =====================================================
# PARTNER: SUBMIT
# =====================================================
def required_fields_for(api_key: ApiKey) -> list[str]:
    client = (api_key.client_name or "").strip().lower()
    if client in PARTNERS_WITHOUT_APPLICANT_NAME:
        return [f for f in BASE_REQUIRED_FIELDS if f != "applicant_name"]
    return list(BASE_REQUIRED_FIELDS)


async def create_api_quote_request(
    db: AsyncSession,
    api_key: ApiKey,
    payload: ApiQuoteRequestCreate,
) -> ApiQuoteRequestCreated:
    required = required_fields_for(api_key)
    data = payload.model_dump()

    missing = [
        field
        for field in required
        if data.get(field) is None or (isinstance(data[field], str) and not data[field].strip())
    ]
    if missing:
        raise AppException(
            400,
            f"Missing required fields in request body: {', '.join(missing)}",
            ErrorCode.API_QUOTE_MISSING_FIELDS,
            details={"missing": missing, "required": required},
        )

    quote_request = ApiQuoteRequest(
        api_key_id=api_key.id,
        user_id=api_key.user_id,
        applicant_name=payload.applicant_name,
        country_of_education=payload.country_of_education.strip(),
        college_attended=payload.college_attended,
        degree_received=payload.degree_received.strip(),
        year_of_graduation=payload.year_of_graduation,
        notes=payload.notes,
        status=ApiQuoteStatus.pending,
    )
    db.add(quote_request)
    await db.commit()

    logger.info(
        "Partner quote request received",
        extra={"quote_request_id": str(quote_request.id), "api_key_id": str(api_key.id)},
    )
    return ApiQuoteRequestCreated(
        message="Quote request received successfully",
        quote_request_id=quote_request.id,
    )


async def get_partner_quote_request(
    db: AsyncSession,
    api_key: ApiKey,
    quote_request_id: UUID,
) -> ApiQuoteRequestStatus:
    row = await db.scalar(
        select(ApiQuoteRequest).where(
            ApiQuoteRequest.id == quote_request_id,
            ApiQuoteRequest.user_id == api_key.user_id,
        )
    )
    if not row:
        raise AppException(404, "Quote request not found", ErrorCode.API_QUOTE_NOT_FOUND)

    return ApiQuoteRequestStatus(
        quote_request_id=row.id,
        status=row.status,
        applicant_name=row.applicant_name,
        us_equivalent=row.us_equivalent,
        unable_to_provide=row.unable_to_provide,
        rejection_reason=row.rejection_reason,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


# =====================================================
# ADMIN: READ
# =====================================================
async def _load(db: AsyncSession, quote_request_id: UUID) -> ApiQuoteRequest:
    row = await db.get(ApiQuoteRequest, quote_request_id, populate_existing=True)
    if not row:
        raise AppException(404, "API quote request not found", ErrorCode.API_QUOTE_NOT_FOUND)
    return row


async def list_api_quote_requests(
    db: AsyncSession,
    *,
    status: ApiQuoteStatus | None = None,
    user_id: UUID | None = None,
    page: int = 1,
    page_size: int = 20,
) -> ApiQuoteRequestListData:
    base_query = select(ApiQuoteRequest)
    if status:
        base_query = base_query.where(ApiQuoteRequest.status == status)
    if user_id:
        base_query = base_query.where(ApiQuoteRequest.user_id == user_id)

    total = await db.scalar(select(func.count()).select_from(base_query.subquery()))
    rows = (
        await db.execute(
            base_query
            .order_by(desc(ApiQuoteRequest.created_at))
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
    ).scalars().all()

    return ApiQuoteRequestListData(
        total=total or 0,
        items=[ApiQuoteRequestOut.model_validate(r) for r in rows],
    )


async def get_api_quote_request(db: AsyncSession, quote_request_id: UUID) -> ApiQuoteRequestOut:
    return ApiQuoteRequestOut.model_validate(await _load(db, quote_request_id))


# =====================================================
# CALLBACK
# =====================================================
def build_callback_payload(row: ApiQuoteRequest) -> dict:
    payload = {
        "quote_request_id": str(row.id),
        # partners exempt from applicant_name still get a non-empty field
        "applicant_name": row.applicant_name or "N/A",
    }

    if row.status == ApiQuoteStatus.rejected:
        payload.update(
            status=ApiQuoteStatus.rejected.value,
            unable_to_provide=True,
            rejection_reason=row.rejection_reason,
        )
    else:
        payload.update(
            status=ApiQuoteStatus.completed.value,
            us_equivalent=row.us_equivalent,
            unable_to_provide=False,
        )
    return payload


async def _dispatch_callback(
    db: AsyncSession,
    row: ApiQuoteRequest,
    transport: Optional[httpx.AsyncBaseTransport],
) -> CallbackOutcome:
    api_key = await db.get(ApiKey, row.api_key_id) if row.api_key_id else None

    if not api_key or not api_key.has_callback:
        logger.warning(
            "Callback skipped: no callback configured",
            extra={"quote_request_id": str(row.id), "api_key_id": str(row.api_key_id)},
        )
        return CallbackOutcome(
            attempted=False,
            message="Callback URL or secret not configured for this API key.",
        )

    try:
        result = await send_partner_callback(
            api_key.callback_url,
            api_key.webhook_secret,
            build_callback_payload(row),
            transport=transport,
        )
    except AppException as e:
        logger.warning(
            "Callback payload rejected",
            extra={"quote_request_id": str(row.id), "reason": e.detail},
        )
        return CallbackOutcome(attempted=True, sent=False, message=e.detail)

    return CallbackOutcome(
        attempted=True,
        sent=result.sent,
        delivered=result.ok,
        message=result.message,
        partner_status=result.partner_status,
        partner_response=result.partner_response,
    )


# =====================================================
# ADMIN: SUBMIT RESULT
# =====================================================
async def submit_result(
    db: AsyncSession,
    quote_request_id: UUID,
    payload: ApiQuoteResultSubmit,
    admin: User,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ApiQuoteResultOut:
    """Store the evaluation outcome, then notify the partner.

    Callback problems never fail the submission; they come back in ``callback``.
    """
    row = await _load(db, quote_request_id)

    if row.status == ApiQuoteStatus.invoiced:
        raise AppException(
            400,
            "Invoiced quote requests can no longer be changed",
            ErrorCode.QUOTE_INVALID_STATE,
        )

    target_name = row.applicant_name or str(row.id)[:8]

    if payload.unable_to_provide:
        row.status = ApiQuoteStatus.rejected
        row.unable_to_provide = True
        row.rejection_reason = payload.rejection_reason
        row.us_equivalent = None
        await emit_user_activity(
            db,
            admin,
            ActivityCode.REJECT_API_QUOTE,
            target_name=target_name,
            rejection_reason=payload.rejection_reason,
        )
    else:
        row.status = ApiQuoteStatus.completed
        row.unable_to_provide = False
        row.us_equivalent = payload.us_equivalent
        row.rejection_reason = None
        await emit_user_activity(
            db,
            admin,
            ActivityCode.COMPLETE_API_QUOTE,
            target_name=target_name,
            us_equivalent=payload.us_equivalent,
        )

    await db.commit()
    await db.refresh(row)

    logger.info(
        "API quote result submitted",
        extra={"quote_request_id": str(row.id), "quote_status": row.status.value},
    )

    callback = await _dispatch_callback(db, row, transport)

    return ApiQuoteResultOut(
        quote_request=ApiQuoteRequestOut.model_validate(row),
        callback=callback,
    )


async def resend_callback(
    db: AsyncSession,
    quote_request_id: UUID,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> CallbackOutcome:
    row = await _load(db, quote_request_id)

    if row.status not in NOTIFIABLE:
        raise AppException(
            400,
            f"No result to send for a quote request with status '{row.status.value}'",
            ErrorCode.QUOTE_INVALID_STATE,
        )

    api_key = await db.get(ApiKey, row.api_key_id) if row.api_key_id else None
    if not api_key or not api_key.has_callback:
        raise AppException(
            400,
            "Callback URL or secret not configured for this API key.",
            ErrorCode.CALLBACK_NOT_CONFIGURED,
        )

    return await _dispatch_callback(db, row, transport)
