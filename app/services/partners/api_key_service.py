# app/services/partners/api_key_service.py

from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from app.core.security import (
    generate_api_key,
    api_key_lookup_prefix,
    hash_api_key,
    generate_webhook_secret,
)
from app.core.exceptions import AppException
from app.constants.error_codes import ErrorCode
from app.constants.activity_codes import ActivityCode
from app.models.partners.api_key_models import ApiKey
from app.models.users.user_models import User
from app.schemas.partners.api_key_schemas import (
    ApiKeyCreate,
    ApiKeyCreated,
    ApiKeyOut,
    ApiKeyListData,
    CallbackConfigUpdate,
    CallbackConfigOut,
)
from app.utils.activity_helpers import emit_user_activity
from app.utils.logger import get_logger

logger = get_logger(__name__)


async def _load_own_key(db: AsyncSession, user: User, key_id: UUID) -> ApiKey:
    api_key = await db.scalar(
        select(ApiKey).where(ApiKey.id == key_id, ApiKey.user_id == user.id)
    )
    if not api_key:
        raise AppException(404, "API key not found", ErrorCode.API_KEY_NOT_FOUND)
    return api_key


# =====================================================
# GENERATE
# =====================================================
async def create_api_key(
    db: AsyncSession,
    user: User,
    payload: ApiKeyCreate,
) -> ApiKeyCreated:
    """Issue a new key. The raw key is only ever returned from here."""
    raw_key = generate_api_key()
    # bcrypt is CPU bound
    hashed = await run_in_threadpool(hash_api_key, raw_key)

    api_key = ApiKey(
        user_id=user.id,
        hashed_key=hashed,
        key_prefix=api_key_lookup_prefix(raw_key),
        client_name=(payload.client_name or "").strip().lower() or None,
        revoked=False,
    )
    db.add(api_key)

    await emit_user_activity(
        db,
        user,
        ActivityCode.GENERATE_API_KEY,
        key_prefix=api_key.key_prefix,
    )

    await db.commit()
    await db.refresh(api_key)

    logger.info("API key generated", extra={"api_key_id": str(api_key.id), "user_id": str(user.id)})
    return ApiKeyCreated(
        id=api_key.id,
        api_key=raw_key,
        key_prefix=api_key.key_prefix,
        client_name=api_key.client_name,
        created_at=api_key.created_at,
    )


# =====================================================
# LIST
# =====================================================
async def list_api_keys(db: AsyncSession, user: User) -> ApiKeyListData:
    base_query = select(ApiKey).where(ApiKey.user_id == user.id)

    total = await db.scalar(select(func.count()).select_from(base_query.subquery()))
    keys = (
        await db.execute(base_query.order_by(ApiKey.created_at.desc()))
    ).scalars().all()

    return ApiKeyListData(
        total=total or 0,
        items=[ApiKeyOut.model_validate(k) for k in keys],
    )


# =====================================================
# REVOKE
# =====================================================
async def revoke_api_key(db: AsyncSession, user: User, key_id: UUID) -> ApiKeyOut:
    api_key = await _load_own_key(db, user, key_id)

    if not api_key.revoked:
        api_key.revoked = True
        await emit_user_activity(
            db,
            user,
            ActivityCode.REVOKE_API_KEY,
            key_prefix=api_key.key_prefix,
        )
        await db.commit()
        await db.refresh(api_key)
        logger.info("API key revoked", extra={"api_key_id": str(api_key.id)})

    return ApiKeyOut.model_validate(api_key)


# =====================================================
# CALLBACK CONFIG
# =====================================================
async def configure_callback(
    db: AsyncSession,
    user: User,
    key_id: UUID,
    payload: CallbackConfigUpdate,
) -> CallbackConfigOut:
    api_key = await _load_own_key(db, user, key_id)

    if api_key.revoked:
        raise AppException(400, "API key has been revoked", ErrorCode.API_KEY_REVOKED)

    generated_secret = None
    if payload.webhook_secret:
        api_key.webhook_secret = payload.webhook_secret
    elif not api_key.webhook_secret:
        generated_secret = generate_webhook_secret()
        api_key.webhook_secret = generated_secret

    api_key.callback_url = str(payload.callback_url)

    await emit_user_activity(
        db,
        user,
        ActivityCode.CONFIGURE_CALLBACK,
        key_prefix=api_key.key_prefix,
        callback_url=api_key.callback_url,
    )
    await db.commit()

    logger.info("Callback configured", extra={"api_key_id": str(api_key.id)})
    return CallbackConfigOut(
        id=api_key.id,
        callback_url=api_key.callback_url,
        webhook_secret=generated_secret,
    )
