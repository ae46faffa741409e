from datetime import datetime, timezone

from fastapi import Depends, Header, status, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from starlette.concurrency import run_in_threadpool

from app.core.db import get_db, AsyncSessionLocal
from app.core.security import (
    decode_access_token,
    API_KEY_PREFIX,
    api_key_lookup_prefix,
    verify_api_key,
)
from app.core.exceptions import AppException
from app.constants.error_codes import ErrorCode
from app.models.users.user_models import User
from app.models.partners.api_key_models import ApiKey
from app.utils.logger import get_logger

logger = get_logger("auth.guard")


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization or not authorization.startswith("Bearer "):
        return None
    return authorization.split("Bearer ", 1)[1].strip() or None


def _user_from_claims(payload: dict) -> User:
    metadata = payload.get("user_metadata") or {}
    app_metadata = payload.get("app_metadata") or {}
    return User(
        id=payload["sub"],
        email=payload.get("email") or f"{payload['sub']}@users.invalid",
        first_name=metadata.get("first_name"),
        last_name=metadata.get("last_name"),
        company_name=metadata.get("company_name"),
        billing_email=metadata.get("billing_email"),
        role=app_metadata.get("role") or "user",
        is_active=True,
    )


async def _resolve_user(request: Request, token: str, db: AsyncSession) -> User:
    payload = decode_access_token(token)

    user = await db.get(User, payload["sub"])

    if not user:
        # first request from this hosted-auth account
        user = _user_from_claims(payload)
        db.add(user)
        await db.commit()
        await db.refresh(user)
        logger.info("Provisioned local user", extra={"user_id": str(user.id)})

    if not user.is_active:
        logger.warning("Inactive user access blocked", extra={"user_id": str(user.id)})
        raise AppException(
            status.HTTP_403_FORBIDDEN,
            "User account is inactive",
            ErrorCode.USER_INACTIVE,
        )

    request.state.user = user
    return user


async def get_current_user(
    request: Request,
    authorization: str | None = Header(None),
    db: AsyncSession = Depends(get_db),
) -> User:
    token = _bearer_token(authorization)
    if not token:
        logger.warning("Missing bearer token")
        raise AppException(
            status.HTTP_401_UNAUTHORIZED,
            "Authentication token missing",
            ErrorCode.UNAUTHORIZED,
        )

    return await _resolve_user(request, token, db)


async def get_optional_user(
    request: Request,
    authorization: str | None = Header(None),
    db: AsyncSession = Depends(get_db),
) -> User | None:
    token = _bearer_token(authorization)
    if not token:
        return None
    return await _resolve_user(request, token, db)


async def _touch_api_key(api_key_id) -> None:
    # separate session: usage tracking never blocks or dirties the partner request
    async with AsyncSessionLocal() as usage_db:
        try:
            await usage_db.execute(
                update(ApiKey)
                .where(ApiKey.id == api_key_id)
                .values(last_used_at=datetime.now(timezone.utc))
            )
            await usage_db.commit()
        except Exception:
            logger.exception("Failed to update last_used_at", extra={"api_key_id": str(api_key_id)})


async def get_api_key(
    request: Request,
    authorization: str | None = Header(None),
    db: AsyncSession = Depends(get_db),
) -> ApiKey:
    """Authenticate a partner by the raw ``sk_`` key in the bearer header."""
    raw_key = _bearer_token(authorization)
    if not raw_key:
        raise AppException(401, "API key is required", ErrorCode.API_KEY_MISSING)

    if not raw_key.startswith(API_KEY_PREFIX):
        raise AppException(401, "Invalid API key format", ErrorCode.API_KEY_INVALID)

    result = await db.execute(
        select(ApiKey).where(ApiKey.key_prefix == api_key_lookup_prefix(raw_key))
    )
    candidates = result.scalars().all()

    api_key = None
    for candidate in candidates:
        if await run_in_threadpool(verify_api_key, raw_key, candidate.hashed_key):
            api_key = candidate
            break

    if not api_key:
        logger.warning("Invalid API key presented")
        raise AppException(401, "Invalid API key", ErrorCode.API_KEY_INVALID)

    if api_key.revoked:
        logger.warning("Revoked API key presented", extra={"api_key_id": str(api_key.id)})
        raise AppException(403, "API key has been revoked", ErrorCode.API_KEY_REVOKED)

    await _touch_api_key(api_key.id)

    request.state.api_key = api_key
    return api_key
