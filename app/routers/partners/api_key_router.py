from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.utils.get_user import get_current_user
from app.utils.response import success_response, APIResponse

from app.services.partners.api_key_service import (
    create_api_key,
    list_api_keys,
    revoke_api_key,
    configure_callback,
)

from app.schemas.partners.api_key_schemas import (
    ApiKeyCreate,
    ApiKeyCreated,
    ApiKeyOut,
    ApiKeyListData,
    CallbackConfigUpdate,
    CallbackConfigOut,
)

router = APIRouter(
    prefix="/api/api-keys",
    tags=["API Keys"],
)


@router.post(
    "/",
    response_model=APIResponse[ApiKeyCreated],
    status_code=201,
)
async def create_api_key_api(
    payload: ApiKeyCreate | None = None,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    data = await create_api_key(db, user, payload or ApiKeyCreate())
    return success_response("API key generated. Store it now, it will not be shown again.", data)


@router.get(
    "/",
    response_model=APIResponse[ApiKeyListData],
)
async def list_api_keys_api(
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    data = await list_api_keys(db, user)
    return success_response("API keys retrieved successfully", data)


@router.post(
    "/{key_id}/revoke",
    response_model=APIResponse[ApiKeyOut],
)
async def revoke_api_key_api(
    key_id: UUID,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    data = await revoke_api_key(db, user, key_id)
    return success_response("API key revoked", data)


@router.put(
    "/{key_id}/callback",
    response_model=APIResponse[CallbackConfigOut],
)
async def configure_callback_api(
    key_id: UUID,
    payload: CallbackConfigUpdate,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    data = await configure_callback(db, user, key_id, payload)
    return success_response("Callback configured", data)
