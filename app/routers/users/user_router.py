from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.schemas.users.user_schemas import (
    BillingDetailsUpdate,
    UserListFilters,
    UserListData,
    UserDetailSchema,
)
from app.services.users.user_services import (
    list_users,
    get_user_by_id,
    update_billing_details,
)
from app.utils.check_roles import require_role
from app.utils.response import success_response, APIResponse
from app.utils.logger import get_logger

router = APIRouter(prefix="/api/admin/users", tags=["Users"])
logger = get_logger(__name__)


@router.get(
    "/",
    response_model=APIResponse[UserListData]
)
async def list_users_api(
    filters: UserListFilters = Depends(),
    db: AsyncSession = Depends(get_db),
    admin=Depends(require_role(["admin"])),
):
    logger.info("List users request", extra=filters.model_dump())
    users = await list_users(db, filters)
    return success_response("Users fetched", users)


@router.get("/{user_id}", response_model=APIResponse[UserDetailSchema])
async def get_user_api(
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
    admin=Depends(require_role(["admin"])),
):
    user = await get_user_by_id(db, user_id)
    return success_response("User fetched", user)


@router.patch("/{user_id}/billing", response_model=APIResponse[UserDetailSchema])
async def update_billing_details_api(
    user_id: UUID,
    payload: BillingDetailsUpdate,
    db: AsyncSession = Depends(get_db),
    admin=Depends(require_role(["admin"])),
):
    logger.info("Update billing details request", extra={"user_id": str(user_id)})
    user = await update_billing_details(db, user_id, payload, admin)
    return success_response("Billing details updated", user)
