from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_

from app.models.users.user_models import User
from app.schemas.users.user_schemas import (
    BillingDetailsUpdate,
    UserListFilters,
    UserListItemSchema,
    UserDetailSchema,
    UserListData,
)
from app.utils.activity_helpers import emit_user_activity
from app.constants.activity_codes import ActivityCode
from app.core.exceptions import AppException
from app.constants.error_codes import ErrorCode
from app.utils.logger import get_logger

logger = get_logger(__name__)


# =========================
# LIST USERS
# =========================
async def list_users(
    db: AsyncSession,
    filters: UserListFilters,
) -> UserListData:
    base_stmt = select(User)

    # --------------------
    # Filters
    # --------------------
    if filters.search:
        pattern = f"%{filters.search}%"
        base_stmt = base_stmt.where(
            or_(
                User.email.ilike(pattern),
                User.company_name.ilike(pattern),
                User.billing_email.ilike(pattern),
            )
        )

    if filters.role:
        base_stmt = base_stmt.where(User.role == filters.role)

    if filters.is_active is not None:
        base_stmt = base_stmt.where(User.is_active == filters.is_active)

    # --------------------
    # Total count (before pagination)
    # --------------------
    total = await db.scalar(
        select(func.count()).select_from(base_stmt.subquery())
    )

    # --------------------
    # Sorting (safe)
    # --------------------
    sort_map = {
        "created_at": User.created_at,
        "email": User.email,
    }

    sort_col = sort_map.get(filters.sort_by)
    if sort_col is None:
        raise AppException(400, "Invalid sort field", ErrorCode.VALIDATION_ERROR)

    sort_col = (
        sort_col.desc()
        if filters.sort_order.lower() == "desc"
        else sort_col.asc()
    )

    stmt = (
        base_stmt
        .order_by(sort_col)
        .limit(filters.limit)
        .offset(filters.offset)
    )

    result = await db.execute(stmt)
    users = result.scalars().all()

    return UserListData(
        total=total or 0,
        items=[UserListItemSchema.model_validate(u) for u in users],
    )


# =========================
# GET USER BY ID
# =========================
async def get_user_by_id(db: AsyncSession, user_id: UUID) -> UserDetailSchema:
    user = await db.get(User, user_id)
    if not user:
        raise AppException(404, "User not found", ErrorCode.USER_NOT_FOUND)
    return UserDetailSchema.model_validate(user)


# =========================
# UPDATE BILLING DETAILS
# =========================
async def update_billing_details(
    db: AsyncSession,
    user_id: UUID,
    payload: BillingDetailsUpdate,
    admin: User,
) -> UserDetailSchema:
    user = await db.get(User, user_id)
    if not user:
        raise AppException(404, "User not found", ErrorCode.USER_NOT_FOUND)

    changes = []
    for field, value in payload.model_dump(exclude_unset=True).items():
        if getattr(user, field) != value:
            changes.append(f"{field}: '{getattr(user, field) or ''}' -> '{value or ''}'")
            setattr(user, field, value)

    if not changes:
        return UserDetailSchema.model_validate(user)

    await emit_user_activity(
        db,
        admin,
        ActivityCode.UPDATE_BILLING_DETAILS,
        target_email=user.email,
        changes=", ".join(changes),
    )

    await db.commit()
    await db.refresh(user)

    logger.info("Billing details updated", extra={"user_id": str(user.id)})
    return UserDetailSchema.model_validate(user)
