# app/services/support/activity_service.py

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, desc, asc

from app.models.support.activity_models import UserActivity
from app.schemas.support.activity_schemas import (
    UserActivityOut,
    UserActivityFilters,
    UserActivityListData,
)
from app.core.exceptions import AppException
from app.constants.error_codes import ErrorCode
from app.utils.logger import get_logger

logger = get_logger(__name__)

ALLOWED_SORT_FIELDS = {
    "created_at": UserActivity.created_at,
    "username": UserActivity.username_snapshot,
}


async def list_user_activities(
    *,
    db: AsyncSession,
    filters: UserActivityFilters,
) -> UserActivityListData:
    """Audit trail for staff review; rows are never edited."""
    query = select(UserActivity)

    # -------------------------
    # Filters
    # -------------------------
    if filters.user_id:
        query = query.where(UserActivity.user_id == filters.user_id)

    if filters.username:
        query = query.where(UserActivity.username_snapshot.ilike(f"%{filters.username}%"))

    if filters.search:
        query = query.where(UserActivity.message.ilike(f"%{filters.search}%"))

    if filters.code:
        query = query.where(UserActivity.code == filters.code.upper())

    total = await db.scalar(select(func.count()).select_from(query.subquery()))

    # -------------------------
    # Sorting (safe)
    # -------------------------
    sort_column = ALLOWED_SORT_FIELDS.get(filters.sort_by)
    if sort_column is None:
        raise AppException(
            400,
            "Invalid sort field",
            ErrorCode.VALIDATION_ERROR,
        )

    order_fn = desc if filters.sort_order == "desc" else asc
    # id breaks ties between rows written in the same second
    query = query.order_by(order_fn(sort_column), order_fn(UserActivity.id))

    offset = (filters.page - 1) * filters.page_size
    activities = (
        await db.execute(query.limit(filters.page_size).offset(offset))
    ).scalars().all()

    logger.info(
        "User activities fetched",
        extra={
            "total": total,
            "page": filters.page,
            "page_size": filters.page_size,
        },
    )

    return UserActivityListData(
        total=total or 0,
        items=[UserActivityOut.model_validate(a) for a in activities],
    )
