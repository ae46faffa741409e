# app/services/orders/order_service.py

from uuid import UUID

from sqlalchemy import select, func, asc, desc, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.orders.order_models import Order, Translation
from app.models.enums.order_status import OrderStatus
from app.models.users.user_models import User
from app.schemas.orders.order_schemas import (
    OrderOut,
    OrderListItem,
    OrderListData,
    TranslationUpload,
)
from app.utils.activity_helpers import emit_user_activity
from app.constants.activity_codes import ActivityCode
from app.core.exceptions import AppException
from app.constants.error_codes import ErrorCode
from app.utils.logger import get_logger

logger = get_logger(__name__)


# =====================================================
# HELPERS
# =====================================================
async def _load_order(db: AsyncSession, order_id: UUID, *, owner_id: UUID | None = None) -> Order:
    stmt = (
        select(Order)
        .options(selectinload(Order.translations))
        .where(Order.id == order_id)
        .execution_options(populate_existing=True)
    )
    if owner_id is not None:
        stmt = stmt.where(Order.user_id == owner_id)

    order = (await db.execute(stmt)).scalar_one_or_none()
    if not order:
        raise AppException(404, "Order not found", ErrorCode.ORDER_NOT_FOUND)
    return order


async def _list(
    db: AsyncSession,
    base_query,
    *,
    page: int,
    page_size: int,
    sort_by: str,
    order: str,
) -> OrderListData:
    total = await db.scalar(
        select(func.count()).select_from(base_query.subquery())
    )

    sort_map = {
        "created_at": Order.created_at,
        "total": Order.total,
        "status": Order.status,
    }
    sort_col = sort_map.get(sort_by, Order.created_at)

    stmt = (
        base_query
        .order_by(asc(sort_col) if order == "asc" else desc(sort_col))
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    orders = (await db.execute(stmt)).scalars().all()

    return OrderListData(
        total=total or 0,
        items=[OrderListItem.model_validate(o) for o in orders],
    )


# =====================================================
# CUSTOMER
# =====================================================
async def list_my_orders(
    db: AsyncSession,
    user: User,
    *,
    status: OrderStatus | None = None,
    page: int = 1,
    page_size: int = 20,
) -> OrderListData:
    base_query = select(Order).where(Order.user_id == user.id)
    if status:
        base_query = base_query.where(Order.status == status)

    return await _list(
        db, base_query, page=page, page_size=page_size, sort_by="created_at", order="desc"
    )


async def get_my_order(db: AsyncSession, user: User, order_id: UUID) -> OrderOut:
    order = await _load_order(db, order_id, owner_id=user.id)
    return OrderOut.model_validate(order)


# =====================================================
# ADMIN
# =====================================================
async def list_orders(
    db: AsyncSession,
    *,
    status: OrderStatus | None = None,
    order_type: str | None = None,
    search: str | None = None,
    page: int = 1,
    page_size: int = 20,
    sort_by: str = "created_at",
    order: str = "desc",
) -> OrderListData:
    logger.info(
        "List orders",
        extra={"status": status, "order_type": order_type, "page": page, "page_size": page_size},
    )

    base_query = select(Order)

    if status:
        base_query = base_query.where(Order.status == status)

    if order_type:
        base_query = base_query.where(Order.order_type == order_type)

    if search:
        pattern = f"%{search}%"
        base_query = base_query.where(
            or_(
                Order.order_number.ilike(pattern),
                Order.email.ilike(pattern),
                Order.full_name.ilike(pattern),
            )
        )

    return await _list(
        db, base_query, page=page, page_size=page_size, sort_by=sort_by, order=order
    )


async def get_order(db: AsyncSession, order_id: UUID) -> OrderOut:
    order = await _load_order(db, order_id)
    return OrderOut.model_validate(order)


async def start_processing(db: AsyncSession, order_id: UUID, admin: User) -> OrderOut:
    order = await _load_order(db, order_id)

    if order.status != OrderStatus.pending:
        raise AppException(
            400,
            f"Only pending orders can be moved to processing (current: {order.status.value})",
            ErrorCode.ORDER_INVALID_STATE,
        )

    order.status = OrderStatus.processing

    await emit_user_activity(
        db,
        admin,
        ActivityCode.START_ORDER_PROCESSING,
        target_name=order.order_number,
    )
    await db.commit()

    logger.info("Order processing started", extra={"order_id": str(order_id)})
    return OrderOut.model_validate(await _load_order(db, order_id))


async def complete_order(db: AsyncSession, order_id: UUID, admin: User) -> OrderOut:
    order = await _load_order(db, order_id)

    if order.status == OrderStatus.cancelled:
        raise AppException(
            400,
            "Cancelled orders cannot be completed",
            ErrorCode.ORDER_INVALID_STATE,
        )

    if order.status != OrderStatus.completed:
        order.status = OrderStatus.completed
        await emit_user_activity(
            db,
            admin,
            ActivityCode.COMPLETE_ORDER,
            target_name=order.order_number,
        )
        await db.commit()
        logger.info("Order completed", extra={"order_id": str(order_id)})

    return OrderOut.model_validate(await _load_order(db, order_id))


async def upload_translation(
    db: AsyncSession,
    order_id: UUID,
    payload: TranslationUpload,
    admin: User,
) -> OrderOut:
    """Record a delivered translation file; the order is completed with it."""
    order = await _load_order(db, order_id)

    if order.status == OrderStatus.cancelled:
        raise AppException(
            400,
            "Cannot upload a translation for a cancelled order",
            ErrorCode.ORDER_INVALID_STATE,
        )

    db.add(
        Translation(
            order_id=order.id,
            file_name=payload.file_name,
            file_path=payload.file_path,
            uploaded_by_id=admin.id,
        )
    )

    await emit_user_activity(
        db,
        admin,
        ActivityCode.UPLOAD_TRANSLATION,
        file_name=payload.file_name,
        target_name=order.order_number,
    )

    if order.status != OrderStatus.completed:
        order.status = OrderStatus.completed
        await emit_user_activity(
            db,
            admin,
            ActivityCode.COMPLETE_ORDER,
            target_name=order.order_number,
        )

    await db.commit()

    logger.info(
        "Translation uploaded",
        extra={"order_id": str(order_id), "file_path": payload.file_path},
    )
    return OrderOut.model_validate(await _load_order(db, order_id))
