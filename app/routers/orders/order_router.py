from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.models.enums.order_status import OrderStatus
from app.models.enums.service_type import ServiceType
from app.utils.check_roles import require_role
from app.utils.get_user import get_current_user
from app.utils.response import success_response, APIResponse

from app.services.orders.order_service import (
    list_my_orders,
    get_my_order,
    list_orders,
    get_order,
    start_processing,
    complete_order,
    upload_translation,
)

from app.schemas.orders.order_schemas import (
    OrderOut,
    OrderListData,
    TranslationUpload,
)

router = APIRouter(
    prefix="/api/orders",
    tags=["Orders"],
)

admin_router = APIRouter(
    prefix="/api/admin/orders",
    tags=["Admin Orders"],
)


# =====================================================
# CUSTOMER: LIST OWN ORDERS
# =====================================================
@router.get(
    "/",
    response_model=APIResponse[OrderListData],
)
async def list_my_orders_api(
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
    status: OrderStatus | None = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
):
    data = await list_my_orders(db, user, status=status, page=page, page_size=page_size)
    return success_response("Orders retrieved successfully", data)


# =====================================================
# CUSTOMER: GET OWN ORDER
# =====================================================
@router.get(
    "/{order_id}",
    response_model=APIResponse[OrderOut],
)
async def get_my_order_api(
    order_id: UUID,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    order = await get_my_order(db, user, order_id)
    return success_response("Order retrieved successfully", order)


# =====================================================
# ADMIN: LIST ORDERS
# =====================================================
@admin_router.get(
    "/",
    response_model=APIResponse[OrderListData],
)
async def list_orders_api(
    db: AsyncSession = Depends(get_db),
    _=Depends(require_role(["admin"])),

    status: OrderStatus | None = Query(None),
    order_type: ServiceType | None = Query(None),
    search: str | None = Query(None),

    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),

    sort_by: str = Query("created_at"),
    order: str = Query("desc"),
):
    data = await list_orders(
        db,
        status=status,
        order_type=order_type,
        search=search,
        page=page,
        page_size=page_size,
        sort_by=sort_by,
        order=order,
    )
    return success_response("Orders retrieved successfully", data)


# =====================================================
# ADMIN: GET ORDER
# =====================================================
@admin_router.get(
    "/{order_id}",
    response_model=APIResponse[OrderOut],
)
async def get_order_api(
    order_id: UUID,
    db: AsyncSession = Depends(get_db),
    _=Depends(require_role(["admin"])),
):
    order = await get_order(db, order_id)
    return success_response("Order retrieved successfully", order)


# =====================================================
# ADMIN: START PROCESSING
# =====================================================
@admin_router.post(
    "/{order_id}/start-processing",
    response_model=APIResponse[OrderOut],
)
async def start_processing_api(
    order_id: UUID,
    db: AsyncSession = Depends(get_db),
    admin=Depends(require_role(["admin"])),
):
    order = await start_processing(db, order_id, admin)
    return success_response("Order moved to processing", order)


# =====================================================
# ADMIN: COMPLETE
# =====================================================
@admin_router.post(
    "/{order_id}/complete",
    response_model=APIResponse[OrderOut],
)
async def complete_order_api(
    order_id: UUID,
    db: AsyncSession = Depends(get_db),
    admin=Depends(require_role(["admin"])),
):
    order = await complete_order(db, order_id, admin)
    return success_response("Order completed", order)


# =====================================================
# ADMIN: UPLOAD TRANSLATION
# =====================================================
@admin_router.post(
    "/{order_id}/translations",
    response_model=APIResponse[OrderOut],
    status_code=201,
)
async def upload_translation_api(
    order_id: UUID,
    payload: TranslationUpload,
    db: AsyncSession = Depends(get_db),
    admin=Depends(require_role(["admin"])),
):
    order = await upload_translation(db, order_id, payload, admin)
    return success_response("Translation uploaded", order)
