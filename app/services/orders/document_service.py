# app/services/orders/document_service.py

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.orders.order_models import Document, Order
from app.models.users.user_models import User
from app.schemas.orders.order_schemas import DocumentCreate, DocumentOut, DocumentListData
from app.core.exceptions import AppException
from app.constants.error_codes import ErrorCode
from app.utils.logger import get_logger

logger = get_logger(__name__)


async def register_document(
    db: AsyncSession,
    user: User,
    payload: DocumentCreate,
) -> DocumentOut:
    """Record metadata for a file the client already put in object storage."""
    if payload.order_id is not None:
        owns_order = await db.scalar(
            select(Order.id).where(Order.id == payload.order_id, Order.user_id == user.id)
        )
        if not owns_order:
            raise AppException(404, "Order not found", ErrorCode.ORDER_NOT_FOUND)

    document = Document(
        user_id=user.id,
        order_id=payload.order_id,
        file_name=payload.file_name,
        file_path=payload.file_path,
        file_type=payload.file_type,
        file_size=payload.file_size,
    )
    db.add(document)
    await db.commit()
    await db.refresh(document)

    logger.info(
        "Document registered",
        extra={"document_id": str(document.id), "file_path": document.file_path},
    )
    return DocumentOut.model_validate(document)


async def list_my_documents(
    db: AsyncSession,
    user: User,
    *,
    page: int = 1,
    page_size: int = 50,
) -> DocumentListData:
    base_query = select(Document).where(Document.user_id == user.id)

    total = await db.scalar(
        select(func.count()).select_from(base_query.subquery())
    )
    documents = (
        await db.execute(
            base_query
            .order_by(Document.created_at.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
    ).scalars().all()

    return DocumentListData(
        total=total or 0,
        items=[DocumentOut.model_validate(d) for d in documents],
    )


async def find_document_by_path(db: AsyncSession, file_path: str) -> Document | None:
    return await db.scalar(select(Document).where(Document.file_path == file_path))
