from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.utils.get_user import get_current_user
from app.utils.response import success_response, APIResponse

from app.services.orders.document_service import (
    register_document,
    list_my_documents,
)

from app.schemas.orders.order_schemas import (
    DocumentCreate,
    DocumentOut,
    DocumentListData,
)

router = APIRouter(
    prefix="/api/documents",
    tags=["Documents"],
)


@router.post(
    "/",
    response_model=APIResponse[DocumentOut],
    status_code=201,
)
async def register_document_api(
    payload: DocumentCreate,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    document = await register_document(db, user, payload)
    return success_response("Document registered", document)


@router.get(
    "/",
    response_model=APIResponse[DocumentListData],
)
async def list_my_documents_api(
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=100),
):
    data = await list_my_documents(db, user, page=page, page_size=page_size)
    return success_response("Documents retrieved successfully", data)
