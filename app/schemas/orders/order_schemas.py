# app/schemas/orders/order_schemas.py

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from app.models.enums.order_status import OrderStatus
from app.models.enums.service_type import ServiceType


# =========================
# TRANSLATIONS
# =========================
class TranslationUpload(BaseModel):
    file_name: str = Field(min_length=1, max_length=255)
    file_path: str = Field(min_length=1, max_length=1024)


class TranslationOut(BaseModel):
    id: UUID
    order_id: UUID
    file_name: str
    file_path: str
    uploaded_by_id: Optional[UUID]
    created_at: datetime

    model_config = {"from_attributes": True}


# =========================
# ORDERS
# =========================
class OrderListItem(BaseModel):
    id: UUID
    order_number: str
    user_id: Optional[UUID]
    email: Optional[str]
    full_name: Optional[str]
    order_type: ServiceType
    status: OrderStatus
    total: Decimal
    created_at: datetime

    model_config = {"from_attributes": True}


class OrderOut(OrderListItem):
    evaluation_type: Optional[str]
    processing_time: Optional[str]
    document_type: Optional[str]
    source_language: Optional[str]
    target_language: Optional[str]
    service_level: Optional[str]
    delivery_method: Optional[str]
    document_paths: Optional[List[str]]
    subtotal: Decimal
    tax: Decimal
    quote_id: Optional[UUID]
    document_id: Optional[UUID]
    payment_intent_id: Optional[str]
    updated_at: Optional[datetime]
    translations: List[TranslationOut] = []


class OrderListData(BaseModel):
    total: int
    items: List[OrderListItem]


# =========================
# DOCUMENTS
# =========================
class DocumentCreate(BaseModel):
    file_name: str = Field(min_length=1, max_length=255)
    file_path: str = Field(min_length=1, max_length=1024)
    file_type: Optional[str] = Field(None, max_length=100)
    file_size: Optional[int] = Field(None, ge=0)
    order_id: Optional[UUID] = None


class DocumentOut(BaseModel):
    id: UUID
    user_id: Optional[UUID]
    order_id: Optional[UUID]
    file_name: str
    file_path: str
    file_type: Optional[str]
    file_size: Optional[int]
    created_at: datetime

    model_config = {"from_attributes": True}


class DocumentListData(BaseModel):
    total: int
    items: List[DocumentOut]
