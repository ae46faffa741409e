# app/schemas/quotes/quote_schemas.py

from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from app.models.enums.order_status import OrderStatus
from app.models.enums.quote_status import QuoteStatus


class QuoteCreate(BaseModel):
    full_name: Optional[str] = Field(None, max_length=255)
    email: Optional[EmailStr] = None
    document_type: str = Field(min_length=1, max_length=50)
    source_language: str = Field(min_length=1, max_length=50)
    target_language: str = Field(min_length=1, max_length=50)
    document_paths: List[str] = Field(min_length=1)
    notes: Optional[str] = None


class QuotePriceUpdate(BaseModel):
    price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)


class QuoteOut(BaseModel):
    id: UUID
    user_id: Optional[UUID]
    email: str
    full_name: Optional[str]
    document_type: Optional[str]
    source_language: Optional[str]
    target_language: Optional[str]
    document_paths: Optional[List[str]]
    notes: Optional[str]
    price: Optional[Decimal]
    status: QuoteStatus
    created_at: datetime
    updated_at: Optional[datetime]

    model_config = {"from_attributes": True}


class QuoteListData(BaseModel):
    total: int
    items: List[QuoteOut]


class QuoteConvertOut(BaseModel):
    order_id: UUID
    order_number: str
    status: OrderStatus
    quote_status: QuoteStatus
    warning: Optional[str] = None


class QuotePaymentOut(BaseModel):
    client_secret: str
    payment_intent_id: str
    amount_cents: int


class QuoteConvertRequest(BaseModel):
    payment_intent_id: str = Field(min_length=1)
