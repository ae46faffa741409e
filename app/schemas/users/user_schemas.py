from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List
from datetime import datetime
from uuid import UUID


# =========================
# UPDATE
# =========================
class BillingDetailsUpdate(BaseModel):
    company_name: Optional[str] = Field(None, max_length=255)
    billing_email: Optional[EmailStr] = None


# =========================
# LIST FILTERS
# =========================
class UserListFilters(BaseModel):
    search: Optional[str] = None
    role: Optional[str] = None
    is_active: Optional[bool] = None
    sort_by: str = "created_at"
    sort_order: str = "desc"
    limit: int = 50
    offset: int = 0


# =========================
# RESPONSE SCHEMAS
# =========================
class UserListItemSchema(BaseModel):
    id: UUID
    email: str
    full_name: str
    company_name: Optional[str]
    role: str
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class UserDetailSchema(UserListItemSchema):
    first_name: Optional[str]
    last_name: Optional[str]
    billing_email: Optional[str]
    stripe_customer_id: Optional[str]
    updated_at: Optional[datetime]


class UserListData(BaseModel):
    total: int
    items: List[UserListItemSchema]
