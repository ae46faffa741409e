# app/schemas/partners/api_key_schemas.py

from pydantic import BaseModel, Field, AnyHttpUrl
from typing import Optional, List
from datetime import datetime
from uuid import UUID


class ApiKeyCreate(BaseModel):
    client_name: Optional[str] = Field(None, max_length=100)


class ApiKeyCreated(BaseModel):
    id: UUID
    api_key: str
    key_prefix: str
    client_name: Optional[str]
    created_at: datetime


class ApiKeyOut(BaseModel):
    id: UUID
    key_prefix: str
    client_name: Optional[str]
    created_at: datetime
    revoked: bool
    last_used_at: Optional[datetime]
    callback_url: Optional[str]
    has_callback: bool

    model_config = {"from_attributes": True}


class ApiKeyListData(BaseModel):
    total: int
    items: List[ApiKeyOut]


class CallbackConfigUpdate(BaseModel):
    callback_url: AnyHttpUrl
    webhook_secret: Optional[str] = Field(None, min_length=16, max_length=255)


class CallbackConfigOut(BaseModel):
    id: UUID
    callback_url: str
    webhook_secret: Optional[str] = None
