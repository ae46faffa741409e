# app/schemas/partners/api_quote_schemas.py

from pydantic import BaseModel, Field, model_validator
from typing import Optional, List
from datetime import datetime
from uuid import UUID

from app.models.enums.quote_status import ApiQuoteStatus


# =========================
# PARTNER CONTRACT
# =========================
class ApiQuoteRequestCreate(BaseModel):
    # presence of required fields is checked by the service so it can answer 400
    applicant_name: Optional[str] = None
    country_of_education: Optional[str] = None
    college_attended: Optional[str] = None
    degree_received: Optional[str] = None
    year_of_graduation: Optional[int] = None
    notes: Optional[str] = None


class ApiQuoteRequestCreated(BaseModel):
    message: str
    quote_request_id: UUID


class ApiQuoteRequestStatus(BaseModel):
    quote_request_id: UUID
    status: ApiQuoteStatus
    applicant_name: Optional[str]
    us_equivalent: Optional[str]
    unable_to_provide: bool
    rejection_reason: Optional[str]
    created_at: datetime
    updated_at: Optional[datetime]


# =========================
# ADMIN
# =========================
class ApiQuoteRequestOut(BaseModel):
    id: UUID
    api_key_id: Optional[UUID]
    user_id: Optional[UUID]
    applicant_name: Optional[str]
    country_of_education: str
    college_attended: Optional[str]
    degree_received: str
    year_of_graduation: Optional[int]
    notes: Optional[str]
    status: ApiQuoteStatus
    us_equivalent: Optional[str]
    unable_to_provide: bool
    rejection_reason: Optional[str]
    invoice_id: Optional[str]
    created_at: datetime
    updated_at: Optional[datetime]

    model_config = {"from_attributes": True}


class ApiQuoteRequestListData(BaseModel):
    total: int
    items: List[ApiQuoteRequestOut]


class ApiQuoteResultSubmit(BaseModel):
    us_equivalent: Optional[str] = Field(None, min_length=1)
    unable_to_provide: bool = False
    rejection_reason: Optional[str] = Field(None, min_length=1)

    @model_validator(mode="after")
    def check_outcome(self):
        if self.unable_to_provide:
            if not self.rejection_reason:
                raise ValueError("rejection_reason is required when unable_to_provide is set")
        elif not self.us_equivalent:
            raise ValueError("us_equivalent is required unless unable_to_provide is set")
        return self


class CallbackOutcome(BaseModel):
    attempted: bool
    sent: bool = False
    delivered: bool = False
    message: str
    partner_status: Optional[int] = None
    partner_response: Optional[str] = None


class ApiQuoteResultOut(BaseModel):
    quote_request: ApiQuoteRequestOut
    callback: CallbackOutcome
