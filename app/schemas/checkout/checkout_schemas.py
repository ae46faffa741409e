# app/schemas/checkout/checkout_schemas.py

from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from app.models.enums.service_type import ServiceType


class CheckoutStep(str, Enum):
    service_selection = "service-selection"
    contact_info = "contact-info"
    evaluation_options = "evaluation-options"
    evaluation_documents = "evaluation-documents"
    translation_document_language = "translation-document-language"
    translation_service = "translation-service"
    translation_delivery = "translation-delivery"
    payment = "payment"
    success = "success"


# =========================
# AGGREGATED ORDER STATE
# =========================
class ContactInfo(BaseModel):
    full_name: Optional[str] = None
    email: Optional[str] = None


class EvaluationDetails(BaseModel):
    evaluation_type: Optional[str] = None
    processing_time: Optional[str] = None
    evaluation_docs: List[str] = Field(default_factory=list)


class DocumentLanguage(BaseModel):
    document_type: Optional[str] = None
    source_language: Optional[str] = None
    target_language: Optional[str] = None
    files: List[str] = Field(default_factory=list)


class ServiceOptions(BaseModel):
    service_id: Optional[str] = None


class DeliveryOptions(BaseModel):
    delivery_id: Optional[str] = None


class TranslationDetails(BaseModel):
    document_language: Optional[DocumentLanguage] = None
    service_options: Optional[ServiceOptions] = None
    delivery_options: Optional[DeliveryOptions] = None


class CheckoutState(BaseModel):
    """Partial order carried by the client between checkout steps."""

    service_type: Optional[ServiceType] = None
    contact_info: Optional[ContactInfo] = None
    evaluation_details: Optional[EvaluationDetails] = None
    translation_details: Optional[TranslationDetails] = None
    payment_intent_id: Optional[str] = None
    client_secret: Optional[str] = None


# =========================
# REQUESTS
# =========================
class CheckoutAdvanceRequest(BaseModel):
    state: CheckoutState = Field(default_factory=CheckoutState)
    # parsed by the service so an unknown step answers 400
    step: str
    data: Dict[str, Any] = Field(default_factory=dict)


class CheckoutBackRequest(BaseModel):
    state: CheckoutState = Field(default_factory=CheckoutState)
    step: str


class CheckoutStateRequest(BaseModel):
    state: CheckoutState


# =========================
# RESPONSES
# =========================
class CheckoutStepOut(BaseModel):
    state: CheckoutState
    next_step: CheckoutStep


class CheckoutBackOut(BaseModel):
    previous_step: Optional[CheckoutStep]


class CheckoutPriceOut(BaseModel):
    amount_cents: int
    currency: str


class CheckoutPaymentOut(CheckoutStepOut):
    amount_cents: int
    currency: str


class CheckoutCompleteOut(BaseModel):
    order_id: str
    order_number: str
    status: str
    total: str
    next_step: CheckoutStep
