from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.integrations.stripe_client import PaymentGateway, get_payment_gateway
from app.utils.get_user import get_current_user

from app.services.payments.payment_service import (
    create_payment_intent,
    create_setup_intent,
)

from app.schemas.payments.payment_schemas import (
    PaymentIntentRequest,
    ClientSecretOut,
)

router = APIRouter(
    prefix="/api",
    tags=["Payments"],
)


# =====================================================
# PAYMENT INTENT
# =====================================================
@router.post(
    "/create-payment-intent",
    response_model=ClientSecretOut,
)
async def create_payment_intent_api(
    payload: PaymentIntentRequest,
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    intent = await create_payment_intent(
        gateway,
        amount=payload.amount,
        currency=payload.currency,
    )
    return ClientSecretOut(clientSecret=intent["client_secret"])


# =====================================================
# SETUP INTENT (save a card)
# =====================================================
@router.post(
    "/create-setup-intent",
    response_model=ClientSecretOut,
)
async def create_setup_intent_api(
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    client_secret = await create_setup_intent(db, gateway, user)
    return ClientSecretOut(clientSecret=client_secret)
