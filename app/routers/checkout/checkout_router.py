from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import CHECKOUT_CURRENCY
from app.core.db import get_db
from app.integrations.stripe_client import PaymentGateway, get_payment_gateway
from app.integrations.email_client import EmailClient, get_email_client
from app.utils.get_user import get_current_user, get_optional_user
from app.utils.response import success_response, APIResponse

from app.services.checkout.checkout_flow import (
    advance,
    previous_step,
    parse_step,
    initialize_payment,
    complete_checkout,
)
from app.services.checkout.pricing import calculate_amount_cents

from app.schemas.checkout.checkout_schemas import (
    CheckoutAdvanceRequest,
    CheckoutBackRequest,
    CheckoutStateRequest,
    CheckoutStepOut,
    CheckoutBackOut,
    CheckoutPriceOut,
    CheckoutPaymentOut,
    CheckoutCompleteOut,
)

router = APIRouter(
    prefix="/api/checkout",
    tags=["Checkout"],
)


# =====================================================
# SUBMIT STEP
# =====================================================
@router.post(
    "/advance",
    response_model=APIResponse[CheckoutStepOut],
)
async def advance_api(
    payload: CheckoutAdvanceRequest,
    user=Depends(get_optional_user),
):
    state, next_step = advance(
        payload.state,
        parse_step(payload.step),
        payload.data,
        logged_in=user is not None,
    )
    return success_response(
        "Checkout step accepted",
        CheckoutStepOut(state=state, next_step=next_step),
    )


# =====================================================
# BACK
# =====================================================
@router.post(
    "/back",
    response_model=APIResponse[CheckoutBackOut],
)
async def back_api(
    payload: CheckoutBackRequest,
    user=Depends(get_optional_user),
):
    step = previous_step(
        payload.state,
        parse_step(payload.step),
        logged_in=user is not None,
    )
    return success_response("Previous checkout step", CheckoutBackOut(previous_step=step))


# =====================================================
# PRICE
# =====================================================
@router.post(
    "/price",
    response_model=APIResponse[CheckoutPriceOut],
)
async def price_api(payload: CheckoutStateRequest):
    amount_cents = calculate_amount_cents(payload.state)
    return success_response(
        "Price calculated",
        CheckoutPriceOut(amount_cents=amount_cents, currency=CHECKOUT_CURRENCY),
    )


# =====================================================
# INITIALIZE PAYMENT
# =====================================================
@router.post(
    "/payment",
    response_model=APIResponse[CheckoutPaymentOut],
)
async def initialize_payment_api(
    payload: CheckoutStateRequest,
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    state, next_step, amount_cents = await initialize_payment(payload.state, gateway)
    return success_response(
        "Payment initialized",
        CheckoutPaymentOut(
            state=state,
            next_step=next_step,
            amount_cents=amount_cents,
            currency=CHECKOUT_CURRENCY,
        ),
    )


# =====================================================
# COMPLETE (after payment confirmation)
# =====================================================
@router.post(
    "/complete",
    response_model=APIResponse[CheckoutCompleteOut],
    status_code=201,
)
async def complete_checkout_api(
    payload: CheckoutStateRequest,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    email_client: EmailClient = Depends(get_email_client),
):
    order = await complete_checkout(db, payload.state, user, gateway, email_client)
    return success_response("Order placed successfully", order)
