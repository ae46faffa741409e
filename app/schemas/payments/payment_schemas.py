# app/schemas/payments/payment_schemas.py

from typing import Any
from pydantic import BaseModel


class PaymentIntentRequest(BaseModel):
    # loose types: a bad amount or currency is answered with 400, not 422
    amount: Any = None
    currency: Any = None


class ClientSecretOut(BaseModel):
    clientSecret: str
