# app/core/security.py

import secrets
import uuid

from passlib.context import CryptContext
from jose import jwt, JWTError
from fastapi import status

from app.core.config import (
    AUTH_JWT_SECRET,
    AUTH_JWT_ALGORITHM,
    AUTH_JWT_AUDIENCE,
    API_KEY_BCRYPT_ROUNDS,
)
from app.core.exceptions import AppException
from app.constants.error_codes import ErrorCode

API_KEY_PREFIX = "sk_"
API_KEY_LOOKUP_LENGTH = 8

# =====================================================
# API KEY HASHING
# =====================================================
key_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=API_KEY_BCRYPT_ROUNDS,
)


def generate_api_key() -> str:
    return f"{API_KEY_PREFIX}{secrets.token_hex(32)}"


def api_key_lookup_prefix(raw_key: str) -> str:
    return raw_key[:API_KEY_LOOKUP_LENGTH]


def hash_api_key(raw_key: str) -> str:
    return key_context.hash(raw_key)


def verify_api_key(raw_key: str, hashed: str) -> bool:
    return key_context.verify(raw_key, hashed)


def generate_webhook_secret() -> str:
    return f"whsec_{secrets.token_urlsafe(32)}"

# =====================================================
# HOSTED AUTH TOKENS
# =====================================================
def decode_access_token(token: str) -> dict:
    """Verify a session token issued by the hosted auth service.

    Only verification happens here; issuing and refreshing tokens is the
    auth service's job.
    """
    try:
        payload = jwt.decode(
            token,
            AUTH_JWT_SECRET,
            algorithms=[AUTH_JWT_ALGORITHM],
            audience=AUTH_JWT_AUDIENCE,
        )
    except JWTError:
        raise AppException(
            status.HTTP_401_UNAUTHORIZED,
            "Invalid or expired token",
            ErrorCode.UNAUTHORIZED,
        )

    try:
        payload["sub"] = uuid.UUID(str(payload.get("sub")))
    except ValueError:
        raise AppException(
            status.HTTP_401_UNAUTHORIZED,
            "Invalid token subject",
            ErrorCode.UNAUTHORIZED,
        )

    return payload
