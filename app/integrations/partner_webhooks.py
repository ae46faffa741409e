# app/integrations/partner_webhooks.py
"""Signed result callbacks to partner endpoints.

Partners verify ``X-Webhook-Signature`` by recomputing HMAC-SHA256 over the
exact request body with their webhook secret.
"""

import hashlib
import hmac
import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from app.core.exceptions import AppException
from app.constants.error_codes import ErrorCode
from app.models.enums.quote_status import ApiQuoteStatus
from app.utils.logger import get_logger

logger = get_logger(__name__)

SIGNATURE_HEADER = "X-Webhook-Signature"
CALLBACK_TIMEOUT_SECONDS = 10.0


@dataclass
class CallbackResult:
    sent: bool
    message: str
    partner_status: Optional[int] = None
    partner_response: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.sent and self.partner_status is not None and self.partner_status < 400


def sign_payload(secret: str, raw_body: bytes) -> str:
    digest = hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).hexdigest()
    return f"sha256={digest}"


def validate_callback_payload(payload: Dict[str, Any]) -> None:
    missing = [
        field
        for field in ("quote_request_id", "applicant_name", "status")
        if not payload.get(field)
    ]
    if missing:
        raise AppException(
            400,
            "Missing required fields in payload: quote_request_id, applicant_name, or status",
            ErrorCode.CALLBACK_INVALID_PAYLOAD,
            details={"missing": missing},
        )

    status = payload["status"]
    if status == ApiQuoteStatus.completed.value and not payload.get("us_equivalent"):
        raise AppException(
            400,
            "Missing us_equivalent field for completed status",
            ErrorCode.CALLBACK_INVALID_PAYLOAD,
        )
    if status == ApiQuoteStatus.rejected.value and not payload.get("rejection_reason"):
        raise AppException(
            400,
            "Missing rejection_reason field for rejected status",
            ErrorCode.CALLBACK_INVALID_PAYLOAD,
        )


async def send_partner_callback(
    url: str,
    secret: str,
    payload: Dict[str, Any],
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> CallbackResult:
    """POST the signed payload. Only payload validation raises; delivery problems are reported."""
    validate_callback_payload(payload)

    raw_body = json.dumps(payload).encode("utf-8")
    headers = {
        "Content-Type": "application/json",
        SIGNATURE_HEADER: sign_payload(secret, raw_body),
    }

    logger.info(
        "Sending partner callback",
        extra={"callback_url": url, "quote_request_id": payload["quote_request_id"]},
    )

    try:
        async with httpx.AsyncClient(
            timeout=CALLBACK_TIMEOUT_SECONDS, transport=transport
        ) as client:
            response = await client.post(url, content=raw_body, headers=headers)
    except httpx.HTTPError as e:
        logger.error(
            "Partner callback not delivered",
            extra={"callback_url": url, "error": str(e)},
        )
        return CallbackResult(sent=False, message=f"Callback could not be sent: {e}")

    if response.is_error:
        logger.warning(
            "Partner callback rejected",
            extra={
                "callback_url": url,
                "partner_status": response.status_code,
                "partner_response": response.text,
            },
        )
        return CallbackResult(
            sent=True,
            message="Callback sent, but partner endpoint responded with an error.",
            partner_status=response.status_code,
            partner_response=response.text,
        )

    logger.info(
        "Partner callback delivered",
        extra={"callback_url": url, "partner_status": response.status_code},
    )
    return CallbackResult(
        sent=True,
        message="Callback sent successfully.",
        partner_status=response.status_code,
    )
