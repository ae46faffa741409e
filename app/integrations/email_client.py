# app/integrations/email_client.py

from typing import List

import resend
from starlette.concurrency import run_in_threadpool

from app.core.config import RESEND_API_KEY
from app.utils.logger import get_logger

logger = get_logger(__name__)


class EmailClient:
    """Transactional email over the Resend SDK."""

    def __init__(self, api_key: str | None):
        self.api_key = api_key

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _send_sync(self, params: dict) -> dict:
        resend.api_key = self.api_key
        return resend.Emails.send(params)

    async def send(self, *, sender: str, to: List[str], subject: str, html: str) -> str | None:
        """Send one message; returns the provider message id, or None when email is disabled."""
        if not self.configured:
            logger.warning("RESEND_API_KEY not set, email skipped", extra={"subject": subject})
            return None

        result = await run_in_threadpool(
            self._send_sync,
            {"from": sender, "to": to, "subject": subject, "html": html},
        )
        message_id = result.get("id") if isinstance(result, dict) else None
        logger.info("Email sent", extra={"subject": subject, "message_id": message_id})
        return message_id


def get_email_client() -> EmailClient:
    return EmailClient(RESEND_API_KEY)
