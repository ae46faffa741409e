# app/integrations/callback_transport.py

from typing import Optional

import httpx


def get_callback_transport() -> Optional[httpx.AsyncBaseTransport]:
    """Transport for partner callbacks; ``None`` means the default network transport."""
    return None
