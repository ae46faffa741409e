# tests/conftest.py
import os
import uuid
from datetime import datetime, timedelta, timezone

# configuration is read at import time
os.environ.setdefault("APP_ENV", "development")
os.environ.setdefault("DB_TYPE", "sqlite")
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./pytest.db"
os.environ.setdefault("AUTH_JWT_SECRET", "test-secret-for-hosted-auth-tokens")
os.environ["API_KEY_BCRYPT_ROUNDS"] = "4"
os.environ.pop("RESEND_API_KEY", None)
os.environ.pop("ADMIN_NOTIFICATION_EMAIL", None)

import httpx
import pytest
from jose import jwt
from sqlalchemy import Update
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from main import app as fastapi_app
from app.core.config import AUTH_JWT_SECRET, AUTH_JWT_AUDIENCE
from app.core.db import Base, engine, AsyncSessionLocal
from app.core.exceptions import UpstreamServiceError
from app.integrations.stripe_client import get_payment_gateway
from app.integrations.email_client import get_email_client
from app.integrations.callback_transport import get_callback_transport


# =====================================================
# FAKES
# =====================================================
class FakeGateway:
    """Stands in for the payment processor; intents live in memory."""

    def __init__(self):
        self.intents = {}
        self.customers = []
        self.fail_with = None

    def _maybe_fail(self):
        if self.fail_with:
            raise UpstreamServiceError("stripe", self.fail_with, status_code=402)

    async def create_payment_intent(self, amount, currency, metadata=None):
        self._maybe_fail()
        intent_id = f"pi_{uuid.uuid4().hex[:16]}"
        self.intents[intent_id] = {
            "id": intent_id,
            "status": "requires_payment_method",
            "amount": amount,
            "currency": currency,
            "metadata": metadata or {},
        }
        return {
            "id": intent_id,
            "client_secret": f"{intent_id}_secret_test",
            "amount": amount,
            "currency": currency,
        }

    async def retrieve_payment_intent(self, payment_intent_id):
        self._maybe_fail()
        intent = self.intents.get(payment_intent_id)
        if intent is None:
            raise UpstreamServiceError("stripe", "No such payment_intent", status_code=404)
        return {k: intent[k] for k in ("id", "status", "amount", "currency", "metadata")}

    async def create_customer(self, email, name, metadata=None):
        self._maybe_fail()
        customer_id = f"cus_{len(self.customers) + 1}"
        self.customers.append({"id": customer_id, "email": email, "name": name})
        return customer_id

    async def create_setup_intent(self, customer_id, metadata=None):
        self._maybe_fail()
        return {"id": "seti_1", "client_secret": f"seti_1_secret_{customer_id}"}

    def mark_paid(self, payment_intent_id, amount=None):
        intent = self.intents[payment_intent_id]
        intent["status"] = "succeeded"
        if amount is not None:
            intent["amount"] = amount


class FakeEmailClient:
    configured = True

    def __init__(self):
        self.sent = []

    async def send(self, *, sender, to, subject, html):
        self.sent.append({"from": sender, "to": to, "subject": subject, "html": html})
        return f"msg_{len(self.sent)}"


class CallbackRecorder:
    """httpx mock transport that records partner callbacks."""

    def __init__(self, status_code=200, body="ok"):
        self.requests = []
        self.status_code = status_code
        self.body = body
        self.transport = httpx.MockTransport(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, text=self.body)


# =====================================================
# APP + DB
# =====================================================
@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def email_client():
    return FakeEmailClient()


@pytest.fixture
def callbacks():
    return CallbackRecorder()


@pytest.fixture
async def app(gateway, email_client, callbacks):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    fastapi_app.dependency_overrides[get_payment_gateway] = lambda: gateway
    fastapi_app.dependency_overrides[get_email_client] = lambda: email_client
    fastapi_app.dependency_overrides[get_callback_transport] = lambda: callbacks.transport

    yield fastapi_app

    fastapi_app.dependency_overrides.clear()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
async def db(app):
    async with AsyncSessionLocal() as session:
        yield session


@pytest.fixture
def fail_updates_on(monkeypatch):
    """Make bulk UPDATE statements against one table raise a database error."""

    def install(table_name):
        real_execute = AsyncSession.execute

        async def execute(self, statement, *args, **kwargs):
            if isinstance(statement, Update) and statement.table.name == table_name:
                raise OperationalError(str(statement), {}, Exception("database is locked"))
            return await real_execute(self, statement, *args, **kwargs)

        monkeypatch.setattr(AsyncSession, "execute", execute)

    return install


# =====================================================
# AUTH
# =====================================================
def make_token(user_id=None, email=None, role="user", **user_metadata) -> str:
    user_id = user_id or uuid.uuid4()
    claims = {
        "sub": str(user_id),
        "aud": AUTH_JWT_AUDIENCE,
        "email": email or f"{str(user_id)[:8]}@example.com",
        "exp": datetime.now(timezone.utc) + timedelta(hours=1),
        "app_metadata": {"role": role},
        "user_metadata": user_metadata,
    }
    return jwt.encode(claims, AUTH_JWT_SECRET, algorithm="HS256")


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_headers():
    return bearer(make_token(email="customer@example.com", first_name="Ada", last_name="Lovelace"))


@pytest.fixture
def admin_headers():
    return bearer(make_token(email="admin@opentranslate.co", role="admin"))


@pytest.fixture
def partner_headers():
    return bearer(make_token(email="ops@partner.example", company_name="Partner Inc"))


@pytest.fixture
async def partner_key(client, partner_headers):
    """Raw API key issued to the partner account."""
    res = await client.post(
        "/api/api-keys/",
        json={"client_name": "Acme Background"},
        headers=partner_headers,
    )
    assert res.status_code == 201, res.text
    return res.json()["data"]
