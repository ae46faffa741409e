# tests/test_checkout_api.py
import uuid

from app.services.checkout import checkout_flow

EVALUATION_STEPS = [
    ("service-selection", {"service_type": "credential-evaluation"}),
    ("evaluation-options", {"evaluation_type": "course-by-course", "processing_time": "standard"}),
    ("evaluation-documents", {"evaluation_docs": ["uploads/u1/transcript.pdf"]}),
]


async def _walk(client, headers, steps):
    state = {}
    for step, data in steps:
        res = await client.post(
            "/api/checkout/advance",
            json={"state": state, "step": step, "data": data},
            headers=headers,
        )
        assert res.status_code == 200, res.text
        state = res.json()["data"]["state"]
    return state


async def _paid_state(client, gateway, headers, amount=None):
    state = await _walk(client, headers, EVALUATION_STEPS)
    res = await client.post("/api/checkout/payment", json={"state": state}, headers=headers)
    assert res.status_code == 200, res.text
    state = res.json()["data"]["state"]
    gateway.mark_paid(state["payment_intent_id"], amount=amount)
    return state


async def test_advance_returns_next_step(client):
    res = await client.post(
        "/api/checkout/advance",
        json={"step": "service-selection", "data": {"service_type": "certified-translation"}},
    )

    assert res.status_code == 200
    assert res.json()["data"]["next_step"] == "contact-info"


async def test_logged_in_translation_skips_contact_info(client, user_headers):
    res = await client.post(
        "/api/checkout/advance",
        json={"step": "service-selection", "data": {"service_type": "certified-translation"}},
        headers=user_headers,
    )

    assert res.json()["data"]["next_step"] == "translation-document-language"


async def test_advance_blocks_incomplete_step(client):
    res = await client.post(
        "/api/checkout/advance",
        json={"step": "service-selection", "data": {}},
    )

    assert res.status_code == 400
    assert res.json()["error_code"] == "CHECKOUT_STEP_INCOMPLETE"


async def test_unknown_step_is_400(client):
    res = await client.post("/api/checkout/advance", json={"step": "gift-wrap", "data": {}})

    assert res.status_code == 400
    assert res.json()["error_code"] == "CHECKOUT_STEP_INVALID"


async def test_back(client):
    state = await _walk(client, {}, EVALUATION_STEPS[:2])

    res = await client.post("/api/checkout/back", json={"state": state, "step": "evaluation-documents"})

    assert res.json()["data"]["previous_step"] == "evaluation-options"


async def test_price(client):
    state = await _walk(client, {}, EVALUATION_STEPS)

    res = await client.post("/api/checkout/price", json={"state": state})

    assert res.json()["data"] == {"amount_cents": 15000, "currency": "usd"}


async def test_payment_creates_intent_for_computed_amount(client, gateway):
    state = await _walk(client, {}, EVALUATION_STEPS)

    res = await client.post("/api/checkout/payment", json={"state": state})

    assert res.status_code == 200
    data = res.json()["data"]
    assert data["next_step"] == "payment"
    assert data["amount_cents"] == 15000
    intent = gateway.intents[data["state"]["payment_intent_id"]]
    assert intent["amount"] == 15000
    assert data["state"]["client_secret"].startswith(intent["id"])


async def test_payment_requires_documents(client):
    state = await _walk(client, {}, EVALUATION_STEPS[:2])

    res = await client.post("/api/checkout/payment", json={"state": state})

    assert res.status_code == 400


async def test_payment_provider_failure_is_502(client, gateway):
    state = await _walk(client, {}, EVALUATION_STEPS)
    gateway.fail_with = "Your card was declined."

    res = await client.post("/api/checkout/payment", json={"state": state})

    assert res.status_code == 502
    assert res.json()["error_code"] == "PAYMENT_PROVIDER_ERROR"


async def test_complete_records_pending_order(client, gateway, email_client, user_headers):
    state = await _paid_state(client, gateway, user_headers)

    res = await client.post("/api/checkout/complete", json={"state": state}, headers=user_headers)

    assert res.status_code == 201, res.text
    data = res.json()["data"]
    assert data["status"] == "pending"
    assert data["total"] == "150.00"
    assert data["next_step"] == "success"
    uuid.UUID(data["order_number"])

    orders = await client.get("/api/orders/", headers=user_headers)
    assert orders.json()["data"]["total"] == 1

    subjects = [m["subject"] for m in email_client.sent]
    assert f"Your OpenTranslate Order Confirmation #{data['order_number']}" in subjects


async def test_complete_requires_login(client, gateway, user_headers):
    state = await _paid_state(client, gateway, user_headers)

    res = await client.post("/api/checkout/complete", json={"state": state})

    assert res.status_code == 401


async def test_complete_requires_paid_intent(client, user_headers):
    state = await _walk(client, user_headers, EVALUATION_STEPS)
    res = await client.post("/api/checkout/payment", json={"state": state}, headers=user_headers)
    state = res.json()["data"]["state"]

    res = await client.post("/api/checkout/complete", json={"state": state}, headers=user_headers)

    assert res.status_code == 402
    assert res.json()["error_code"] == "PAYMENT_NOT_COMPLETED"


async def test_complete_rejects_amount_mismatch(client, gateway, user_headers):
    state = await _paid_state(client, gateway, user_headers, amount=100)

    res = await client.post("/api/checkout/complete", json={"state": state}, headers=user_headers)

    assert res.status_code == 400
    assert res.json()["error_code"] == "PAYMENT_INVALID_AMOUNT"


async def test_complete_twice_is_409(client, gateway, user_headers):
    state = await _paid_state(client, gateway, user_headers)

    first = await client.post("/api/checkout/complete", json={"state": state}, headers=user_headers)
    second = await client.post("/api/checkout/complete", json={"state": state}, headers=user_headers)

    assert first.status_code == 201
    assert second.status_code == 409
    assert second.json()["error_code"] == "PAYMENT_ALREADY_USED"


async def test_concurrent_completion_hits_unique_payment(client, gateway, user_headers, monkeypatch):
    state = await _paid_state(client, gateway, user_headers)

    async def check_passes(db, payment_intent_id):
        return None

    # both requests pass the pre-check, as two racing requests would
    monkeypatch.setattr(checkout_flow, "ensure_payment_unused", check_passes)

    first = await client.post("/api/checkout/complete", json={"state": state}, headers=user_headers)
    second = await client.post("/api/checkout/complete", json={"state": state}, headers=user_headers)

    assert first.status_code == 201
    assert second.status_code == 409
    assert second.json()["error_code"] == "PAYMENT_ALREADY_USED"


async def test_quote_payment_cannot_complete_checkout(client, gateway, user_headers):
    state = await _paid_state(client, gateway, user_headers)
    quote_intent = await gateway.create_payment_intent(15000, "usd", metadata={"quote_id": str(uuid.uuid4())})
    gateway.mark_paid(quote_intent["id"])
    state["payment_intent_id"] = quote_intent["id"]

    res = await client.post("/api/checkout/complete", json={"state": state}, headers=user_headers)

    assert res.status_code == 400
    assert res.json()["error_code"] == "PAYMENT_INTENT_MISMATCH"
