# tests/test_quotes_api.py
import uuid

from app.models.enums.quote_status import QuoteStatus
from app.models.orders.order_models import Order
from app.models.quotes.quote_models import Quote

QUOTE = {
    "full_name": "Ana Ruiz",
    "document_type": "birth-certificate",
    "source_language": "es",
    "target_language": "en",
    "document_paths": ["uploads/ana/acta.pdf"],
    "notes": "Two pages",
}


async def _register_document(client, headers, path="uploads/ana/acta.pdf"):
    res = await client.post(
        "/api/documents/",
        json={"file_name": path.rsplit("/", 1)[-1], "file_path": path, "file_type": "application/pdf", "file_size": 2048},
        headers=headers,
    )
    assert res.status_code == 201, res.text
    return res.json()["data"]


async def _priced_quote(client, user_headers, admin_headers, price="80.00"):
    quote = (await client.post("/api/quotes/", json=QUOTE, headers=user_headers)).json()["data"]
    priced = await client.post(
        f"/api/admin/quotes/{quote['id']}/price",
        json={"price": price},
        headers=admin_headers,
    )
    assert priced.status_code == 200, priced.text
    return priced.json()["data"]


async def test_request_quote(client, user_headers):
    res = await client.post("/api/quotes/", json=QUOTE, headers=user_headers)

    assert res.status_code == 201
    data = res.json()["data"]
    assert data["status"] == "pending"
    assert data["email"] == "customer@example.com"
    assert data["price"] is None


async def test_request_quote_needs_documents(client, user_headers):
    res = await client.post("/api/quotes/", json=dict(QUOTE, document_paths=[]), headers=user_headers)

    assert res.status_code == 422


async def test_customers_only_see_own_quotes(client, user_headers):
    from tests.conftest import bearer, make_token

    quote = (await client.post("/api/quotes/", json=QUOTE, headers=user_headers)).json()["data"]

    other = bearer(make_token(email="someone@example.com"))
    res = await client.get(f"/api/quotes/{quote['id']}", headers=other)

    assert res.status_code == 404
    assert (await client.get("/api/quotes/", headers=other)).json()["data"]["total"] == 0


async def test_review_then_price_sends_email(client, user_headers, admin_headers, email_client):
    quote = (await client.post("/api/quotes/", json=QUOTE, headers=user_headers)).json()["data"]

    reviewed = await client.post(f"/api/admin/quotes/{quote['id']}/review", headers=admin_headers)
    assert reviewed.json()["data"]["status"] == "reviewed"

    priced = await client.post(
        f"/api/admin/quotes/{quote['id']}/price",
        json={"price": "120.50"},
        headers=admin_headers,
    )
    assert priced.status_code == 200
    assert priced.json()["data"]["status"] == "quoted"
    assert priced.json()["data"]["price"] == "120.50"

    assert email_client.sent[-1]["to"] == ["customer@example.com"]
    assert email_client.sent[-1]["subject"] == f"Your Translation Quote #{quote['id'][:8]} is Ready!"


async def test_price_must_be_positive(client, user_headers, admin_headers):
    quote = (await client.post("/api/quotes/", json=QUOTE, headers=user_headers)).json()["data"]

    res = await client.post(
        f"/api/admin/quotes/{quote['id']}/price",
        json={"price": "0"},
        headers=admin_headers,
    )

    assert res.status_code == 422


async def test_rejected_quote_cannot_be_priced(client, user_headers, admin_headers):
    quote = (await client.post("/api/quotes/", json=QUOTE, headers=user_headers)).json()["data"]
    await client.post(f"/api/admin/quotes/{quote['id']}/reject", headers=admin_headers)

    res = await client.post(
        f"/api/admin/quotes/{quote['id']}/price",
        json={"price": "50"},
        headers=admin_headers,
    )

    assert res.status_code == 400
    assert res.json()["error_code"] == "QUOTE_INVALID_STATE"


async def test_pay_requires_quoted_status(client, user_headers):
    quote = (await client.post("/api/quotes/", json=QUOTE, headers=user_headers)).json()["data"]

    res = await client.post(f"/api/quotes/{quote['id']}/pay", headers=user_headers)

    assert res.status_code == 400


async def test_pay_creates_intent_for_quote_price(client, gateway, user_headers, admin_headers):
    quote = await _priced_quote(client, user_headers, admin_headers)

    res = await client.post(f"/api/quotes/{quote['id']}/pay", headers=user_headers)

    assert res.status_code == 200
    data = res.json()["data"]
    assert data["amount_cents"] == 8000
    assert gateway.intents[data["payment_intent_id"]]["metadata"] == {"quote_id": quote["id"]}


async def test_convert_creates_processing_order(client, gateway, user_headers, admin_headers):
    document = await _register_document(client, user_headers)
    quote = await _priced_quote(client, user_headers, admin_headers)
    payment = (await client.post(f"/api/quotes/{quote['id']}/pay", headers=user_headers)).json()["data"]
    gateway.mark_paid(payment["payment_intent_id"])

    res = await client.post(
        f"/api/quotes/{quote['id']}/convert",
        json={"payment_intent_id": payment["payment_intent_id"]},
        headers=user_headers,
    )

    assert res.status_code == 201, res.text
    data = res.json()["data"]
    assert data["status"] == "processing"
    assert data["quote_status"] == "converted_to_order"
    assert data["warning"] is None
    uuid.UUID(data["order_number"])

    order = (await client.get(f"/api/orders/{data['order_id']}", headers=user_headers)).json()["data"]
    assert order["order_type"] == "certified-translation"
    assert order["service_level"] == "standard"
    assert order["delivery_method"] == "digital"
    assert order["total"] == "80.00"
    assert order["tax"] == "0.00"
    assert order["quote_id"] == quote["id"]
    assert order["document_id"] == document["id"]

    again = await client.get(f"/api/quotes/{quote['id']}", headers=user_headers)
    assert again.json()["data"]["status"] == "converted_to_order"


async def test_convert_requires_successful_payment(client, user_headers, admin_headers):
    await _register_document(client, user_headers)
    quote = await _priced_quote(client, user_headers, admin_headers)
    payment = (await client.post(f"/api/quotes/{quote['id']}/pay", headers=user_headers)).json()["data"]

    res = await client.post(
        f"/api/quotes/{quote['id']}/convert",
        json={"payment_intent_id": payment["payment_intent_id"]},
        headers=user_headers,
    )

    assert res.status_code == 402


async def test_convert_requires_uploaded_document(client, gateway, user_headers, admin_headers):
    quote = await _priced_quote(client, user_headers, admin_headers)
    payment = (await client.post(f"/api/quotes/{quote['id']}/pay", headers=user_headers)).json()["data"]
    gateway.mark_paid(payment["payment_intent_id"])

    res = await client.post(
        f"/api/quotes/{quote['id']}/convert",
        json={"payment_intent_id": payment["payment_intent_id"]},
        headers=user_headers,
    )

    assert res.status_code == 400
    assert res.json()["error_code"] == "DOCUMENT_NOT_FOUND"


async def test_admin_lists_quotes_by_status(client, user_headers, admin_headers):
    await client.post("/api/quotes/", json=QUOTE, headers=user_headers)
    await _priced_quote(client, user_headers, admin_headers)

    res = await client.get("/api/admin/quotes/", params={"status": "quoted"}, headers=admin_headers)

    assert res.json()["data"]["total"] == 1


async def _paid_conversion(client, gateway, user_headers, admin_headers):
    quote = await _priced_quote(client, user_headers, admin_headers)
    payment = (await client.post(f"/api/quotes/{quote['id']}/pay", headers=user_headers)).json()["data"]
    gateway.mark_paid(payment["payment_intent_id"])
    return quote, payment["payment_intent_id"]


async def test_one_payment_converts_one_quote(client, gateway, user_headers, admin_headers):
    await _register_document(client, user_headers)
    first, intent_id = await _paid_conversion(client, gateway, user_headers, admin_headers)
    second = await _priced_quote(client, user_headers, admin_headers)

    converted = await client.post(
        f"/api/quotes/{first['id']}/convert",
        json={"payment_intent_id": intent_id},
        headers=user_headers,
    )
    reused = await client.post(
        f"/api/quotes/{second['id']}/convert",
        json={"payment_intent_id": intent_id},
        headers=user_headers,
    )

    assert converted.status_code == 201
    assert reused.status_code == 400
    assert reused.json()["error_code"] == "PAYMENT_INTENT_MISMATCH"

    orders = await client.get("/api/orders/", headers=user_headers)
    assert orders.json()["data"]["total"] == 1
    untouched = await client.get(f"/api/quotes/{second['id']}", headers=user_headers)
    assert untouched.json()["data"]["status"] == "quoted"


async def test_checkout_payment_cannot_pay_for_quote(client, gateway, user_headers, admin_headers):
    await _register_document(client, user_headers)
    quote = await _priced_quote(client, user_headers, admin_headers)
    checkout = await gateway.create_payment_intent(8000, "usd", metadata={"service_type": "certified-translation"})
    gateway.mark_paid(checkout["id"])

    res = await client.post(
        f"/api/quotes/{quote['id']}/convert",
        json={"payment_intent_id": checkout["id"]},
        headers=user_headers,
    )

    assert res.status_code == 400
    assert res.json()["error_code"] == "PAYMENT_INTENT_MISMATCH"


async def test_payment_already_recorded_is_409(client, gateway, user_headers, admin_headers, db):
    await _register_document(client, user_headers)
    quote, intent_id = await _paid_conversion(client, gateway, user_headers, admin_headers)
    converted = await client.post(
        f"/api/quotes/{quote['id']}/convert",
        json={"payment_intent_id": intent_id},
        headers=user_headers,
    )
    order = await db.get(Order, uuid.UUID(converted.json()["data"]["order_id"]))
    # put the quote back so only the recorded payment stands in the way
    quote_row = await db.get(Quote, uuid.UUID(quote["id"]))
    quote_row.status = QuoteStatus.quoted
    await db.commit()

    again = await client.post(
        f"/api/quotes/{quote['id']}/convert",
        json={"payment_intent_id": intent_id},
        headers=user_headers,
    )

    assert again.status_code == 409
    assert again.json()["error_code"] == "PAYMENT_ALREADY_USED"
    assert again.json()["details"] == {"order_id": str(order.id)}


async def test_convert_warns_when_quote_status_write_fails(
    client, gateway, user_headers, admin_headers, fail_updates_on
):
    await _register_document(client, user_headers)
    quote, intent_id = await _paid_conversion(client, gateway, user_headers, admin_headers)
    fail_updates_on("quotes")

    res = await client.post(
        f"/api/quotes/{quote['id']}/convert",
        json={"payment_intent_id": intent_id},
        headers=user_headers,
    )

    assert res.status_code == 201, res.text
    data = res.json()["data"]
    assert data["quote_status"] == "quoted"
    assert data["warning"].startswith("Order created, but the quote status could not be updated")

    order = await client.get(f"/api/orders/{data['order_id']}", headers=user_headers)
    assert order.status_code == 200
    assert order.json()["data"]["status"] == "processing"
    assert order.json()["data"]["payment_intent_id"] == intent_id
