# tests/test_orders_api.py
from tests.test_checkout_api import EVALUATION_STEPS, _paid_state


async def _place_order(client, gateway, headers):
    state = await _paid_state(client, gateway, headers)
    res = await client.post("/api/checkout/complete", json={"state": state}, headers=headers)
    assert res.status_code == 201, res.text
    return res.json()["data"]


async def test_customer_order_detail(client, gateway, user_headers):
    placed = await _place_order(client, gateway, user_headers)

    res = await client.get(f"/api/orders/{placed['order_id']}", headers=user_headers)

    assert res.status_code == 200
    order = res.json()["data"]
    assert order["order_type"] == "credential-evaluation"
    assert order["evaluation_type"] == "course-by-course"
    assert order["document_paths"] == EVALUATION_STEPS[2][1]["evaluation_docs"]
    assert order["translations"] == []


async def test_admin_workflow_to_delivery(client, gateway, user_headers, admin_headers):
    placed = await _place_order(client, gateway, user_headers)
    order_id = placed["order_id"]

    started = await client.post(f"/api/admin/orders/{order_id}/start-processing", headers=admin_headers)
    assert started.json()["data"]["status"] == "processing"

    again = await client.post(f"/api/admin/orders/{order_id}/start-processing", headers=admin_headers)
    assert again.status_code == 400
    assert again.json()["error_code"] == "ORDER_INVALID_STATE"

    delivered = await client.post(
        f"/api/admin/orders/{order_id}/translations",
        json={"file_name": "evaluation.pdf", "file_path": f"deliveries/{order_id}/evaluation.pdf"},
        headers=admin_headers,
    )
    assert delivered.status_code == 201
    order = delivered.json()["data"]
    assert order["status"] == "completed"
    assert [t["file_name"] for t in order["translations"]] == ["evaluation.pdf"]

    mine = await client.get(f"/api/orders/{order_id}", headers=user_headers)
    assert len(mine.json()["data"]["translations"]) == 1


async def test_admin_list_filters(client, gateway, user_headers, admin_headers):
    await _place_order(client, gateway, user_headers)

    pending = await client.get("/api/admin/orders/", params={"status": "pending"}, headers=admin_headers)
    completed = await client.get("/api/admin/orders/", params={"status": "completed"}, headers=admin_headers)

    assert pending.json()["data"]["total"] == 1
    assert completed.json()["data"]["total"] == 0


async def test_other_customers_cannot_read_order(client, gateway, user_headers):
    from tests.conftest import bearer, make_token

    placed = await _place_order(client, gateway, user_headers)

    res = await client.get(f"/api/orders/{placed['order_id']}", headers=bearer(make_token()))

    assert res.status_code == 404


async def test_document_on_foreign_order_is_rejected(client, gateway, user_headers):
    from tests.conftest import bearer, make_token

    placed = await _place_order(client, gateway, user_headers)

    res = await client.post(
        "/api/documents/",
        json={"file_name": "x.pdf", "file_path": "uploads/x.pdf", "order_id": placed["order_id"]},
        headers=bearer(make_token()),
    )

    assert res.status_code == 404


async def test_list_my_documents(client, user_headers):
    await client.post(
        "/api/documents/",
        json={"file_name": "a.pdf", "file_path": "uploads/a.pdf"},
        headers=user_headers,
    )

    res = await client.get("/api/documents/", headers=user_headers)

    assert res.json()["data"]["total"] == 1
    assert res.json()["data"]["items"][0]["file_path"] == "uploads/a.pdf"
