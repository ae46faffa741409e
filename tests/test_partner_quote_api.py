# tests/test_partner_quote_api.py
import hashlib
import hmac
import json
import uuid

from starlette.concurrency import run_in_threadpool

from app.utils import get_user
from tests.conftest import bearer, make_token


QUOTE_BODY = {
    "applicant_name": "Maria Gonzalez",
    "country_of_education": "Mexico",
    "college_attended": "UNAM",
    "degree_received": "Licenciatura en Derecho",
    "year_of_graduation": 2015,
}


async def _submit(client, raw_key, body=None):
    return await client.post(
        "/v1/quote-requests",
        json=QUOTE_BODY if body is None else body,
        headers=bearer(raw_key),
    )


async def _configure_callback(client, partner_headers, key_id, secret="partner-shared-secret-0001"):
    res = await client.put(
        f"/api/api-keys/{key_id}/callback",
        json={"callback_url": "https://partner.example/hooks/quotes", "webhook_secret": secret},
        headers=partner_headers,
    )
    assert res.status_code == 200, res.text
    return secret


# =====================================================
# SUBMISSION
# =====================================================
async def test_submit_returns_201_with_request_id(client, partner_key):
    res = await _submit(client, partner_key["api_key"])

    assert res.status_code == 201
    body = res.json()
    assert body["message"] == "Quote request received successfully"
    uuid.UUID(body["quote_request_id"])


async def test_submit_lists_missing_fields(client, partner_key):
    res = await _submit(client, partner_key["api_key"], {"applicant_name": "Only Name"})

    assert res.status_code == 400
    body = res.json()
    assert body["error_code"] == "API_QUOTE_MISSING_FIELDS"
    assert body["details"]["missing"] == ["country_of_education", "degree_received"]


async def test_submit_treats_blank_strings_as_missing(client, partner_key):
    body = dict(QUOTE_BODY, degree_received="   ")
    res = await _submit(client, partner_key["api_key"], body)

    assert res.status_code == 400
    assert res.json()["details"]["missing"] == ["degree_received"]


async def test_exempt_partner_may_omit_applicant_name(client, partner_headers):
    created = await client.post(
        "/api/api-keys/",
        json={"client_name": "HireRight"},
        headers=partner_headers,
    )
    raw_key = created.json()["data"]["api_key"]

    body = {k: v for k, v in QUOTE_BODY.items() if k != "applicant_name"}
    res = await _submit(client, raw_key, body)

    assert res.status_code == 201


async def test_key_verification_runs_off_the_event_loop(client, partner_key, monkeypatch):
    offloaded = []

    async def record(func, *args, **kwargs):
        offloaded.append(func)
        return await run_in_threadpool(func, *args, **kwargs)

    monkeypatch.setattr(get_user, "run_in_threadpool", record)

    res = await _submit(client, partner_key["api_key"])

    assert res.status_code == 201
    assert get_user.verify_api_key in offloaded


async def test_submit_without_key_is_401(client):
    res = await client.post("/v1/quote-requests", json=QUOTE_BODY)

    assert res.status_code == 401
    assert res.json()["error_code"] == "API_KEY_MISSING"


async def test_submit_with_unknown_key_is_401(client, partner_key):
    res = await _submit(client, "sk_" + "0" * 64)

    assert res.status_code == 401
    assert res.json()["error_code"] == "API_KEY_INVALID"


async def test_submit_with_malformed_key_is_401(client):
    res = await _submit(client, "not-a-partner-key")

    assert res.status_code == 401


async def test_revoked_key_is_403(client, partner_key, partner_headers):
    revoked = await client.post(
        f"/api/api-keys/{partner_key['id']}/revoke",
        headers=partner_headers,
    )
    assert revoked.status_code == 200

    res = await _submit(client, partner_key["api_key"])

    assert res.status_code == 403
    assert res.json()["error_code"] == "API_KEY_REVOKED"


async def test_partner_sees_only_own_requests(client, partner_key):
    created = await _submit(client, partner_key["api_key"])
    request_id = created.json()["quote_request_id"]

    own = await client.get(f"/v1/quote-requests/{request_id}", headers=bearer(partner_key["api_key"]))
    assert own.status_code == 200
    assert own.json()["status"] == "pending"

    other_headers = bearer(make_token(email="other@partner.example"))
    other_key = (await client.post("/api/api-keys/", json={}, headers=other_headers)).json()["data"]
    res = await client.get(f"/v1/quote-requests/{request_id}", headers=bearer(other_key["api_key"]))
    assert res.status_code == 404


# =====================================================
# ADMIN RESULT + CALLBACK
# =====================================================
async def test_result_sends_signed_callback(client, partner_key, partner_headers, admin_headers, callbacks):
    secret = await _configure_callback(client, partner_headers, partner_key["id"])
    request_id = (await _submit(client, partner_key["api_key"])).json()["quote_request_id"]

    res = await client.post(
        f"/api/admin/api-quotes/{request_id}/result",
        json={"us_equivalent": "Bachelor of Laws"},
        headers=admin_headers,
    )

    assert res.status_code == 200, res.text
    data = res.json()["data"]
    assert data["quote_request"]["status"] == "completed"
    assert data["callback"]["delivered"] is True

    assert len(callbacks.requests) == 1
    sent = callbacks.requests[0]
    raw = sent.content
    expected = "sha256=" + hmac.new(secret.encode(), raw, hashlib.sha256).hexdigest()
    assert sent.headers["X-Webhook-Signature"] == expected

    payload = json.loads(raw)
    assert payload == {
        "quote_request_id": request_id,
        "applicant_name": "Maria Gonzalez",
        "status": "completed",
        "us_equivalent": "Bachelor of Laws",
        "unable_to_provide": False,
    }


async def test_rejection_callback_carries_reason(client, partner_key, partner_headers, admin_headers, callbacks):
    await _configure_callback(client, partner_headers, partner_key["id"])
    request_id = (await _submit(client, partner_key["api_key"])).json()["quote_request_id"]

    res = await client.post(
        f"/api/admin/api-quotes/{request_id}/result",
        json={"unable_to_provide": True, "rejection_reason": "Transcript illegible"},
        headers=admin_headers,
    )

    assert res.status_code == 200
    payload = json.loads(callbacks.requests[0].content)
    assert payload["status"] == "rejected"
    assert payload["unable_to_provide"] is True
    assert payload["rejection_reason"] == "Transcript illegible"


async def test_partner_error_is_reported_not_raised(client, partner_key, partner_headers, admin_headers, callbacks):
    callbacks.status_code = 500
    callbacks.body = "partner down"
    await _configure_callback(client, partner_headers, partner_key["id"])
    request_id = (await _submit(client, partner_key["api_key"])).json()["quote_request_id"]

    res = await client.post(
        f"/api/admin/api-quotes/{request_id}/result",
        json={"us_equivalent": "Bachelor of Laws"},
        headers=admin_headers,
    )

    assert res.status_code == 200
    body = res.json()
    assert body["message"].startswith("Result saved. Callback warning:")
    callback = body["data"]["callback"]
    assert callback["sent"] is True
    assert callback["delivered"] is False
    assert callback["partner_status"] == 500
    assert callback["partner_response"] == "partner down"


async def test_result_without_callback_config_skips_delivery(client, partner_key, admin_headers, callbacks):
    request_id = (await _submit(client, partner_key["api_key"])).json()["quote_request_id"]

    res = await client.post(
        f"/api/admin/api-quotes/{request_id}/result",
        json={"us_equivalent": "Bachelor of Laws"},
        headers=admin_headers,
    )

    assert res.status_code == 200
    assert res.json()["data"]["callback"]["attempted"] is False
    assert callbacks.requests == []


async def test_result_requires_outcome_fields(client, partner_key, admin_headers):
    request_id = (await _submit(client, partner_key["api_key"])).json()["quote_request_id"]

    res = await client.post(
        f"/api/admin/api-quotes/{request_id}/result",
        json={"unable_to_provide": True},
        headers=admin_headers,
    )

    assert res.status_code == 422


async def test_resend_callback_needs_a_result(client, partner_key, partner_headers, admin_headers):
    await _configure_callback(client, partner_headers, partner_key["id"])
    request_id = (await _submit(client, partner_key["api_key"])).json()["quote_request_id"]

    res = await client.post(
        f"/api/admin/api-quotes/{request_id}/resend-callback",
        headers=admin_headers,
    )

    assert res.status_code == 400
    assert res.json()["error_code"] == "QUOTE_INVALID_STATE"


async def test_resend_callback_delivers_again(client, partner_key, partner_headers, admin_headers, callbacks):
    await _configure_callback(client, partner_headers, partner_key["id"])
    request_id = (await _submit(client, partner_key["api_key"])).json()["quote_request_id"]
    await client.post(
        f"/api/admin/api-quotes/{request_id}/result",
        json={"us_equivalent": "Bachelor of Laws"},
        headers=admin_headers,
    )

    res = await client.post(
        f"/api/admin/api-quotes/{request_id}/resend-callback",
        headers=admin_headers,
    )

    assert res.status_code == 200
    assert res.json()["message"] == "Callback sent successfully."
    assert len(callbacks.requests) == 2


async def test_admin_routes_reject_customers(client, partner_headers):
    res = await client.get("/api/admin/api-quotes/", headers=partner_headers)

    assert res.status_code == 403
