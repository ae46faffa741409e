# tests/test_api_keys_api.py
from tests.conftest import bearer, make_token


async def test_generated_key_is_shown_once(client, partner_headers, partner_key):
    assert partner_key["api_key"].startswith("sk_")
    assert partner_key["key_prefix"] == partner_key["api_key"][:8]
    assert partner_key["client_name"] == "acme background"

    listed = await client.get("/api/api-keys/", headers=partner_headers)

    items = listed.json()["data"]["items"]
    assert len(items) == 1
    assert "api_key" not in items[0]
    assert "hashed_key" not in items[0]
    assert items[0]["revoked"] is False
    assert items[0]["has_callback"] is False


async def test_each_key_is_listed(client, partner_headers, partner_key):
    second = (await client.post("/api/api-keys/", json={"client_name": "second"}, headers=partner_headers)).json()["data"]

    items = (await client.get("/api/api-keys/", headers=partner_headers)).json()["data"]["items"]

    assert {i["id"] for i in items} == {second["id"], partner_key["id"]}


async def test_last_used_is_recorded(client, partner_headers, partner_key):
    await client.get(
        "/v1/quote-requests/00000000-0000-0000-0000-000000000000",
        headers=bearer(partner_key["api_key"]),
    )

    items = (await client.get("/api/api-keys/", headers=partner_headers)).json()["data"]["items"]

    assert items[0]["last_used_at"] is not None


async def test_revoke_is_scoped_to_owner(client, partner_key):
    stranger = bearer(make_token(email="stranger@example.com"))

    res = await client.post(f"/api/api-keys/{partner_key['id']}/revoke", headers=stranger)

    assert res.status_code == 404
    assert res.json()["error_code"] == "API_KEY_NOT_FOUND"


async def test_configure_callback_generates_secret_once(client, partner_headers, partner_key):
    url = f"/api/api-keys/{partner_key['id']}/callback"

    first = await client.put(url, json={"callback_url": "https://partner.example/hook"}, headers=partner_headers)
    second = await client.put(url, json={"callback_url": "https://partner.example/hook2"}, headers=partner_headers)

    assert first.json()["data"]["webhook_secret"].startswith("whsec_")
    assert second.json()["data"]["webhook_secret"] is None
    assert second.json()["data"]["callback_url"] == "https://partner.example/hook2"

    items = (await client.get("/api/api-keys/", headers=partner_headers)).json()["data"]["items"]
    assert items[0]["has_callback"] is True


async def test_configure_callback_validates_url(client, partner_headers, partner_key):
    res = await client.put(
        f"/api/api-keys/{partner_key['id']}/callback",
        json={"callback_url": "not a url"},
        headers=partner_headers,
    )

    assert res.status_code == 422


async def test_revoked_key_cannot_get_callback(client, partner_headers, partner_key):
    await client.post(f"/api/api-keys/{partner_key['id']}/revoke", headers=partner_headers)

    res = await client.put(
        f"/api/api-keys/{partner_key['id']}/callback",
        json={"callback_url": "https://partner.example/hook"},
        headers=partner_headers,
    )

    assert res.status_code == 400


async def test_key_management_requires_login(client):
    res = await client.get("/api/api-keys/")

    assert res.status_code == 401
