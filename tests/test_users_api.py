# tests/test_users_api.py
from tests.conftest import bearer, make_token


async def _provision(client, **claims):
    headers = bearer(make_token(**claims))
    # any authenticated call provisions the local profile
    await client.get("/api/quotes/", headers=headers)
    return headers


async def test_list_users_search(client, admin_headers):
    await _provision(client, email="ops@acme.example", company_name="Acme Screening")
    await _provision(client, email="jane@example.com")

    res = await client.get("/api/admin/users/", params={"search": "acme"}, headers=admin_headers)

    assert res.status_code == 200
    data = res.json()["data"]
    assert data["total"] == 1
    assert data["items"][0]["company_name"] == "Acme Screening"


async def test_list_users_rejects_unknown_sort(client, admin_headers):
    res = await client.get("/api/admin/users/", params={"sort_by": "password"}, headers=admin_headers)

    assert res.status_code == 400


async def test_update_billing_details(client, admin_headers):
    await _provision(client, email="ops@acme.example")
    listed = await client.get("/api/admin/users/", params={"search": "ops@acme"}, headers=admin_headers)
    user_id = listed.json()["data"]["items"][0]["id"]

    res = await client.patch(
        f"/api/admin/users/{user_id}/billing",
        json={"company_name": "Acme Screening LLC", "billing_email": "ap@acme.example"},
        headers=admin_headers,
    )

    assert res.status_code == 200
    data = res.json()["data"]
    assert data["company_name"] == "Acme Screening LLC"
    assert data["billing_email"] == "ap@acme.example"


async def test_users_api_is_admin_only(client, user_headers):
    res = await client.get("/api/admin/users/", headers=user_headers)

    assert res.status_code == 403


async def test_expired_token_is_401(client):
    from datetime import datetime, timedelta, timezone
    from jose import jwt
    from app.core.config import AUTH_JWT_SECRET

    token = jwt.encode(
        {
            "sub": "3f1c2b9a-5a44-4c1e-8d1e-2b8c6c1b7f00",
            "aud": "authenticated",
            "exp": datetime.now(timezone.utc) - timedelta(minutes=5),
        },
        AUTH_JWT_SECRET,
        algorithm="HS256",
    )

    res = await client.get("/api/quotes/", headers=bearer(token))

    assert res.status_code == 401


async def test_activity_log_records_admin_actions(client, admin_headers):
    await _provision(client, email="ops@acme.example")
    listed = await client.get("/api/admin/users/", params={"search": "ops@acme"}, headers=admin_headers)
    user_id = listed.json()["data"]["items"][0]["id"]
    await client.patch(
        f"/api/admin/users/{user_id}/billing",
        json={"company_name": "Acme Screening LLC"},
        headers=admin_headers,
    )

    res = await client.get(
        "/api/admin/activities/",
        params={"code": "update_billing_details"},
        headers=admin_headers,
    )

    assert res.status_code == 200
    items = res.json()["data"]["items"]
    assert len(items) == 1
    assert items[0]["username_snapshot"] == "admin@opentranslate.co"
    assert "ops@acme.example" in items[0]["message"]
    assert "Acme Screening LLC" in items[0]["message"]
