"""
End-to-end tests for the /api/auth endpoints.
"""
from datetime import datetime, timedelta

import pytest

from lawconnect.core.security import create_access_token


def auth(token):
    return {"Authorization": f"Bearer {token}"}


def reset_token_from(response):
    return response.json()["resetUrl"].split("token=", 1)[1]


@pytest.mark.asyncio
async def test_register_returns_user_and_token(client):
    response = await client.post("/api/auth/register", json={
        "name": "  Alice Smith ",
        "email": "Alice@Example.com",
        "password": "Passw0rd",
    })

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    user = body["data"]["user"]
    assert user["email"] == "alice@example.com"
    assert user["name"] == "Alice Smith"
    assert user["role"] == "client"
    assert user["id"]
    assert "hashedPassword" not in user and "password" not in user
    assert body["data"]["token"]


@pytest.mark.asyncio
async def test_register_lawyer_keeps_lawyer_fields(register):
    lawyer, _ = await register(
        email="bob@example.com", role="lawyer", name="Bob Jones",
        specialization="Family law", licenseNumber="LIC-42", experience=7,
    )
    assert lawyer["role"] == "lawyer"
    assert lawyer["licenseNumber"] == "LIC-42"


@pytest.mark.asyncio
async def test_register_client_drops_lawyer_fields(register):
    user, _ = await register(licenseNumber="LIC-42")
    assert user["licenseNumber"] is None


@pytest.mark.asyncio
async def test_register_duplicate_email(client, register):
    await register()
    response = await client.post("/api/auth/register", json={
        "name": "Alice Again", "email": "ALICE@example.com", "password": "Passw0rd",
    })

    assert response.status_code == 400
    assert response.json()["success"] is False
    assert response.json()["message"] == "Email already registered"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload, field",
    [
        ({"name": "Al", "email": "not-an-email", "password": "Passw0rd"}, "email"),
        ({"name": "A", "email": "a@example.com", "password": "Passw0rd"}, "name"),
        ({"name": "Alice", "email": "a@example.com", "password": "short"}, "password"),
        ({"name": "Alice", "email": "a@example.com", "password": "lettersonly"}, "password"),
        ({"name": "Alice", "email": "a@example.com", "password": "Passw0rd", "role": "admin"}, "role"),
        ({"name": "Alice", "email": "a@example.com", "password": "Passw0rd", "phone": "call me"}, "phone"),
    ],
)
async def test_register_validation(client, payload, field):
    response = await client.post("/api/auth/register", json=payload)

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Validation failed"
    assert field in [error["field"] for error in body["errors"]]


@pytest.mark.asyncio
async def test_login(client, register):
    await register()

    response = await client.post("/api/auth/login", json={"email": "alice@example.com", "password": "Passw0rd"})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["user"]["email"] == "alice@example.com"
    assert data["user"]["lastLogin"] is not None
    assert data["token"] and data["refreshToken"]


@pytest.mark.asyncio
@pytest.mark.parametrize("email, password", [
    ("alice@example.com", "WrongPass1"),
    ("nobody@example.com", "Passw0rd"),
])
async def test_login_rejects_bad_credentials(client, register, email, password):
    await register()

    response = await client.post("/api/auth/login", json={"email": email, "password": password})

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid email or password"


@pytest.mark.asyncio
async def test_login_rejects_deactivated_account(client, register, db):
    await register()
    await db.users.update_one({"email": "alice@example.com"}, {"$set": {"is_active": False}})

    response = await client.post("/api/auth/login", json={"email": "alice@example.com", "password": "Passw0rd"})

    assert response.status_code == 401
    assert "deactivated" in response.json()["message"]


@pytest.mark.asyncio
async def test_me(client, register):
    user, token = await register()

    response = await client.get("/api/auth/me", headers=auth(token))

    assert response.status_code == 200
    me = response.json()["data"]["user"]
    assert me["id"] == user["id"]
    assert "hashedPassword" not in me


@pytest.mark.asyncio
async def test_me_rejects_missing_malformed_and_expired_tokens(client, register):
    user, _ = await register()
    expired = create_access_token(user["id"], "client", issued_at=datetime.utcnow() - timedelta(days=8))

    for headers in ({}, auth("garbage"), auth(expired), {"Authorization": "Token abc"}):
        response = await client.get("/api/auth/me", headers=headers)
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid or missing token"
        assert response.headers["www-authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_update_profile(client, register):
    _, token = await register()

    response = await client.put(
        "/api/auth/profile",
        headers=auth(token),
        json={"name": "Alice Cooper", "phone": "+1 555 0100", "specialization": "ignored"},
    )

    assert response.status_code == 200
    user = response.json()["data"]["user"]
    assert user["name"] == "Alice Cooper"
    assert user["phone"] == "+1 555 0100"
    assert user["specialization"] is None


@pytest.mark.asyncio
async def test_change_password(client, register):
    _, token = await register()

    wrong = await client.put("/api/auth/change-password", headers=auth(token), json={
        "currentPassword": "WrongPass1", "newPassword": "NewPass1", "confirmPassword": "NewPass1",
    })
    assert wrong.status_code == 401
    assert wrong.json()["message"] == "Current password is incorrect"

    mismatch = await client.put("/api/auth/change-password", headers=auth(token), json={
        "currentPassword": "Passw0rd", "newPassword": "NewPass1", "confirmPassword": "NewPass2",
    })
    assert mismatch.status_code == 400

    ok = await client.put("/api/auth/change-password", headers=auth(token), json={
        "currentPassword": "Passw0rd", "newPassword": "NewPass1", "confirmPassword": "NewPass1",
    })
    assert ok.status_code == 200

    login = await client.post("/api/auth/login", json={"email": "alice@example.com", "password": "NewPass1"})
    assert login.status_code == 200


@pytest.mark.asyncio
async def test_forgot_password_does_not_reveal_unknown_email(client, register):
    await register()

    known = await client.post("/api/auth/forgot-password", json={"email": "alice@example.com"})
    unknown = await client.post("/api/auth/forgot-password", json={"email": "nobody@example.com"})

    assert known.status_code == unknown.status_code == 200
    assert known.json()["message"] == unknown.json()["message"]
    assert "resetUrl" in known.json()
    assert "resetUrl" not in unknown.json()


@pytest.mark.asyncio
async def test_forgot_password_records_client_details(client, register, db):
    await register()

    await client.post(
        "/api/auth/forgot-password",
        json={"email": "alice@example.com"},
        headers={"User-Agent": "pytest-agent"},
    )

    record = await db.password_resets.find_one({})
    assert record["user_agent"] == "pytest-agent"
    assert record["is_used"] is False


@pytest.mark.asyncio
async def test_reset_password_rejects_unknown_token(client):
    response = await client.post("/api/auth/reset-password", json={
        "token": "0" * 64, "password": "NewPass1", "confirmPassword": "NewPass1",
    })

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid reset token"


@pytest.mark.asyncio
async def test_reset_token_is_single_use(client, register):
    await register()
    token = reset_token_from(await client.post("/api/auth/forgot-password", json={"email": "alice@example.com"}))
    body = {"token": token, "password": "NewPass1", "confirmPassword": "NewPass1"}

    first = await client.post("/api/auth/reset-password", json=body)
    second = await client.post("/api/auth/reset-password", json={**body, "password": "Other2", "confirmPassword": "Other2"})

    assert first.status_code == 200
    assert second.status_code == 400
    assert second.json()["message"] == "Reset token has already been used"


@pytest.mark.asyncio
async def test_forgotten_password_recovery(client, register, clock):
    await register()

    # A token left unused for over an hour no longer works.
    stale = reset_token_from(await client.post("/api/auth/forgot-password", json={"email": "alice@example.com"}))
    clock.advance(hours=1, minutes=1)
    expired = await client.post("/api/auth/reset-password", json={
        "token": stale, "password": "NewPass1", "confirmPassword": "NewPass1",
    })
    assert expired.status_code == 400
    assert expired.json()["message"] == "Reset token has expired"

    fresh = reset_token_from(await client.post("/api/auth/forgot-password", json={"email": "alice@example.com"}))
    assert fresh != stale
    reset = await client.post("/api/auth/reset-password", json={
        "token": fresh, "password": "NewPass1", "confirmPassword": "NewPass1",
    })
    assert reset.status_code == 200

    old = await client.post("/api/auth/login", json={"email": "alice@example.com", "password": "Passw0rd"})
    new = await client.post("/api/auth/login", json={"email": "alice@example.com", "password": "NewPass1"})
    assert old.status_code == 401
    assert new.status_code == 200


@pytest.mark.asyncio
async def test_reset_for_deleted_account_is_an_invalid_token(client, register, db):
    await register()
    token = reset_token_from(await client.post("/api/auth/forgot-password", json={"email": "alice@example.com"}))
    await db.users.delete_one({"email": "alice@example.com"})
    body = {"token": token, "password": "NewPass1", "confirmPassword": "NewPass1"}

    first = await client.post("/api/auth/reset-password", json=body)
    retry = await client.post("/api/auth/reset-password", json=body)

    assert first.status_code == 400
    assert first.json()["message"] == "Invalid reset token"
    assert retry.status_code == 400
    assert retry.json()["message"] == "Reset token has already been used"


@pytest.mark.asyncio
async def test_logout(client, register):
    _, token = await register()

    assert (await client.post("/api/auth/logout", headers=auth(token))).status_code == 200
    assert (await client.post("/api/auth/logout")).status_code == 401


@pytest.mark.asyncio
async def test_unknown_route(client):
    response = await client.get("/api/nope")

    assert response.status_code == 404
    assert response.json()["message"] == "Not Found - /api/nope"
