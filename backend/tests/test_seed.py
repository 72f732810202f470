"""
Tests for the admin bootstrap and what an admin may do.
"""
from datetime import datetime

import pytest
from bson import ObjectId

from lawconnect.seed import seed_admin


@pytest.mark.asyncio
async def test_seeded_admin_can_log_in(client, db):
    admin_id = await seed_admin(db, "Admin@LawConnect.test", "Adm1npass")

    response = await client.post("/api/auth/login", json={"email": "admin@lawconnect.test", "password": "Adm1npass"})

    assert response.status_code == 200
    user = response.json()["data"]["user"]
    assert user["id"] == admin_id
    assert user["role"] == "admin"
    assert user["isVerified"] is True


@pytest.mark.asyncio
async def test_seeding_twice_replaces_the_account(db):
    await seed_admin(db, "admin@lawconnect.test", "Adm1npass")
    await seed_admin(db, "admin@lawconnect.test", "Adm1npass2")

    assert await db.users.count_documents({"email": "admin@lawconnect.test"}) == 1


@pytest.mark.asyncio
async def test_admin_is_not_restricted_to_own_cases(client, db, upstream):
    await seed_admin(db, "admin@lawconnect.test", "Adm1npass")
    login = await client.post("/api/auth/login", json={"email": "admin@lawconnect.test", "password": "Adm1npass"})
    token = login.json()["data"]["token"]
    case = await db.cases.insert_one({
        "client_id": ObjectId(),
        "case_number": "CASE-2024-0002",
        "title": "Boundary dispute",
        "description": "Neighbour moved the fence.",
        "case_type": "property",
        "created_at": datetime.utcnow(),
        "updated_at": datetime.utcnow(),
    })

    response = await client.post(
        "/api/ai/legal-advice",
        headers={"Authorization": f"Bearer {token}"},
        json={"query": "Who owns the strip?", "caseId": str(case.inserted_id)},
    )

    assert response.status_code == 200
