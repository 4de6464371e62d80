"""HTTP tests for actor directory endpoints."""

import uuid

import pytest


@pytest.mark.asyncio
async def test_register_human_returns_actor(client):
    resp = await client.post("/humans", json={"username": "Ada", "displayName": "Ada L."})
    assert resp.status_code == 201, resp.text

    data = resp.json()
    assert data["username"] == "ada"
    assert data["displayName"] == "Ada L."
    assert data["actorId"]

    resolved = await client.post(
        "/actors/resolve", json={"ownerKind": "human", "ownerId": data["id"]}
    )
    assert resolved.status_code == 200, resolved.text
    assert resolved.json() == {"actorId": data["actorId"]}


@pytest.mark.asyncio
async def test_register_human_duplicate_conflicts(client):
    first = await client.post("/humans", json={"username": "twin"})
    assert first.status_code == 201

    second = await client.post("/humans", json={"username": "twin"})
    assert second.status_code == 409


@pytest.mark.asyncio
async def test_resolve_unknown_owner_is_404(client):
    resp = await client.post(
        "/actors/resolve", json={"ownerKind": "organization", "ownerId": str(uuid.uuid4())}
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_resolve_accepts_snake_case_fields(client, make_human):
    human = make_human()

    resp = await client.post(
        "/actors/resolve", json={"owner_kind": "human", "owner_id": str(human.id)}
    )
    assert resp.status_code == 200, resp.text


@pytest.mark.asyncio
async def test_organization_and_managers(client, make_human):
    owner = make_human()
    helper = make_human()

    created = await client.post(
        "/organizations",
        json={"ownerHumanId": str(owner.id), "name": "Night Market"},
    )
    assert created.status_code == 201, created.text
    org = created.json()
    assert org["slug"] == "night-market"
    assert org["actorId"]

    added = await client.post(
        f"/organizations/{org['id']}/managers", json={"humanId": str(helper.id)}
    )
    assert added.status_code == 200, added.text
    assert added.json()["isActive"] is True

    removed = await client.request(
        "DELETE", f"/organizations/{org['id']}/managers", json={"humanId": str(helper.id)}
    )
    assert removed.status_code == 200
    assert removed.json() == {"ok": True}

    owner_removal = await client.request(
        "DELETE", f"/organizations/{org['id']}/managers", json={"humanId": str(owner.id)}
    )
    assert owner_removal.status_code == 400


@pytest.mark.asyncio
async def test_list_actors_preserves_order(client, make_actor):
    a = make_actor()
    b = make_actor()

    resp = await client.get(
        "/actors", params={"ids": [str(b.id), str(uuid.uuid4()), str(a.id)]}
    )
    assert resp.status_code == 200, resp.text
    assert [item["id"] for item in resp.json()] == [str(b.id), str(a.id)]
    assert resp.json()[0]["kind"] == "human"


@pytest.mark.asyncio
async def test_sandbox_and_deactivate(client, make_actor):
    actor = make_actor()

    sandboxed = await client.post(f"/actors/{actor.id}/sandbox", json={"sandboxed": True})
    assert sandboxed.status_code == 200
    assert sandboxed.json()["isSandboxed"] is True

    deactivated = await client.post(f"/actors/{actor.id}/deactivate")
    assert deactivated.status_code == 200
    assert deactivated.json()["isActive"] is False

    missing = await client.post(f"/actors/{uuid.uuid4()}/deactivate")
    assert missing.status_code == 404
