"""Application-level behaviour: health, request ids, internal secret, storage errors."""

import uuid

import pytest
from httpx import AsyncClient

from actor_engine.core.config import settings
from actor_engine.services import inbox_service
from actor_engine.services.errors import StorageError


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert "env" in data
    assert "version" in data


@pytest.mark.asyncio
async def test_request_id_is_echoed_or_assigned(client: AsyncClient):
    echoed = await client.get("/health", headers={"X-Request-ID": "req-123"})
    assert echoed.headers["X-Request-ID"] == "req-123"

    assigned = await client.get("/health")
    assert uuid.UUID(assigned.headers["X-Request-ID"])


@pytest.mark.asyncio
async def test_internal_secret_required_when_configured(client: AsyncClient, make_actor, monkeypatch):
    actor = make_actor()
    monkeypatch.setattr(settings, "INTERNAL_SECRET", "s3cret")

    missing = await client.get("/inbox", params={"actorId": str(actor.id)})
    wrong = await client.get(
        "/inbox", params={"actorId": str(actor.id)}, headers={"X-Internal-Secret": "nope"}
    )
    ok = await client.get(
        "/inbox", params={"actorId": str(actor.id)}, headers={"X-Internal-Secret": "s3cret"}
    )

    assert missing.status_code == 403
    assert wrong.status_code == 403
    assert ok.status_code == 200
    # Health stays open
    assert (await client.get("/health")).status_code == 200


@pytest.mark.asyncio
async def test_storage_error_maps_to_503(client: AsyncClient, monkeypatch):
    def failing(*args, **kwargs):
        raise StorageError("connection refused")

    monkeypatch.setattr(inbox_service, "list_visible_inbox", failing)

    response = await client.get("/inbox", params={"actorId": str(uuid.uuid4())})

    assert response.status_code == 503
    assert response.json() == {"detail": "Storage unavailable"}
