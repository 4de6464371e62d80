"""HTTP tests for notification endpoints."""

import uuid

import pytest
from sqlalchemy import func, select

from actor_engine.db.models import Notification
from actor_engine.services import actor_service


def _payload(recipient, source, **extra) -> dict:
    return {
        "recipientActorId": str(recipient.id),
        "sourceActorId": str(source.id) if source else None,
        "kind": "comment",
        "objectType": "post",
        "objectId": "p-1",
        "linkPath": "/posts/p-1",
        "context": {"preview": "hi"},
        **extra,
    }


@pytest.mark.asyncio
async def test_blocked_notify_response_matches_delivery(client, db, make_actor):
    recipient = make_actor()
    friend = make_actor()
    blocked = make_actor()
    await client.post(
        "/blocks",
        json={"blockerActorId": str(recipient.id), "blockedActorId": str(blocked.id)},
    )

    delivered = await client.post("/notifications", json=_payload(recipient, friend))
    suppressed = await client.post("/notifications", json=_payload(recipient, blocked))

    assert delivered.status_code == suppressed.status_code == 200
    assert delivered.json() == suppressed.json() == {"ok": True}
    count = db.scalar(
        select(func.count())
        .select_from(Notification)
        .where(Notification.recipient_actor_id == recipient.id)
    )
    assert count == 1


@pytest.mark.asyncio
async def test_notify_unknown_recipient_is_404(client, make_actor):
    source = make_actor()
    payload = {**_payload(source, None), "recipientActorId": str(uuid.uuid4())}

    resp = await client.post("/notifications", json=payload)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_notify_unknown_source_is_404(client, db, make_actor):
    recipient = make_actor()
    payload = {**_payload(recipient, None), "sourceActorId": str(uuid.uuid4())}

    resp = await client.post("/notifications", json=payload)

    assert resp.status_code == 404
    count = db.scalar(
        select(func.count())
        .select_from(Notification)
        .where(Notification.recipient_actor_id == recipient.id)
    )
    assert count == 0


@pytest.mark.asyncio
async def test_list_count_and_mark(client, make_actor):
    viewer = make_actor()
    source = make_actor()
    await client.post("/notifications", json=_payload(viewer, source))
    await client.post("/notifications", json=_payload(viewer, None, kind="system"))

    listed = await client.get("/notifications", params={"actorId": str(viewer.id)})
    assert listed.status_code == 200, listed.text
    items = listed.json()
    assert len(items) == 2
    assert {item["kind"] for item in items} == {"comment", "system"}
    comment = next(item for item in items if item["kind"] == "comment")
    assert comment["actorId"] == str(source.id)
    assert comment["linkPath"] == "/posts/p-1"
    assert comment["context"] == {"preview": "hi"}

    counts = await client.get("/notifications/count", params={"actorId": str(viewer.id)})
    assert counts.json() == {"unread": 2, "unseen": 2}

    marked = await client.post(
        "/notifications/mark-read", json={"id": comment["id"], "actorId": str(viewer.id)}
    )
    assert marked.json() == {"ok": True}
    foreign = await client.post(
        "/notifications/mark-read", json={"id": comment["id"], "actorId": str(source.id)}
    )
    assert foreign.json() == {"ok": False}

    seen = await client.post("/notifications/mark-all-seen", json={"actorId": str(viewer.id)})
    assert seen.json() == {"ok": True, "updated": 1}

    counts = await client.get("/notifications/count", params={"actorId": str(viewer.id)})
    assert counts.json() == {"unread": 1, "unseen": 0}

    unread = await client.get(
        "/notifications", params={"actorId": str(viewer.id), "unreadOnly": "true"}
    )
    assert [item["kind"] for item in unread.json()] == ["system"]


@pytest.mark.asyncio
async def test_organization_fan_out(client, db, make_human, make_org, make_actor):
    owner = make_human()
    second = make_human()
    third = make_human()
    org = make_org(owner=owner)
    actor_service.add_manager(db, org.id, second.id)
    actor_service.add_manager(db, org.id, third.id)
    source = make_actor()
    third_actor = actor_service.resolve_actor_for_human(db, third.id)
    await client.post(
        "/blocks",
        json={"blockerActorId": str(third_actor.id), "blockedActorId": str(source.id)},
    )

    resp = await client.post(
        f"/organizations/{org.id}/notifications",
        json={"sourceActorId": str(source.id), "kind": "review", "objectId": "r-9"},
    )
    assert resp.status_code == 200, resp.text
    assert resp.json() == {"ok": True, "delivered": 2}

    missing = await client.post(
        f"/organizations/{uuid.uuid4()}/notifications",
        json={"sourceActorId": str(source.id), "kind": "review"},
    )
    assert missing.status_code == 404
