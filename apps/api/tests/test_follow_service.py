"""Tests for follow requests, follows and blocks."""

import pytest
from sqlalchemy import func, select

from actor_engine.db.enums import FollowRequestStatus, NotificationKind
from actor_engine.db.models import FollowEdge, FollowRequest, Notification
from actor_engine.services import block_service, follow_service
from actor_engine.services.errors import BlockedError, InvalidOperationError


def _request_rows(db, requester, target) -> int:
    return db.scalar(
        select(func.count())
        .select_from(FollowRequest)
        .where(
            FollowRequest.requester_actor_id == requester,
            FollowRequest.target_actor_id == target,
        )
    )


def _edge_rows(db, follower, followed) -> int:
    return db.scalar(
        select(func.count())
        .select_from(FollowEdge)
        .where(
            FollowEdge.follower_actor_id == follower,
            FollowEdge.followed_actor_id == followed,
        )
    )


def _notifications(db, recipient, kind) -> list[Notification]:
    return list(
        db.execute(
            select(Notification).where(
                Notification.recipient_actor_id == recipient,
                Notification.kind == kind.value,
            )
        ).scalars().all()
    )


# =============================================================================
# Follow requests
# =============================================================================


def test_send_follow_request_is_idempotent(db, make_actor):
    requester = make_actor()
    target = make_actor()

    first = follow_service.send_follow_request(db, requester.id, target.id)
    second = follow_service.send_follow_request(db, requester.id, target.id)

    assert first == FollowRequestStatus.PENDING
    assert second == FollowRequestStatus.PENDING
    assert _request_rows(db, requester.id, target.id) == 1
    assert len(_notifications(db, target.id, NotificationKind.FOLLOW_REQUEST)) == 1


def test_send_follow_request_to_self_is_rejected(db, make_actor):
    actor = make_actor()

    with pytest.raises(InvalidOperationError):
        follow_service.send_follow_request(db, actor.id, actor.id)


@pytest.mark.parametrize("blocker_is_target", [True, False])
def test_send_follow_request_blocked_in_either_direction(db, make_actor, blocker_is_target):
    requester = make_actor()
    target = make_actor()
    if blocker_is_target:
        follow_service.block(db, target.id, requester.id)
    else:
        follow_service.block(db, requester.id, target.id)

    with pytest.raises(BlockedError):
        follow_service.send_follow_request(db, requester.id, target.id)

    assert _request_rows(db, requester.id, target.id) == 0


def test_concurrent_duplicate_request_returns_existing_status(db, make_actor, monkeypatch):
    requester = make_actor()
    target = make_actor()
    follow_service.send_follow_request(db, requester.id, target.id)

    real_find = follow_service._find_request
    calls = []

    def racing_find(session, req, tgt):
        calls.append(req)
        if len(calls) == 1:
            return None
        return real_find(session, req, tgt)

    monkeypatch.setattr(follow_service, "_find_request", racing_find)

    status = follow_service.send_follow_request(db, requester.id, target.id)

    assert status == FollowRequestStatus.PENDING
    assert _request_rows(db, requester.id, target.id) == 1
    assert len(_notifications(db, target.id, NotificationKind.FOLLOW_REQUEST)) == 1


def test_accept_creates_edge_and_notifies_requester(db, make_actor):
    requester = make_actor()
    target = make_actor()
    follow_service.send_follow_request(db, requester.id, target.id)

    assert follow_service.accept_follow_request(db, requester.id, target.id) is True

    assert follow_service.is_following(db, requester.id, target.id) is True
    assert follow_service.is_following(db, target.id, requester.id) is False
    assert follow_service.get_follow_request_status(db, requester.id, target.id) == FollowRequestStatus.ACCEPTED
    accepted = _notifications(db, requester.id, NotificationKind.FOLLOW_REQUEST_ACCEPTED)
    assert len(accepted) == 1
    assert accepted[0].actor_id == target.id


def test_double_accept_yields_one_edge(db, make_actor):
    requester = make_actor()
    target = make_actor()
    follow_service.send_follow_request(db, requester.id, target.id)

    assert follow_service.accept_follow_request(db, requester.id, target.id) is True
    assert follow_service.accept_follow_request(db, requester.id, target.id) is False

    assert _edge_rows(db, requester.id, target.id) == 1
    assert len(_notifications(db, requester.id, NotificationKind.FOLLOW_REQUEST_ACCEPTED)) == 1


def test_accepted_request_is_returned_unchanged_on_resend(db, make_actor):
    requester = make_actor()
    target = make_actor()
    follow_service.send_follow_request(db, requester.id, target.id)
    follow_service.accept_follow_request(db, requester.id, target.id)

    status = follow_service.send_follow_request(db, requester.id, target.id)

    assert status == FollowRequestStatus.ACCEPTED
    assert len(_notifications(db, target.id, NotificationKind.FOLLOW_REQUEST)) == 1


def test_block_then_accept_raises_and_request_is_declined(db, make_actor):
    requester = make_actor()
    target = make_actor()
    follow_service.send_follow_request(db, requester.id, target.id)
    follow_service.block(db, target.id, requester.id)

    with pytest.raises(BlockedError):
        follow_service.accept_follow_request(db, requester.id, target.id)

    assert _edge_rows(db, requester.id, target.id) == 0
    assert follow_service.get_follow_request_status(db, requester.id, target.id) == FollowRequestStatus.DECLINED
    assert follow_service.cancel_follow_request(db, requester.id, target.id) is False
    # Declining under a block is silent
    assert _notifications(db, requester.id, NotificationKind.FOLLOW_REQUEST_DECLINED) == []

    follow_service.unblock(db, target.id, requester.id)
    assert follow_service.send_follow_request(db, requester.id, target.id) == FollowRequestStatus.PENDING


def test_decline_then_resend_resets_to_pending(db, make_actor):
    requester = make_actor()
    target = make_actor()
    follow_service.send_follow_request(db, requester.id, target.id)

    assert follow_service.decline_follow_request(db, requester.id, target.id) is True
    assert follow_service.decline_follow_request(db, requester.id, target.id) is False
    assert follow_service.accept_follow_request(db, requester.id, target.id) is False
    assert len(_notifications(db, requester.id, NotificationKind.FOLLOW_REQUEST_DECLINED)) == 1

    status = follow_service.send_follow_request(db, requester.id, target.id)

    assert status == FollowRequestStatus.PENDING
    assert _request_rows(db, requester.id, target.id) == 1
    assert len(_notifications(db, target.id, NotificationKind.FOLLOW_REQUEST)) == 2


def test_cancel_returns_state_to_none(db, make_actor):
    requester = make_actor()
    target = make_actor()
    follow_service.send_follow_request(db, requester.id, target.id)

    assert follow_service.cancel_follow_request(db, requester.id, target.id) is True
    assert follow_service.cancel_follow_request(db, requester.id, target.id) is False
    assert follow_service.get_follow_request_status(db, requester.id, target.id) is None
    assert follow_service.accept_follow_request(db, requester.id, target.id) is False


def test_cancel_is_scoped_to_requester(db, make_actor):
    requester = make_actor()
    target = make_actor()
    follow_service.send_follow_request(db, requester.id, target.id)

    # Reversed pair has nothing pending
    assert follow_service.cancel_follow_request(db, target.id, requester.id) is False
    assert follow_service.get_follow_request_status(db, requester.id, target.id) == FollowRequestStatus.PENDING


def test_incoming_and_outgoing_listings(db, make_actor):
    target = make_actor()
    first = make_actor()
    second = make_actor()
    follow_service.send_follow_request(db, first.id, target.id)
    follow_service.send_follow_request(db, second.id, target.id)
    follow_service.decline_follow_request(db, second.id, target.id)

    incoming = follow_service.list_incoming_requests(db, target.id)
    declined = follow_service.list_incoming_requests(db, target.id, FollowRequestStatus.DECLINED)
    outgoing = follow_service.list_outgoing_requests(db, first.id)

    assert [r.requester_actor_id for r in incoming] == [first.id]
    assert [r.requester_actor_id for r in declined] == [second.id]
    assert [r.target_actor_id for r in outgoing] == [target.id]


# =============================================================================
# Direct follows
# =============================================================================


def test_follow_unfollow_refollow_reuses_row(db, make_actor):
    follower = make_actor()
    followed = make_actor()

    follow_service.follow(db, follower.id, followed.id)
    follow_service.follow(db, follower.id, followed.id)
    assert len(_notifications(db, followed.id, NotificationKind.FOLLOW)) == 1

    assert follow_service.unfollow(db, follower.id, followed.id) is True
    assert follow_service.unfollow(db, follower.id, followed.id) is False
    assert follow_service.is_following(db, follower.id, followed.id) is False

    edge = follow_service.follow(db, follower.id, followed.id)
    assert edge.is_active is True
    assert _edge_rows(db, follower.id, followed.id) == 1
    assert len(_notifications(db, followed.id, NotificationKind.FOLLOW)) == 2


def test_follow_rejects_self_and_blocked(db, make_actor):
    a = make_actor()
    b = make_actor()
    follow_service.block(db, b.id, a.id)

    with pytest.raises(InvalidOperationError):
        follow_service.follow(db, a.id, a.id)
    with pytest.raises(BlockedError):
        follow_service.follow(db, a.id, b.id)


def test_unfollow_allows_new_request(db, make_actor):
    requester = make_actor()
    target = make_actor()
    follow_service.send_follow_request(db, requester.id, target.id)
    follow_service.accept_follow_request(db, requester.id, target.id)

    follow_service.unfollow(db, requester.id, target.id)

    assert follow_service.get_follow_request_status(db, requester.id, target.id) is None
    assert follow_service.send_follow_request(db, requester.id, target.id) == FollowRequestStatus.PENDING


def test_follower_counts_only_count_active_edges(db, make_actor):
    star = make_actor()
    fans = [make_actor() for _ in range(3)]
    for fan in fans:
        follow_service.follow(db, fan.id, star.id)
    follow_service.unfollow(db, fans[0].id, star.id)
    follow_service.follow(db, star.id, fans[1].id)

    counts = follow_service.follower_counts(db, star.id)

    assert counts.followers == 2
    assert counts.following == 1


# =============================================================================
# Blocks
# =============================================================================


def test_block_is_idempotent_and_bidirectional(db, make_actor):
    a = make_actor()
    b = make_actor()

    first = follow_service.block(db, a.id, b.id, reason="spam")
    second = follow_service.block(db, a.id, b.id)

    assert first.id == second.id
    assert block_service.is_blocked_between(db, a.id, b.id) is True
    assert block_service.is_blocked_between(db, b.id, a.id) is True
    assert block_service.is_blocking(db, a.id, b.id) is True
    assert block_service.is_blocked_by(db, b.id, a.id) is True
    assert block_service.is_blocking(db, b.id, a.id) is False


def test_block_self_is_rejected(db, make_actor):
    a = make_actor()

    with pytest.raises(InvalidOperationError):
        follow_service.block(db, a.id, a.id)


def test_block_ends_follows_in_both_directions(db, make_actor):
    a = make_actor()
    b = make_actor()
    bystander = make_actor()
    follow_service.follow(db, a.id, b.id)
    follow_service.follow(db, b.id, a.id)
    follow_service.follow(db, bystander.id, b.id)

    follow_service.block(db, b.id, a.id)

    assert follow_service.is_following(db, a.id, b.id) is False
    assert follow_service.is_following(db, b.id, a.id) is False
    assert follow_service.follower_counts(db, b.id) == follow_service.FollowCounts(followers=1, following=0)
    assert follow_service.follower_counts(db, a.id) == follow_service.FollowCounts(followers=0, following=0)
    # Rows are kept for reactivation after unblocking
    assert _edge_rows(db, a.id, b.id) == 1


def test_block_removes_accepted_request(db, make_actor):
    requester = make_actor()
    target = make_actor()
    follow_service.send_follow_request(db, requester.id, target.id)
    follow_service.accept_follow_request(db, requester.id, target.id)

    follow_service.block(db, requester.id, target.id)

    assert follow_service.get_follow_request_status(db, requester.id, target.id) is None
    assert follow_service.is_following(db, requester.id, target.id) is False

    follow_service.unblock(db, requester.id, target.id)
    assert follow_service.send_follow_request(db, requester.id, target.id) == FollowRequestStatus.PENDING


def test_unblock_and_block_set(db, make_actor):
    viewer = make_actor()
    blocked = make_actor()
    blocker = make_actor()
    follow_service.block(db, viewer.id, blocked.id)
    follow_service.block(db, blocker.id, viewer.id)

    block_set = block_service.get_block_set(db, viewer.id)
    assert block_set.i_blocked == {blocked.id}
    assert block_set.blocked_me == {blocker.id}
    assert block_set.hides(blocked.id) and block_set.hides(blocker.id)
    assert block_set.hides(None) is False
    assert [edge.blocked_actor_id for edge in block_service.list_blocked(db, viewer.id)] == [blocked.id]

    assert follow_service.unblock(db, viewer.id, blocked.id) is True
    assert follow_service.unblock(db, viewer.id, blocked.id) is False
    assert block_service.is_blocked_between(db, viewer.id, blocked.id) is False
