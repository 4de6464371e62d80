"""Follow and follow-request API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from actor_engine.core.deps import get_db, require_internal_secret
from actor_engine.db.enums import FollowRequestStatus
from actor_engine.schemas import (
    FollowCountsResponse,
    FollowEdgeRead,
    FollowPair,
    FollowRequestPair,
    FollowRequestRead,
    FollowRequestStatusResponse,
    OkResponse,
)
from actor_engine.services import follow_service
from actor_engine.services.errors import BlockedError, InvalidOperationError, NotFoundError

router = APIRouter(
    tags=["follows"],
    dependencies=[Depends(require_internal_secret)],
)


# =============================================================================
# Follow requests
# =============================================================================


@router.post("/follow-requests", response_model=FollowRequestStatusResponse)
def send_follow_request(data: FollowRequestPair, db: Session = Depends(get_db)):
    """
    Send a follow request.

    Returns the existing status unchanged when a request is already pending
    or accepted.
    """
    try:
        request_status = follow_service.send_follow_request(
            db, data.requester_actor_id, data.target_actor_id
        )
    except InvalidOperationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except BlockedError as e:
        raise HTTPException(status_code=403, detail=str(e))
    return FollowRequestStatusResponse(status=request_status)


@router.post("/follow-requests/accept", response_model=OkResponse)
def accept_follow_request(data: FollowRequestPair, db: Session = Depends(get_db)):
    try:
        ok = follow_service.accept_follow_request(db, data.requester_actor_id, data.target_actor_id)
    except BlockedError as e:
        raise HTTPException(status_code=403, detail=str(e))
    return OkResponse(ok=ok)


@router.post("/follow-requests/decline", response_model=OkResponse)
def decline_follow_request(data: FollowRequestPair, db: Session = Depends(get_db)):
    ok = follow_service.decline_follow_request(db, data.requester_actor_id, data.target_actor_id)
    return OkResponse(ok=ok)


@router.post("/follow-requests/cancel", response_model=OkResponse)
def cancel_follow_request(data: FollowRequestPair, db: Session = Depends(get_db)):
    ok = follow_service.cancel_follow_request(db, data.requester_actor_id, data.target_actor_id)
    return OkResponse(ok=ok)


@router.get("/follow-requests/incoming", response_model=list[FollowRequestRead])
def list_incoming_requests(
    actor_id: UUID = Query(..., alias="actorId"),
    request_status: FollowRequestStatus = Query(FollowRequestStatus.PENDING, alias="status"),
    db: Session = Depends(get_db),
):
    return follow_service.list_incoming_requests(db, actor_id, request_status)


@router.get("/follow-requests/outgoing", response_model=list[FollowRequestRead])
def list_outgoing_requests(
    actor_id: UUID = Query(..., alias="actorId"),
    request_status: FollowRequestStatus = Query(FollowRequestStatus.PENDING, alias="status"),
    db: Session = Depends(get_db),
):
    return follow_service.list_outgoing_requests(db, actor_id, request_status)


@router.get("/follow-requests/status", response_model=FollowRequestStatusResponse)
def get_follow_request_status(
    requester_actor_id: UUID = Query(..., alias="requesterActorId"),
    target_actor_id: UUID = Query(..., alias="targetActorId"),
    db: Session = Depends(get_db),
):
    """Status of the request, or null when none exists."""
    return FollowRequestStatusResponse(
        status=follow_service.get_follow_request_status(db, requester_actor_id, target_actor_id)
    )


# =============================================================================
# Follows
# =============================================================================


@router.post("/follows", response_model=FollowEdgeRead)
def follow(data: FollowPair, db: Session = Depends(get_db)):
    try:
        return follow_service.follow(db, data.follower_actor_id, data.followed_actor_id)
    except InvalidOperationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except BlockedError as e:
        raise HTTPException(status_code=403, detail=str(e))


@router.delete("/follows", response_model=OkResponse)
def unfollow(data: FollowPair, db: Session = Depends(get_db)):
    ok = follow_service.unfollow(db, data.follower_actor_id, data.followed_actor_id)
    return OkResponse(ok=ok)


@router.get("/follows/counts", response_model=FollowCountsResponse)
def follower_counts(
    actor_id: UUID = Query(..., alias="actorId"),
    db: Session = Depends(get_db),
):
    counts = follow_service.follower_counts(db, actor_id)
    return FollowCountsResponse(followers=counts.followers, following=counts.following)
