"""
Notifications Router - block-aware notification endpoints.

Delivery to a blocked pair answers exactly like a delivery.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from actor_engine.core.deps import get_db, require_internal_secret
from actor_engine.schemas import (
    FanOutResponse,
    MarkAllSeenResponse,
    NotificationActorRef,
    NotificationCountResponse,
    NotificationCreate,
    NotificationMarkRead,
    NotificationRead,
    OkResponse,
    OrganizationNotificationCreate,
)
from actor_engine.services import notification_service
from actor_engine.services.errors import NotFoundError

router = APIRouter(
    tags=["notifications"],
    dependencies=[Depends(require_internal_secret)],
)


@router.post("/notifications", response_model=OkResponse)
def create_notification(data: NotificationCreate, db: Session = Depends(get_db)):
    try:
        notification_service.notify(
            db,
            data.recipient_actor_id,
            data.source_actor_id,
            data.kind,
            object_type=data.object_type,
            object_id=data.object_id,
            link_path=data.link_path,
            context=data.context,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return OkResponse(ok=True)


@router.get("/notifications", response_model=list[NotificationRead])
def list_notifications(
    actor_id: UUID = Query(..., alias="actorId"),
    unread_only: bool = Query(False, alias="unreadOnly"),
    limit: int | None = Query(None, ge=1),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    """Newest first. Pages may come back short when sources are blocked."""
    return notification_service.list_inbox(
        db,
        actor_id,
        limit=limit,
        offset=offset,
        unread_only=unread_only,
    )


@router.get("/notifications/count", response_model=NotificationCountResponse)
def count_notifications(
    actor_id: UUID = Query(..., alias="actorId"),
    db: Session = Depends(get_db),
):
    return NotificationCountResponse(
        unread=notification_service.count_unread(db, actor_id),
        unseen=notification_service.count_unseen(db, actor_id),
    )


@router.post("/notifications/mark-read", response_model=OkResponse)
def mark_read(data: NotificationMarkRead, db: Session = Depends(get_db)):
    return OkResponse(ok=notification_service.mark_read(db, data.id, data.actor_id))


@router.post("/notifications/mark-all-seen", response_model=MarkAllSeenResponse)
def mark_all_seen(data: NotificationActorRef, db: Session = Depends(get_db)):
    updated = notification_service.mark_all_seen(db, data.actor_id)
    return MarkAllSeenResponse(ok=True, updated=updated)


@router.post("/organizations/{organization_id}/notifications", response_model=FanOutResponse)
def notify_organization_managers(
    organization_id: UUID,
    data: OrganizationNotificationCreate,
    db: Session = Depends(get_db),
):
    """Fan out to every manager of the organization."""
    try:
        delivered = notification_service.notify_organization_managers(
            db,
            organization_id,
            data.source_actor_id,
            data.kind,
            object_type=data.object_type,
            object_id=data.object_id,
            link_path=data.link_path,
            context=data.context,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return FanOutResponse(ok=True, delivered=delivered)
