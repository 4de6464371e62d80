"""
Inbox Router - per-actor inbox visibility endpoints.

Every endpoint takes explicit conversation and actor ids; operations on an
entry the actor does not have return ok=false rather than an error.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from actor_engine.core.deps import get_db, require_internal_secret
from actor_engine.db.enums import InboxFolder
from actor_engine.schemas import (
    DeleteForMeRequest,
    EntryRef,
    FolderRequest,
    InboxEntryRead,
    InboxFlagsRequest,
    InboxReadRequest,
    MuteRequest,
    OkResponse,
    PinRequest,
)
from actor_engine.services import inbox_service
from actor_engine.services.errors import InvalidOperationError, NotFoundError

router = APIRouter(
    prefix="/inbox",
    tags=["inbox"],
    dependencies=[Depends(require_internal_secret)],
)


@router.get("", response_model=list[InboxEntryRead])
def list_inbox(
    actor_id: UUID = Query(..., alias="actorId"),
    folder: InboxFolder | None = Query(None),
    include_archived: bool = Query(False, alias="includeArchived"),
    db: Session = Depends(get_db),
):
    """Visible threads for an actor, most recent first."""
    return inbox_service.list_visible_inbox(
        db, actor_id, folder=folder, include_archived=include_archived
    )


@router.post("/flags", response_model=OkResponse)
def set_flags(data: InboxFlagsRequest, db: Session = Depends(get_db)):
    """Patch visibility flags. Unknown keys are ignored."""
    try:
        ok = inbox_service.set_flags(db, data.conversation_id, data.actor_id, data.patch)
    except InvalidOperationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return OkResponse(ok=ok)


@router.post("/read", response_model=OkResponse)
def mark_read(data: InboxReadRequest, db: Session = Depends(get_db)):
    ok = inbox_service.mark_read(
        db,
        data.conversation_id,
        data.actor_id,
        last_seen_message_id=data.last_message_id,
    )
    return OkResponse(ok=ok)


@router.post("/archive", response_model=OkResponse)
def archive(data: EntryRef, db: Session = Depends(get_db)):
    return OkResponse(ok=inbox_service.archive(db, data.conversation_id, data.actor_id))


@router.post("/hide-until-new", response_model=OkResponse)
def hide_until_new(data: EntryRef, db: Session = Depends(get_db)):
    return OkResponse(ok=inbox_service.hide_until_new(db, data.conversation_id, data.actor_id))


@router.post("/unarchive", response_model=OkResponse)
def unarchive(data: EntryRef, db: Session = Depends(get_db)):
    return OkResponse(ok=inbox_service.unarchive(db, data.conversation_id, data.actor_id))


@router.post("/mute", response_model=OkResponse)
def set_muted(data: MuteRequest, db: Session = Depends(get_db)):
    return OkResponse(ok=inbox_service.set_muted(db, data.conversation_id, data.actor_id, data.muted))


@router.post("/pin", response_model=OkResponse)
def set_pinned(data: PinRequest, db: Session = Depends(get_db)):
    return OkResponse(ok=inbox_service.set_pinned(db, data.conversation_id, data.actor_id, data.pinned))


@router.post("/clear-history", response_model=OkResponse)
def clear_history(data: EntryRef, db: Session = Depends(get_db)):
    return OkResponse(
        ok=inbox_service.clear_history_from_now(db, data.conversation_id, data.actor_id)
    )


@router.post("/leave", response_model=OkResponse)
def leave_conversation(data: EntryRef, db: Session = Depends(get_db)):
    try:
        ok = inbox_service.leave_conversation(db, data.conversation_id, data.actor_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Conversation not found")
    except InvalidOperationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return OkResponse(ok=ok)


@router.post("/delete-for-me", response_model=OkResponse)
def delete_for_me(data: DeleteForMeRequest, db: Session = Depends(get_db)):
    ok = inbox_service.delete_thread_for_me(
        db, data.conversation_id, data.actor_id, archive=data.archive
    )
    return OkResponse(ok=ok)


@router.post("/folder", response_model=OkResponse)
def move_to_folder(data: FolderRequest, db: Session = Depends(get_db)):
    ok = inbox_service.move_to_folder(db, data.conversation_id, data.actor_id, data.folder)
    return OkResponse(ok=ok)
