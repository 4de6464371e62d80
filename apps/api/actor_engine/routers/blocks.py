"""Block API endpoints. Writes go through the relationship engine."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from actor_engine.core.deps import get_db, require_internal_secret
from actor_engine.schemas import BlockPair, BlockRead, BlockStatusResponse, OkResponse
from actor_engine.services import block_service, follow_service
from actor_engine.services.errors import InvalidOperationError, NotFoundError

router = APIRouter(
    tags=["blocks"],
    dependencies=[Depends(require_internal_secret)],
)


@router.post("/blocks", response_model=OkResponse)
def block(data: BlockPair, db: Session = Depends(get_db)):
    try:
        follow_service.block(db, data.blocker_actor_id, data.blocked_actor_id, reason=data.reason)
    except InvalidOperationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return OkResponse(ok=True)


@router.delete("/blocks", response_model=OkResponse)
def unblock(data: BlockPair, db: Session = Depends(get_db)):
    ok = follow_service.unblock(db, data.blocker_actor_id, data.blocked_actor_id)
    return OkResponse(ok=ok)


@router.get("/blocks", response_model=list[BlockRead])
def list_blocked(
    actor_id: UUID = Query(..., alias="actorId"),
    db: Session = Depends(get_db),
):
    return block_service.list_blocked(db, actor_id)


@router.get("/blocks/status", response_model=BlockStatusResponse)
def block_status(
    actor_id: UUID = Query(..., alias="actorId"),
    other_actor_id: UUID = Query(..., alias="otherActorId"),
    db: Session = Depends(get_db),
):
    is_blocking = block_service.is_blocking(db, actor_id, other_actor_id)
    is_blocked_by = block_service.is_blocked_by(db, actor_id, other_actor_id)
    return BlockStatusResponse(
        is_blocking=is_blocking,
        is_blocked_by=is_blocked_by,
        blocked_between=is_blocking or is_blocked_by,
    )
