"""Conversation API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from actor_engine.core.deps import get_db, require_internal_secret
from actor_engine.schemas import (
    ConversationResponse,
    DirectConversationRequest,
    MessageReceived,
    MessageReceivedResponse,
    OneToOneRequest,
)
from actor_engine.services import inbox_service
from actor_engine.services.errors import BlockedError, InvalidOperationError, NotFoundError

router = APIRouter(
    prefix="/conversations",
    tags=["conversations"],
    dependencies=[Depends(require_internal_secret)],
)


@router.post("/one-to-one", response_model=ConversationResponse)
def get_or_create_one_to_one(data: OneToOneRequest, db: Session = Depends(get_db)):
    """Same conversation regardless of argument order."""
    try:
        conversation_id = inbox_service.get_or_create_one_to_one(db, data.actor_a, data.actor_b)
    except InvalidOperationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return ConversationResponse(conversation_id=conversation_id)


@router.post("/direct", response_model=ConversationResponse)
def start_direct_conversation(data: DirectConversationRequest, db: Session = Depends(get_db)):
    try:
        conversation_id = inbox_service.start_direct_conversation(
            db, data.from_actor_id, data.to_actor_id
        )
    except InvalidOperationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except BlockedError as e:
        raise HTTPException(status_code=403, detail=str(e))
    return ConversationResponse(conversation_id=conversation_id)


@router.post("/{conversation_id}/messages", response_model=MessageReceivedResponse)
def message_received(
    conversation_id: UUID,
    data: MessageReceived,
    db: Session = Depends(get_db),
):
    """Apply a stored message to members' inbox entries."""
    try:
        recipients = inbox_service.record_incoming_message(
            db,
            conversation_id,
            data.sender_actor_id,
            data.message_id,
            sent_at=data.sent_at,
        )
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Conversation not found")
    except InvalidOperationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return MessageReceivedResponse(ok=True, recipients=recipients)
