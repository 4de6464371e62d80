"""Actor directory API endpoints: actors, humans, organizations and managers."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from actor_engine.core.deps import get_db, require_internal_secret
from actor_engine.schemas import (
    ActorRead,
    ActorResolveRequest,
    ActorResolveResponse,
    HumanCreate,
    HumanRead,
    ManagerChange,
    ManagerRead,
    OkResponse,
    OrganizationCreate,
    OrganizationRead,
    SandboxUpdate,
)
from actor_engine.services import actor_service
from actor_engine.services.errors import InvalidOperationError, NotFoundError

router = APIRouter(
    tags=["actors"],
    dependencies=[Depends(require_internal_secret)],
)


# =============================================================================
# Actors
# =============================================================================


@router.post("/actors/resolve", response_model=ActorResolveResponse)
def resolve_actor(
    data: ActorResolveRequest,
    db: Session = Depends(get_db),
):
    """Return the canonical actor for a human or organization, creating it if absent."""
    try:
        actor = actor_service.resolve_actor(db, data.owner_kind, data.owner_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return ActorResolveResponse(actor_id=actor.id)


@router.get("/actors", response_model=list[ActorRead])
def list_actors(
    ids: list[UUID] = Query(default=[]),
    db: Session = Depends(get_db),
):
    """Batch hydrate actors. Unknown ids are omitted; order follows the request."""
    return actor_service.actors_of(db, ids)


@router.post("/actors/{actor_id}/deactivate", response_model=ActorRead)
def deactivate_actor(actor_id: UUID, db: Session = Depends(get_db)):
    try:
        return actor_service.deactivate_actor(db, actor_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Actor not found")


@router.post("/actors/{actor_id}/sandbox", response_model=ActorRead)
def set_sandboxed(
    actor_id: UUID,
    data: SandboxUpdate,
    db: Session = Depends(get_db),
):
    try:
        return actor_service.set_sandboxed(db, actor_id, data.sandboxed)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Actor not found")


# =============================================================================
# Owner registries
# =============================================================================


@router.post("/humans", response_model=HumanRead, status_code=status.HTTP_201_CREATED)
def register_human(data: HumanCreate, db: Session = Depends(get_db)):
    try:
        human = actor_service.register_human(db, data.username, data.display_name)
    except InvalidOperationError as e:
        raise HTTPException(status_code=409, detail=str(e))
    actor = actor_service.resolve_actor_for_human(db, human.id)
    return HumanRead(
        id=human.id,
        username=human.username,
        display_name=human.display_name,
        created_at=human.created_at,
        actor_id=actor.id,
    )


@router.post("/organizations", response_model=OrganizationRead, status_code=status.HTTP_201_CREATED)
def register_organization(data: OrganizationCreate, db: Session = Depends(get_db)):
    try:
        org = actor_service.register_organization(
            db,
            owner_human_id=data.owner_human_id,
            name=data.name,
            slug=data.slug,
        )
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Owner not found")
    except InvalidOperationError as e:
        raise HTTPException(status_code=409, detail=str(e))
    actor = actor_service.resolve_actor_for_organization(db, org.id)
    return OrganizationRead(
        id=org.id,
        name=org.name,
        slug=org.slug,
        owner_human_id=org.owner_human_id,
        created_at=org.created_at,
        actor_id=actor.id,
    )


@router.post("/organizations/{organization_id}/managers", response_model=ManagerRead)
def add_manager(
    organization_id: UUID,
    data: ManagerChange,
    db: Session = Depends(get_db),
):
    try:
        return actor_service.add_manager(db, organization_id, data.human_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/organizations/{organization_id}/managers", response_model=OkResponse)
def remove_manager(
    organization_id: UUID,
    data: ManagerChange,
    db: Session = Depends(get_db),
):
    try:
        removed = actor_service.remove_manager(db, organization_id, data.human_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidOperationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return OkResponse(ok=removed)
