"""
Actor Directory - one canonical actor per human or organization.

Owners (humans, organizations) live in their own registries; everything else in
the engine references actors. Actors are created lazily on first lookup and are
never deleted, only deactivated.
"""

from __future__ import annotations

import logging
import re
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from actor_engine.db.enums import ActorKind
from actor_engine.db.models import Actor, Human, Organization, OrganizationManager
from actor_engine.services.errors import (
    InvalidOperationError,
    NotFoundError,
    StorageError,
    storage_errors,
)


logger = logging.getLogger(__name__)

_SLUG_CLEANUP = re.compile(r"[^a-z0-9]+")


# =============================================================================
# Owner registries
# =============================================================================


def _normalize_slug(value: str) -> str:
    return _SLUG_CLEANUP.sub("-", value.strip().lower()).strip("-")


@storage_errors
def register_human(db: Session, username: str, display_name: str | None = None) -> Human:
    """Register a human profile. Usernames are stored lowercase and must be unique."""
    normalized = username.strip().lower()
    if not normalized:
        raise InvalidOperationError("username is required")

    human = Human(username=normalized, display_name=(display_name or normalized).strip())
    try:
        with db.begin_nested():
            db.add(human)
    except IntegrityError as exc:
        raise InvalidOperationError(f"username '{normalized}' is already taken") from exc

    db.commit()
    db.refresh(human)
    logger.info("Registered human %s (%s)", human.id, human.username)
    return human


@storage_errors
def register_organization(
    db: Session,
    owner_human_id: UUID,
    name: str,
    slug: str | None = None,
) -> Organization:
    """
    Register an organization owned by an existing human.

    The owner becomes an active manager and the organization actor is resolved
    eagerly so the organization can participate right away.

    Raises:
        NotFoundError: owner does not exist or is inactive
        InvalidOperationError: empty name or slug already taken
    """
    _require_active_human(db, owner_human_id)

    cleaned_name = name.strip()
    if not cleaned_name:
        raise InvalidOperationError("organization name is required")
    normalized_slug = _normalize_slug(slug or cleaned_name)
    if not normalized_slug:
        raise InvalidOperationError("organization slug is empty after normalization")

    org = Organization(name=cleaned_name, slug=normalized_slug, owner_human_id=owner_human_id)
    try:
        with db.begin_nested():
            db.add(org)
            db.flush()
            db.add(OrganizationManager(organization_id=org.id, human_id=owner_human_id))
    except IntegrityError as exc:
        raise InvalidOperationError(f"slug '{normalized_slug}' is already taken") from exc

    _get_or_create_actor(db, ActorKind.ORGANIZATION, org.id)
    db.commit()
    db.refresh(org)
    logger.info("Registered organization %s (%s) owned by %s", org.id, org.slug, owner_human_id)
    return org


def get_human(db: Session, human_id: UUID) -> Human | None:
    return db.get(Human, human_id)


def get_organization(db: Session, organization_id: UUID) -> Organization | None:
    return db.get(Organization, organization_id)


def _require_active_human(db: Session, human_id: UUID) -> Human:
    human = db.get(Human, human_id)
    if human is None or not human.is_active:
        raise NotFoundError(f"human {human_id} not found")
    return human


def _require_active_organization(db: Session, organization_id: UUID) -> Organization:
    org = db.get(Organization, organization_id)
    if org is None or not org.is_active:
        raise NotFoundError(f"organization {organization_id} not found")
    return org


# =============================================================================
# Actor resolution
# =============================================================================


def _find_actor(db: Session, kind: ActorKind, owner_ref: UUID) -> Actor | None:
    return db.execute(
        select(Actor).where(Actor.kind == kind.value, Actor.owner_ref == owner_ref)
    ).scalar_one_or_none()


def _get_or_create_actor(db: Session, kind: ActorKind, owner_ref: UUID) -> Actor:
    """
    Find or create the actor for an owner. Does not commit.

    A concurrent creator losing the unique-constraint race re-reads the
    winner's row exactly once.
    """
    actor = _find_actor(db, kind, owner_ref)
    if actor is not None:
        return actor

    try:
        with db.begin_nested():
            actor = Actor(kind=kind.value, owner_ref=owner_ref)
            db.add(actor)
    except IntegrityError:
        logger.info("Actor for %s %s created concurrently; re-reading", kind.value, owner_ref)
        actor = _find_actor(db, kind, owner_ref)
        if actor is None:
            raise StorageError(f"actor for {kind.value} {owner_ref} vanished after conflict")
        return actor

    logger.info("Created %s actor %s for owner %s", kind.value, actor.id, owner_ref)
    return actor


@storage_errors
def resolve_actor_for_human(db: Session, human_id: UUID) -> Actor:
    """
    Return the actor for a human, creating it if absent.

    Raises:
        NotFoundError: the human does not exist or is inactive
    """
    _require_active_human(db, human_id)
    actor = _get_or_create_actor(db, ActorKind.HUMAN, human_id)
    db.commit()
    return actor


@storage_errors
def resolve_actor_for_organization(db: Session, organization_id: UUID) -> Actor:
    """
    Return the actor for an organization, creating it if absent.

    Raises:
        NotFoundError: the organization does not exist or is inactive
    """
    _require_active_organization(db, organization_id)
    actor = _get_or_create_actor(db, ActorKind.ORGANIZATION, organization_id)
    db.commit()
    return actor


def resolve_actor(db: Session, owner_kind: ActorKind | str, owner_id: UUID) -> Actor:
    """Dispatch on owner kind."""
    if not isinstance(owner_kind, ActorKind):
        if not ActorKind.has_value(owner_kind):
            raise InvalidOperationError(f"unknown owner kind '{owner_kind}'")
        owner_kind = ActorKind(owner_kind)

    if owner_kind == ActorKind.HUMAN:
        return resolve_actor_for_human(db, owner_id)
    return resolve_actor_for_organization(db, owner_id)


def get_actor(db: Session, actor_id: UUID) -> Actor:
    """Get an actor by id. Raises NotFoundError if missing."""
    actor = db.get(Actor, actor_id)
    if actor is None:
        raise NotFoundError(f"actor {actor_id} not found")
    return actor


def actors_of(db: Session, ids: list[UUID]) -> list[Actor]:
    """
    Batch hydrate actors.

    Preserves request order, drops duplicates and silently omits unknown ids.
    """
    if not ids:
        return []
    rows = db.execute(select(Actor).where(Actor.id.in_(set(ids)))).scalars().all()
    by_id = {actor.id: actor for actor in rows}

    result: list[Actor] = []
    seen: set[UUID] = set()
    for actor_id in ids:
        if actor_id in seen:
            continue
        seen.add(actor_id)
        actor = by_id.get(actor_id)
        if actor is not None:
            result.append(actor)
    return result


@storage_errors
def deactivate_actor(db: Session, actor_id: UUID) -> Actor:
    actor = get_actor(db, actor_id)
    if actor.is_active:
        actor.is_active = False
        db.commit()
        logger.info("Deactivated actor %s", actor_id)
    return actor


@storage_errors
def set_sandboxed(db: Session, actor_id: UUID, sandboxed: bool) -> Actor:
    """Quarantine an actor, or release it."""
    actor = get_actor(db, actor_id)
    if actor.is_sandboxed != sandboxed:
        actor.is_sandboxed = sandboxed
        db.commit()
        logger.info("Actor %s sandboxed=%s", actor_id, sandboxed)
    return actor


# =============================================================================
# Organization managers
# =============================================================================


def _find_manager(db: Session, organization_id: UUID, human_id: UUID) -> OrganizationManager | None:
    return db.execute(
        select(OrganizationManager).where(
            OrganizationManager.organization_id == organization_id,
            OrganizationManager.human_id == human_id,
        )
    ).scalar_one_or_none()


@storage_errors
def add_manager(db: Session, organization_id: UUID, human_id: UUID) -> OrganizationManager:
    """Add (or reactivate) a manager for an organization."""
    _require_active_organization(db, organization_id)
    _require_active_human(db, human_id)

    manager = _find_manager(db, organization_id, human_id)
    if manager is None:
        try:
            with db.begin_nested():
                manager = OrganizationManager(organization_id=organization_id, human_id=human_id)
                db.add(manager)
        except IntegrityError:
            manager = _find_manager(db, organization_id, human_id)
            if manager is None:
                raise
    manager.is_active = True
    db.commit()
    logger.info("Human %s manages organization %s", human_id, organization_id)
    return manager


@storage_errors
def remove_manager(db: Session, organization_id: UUID, human_id: UUID) -> bool:
    """
    Deactivate a manager. Returns False if they were not an active manager.

    The owner cannot be removed.
    """
    org = _require_active_organization(db, organization_id)
    if org.owner_human_id == human_id:
        raise InvalidOperationError("the organization owner cannot be removed as manager")

    manager = _find_manager(db, organization_id, human_id)
    if manager is None or not manager.is_active:
        return False
    manager.is_active = False
    db.commit()
    logger.info("Human %s no longer manages organization %s", human_id, organization_id)
    return True


@storage_errors
def list_manager_actor_ids(db: Session, organization_id: UUID) -> list[UUID]:
    """
    Resolve every active manager to their human actor id.

    Inactive humans are skipped. Order is stable (manager creation time).
    """
    _require_active_organization(db, organization_id)
    rows = db.execute(
        select(OrganizationManager.human_id)
        .join(Human, Human.id == OrganizationManager.human_id)
        .where(
            OrganizationManager.organization_id == organization_id,
            OrganizationManager.is_active.is_(True),
            Human.is_active.is_(True),
        )
        .order_by(OrganizationManager.created_at, OrganizationManager.id)
    ).scalars().all()

    actor_ids = [_get_or_create_actor(db, ActorKind.HUMAN, human_id).id for human_id in rows]
    db.commit()
    return actor_ids
