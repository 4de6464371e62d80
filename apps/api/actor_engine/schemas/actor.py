"""Actor and owner-registry schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import field_validator

from actor_engine.db.enums import ActorKind
from actor_engine.schemas.base import CamelModel


class ActorResolveRequest(CamelModel):
    owner_kind: ActorKind
    owner_id: UUID


class ActorResolveResponse(CamelModel):
    actor_id: UUID


class ActorRead(CamelModel):
    id: UUID
    kind: ActorKind
    owner_ref: UUID
    is_sandboxed: bool
    is_active: bool
    created_at: datetime


class SandboxUpdate(CamelModel):
    sandboxed: bool = True


class HumanCreate(CamelModel):
    username: str
    display_name: str | None = None

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        """Lowercase, alphanumeric with optional dots/hyphens/underscores."""
        v = v.lower().strip()
        if not v or not v.replace(".", "").replace("-", "").replace("_", "").isalnum():
            raise ValueError(
                "Username must be alphanumeric with optional dots/hyphens/underscores"
            )
        return v


class HumanRead(CamelModel):
    id: UUID
    username: str
    display_name: str
    created_at: datetime
    actor_id: UUID | None = None


class OrganizationCreate(CamelModel):
    owner_human_id: UUID
    name: str
    slug: str | None = None


class OrganizationRead(CamelModel):
    id: UUID
    name: str
    slug: str
    owner_human_id: UUID
    created_at: datetime
    actor_id: UUID | None = None


class ManagerChange(CamelModel):
    human_id: UUID


class ManagerRead(CamelModel):
    organization_id: UUID
    human_id: UUID
    is_active: bool
