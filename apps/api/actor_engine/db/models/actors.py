"""SQLAlchemy ORM models for owners and the actors that stand for them."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from actor_engine.db.base import Base
from actor_engine.utils.time import utcnow


# =============================================================================
# Owner registries
# =============================================================================


class Human(Base):
    """
    A human profile.

    Owns exactly one human actor and may manage any number of organizations.
    """

    __tablename__ = "humans"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    display_name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default=text("true"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)


class Organization(Base):
    """
    An organizational entity (vport).

    Acts through its own actor; its managers act through their human actors.
    """

    __tablename__ = "organizations"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    owner_human_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("humans.id", ondelete="RESTRICT"), nullable=False
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default=text("true"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)

    owner: Mapped["Human"] = relationship()
    managers: Mapped[list["OrganizationManager"]] = relationship(
        back_populates="organization",
        cascade="all, delete-orphan",
    )


class OrganizationManager(Base):
    """Links a human to an organization they may act for."""

    __tablename__ = "organization_managers"
    __table_args__ = (
        UniqueConstraint("organization_id", "human_id", name="uq_org_manager"),
        Index("idx_org_manager_org_active", "organization_id", "is_active"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    human_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("humans.id", ondelete="CASCADE"), nullable=False
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default=text("true"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)

    organization: Mapped["Organization"] = relationship(back_populates="managers")
    human: Mapped["Human"] = relationship()


# =============================================================================
# Actors
# =============================================================================


class Actor(Base):
    """
    Canonical participant.

    Every relationship, inbox and notification row references actors, never
    humans or organizations directly. Exactly one actor exists per
    (kind, owner_ref); actors are deactivated, never deleted.
    """

    __tablename__ = "actors"
    __table_args__ = (
        UniqueConstraint("kind", "owner_ref", name="uq_actor_owner"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    kind: Mapped[str] = mapped_column(String(20), nullable=False)
    # Human id or organization id, depending on kind
    owner_ref: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    # "Void" realm: soft-quarantined participant
    is_sandboxed: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=text("false"), nullable=False
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default=text("true"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
