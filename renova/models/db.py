"""SQLAlchemy ORM models for Renova.

Three collections are scoped to the owning profile: profiles (identity and
credit balance), projects, and the generations saved into a project.
processed_purchases records the Hotmart transactions already credited.
Deleting a project cascades to its generations (ORM cascade plus ON DELETE CASCADE).
"""

import uuid
from datetime import UTC, datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    pass


class Profile(Base):
    __tablename__ = "profiles"
    __table_args__ = (CheckConstraint("credits >= 0", name="ck_profiles_credits_non_negative"),)

    # Same id as the auth provider's user id (JWT "sub")
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    first_name: Mapped[str] = mapped_column(String(255), default="")
    last_name: Mapped[str] = mapped_column(String(255), default="")
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    credits: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )

    projects: Mapped[list["Project"]] = relationship(
        back_populates="owner", cascade="all, delete"
    )


class Project(Base):
    __tablename__ = "projects"
    __table_args__ = (
        CheckConstraint("length(name) > 0", name="ck_projects_name_not_empty"),
        Index("idx_projects_user_created", "user_id", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    original_image: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )

    owner: Mapped["Profile"] = relationship(back_populates="projects")
    generations: Mapped[list["Generation"]] = relationship(
        back_populates="project",
        cascade="all, delete",
        order_by="Generation.created_at",
    )


class Generation(Base):
    __tablename__ = "generations"
    __table_args__ = (Index("idx_generations_project", "project_id", "created_at"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"), nullable=False
    )
    generated_image: Mapped[str] = mapped_column(Text, nullable=False)
    prompt: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )

    project: Mapped["Project"] = relationship(back_populates="generations")


class ProcessedPurchase(Base):
    """Hotmart transactions already credited; a redelivered webhook is a no-op."""

    __tablename__ = "processed_purchases"

    transaction: Mapped[str] = mapped_column(String(64), primary_key=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    product_code: Mapped[str] = mapped_column(String(64), nullable=False)
    credits: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )
