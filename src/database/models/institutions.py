"""Institution model and lifecycle status enum."""

import uuid
from datetime import datetime, timezone
from enum import Enum
from uuid import UUID

from sqlalchemy import JSON, DateTime, Enum as SQLAlchemyEnum, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class InstitutionStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    DELETED = "deleted"

    # Internal marker while remote users are being provisioned; never
    # returned to API readers.
    PENDING = "pending"


def status_column_type() -> SQLAlchemyEnum:
    return SQLAlchemyEnum(
        InstitutionStatus,
        native_enum=False,
        length=16,
        values_callable=lambda enum_cls: [member.value for member in enum_cls],
    )


class Institution(Base):
    __tablename__ = "institutions"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    status: Mapped[InstitutionStatus] = mapped_column(
        status_column_type(),
        default=InstitutionStatus.PENDING,
        nullable=False,
        index=True,
    )
    user_ids: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    classrooms = relationship(
        "Classroom",
        back_populates="institution",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by="Classroom.created_at",
    )

    __mapper_args__ = {"version_id_col": version}
