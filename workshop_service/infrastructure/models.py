# workshop_service/infrastructure/models.py
from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    JSON,
    TIMESTAMP,
    Column,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from ..domain.entities import EnrollmentStatus, default_notification_preferences


class Base(DeclarativeBase): pass


# learner -> workshops they requested to join
user_workshops = Table(
    "user_workshops",
    Base.metadata,
    Column("user_id", ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("workshop_id", ForeignKey("workshops.id", ondelete="CASCADE"), primary_key=True),
)

workshop_activities = Table(
    "workshop_activities",
    Base.metadata,
    Column("workshop_id", ForeignKey("workshops.id", ondelete="CASCADE"), primary_key=True),
    Column("activity_id", ForeignKey("activities.id", ondelete="CASCADE"), primary_key=True),
)


class UserORM(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(1024), nullable=False)
    role: Mapped[str] = mapped_column(String(16), nullable=False)
    notification_preferences: Mapped[dict | None] = mapped_column(
        JSON, nullable=True, default=default_notification_preferences
    )

    workshops: Mapped[list["WorkshopORM"]] = relationship(
        "WorkshopORM",
        secondary=user_workshops,
        order_by="WorkshopORM.id",
    )

    def __repr__(self) -> str:
        return f"UserORM(id={self.id!r}, email={self.email!r}, role={self.role!r})"


class WorkshopORM(Base):
    __tablename__ = "workshops"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    mentor_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    activities: Mapped[list["ActivityORM"]] = relationship(
        "ActivityORM",
        secondary=workshop_activities,
        order_by="ActivityORM.id",
    )

    def __repr__(self) -> str:
        return f"WorkshopORM(id={self.id!r}, title={self.title!r})"


class ActivityORM(Base):
    __tablename__ = "activities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    schedule: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    workshop_id: Mapped[int | None] = mapped_column(
        ForeignKey("workshops.id", ondelete="SET NULL"), nullable=True, index=True
    )

    def __repr__(self) -> str:
        return f"ActivityORM(id={self.id!r}, workshop_id={self.workshop_id!r}, title={self.title!r})"


class EnrollmentORM(Base):
    __tablename__ = "enrollments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    learner_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    workshop_id: Mapped[int] = mapped_column(
        ForeignKey("workshops.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=EnrollmentStatus.PENDING.value
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now()
    )

    # lookup index only; (learner, workshop) is not unique
    __table_args__ = (Index("ix_enrollment_learner_workshop", "learner_id", "workshop_id"),)


User = UserORM
Workshop = WorkshopORM
Activity = ActivityORM
Enrollment = EnrollmentORM

__all__ = [
    "Base",
    "user_workshops",
    "workshop_activities",
    "UserORM",
    "WorkshopORM",
    "ActivityORM",
    "EnrollmentORM",
    "User",
    "Workshop",
    "Activity",
    "Enrollment",
]
