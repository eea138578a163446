from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class Target(Base):
    __tablename__ = "targets"
    __table_args__ = (
        Index("ix_targets_is_running", "is_running"),
        Index("ix_targets_updated_at", "updated_at"),
    )
    # fetch server-generated timestamps on flush; async sessions cannot lazy-load them
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    url: Mapped[str] = mapped_column(String(2048), nullable=False)
    check_interval_sec: Mapped[int] = mapped_column(Integer, nullable=False)
    is_running: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    expected_status_code: Mapped[int | None] = mapped_column(Integer)
    consecutive_failures: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    active_alert: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    check_results: Mapped[list["CheckResult"]] = relationship(
        back_populates="target",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="raise",
    )


class CheckResult(Base):
    __tablename__ = "check_results"
    __table_args__ = (
        Index("ix_check_results_target_time", "target_id", "checked_at"),
        Index("ix_check_results_checked_at", "checked_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    target_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("targets.id", ondelete="CASCADE"),
        nullable=False,
    )
    checked_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    http_status: Mapped[int | None] = mapped_column(Integer)
    latency_ms: Mapped[int | None] = mapped_column(Integer)
    is_up: Mapped[bool] = mapped_column(Boolean, nullable=False)
    error: Mapped[str | None] = mapped_column(Text)

    target: Mapped[Target] = relationship(back_populates="check_results", lazy="raise")


class ScheduleEntityRow(Base):
    """Durable state of one schedule entity.

    Owned by the entity, not by the registry: there is no foreign key to
    ``targets``, so deleting a target row leaves this row in place.
    """

    __tablename__ = "schedule_entities"
    __table_args__ = (
        Index("ix_schedule_entities_next_run_at", "next_run_at"),
    )

    target_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    check_interval_sec: Mapped[int] = mapped_column(Integer, nullable=False)
    next_run_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    wake_token: Mapped[str | None] = mapped_column(String(64))
    last_handled_token: Mapped[str | None] = mapped_column(String(64))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
