"""SLA configuration rows: response/resolution thresholds per scope tuple."""

from __future__ import annotations

import datetime as dt

from sqlalchemy import Boolean, CheckConstraint, DateTime, Float, ForeignKey, Index, Integer, text
from sqlalchemy.orm import Mapped, mapped_column

from sla_engine.db.base import Base
from sla_engine.models.tenant import utcnow

SCOPE_COLUMNS = ("company_id", "department_id", "incident_type_id")


class SLAConfiguration(Base):
    __tablename__ = "sla_configurations"
    __table_args__ = (
        # NULL priority ids never collide in a plain unique index, so the
        # wildcard row gets its own partial index.
        Index(
            "uq_sla_configurations_active_priority",
            *SCOPE_COLUMNS,
            "priority_id",
            unique=True,
            postgresql_where=text("is_active AND priority_id IS NOT NULL"),
            sqlite_where=text("is_active AND priority_id IS NOT NULL"),
        ),
        Index(
            "uq_sla_configurations_active_wildcard",
            *SCOPE_COLUMNS,
            unique=True,
            postgresql_where=text("is_active AND priority_id IS NULL"),
            sqlite_where=text("is_active AND priority_id IS NULL"),
        ),
        Index("ix_sla_configurations_scope", *SCOPE_COLUMNS),
        CheckConstraint("response_time_hours > 0", name="response_time_positive"),
        CheckConstraint("resolution_time_hours > 0", name="resolution_time_positive"),
        CheckConstraint("response_time_hours <= resolution_time_hours", name="response_within_resolution"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    company_id: Mapped[int] = mapped_column(ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    department_id: Mapped[int] = mapped_column(ForeignKey("departments.id", ondelete="CASCADE"), nullable=False)
    incident_type_id: Mapped[int] = mapped_column(ForeignKey("incident_types.id", ondelete="CASCADE"), nullable=False)
    priority_id: Mapped[int | None] = mapped_column(
        ForeignKey("department_priorities.id", ondelete="CASCADE"),
        nullable=True,
    )
    response_time_hours: Mapped[float] = mapped_column(Float, nullable=False)
    resolution_time_hours: Mapped[float] = mapped_column(Float, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    def scope_key(self) -> tuple[int, int, int, int | None]:
        return (self.company_id, self.department_id, self.incident_type_id, self.priority_id)
