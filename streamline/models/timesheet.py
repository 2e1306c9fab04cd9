"""
Timesheet & LocationPing models: GPS-stamped shifts.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (Column, DateTime, Float, ForeignKey, Index, Integer,
                        text)

from streamline.db.base import Base


class Timesheet(Base):
    __tablename__ = "timesheets"
    __table_args__ = (
        Index("ix_timesheet_staff_clock_in", "staff_id", "clock_in"),
        Index("ix_timesheet_company_clock_in", "company_id", "clock_in"),
        # at most one open shift per user
        Index(
            "uq_timesheet_open_shift",
            "staff_id",
            unique=True,
            postgresql_where=text("clock_out IS NULL"),
            sqlite_where=text("clock_out IS NULL"),
        ),
    )

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    company_id: int = Column(Integer, ForeignKey("companies.id"), nullable=False)  # type: ignore[assignment]
    staff_id: int = Column(Integer, ForeignKey("users.id"), nullable=False)  # type: ignore[assignment]
    job_id: int = Column(Integer, ForeignKey("jobs.id"), nullable=False)  # type: ignore[assignment]
    clock_in: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    clock_out: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    clock_in_latitude: float | None = Column(Float, nullable=True)  # type: ignore[assignment]
    clock_in_longitude: float | None = Column(Float, nullable=True)  # type: ignore[assignment]
    clock_out_latitude: float | None = Column(Float, nullable=True)  # type: ignore[assignment]
    clock_out_longitude: float | None = Column(Float, nullable=True)  # type: ignore[assignment]


class LocationPing(Base):
    __tablename__ = "location_pings"
    __table_args__ = (Index("ix_ping_user_created", "user_id", "created_at"),)

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    user_id: int = Column(Integer, ForeignKey("users.id"), nullable=False)  # type: ignore[assignment]
    timesheet_id: int = Column(Integer, ForeignKey("timesheets.id"), nullable=False)  # type: ignore[assignment]
    latitude: float = Column(Float, nullable=False)  # type: ignore[assignment]
    longitude: float = Column(Float, nullable=False)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )
