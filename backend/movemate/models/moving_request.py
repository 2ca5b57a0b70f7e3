"""
MoveMate Backend — Moving Request Model
========================================

What:  ORM model for the `requests` table: a user's request to be moved.
Who:   Created by the user-facing request flow (outside this service);
       read by DriverRequestRepository for the driver matcher.

Table Design Rationale:
    - origin / destination are free text as typed by the user. There is no
      structured region column, which is why region matching happens in
      application memory (see services/region_classifier.py).
    - moving_date drives the default "soonest" ordering; created_at drives
      "recent". Both are indexed.

    The matcher never mutates this table.
"""

from datetime import datetime, timezone
from typing import List

from sqlalchemy import DateTime, Enum, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from movemate.database import Base
from movemate.models.enums import MovingType


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MovingRequest(Base):
    """
    A moving request as seen by drivers.

    Query Patterns:
        - Driver pool: WHERE moving_type IN (:categories) ORDER BY moving_date
        - Designated pool: adds EXISTS (estimate by this driver)
        - Direct lookup: WHERE id = :request_id
    """

    __tablename__ = "requests"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=False, index=True
    )
    moving_type: Mapped[MovingType] = mapped_column(
        Enum(MovingType, name="moving_type"), nullable=False
    )
    moving_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    origin: Mapped[str] = mapped_column(Text, nullable=False)
    destination: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    user: Mapped["User"] = relationship()  # noqa: F821
    estimates: Mapped[List["Estimate"]] = relationship(  # noqa: F821
        back_populates="request"
    )

    __table_args__ = (
        Index("idx_requests_moving_date", "moving_date"),
        Index("idx_requests_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return (
            f"<MovingRequest(id={self.id}, moving_type='{self.moving_type}', "
            f"moving_date='{self.moving_date}')>"
        )
