"""
MoveMate Backend — Estimate Model
==================================

What:  ORM model for the `estimates` table: a driver's price/decision record
       attached to a moving request.
Who:   Created and updated only by the EstimateDecisionEngine (through the
       repository) in response to driver accept/reject actions.

Lifecycle (per driver, request pair):
    (none) ──accept──▶ ACCEPTED
    (none) ──reject──▶ REJECTED
    PENDING ─────────▶ ACCEPTED | REJECTED
    REJECTED ─accept─▶ ACCEPTED

Uniqueness:
    uq_estimates_driver_request allows one row per (driver_id, request_id).
    Two concurrent first decisions would otherwise both see "no estimate"
    and both insert. The loser gets an IntegrityError, which the
    repository reports as a lost race.

price:
    Integer won amount. 0 is the placeholder stored on rejection.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from movemate.database import Base
from movemate.models.enums import EstimateStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Estimate(Base):
    __tablename__ = "estimates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    request_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("requests.id"), nullable=False
    )
    driver_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("drivers.id"), nullable=False
    )
    status: Mapped[EstimateStatus] = mapped_column(
        Enum(EstimateStatus, name="estimate_status"),
        nullable=False,
        default=EstimateStatus.PENDING,
    )
    price: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )
    request_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # True when the driver acted on the request directly (accept/reject)
    is_request: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )
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

    request: Mapped["MovingRequest"] = relationship(  # noqa: F821
        back_populates="estimates"
    )

    __table_args__ = (
        UniqueConstraint("driver_id", "request_id", name="uq_estimates_driver_request"),
        Index("idx_estimates_driver_status", "driver_id", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<Estimate(id={self.id}, driver_id={self.driver_id}, "
            f"request_id={self.request_id}, status='{self.status}')>"
        )
