"""
MoveMate Backend — User & Driver Profile Models
================================================

What:  ORM models for accounts and the driver profile tables.
Who:   Read by DriverRequestRepository.find_driver_profile(); written only by
       the auth and profile modules, which live outside this service.

Table Design:
    - users:    one row per account; role decides USER vs DRIVER.
    - drivers:  the driver profile row; a DRIVER without one cannot work.
    - services: the moving types a driver offers (1..N per user).
    - regions:  the regions a driver serves (1..N per user).

    Every table carries `is_deleted` for soft deletion; queries in this
    service always filter it out.
"""

import uuid
from datetime import datetime, timezone
from typing import List

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from movemate.database import Base
from movemate.models.enums import MovingType, RegionCode, Role


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """An account. Only role=DRIVER with a live Driver row can use this core."""

    __tablename__ = "users"

    # Why string UUID: ids are minted by the auth module and embedded in JWTs
    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    role: Mapped[Role] = mapped_column(
        Enum(Role, name="role"),
        nullable=False,
        default=Role.USER,
    )
    is_deleted: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
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

    drivers: Mapped[List["Driver"]] = relationship(back_populates="user")
    services: Mapped[List["Service"]] = relationship(back_populates="user")
    regions: Mapped[List["Region"]] = relationship(back_populates="user")

    def __repr__(self) -> str:
        return f"<User(id={self.id}, role='{self.role}')>"


class Driver(Base):
    """Driver profile row. Its integer id is what estimates reference."""

    __tablename__ = "drivers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=False, index=True
    )
    nickname: Mapped[str] = mapped_column(String(50), nullable=False)
    is_deleted: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    user: Mapped["User"] = relationship(back_populates="drivers")

    def __repr__(self) -> str:
        return f"<Driver(id={self.id}, user_id={self.user_id})>"


class Service(Base):
    """One moving type offered by a driver."""

    __tablename__ = "services"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=False, index=True
    )
    category: Mapped[MovingType] = mapped_column(
        Enum(MovingType, name="moving_type"), nullable=False
    )
    is_deleted: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )

    user: Mapped["User"] = relationship(back_populates="services")


class Region(Base):
    """One region served by a driver."""

    __tablename__ = "regions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=False, index=True
    )
    region: Mapped[RegionCode] = mapped_column(
        Enum(RegionCode, name="region_code"), nullable=False
    )
    is_deleted: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )

    user: Mapped["User"] = relationship(back_populates="regions")
