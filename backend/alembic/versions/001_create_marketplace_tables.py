"""Create marketplace tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  users, drivers, services, regions, requests and estimates, plus the
       four PostgreSQL enum types they use.
How:   Enum types are created once up front (moving_type is shared by
       `services` and `requests`) and referenced with create_type=False.

Rollback: downgrade() drops every table and enum type (destructive).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

role = postgresql.ENUM("USER", "DRIVER", name="role", create_type=False)
moving_type = postgresql.ENUM("SMALL", "HOME", "OFFICE", name="moving_type", create_type=False)
region_code = postgresql.ENUM(
    "SEOUL", "GYEONGGI", "INCHEON", "GANGWON", "CHUNGBUK", "CHUNGNAM", "SEJONG",
    "DAEJEON", "JEONBUK", "JEONNAM", "GWANGJU", "GYEONGBUK", "GYEONGNAM", "DAEGU",
    "ULSAN", "BUSAN", "JEJU",
    name="region_code",
    create_type=False,
)
estimate_status = postgresql.ENUM(
    "PENDING", "ACCEPTED", "REJECTED", "COMPLETED", name="estimate_status", create_type=False
)

ENUM_TYPES = (role, moving_type, region_code, estimate_status)


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.TIMESTAMP(timezone=True),
        server_default=sa.text("CURRENT_TIMESTAMP"),
        nullable=False,
    )


def _is_deleted() -> sa.Column:
    return sa.Column("is_deleted", sa.Boolean(), server_default=sa.text("false"), nullable=False)


def upgrade() -> None:
    bind = op.get_bind()
    for enum_type in ENUM_TYPES:
        enum_type.create(bind, checkfirst=True)

    op.create_table(
        "users",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("role", role, nullable=False),
        _is_deleted(),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "drivers",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("nickname", sa.String(50), nullable=False),
        _is_deleted(),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_drivers_user_id", "drivers", ["user_id"])

    op.create_table(
        "services",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("category", moving_type, nullable=False),
        _is_deleted(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_services_user_id", "services", ["user_id"])

    op.create_table(
        "regions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("region", region_code, nullable=False),
        _is_deleted(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_regions_user_id", "regions", ["user_id"])

    op.create_table(
        "requests",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("moving_type", moving_type, nullable=False),
        sa.Column("moving_date", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("origin", sa.Text(), nullable=False),
        sa.Column("destination", sa.Text(), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_requests_user_id", "requests", ["user_id"])
    op.create_index("idx_requests_moving_date", "requests", ["moving_date"])
    # Serves ORDER BY created_at DESC for sort=recent
    op.create_index("idx_requests_created_at", "requests", [sa.text("created_at DESC")])

    op.create_table(
        "estimates",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("request_id", sa.Integer(), sa.ForeignKey("requests.id"), nullable=False),
        sa.Column("driver_id", sa.Integer(), sa.ForeignKey("drivers.id"), nullable=False),
        sa.Column("status", estimate_status, nullable=False),
        sa.Column("price", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("request_reason", sa.Text(), nullable=True),
        sa.Column("is_request", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        # One decision row per (driver, request); concurrent creates lose here
        sa.UniqueConstraint("driver_id", "request_id", name="uq_estimates_driver_request"),
    )
    op.create_index("idx_estimates_driver_status", "estimates", ["driver_id", "status"])


def downgrade() -> None:
    op.drop_index("idx_estimates_driver_status", table_name="estimates")
    op.drop_table("estimates")
    op.drop_index("idx_requests_created_at", table_name="requests")
    op.drop_index("idx_requests_moving_date", table_name="requests")
    op.drop_index("ix_requests_user_id", table_name="requests")
    op.drop_table("requests")
    op.drop_index("ix_regions_user_id", table_name="regions")
    op.drop_table("regions")
    op.drop_index("ix_services_user_id", table_name="services")
    op.drop_table("services")
    op.drop_index("ix_drivers_user_id", table_name="drivers")
    op.drop_table("drivers")
    op.drop_table("users")

    bind = op.get_bind()
    for enum_type in reversed(ENUM_TYPES):
        enum_type.drop(bind, checkfirst=True)
