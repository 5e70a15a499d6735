"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Creates all tables for the Eventboard main service:
users, categories, events, participation_requests,
compilations, compilation_events.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# SQLAlchemy's Enum persists member names, not values.
event_state = sa.Enum("pending", "published", "canceled", name="eventstate")
request_status = sa.Enum("pending", "confirmed", "rejected", "canceled", name="requeststatus")


def upgrade() -> None:
    # --- users ---
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(250), nullable=False),
        sa.Column("email", sa.String(254), nullable=False, unique=True),
        sa.Column("created_at", sa.DateTime, server_default=sa.func.now()),
    )

    # --- categories ---
    op.create_table(
        "categories",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(50), nullable=False, unique=True),
    )

    # --- events ---
    op.create_table(
        "events",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(120), nullable=False),
        sa.Column("annotation", sa.String(2000), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("category_id", sa.Integer, sa.ForeignKey("categories.id"), nullable=False),
        sa.Column("initiator_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("location_lat", sa.Float, nullable=False),
        sa.Column("location_lon", sa.Float, nullable=False),
        sa.Column("paid", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("participant_limit", sa.Integer, nullable=False, server_default="0"),
        sa.Column("request_moderation", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_on", sa.DateTime, nullable=False),
        sa.Column("event_date", sa.DateTime, nullable=False),
        sa.Column("published_on", sa.DateTime, nullable=True),
        sa.Column("state", event_state, nullable=False, server_default="pending"),
        sa.Column("version", sa.Integer, nullable=False, server_default="1"),
        sa.CheckConstraint("participant_limit >= 0", name="ck_events_participant_limit"),
    )

    # --- participation_requests ---
    op.create_table(
        "participation_requests",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("requester_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("event_id", sa.Integer, sa.ForeignKey("events.id"), nullable=False),
        sa.Column("created", sa.DateTime, nullable=False),
        sa.Column("status", request_status, nullable=False, server_default="pending"),
        sa.UniqueConstraint("requester_id", "event_id", name="uq_request_requester_event"),
    )
    op.create_index("ix_participation_requests_event_id", "participation_requests", ["event_id"])

    # --- compilations ---
    op.create_table(
        "compilations",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(50), nullable=False),
        sa.Column("pinned", sa.Boolean, nullable=False, server_default=sa.false()),
    )

    # --- compilation_events ---
    op.create_table(
        "compilation_events",
        sa.Column("compilation_id", sa.Integer, sa.ForeignKey("compilations.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("event_id", sa.Integer, sa.ForeignKey("events.id", ondelete="CASCADE"), primary_key=True),
    )


def downgrade() -> None:
    op.drop_table("compilation_events")
    op.drop_table("compilations")
    op.drop_index("ix_participation_requests_event_id", table_name="participation_requests")
    op.drop_table("participation_requests")
    op.drop_table("events")
    op.drop_table("categories")
    op.drop_table("users")
    request_status.drop(op.get_bind(), checkfirst=True)
    event_state.drop(op.get_bind(), checkfirst=True)
