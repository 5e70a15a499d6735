"""comments

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-19

Adds moderated comments on events.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0002"
down_revision: Union[str, None] = "0001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

comment_status = sa.Enum("pending", "published", "rejected", name="commentstatus")


def upgrade() -> None:
    op.create_table(
        "comments",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("text", sa.Text, nullable=False),
        sa.Column("author_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("event_id", sa.Integer, sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_on", sa.DateTime, nullable=False),
        sa.Column("updated_on", sa.DateTime, nullable=True),
        sa.Column("status", comment_status, nullable=False, server_default="pending"),
    )
    op.create_index("ix_comments_event_id", "comments", ["event_id"])


def downgrade() -> None:
    op.drop_index("ix_comments_event_id", table_name="comments")
    op.drop_table("comments")
    comment_status.drop(op.get_bind(), checkfirst=True)
