"""Initial schema — likes (owned) and users (profile service read model).

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

`users` is created here only so local and test databases are self-contained;
in shared deployments the profile service owns it.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(120), nullable=False, server_default=""),
        sa.Column("age", sa.Integer, nullable=True),
        sa.Column("photo_keys", sa.JSON, nullable=False),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("is_online", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("last_seen", sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        "likes",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("from_user", UUID(as_uuid=True), nullable=False),
        sa.Column("to_user", UUID(as_uuid=True), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("from_user", "to_user", name="uq_likes_from_to"),
        sa.CheckConstraint("from_user <> to_user", name="ck_likes_not_self"),
        sa.CheckConstraint(
            "status IN ('pending', 'accepted', 'rejected')", name="ck_likes_status",
        ),
    )
    op.create_index("ix_likes_from_user", "likes", ["from_user"])
    op.create_index(
        "ix_likes_to_status_created", "likes", ["to_user", "status", "created_at"],
    )


def downgrade() -> None:
    op.drop_index("ix_likes_to_status_created", table_name="likes")
    op.drop_index("ix_likes_from_user", table_name="likes")
    op.drop_table("likes")
    op.drop_table("users")
