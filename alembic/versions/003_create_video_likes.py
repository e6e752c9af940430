"""video_likes: one like per (video, user)

Revision ID: 003
Revises: 002
Create Date: 2026-10-17

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Composite primary key is the uniqueness guarantee the like toggle relies on
    op.create_table(
        "video_likes",
        sa.Column("video_id", sa.String(36), sa.ForeignKey("videos.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_video_likes_user_id", "video_likes", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_video_likes_user_id", table_name="video_likes")
    op.drop_table("video_likes")
