"""Kiosk schema - media, bubbles, speakers, kiosk_home

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Ids and timestamps are assigned by the application, so the same schema runs
on PostgreSQL and SQLite.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    # ==========================================================================
    # media table
    # ==========================================================================
    op.create_table(
        "media",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("title_key", sa.Text(), nullable=False),
        sa.Column("kind", sa.Text(), nullable=False),
        sa.Column("url", sa.Text(), nullable=True),
        sa.Column("website_url", sa.Text(), nullable=True),
        sa.Column("asset_id", sa.Text(), nullable=True),
        sa.Column("content_type", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "kind IN ('image', 'video', 'pdf', 'qr', 'website')",
            name="ck_media_kind",
        ),
    )
    op.create_index("ix_media_title_key", "media", ["title_key"])

    # ==========================================================================
    # bubbles table
    # ==========================================================================
    # media_id has no foreign key: deleted media leaves dangling references
    op.create_table(
        "bubbles",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("parent_bubble_id", sa.Uuid(), nullable=True),
        sa.Column("media_id", sa.Uuid(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["parent_bubble_id"], ["bubbles.id"]),
        sa.CheckConstraint(
            "parent_bubble_id IS NULL OR parent_bubble_id <> id",
            name="ck_bubbles_not_self_parent",
        ),
    )
    op.create_index("ix_bubbles_parent_bubble_id", "bubbles", ["parent_bubble_id"])

    # ==========================================================================
    # speakers table
    # ==========================================================================
    op.create_table(
        "speakers",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("designation", sa.Text(), nullable=False),
        sa.Column("image_url", sa.Text(), nullable=False),
        sa.Column("popup_image_url", sa.Text(), nullable=False),
        sa.Column("start_time", sa.Text(), nullable=False),
        sa.Column("end_time", sa.Text(), nullable=False),
        sa.Column("order", sa.Integer(), server_default="0", nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("start_time < end_time", name="ck_speakers_window"),
    )

    # ==========================================================================
    # kiosk_home singleton
    # ==========================================================================
    op.create_table(
        "kiosk_home",
        sa.Column("id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("video_url", sa.Text(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("id = 1", name="ck_kiosk_home_singleton"),
    )


def downgrade() -> None:
    op.drop_table("kiosk_home")
    op.drop_table("speakers")
    op.drop_index("ix_bubbles_parent_bubble_id", table_name="bubbles")
    op.drop_table("bubbles")
    op.drop_index("ix_media_title_key", table_name="media")
    op.drop_table("media")
