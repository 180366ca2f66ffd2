"""initial schema: tours, gallery, gallery_settings, countdown

Revision ID: 20250801_0001
Revises:
Create Date: 2025-08-01 00:00:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20250801_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "tours",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("date", sa.String(length=50), nullable=False),
        sa.Column("city", sa.String(length=100), nullable=False),
        sa.Column("venue", sa.String(length=200), nullable=False),
        sa.Column("ticket_link", sa.String(length=200), nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sqlite_autoincrement=True,
    )
    op.create_table(
        "gallery",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("filename", sa.String(length=255), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False, server_default=""),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("order_num", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("media_type", sa.String(length=16), nullable=False, server_default="photo"),
        sa.Column("thumbnail", sa.String(length=255), nullable=True),
        sa.Column("mime_type", sa.String(length=100), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=True),
    )
    op.create_table(
        "gallery_settings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.CheckConstraint("id = 1", name="ck_gallery_settings_singleton"),
    )
    op.create_table(
        "countdown",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(length=200), nullable=False, server_default=""),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("release_date", sa.String(length=50), nullable=False, server_default=""),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("completed_title", sa.String(length=200), nullable=False, server_default=""),
        sa.Column("completed_description", sa.Text(), nullable=False, server_default=""),
        sa.Column("pre_release_message", sa.Text(), nullable=False, server_default=""),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.CheckConstraint("id = 1", name="ck_countdown_singleton"),
    )


def downgrade() -> None:
    op.drop_table("countdown")
    op.drop_table("gallery_settings")
    op.drop_table("gallery")
    op.drop_table("tours")
