"""Initial content tables with soft-delete columns.

Revision ID: 0001
Revises:
Create Date: 2026-10-17
"""

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

from alembic import op
import sqlalchemy as sa


def _lifecycle_columns() -> list[sa.Column]:
    return [
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("owner_id", sa.String(64), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
    ]


def _lifecycle_indexes(table: str) -> None:
    op.create_index(f"ix_{table}_owner_id", table, ["owner_id"])
    op.create_index(f"ix_{table}_deleted_at", table, ["deleted_at"])


def upgrade() -> None:
    # ── Code library ─────────────────────────────────────────
    op.create_table(
        "folders",
        *_lifecycle_columns(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("color", sa.String(20), nullable=True),
        sa.Column("icon", sa.String(50), nullable=True),
    )
    _lifecycle_indexes("folders")

    op.create_table(
        "categories",
        *_lifecycle_columns(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("color", sa.String(20), nullable=True),
        sa.Column("background", sa.String(50), nullable=True),
        sa.Column("icon", sa.String(50), nullable=True),
        sa.Column("is_default", sa.Boolean(), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=True),
    )
    _lifecycle_indexes("categories")

    op.create_table(
        "snippets",
        *_lifecycle_columns(),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("code", sa.Text(), nullable=False),
        sa.Column("language", sa.String(50), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=True),
        sa.Column("is_public", sa.Boolean(), nullable=True),
        sa.Column("is_favorite", sa.Boolean(), nullable=True),
        sa.Column(
            "folder_id", sa.String(36),
            sa.ForeignKey("folders.id", ondelete="SET NULL"), nullable=True,
        ),
        sa.Column(
            "category_id", sa.String(36),
            sa.ForeignKey("categories.id", ondelete="SET NULL"), nullable=True,
        ),
    )
    _lifecycle_indexes("snippets")
    op.create_index("ix_snippets_folder_id", "snippets", ["folder_id"])
    op.create_index("ix_snippets_category_id", "snippets", ["category_id"])

    # ── Media library ────────────────────────────────────────
    op.create_table(
        "media_folders",
        *_lifecycle_columns(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("color", sa.String(20), nullable=True),
    )
    _lifecycle_indexes("media_folders")

    op.create_table(
        "media_categories",
        *_lifecycle_columns(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("color", sa.String(20), nullable=True),
    )
    _lifecycle_indexes("media_categories")

    op.create_table(
        "media_files",
        *_lifecycle_columns(),
        sa.Column("file_name", sa.String(255), nullable=False),
        sa.Column("title", sa.String(255), nullable=True),
        sa.Column("file_type", sa.String(100), nullable=False),
        sa.Column("file_url", sa.String(1000), nullable=False),
        sa.Column("file_size", sa.BigInteger(), nullable=True),
        sa.Column(
            "media_folder_id", sa.String(36),
            sa.ForeignKey("media_folders.id", ondelete="SET NULL"), nullable=True,
        ),
        sa.Column(
            "category_id", sa.String(36),
            sa.ForeignKey("media_categories.id", ondelete="SET NULL"), nullable=True,
        ),
    )
    _lifecycle_indexes("media_files")
    op.create_index("ix_media_files_media_folder_id", "media_files", ["media_folder_id"])
    op.create_index("ix_media_files_category_id", "media_files", ["category_id"])

    # ── Audit ────────────────────────────────────────────────
    op.create_table(
        "activity_logs",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("owner_id", sa.String(64), nullable=False),
        sa.Column("action", sa.String(50), nullable=False),
        sa.Column("entity_type", sa.String(50), nullable=False),
        sa.Column("entity_id", sa.String(36), nullable=True),
        sa.Column("summary", sa.Text(), nullable=True),
        sa.Column("details", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_activity_logs_owner_id", "activity_logs", ["owner_id"])
    op.create_index("ix_activity_logs_action", "activity_logs", ["action"])
    op.create_index("ix_activity_logs_entity_type", "activity_logs", ["entity_type"])
    op.create_index("ix_activity_logs_created_at", "activity_logs", ["created_at"])


def downgrade() -> None:
    op.drop_table("activity_logs")
    op.drop_table("media_files")
    op.drop_table("media_categories")
    op.drop_table("media_folders")
    op.drop_table("snippets")
    op.drop_table("categories")
    op.drop_table("folders")
