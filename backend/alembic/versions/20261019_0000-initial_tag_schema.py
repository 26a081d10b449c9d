"""Create tags and article_tags tables

Revision ID: initial_tag_schema
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "initial_tag_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Tags; name/slug uniqueness among live rows is enforced by the application
    op.create_table(
        "tags",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=20), nullable=False),
        sa.Column("slug", sa.String(length=50), nullable=False),
        sa.Column("color", sa.String(length=20), nullable=True),
        sa.Column("use_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    op.create_index(op.f("ix_tags_id"), "tags", ["id"], unique=False)
    op.create_index(op.f("ix_tags_name"), "tags", ["name"], unique=False)
    op.create_index(op.f("ix_tags_slug"), "tags", ["slug"], unique=False)
    op.create_index(op.f("ix_tags_is_deleted"), "tags", ["is_deleted"], unique=False)
    op.create_index(
        "idx_tags_use_count_created", "tags", ["use_count", "created_at"], unique=False
    )

    # Article-tag links
    op.create_table(
        "article_tags",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("article_id", sa.Integer(), nullable=False),
        sa.Column("tag_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("article_id", "tag_id", name="uq_article_tag"),
        sqlite_autoincrement=True,
    )
    op.create_index(op.f("ix_article_tags_id"), "article_tags", ["id"], unique=False)
    op.create_index(
        op.f("ix_article_tags_article_id"), "article_tags", ["article_id"], unique=False
    )
    op.create_index(
        op.f("ix_article_tags_tag_id"), "article_tags", ["tag_id"], unique=False
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_article_tags_tag_id"), table_name="article_tags")
    op.drop_index(op.f("ix_article_tags_article_id"), table_name="article_tags")
    op.drop_index(op.f("ix_article_tags_id"), table_name="article_tags")
    op.drop_table("article_tags")
    op.drop_index("idx_tags_use_count_created", table_name="tags")
    op.drop_index(op.f("ix_tags_is_deleted"), table_name="tags")
    op.drop_index(op.f("ix_tags_slug"), table_name="tags")
    op.drop_index(op.f("ix_tags_name"), table_name="tags")
    op.drop_index(op.f("ix_tags_id"), table_name="tags")
    op.drop_table("tags")
