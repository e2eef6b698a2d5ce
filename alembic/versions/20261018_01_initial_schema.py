"""Initial media-gc schema."""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "20261018_01"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "posts",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("post_type", sa.String(length=20), nullable=False, server_default="post"),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="publish"),
        sa.Column("parent_id", sa.Integer()),
        sa.Column("title", sa.Text(), nullable=False, server_default=""),
        sa.Column("content", sa.Text(), nullable=False, server_default=""),
        sa.Column("excerpt", sa.Text(), nullable=False, server_default=""),
        sa.Column("guid", sa.String(length=255), nullable=False, server_default=""),
        sa.Column(
            "created_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
    )
    op.create_index("ix_posts_parent_id", "posts", ["parent_id"])
    op.create_index("ix_posts_type_status", "posts", ["post_type", "status"])

    op.create_table(
        "postmeta",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("post_id", sa.Integer(), sa.ForeignKey("posts.id"), nullable=False),
        sa.Column("meta_key", sa.String(length=255), nullable=False),
        sa.Column("meta_value", sa.Text()),
    )
    op.create_index("ix_postmeta_post_id", "postmeta", ["post_id"])
    op.create_index("ix_postmeta_meta_key", "postmeta", ["meta_key"])
    op.create_index("ix_postmeta_key_value", "postmeta", ["meta_key", "post_id"])

    op.create_table(
        "termmeta",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("term_id", sa.Integer(), nullable=False),
        sa.Column("meta_key", sa.String(length=255), nullable=False),
        sa.Column("meta_value", sa.Text()),
    )
    op.create_index("ix_termmeta_term_id", "termmeta", ["term_id"])

    op.create_table(
        "comments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("post_id", sa.Integer(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False, server_default=""),
        sa.Column(
            "created_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
    )
    op.create_index("ix_comments_post_id", "comments", ["post_id"])

    op.create_table(
        "options",
        sa.Column("key", sa.String(length=191), primary_key=True),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column(
            "updated_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column("updated_by", sa.String(length=64)),
    )

    op.create_table(
        "transients",
        sa.Column("key", sa.String(length=191), primary_key=True),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
    )

    op.create_table(
        "scheduled_events",
        sa.Column("hook", sa.String(length=64), primary_key=True),
        sa.Column("run_at", sa.DateTime(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
    )


def downgrade() -> None:
    op.drop_table("scheduled_events")
    op.drop_table("transients")
    op.drop_table("options")
    op.drop_index("ix_comments_post_id", table_name="comments")
    op.drop_table("comments")
    op.drop_index("ix_termmeta_term_id", table_name="termmeta")
    op.drop_table("termmeta")
    op.drop_index("ix_postmeta_key_value", table_name="postmeta")
    op.drop_index("ix_postmeta_meta_key", table_name="postmeta")
    op.drop_index("ix_postmeta_post_id", table_name="postmeta")
    op.drop_table("postmeta")
    op.drop_index("ix_posts_type_status", table_name="posts")
    op.drop_index("ix_posts_parent_id", table_name="posts")
    op.drop_table("posts")
