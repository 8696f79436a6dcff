"""Create users and links tables

Revision ID: 5c2e8d41a7b3
Revises:
Create Date: 2026-10-18 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "5c2e8d41a7b3"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=False),
        sa.Column("display_name", sa.String(100), nullable=True),
        sa.Column("points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_active_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("warned", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    op.create_index("ix_users_last_active_at", "users", ["last_active_at"])

    op.create_table(
        "links",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column("owner_id", sa.BigInteger(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_links_created_at", "links", ["created_at"])
    op.create_index("ix_links_owner_id", "links", ["owner_id"])


def downgrade() -> None:
    op.drop_index("ix_links_owner_id", table_name="links")
    op.drop_index("ix_links_created_at", table_name="links")
    op.drop_table("links")
    op.drop_index("ix_users_last_active_at", table_name="users")
    op.drop_table("users")
