"""create users, realms, authorized apps and their daily stats

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_table(
        "realms",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False, unique=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_table(
        "user_realms",
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("realm_id", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("user_id", "realm_id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["realm_id"], ["realms.id"], ondelete="CASCADE"),
    )
    op.create_table(
        "authorized_apps",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("realm_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("api_key_type", sa.SmallInteger(), nullable=False, server_default="0"),
        sa.Column("key_prefix", sa.String(16), nullable=False),
        sa.Column("key_hash", sa.Text(), nullable=False, unique=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["realm_id"], ["realms.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_authorized_apps_realm_id", "authorized_apps", ["realm_id"])

    op.create_table(
        "authorized_app_stats",
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("authorized_app_id", sa.Integer(), nullable=False),
        sa.Column("realm_id", sa.Integer(), nullable=False),
        sa.Column("codes_issued", sa.BigInteger(), nullable=False),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("date", "authorized_app_id"),
        sa.ForeignKeyConstraint(["authorized_app_id"], ["authorized_apps.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["realm_id"], ["realms.id"], ondelete="CASCADE"),
    )
    op.create_index(
        "ix_authorized_app_stats_app_realm",
        "authorized_app_stats",
        ["authorized_app_id", "realm_id"],
    )


def downgrade() -> None:
    op.drop_index("ix_authorized_app_stats_app_realm", table_name="authorized_app_stats")
    op.drop_table("authorized_app_stats")
    op.drop_index("ix_authorized_apps_realm_id", table_name="authorized_apps")
    op.drop_table("authorized_apps")
    op.drop_table("user_realms")
    op.drop_table("realms")
    op.drop_table("users")
