"""Create users, itineraries and searches tables

Revision ID: 001
Revises: None
Create Date: 2026-01-15 00:00:00.000000+00:00

What:  Initial schema: the credential store, saved trip plans and the
       search log.
How:   PostgreSQL types: UUID keys, JSONB for the opaque AI payload,
       TIMESTAMP WITH TIME ZONE.

Rollback: downgrade() drops all three tables (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        # NULL marks a legacy account that has never set a password
        sa.Column(
            "password_hash",
            sa.String(255),
            nullable=True,
            comment="argon2id digest; NULL for legacy accounts",
        ),
        sa.Column(
            "provider",
            sa.String(50),
            nullable=False,
            server_default=sa.text("'local'"),
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    # Unique: arbitrates concurrent signups for one email
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "itineraries",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_email", sa.String(320), nullable=False),
        sa.Column("current_location", sa.String(255), nullable=False),
        sa.Column("destination", sa.String(255), nullable=False),
        sa.Column("start_date", sa.String(64), nullable=True),
        sa.Column("end_date", sa.String(64), nullable=True),
        sa.Column("travelers", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("budget", sa.Float(), nullable=False),
        sa.Column("days", sa.Integer(), nullable=False),
        sa.Column(
            "interests",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        sa.Column("dietary", sa.Text(), nullable=True),
        sa.Column(
            "result",
            postgresql.JSONB(),
            nullable=False,
            comment="AI-generated plan, stored as received",
        ),
        sa.Column("map_data", postgresql.JSONB(), nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    # History is always "trips for one email, newest first"
    op.create_index(
        "idx_itineraries_user_created",
        "itineraries",
        ["user_email", "created_at"],
    )

    op.create_table(
        "searches",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_email", sa.String(320), nullable=False),
        sa.Column("question", sa.Text(), nullable=False),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_searches_user_email", "searches", ["user_email"])


def downgrade() -> None:
    """Drop all tables. Destructive: every account and saved trip is lost."""
    op.drop_index("ix_searches_user_email", table_name="searches")
    op.drop_table("searches")
    op.drop_index("idx_itineraries_user_created", table_name="itineraries")
    op.drop_table("itineraries")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
