"""initial schema: settings, games, bookings, booking audit log

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa


revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

ACTIVE_STATUS_SQL = "status IN ('pending', 'confirmed')"


def upgrade():
    op.create_table(
        "system_settings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("opening_time", sa.String(5), nullable=False, server_default=sa.text("'06:00'")),
        sa.Column("closing_time", sa.String(5), nullable=False, server_default=sa.text("'22:00'")),
        sa.Column("is_24_7", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("advance_booking_days", sa.Integer(), nullable=False, server_default=sa.text("7")),
        sa.Column("require_admin_approval", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("booking_slot_duration", sa.Integer(), nullable=False, server_default=sa.text("30")),
        sa.Column("min_booking_duration", sa.Float(), nullable=False, server_default=sa.text("1.0")),
        sa.Column("max_booking_duration", sa.Float(), nullable=False, server_default=sa.text("4.0")),
        sa.Column("cancellation_deadline", sa.Float(), nullable=False, server_default=sa.text("2")),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
    )

    op.create_table(
        "games",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("price_per_hour", sa.Float(), nullable=False),
        sa.Column("max_players", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.CheckConstraint("price_per_hour > 0", name="ck_games_price_positive"),
        sa.CheckConstraint("max_players > 0", name="ck_games_max_players_positive"),
    )

    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("game_id", sa.Integer(), sa.ForeignKey("games.id"), nullable=False),
        sa.Column("booking_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.String(5), nullable=False),
        sa.Column("end_time", sa.String(5), nullable=False),
        sa.Column("status", sa.Text(), nullable=False, server_default=sa.text("'pending'")),
        sa.Column("total_cost", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("notes", sa.Text()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.CheckConstraint(
            "status IN ('pending', 'confirmed', 'canceled', 'no_show', 'completed')",
            name="ck_bookings_status",
        ),
    )
    op.create_index("ix_bookings_user_id", "bookings", ["user_id"])
    op.create_index("ix_bookings_game_date", "bookings", ["game_id", "booking_date"])
    op.create_index(
        "uq_bookings_active_start",
        "bookings",
        ["game_id", "booking_date", "start_time"],
        unique=True,
        sqlite_where=sa.text(ACTIVE_STATUS_SQL),
        postgresql_where=sa.text(ACTIVE_STATUS_SQL),
    )

    op.create_table(
        "booking_audit_log",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "booking_id",
            sa.Integer(),
            sa.ForeignKey("bookings.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("old_status", sa.Text()),
        sa.Column("new_status", sa.Text(), nullable=False),
        sa.Column("changed_by", sa.Integer()),
        sa.Column("notes", sa.Text()),
        sa.Column("changed_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
    )
    op.create_index("ix_booking_audit_log_booking_id", "booking_audit_log", ["booking_id"])


def downgrade():
    op.drop_index("ix_booking_audit_log_booking_id", table_name="booking_audit_log")
    op.drop_table("booking_audit_log")
    op.drop_index("uq_bookings_active_start", table_name="bookings")
    op.drop_index("ix_bookings_game_date", table_name="bookings")
    op.drop_index("ix_bookings_user_id", table_name="bookings")
    op.drop_table("bookings")
    op.drop_table("games")
    op.drop_table("system_settings")
