"""Initial schema: messes, members, working ledger tables, archives, messaging.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-01 09:00:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.current_timestamp(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.current_timestamp(),
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "messes",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=True),
        sa.Column("manager_id", sa.String(length=255), nullable=False),
        sa.Column("current_month", sa.String(length=7), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="inactive"),
        sa.Column("suspend_reason", sa.String(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("manager_id"),
    )
    op.create_index("idx_mess_status", "messes", ["status"])

    op.create_table(
        "members",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("mess_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("phone", sa.String(length=50), nullable=True),
        sa.Column("room_number", sa.String(length=50), nullable=True),
        sa.Column("user_id", sa.String(length=255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="1"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["mess_id"], ["messes.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
        sa.UniqueConstraint("phone"),
        sa.UniqueConstraint("user_id"),
    )
    op.create_index("ix_members_mess_id", "members", ["mess_id"])
    op.create_index("idx_member_mess_active", "members", ["mess_id", "is_active"])

    op.create_table(
        "meals",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("mess_id", sa.Integer(), nullable=False),
        sa.Column("member_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("breakfast", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("lunch", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("dinner", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["mess_id"], ["messes.id"]),
        sa.ForeignKeyConstraint(["member_id"], ["members.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("member_id", "date", name="uq_meal_member_date"),
    )
    op.create_index("ix_meals_mess_id", "meals", ["mess_id"])
    op.create_index("ix_meals_member_id", "meals", ["member_id"])
    op.create_index("idx_meal_mess_date", "meals", ["mess_id", "date"])

    op.create_table(
        "bazars",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("mess_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("cost", sa.Numeric(12, 2), nullable=False),
        sa.Column("person_name", sa.String(length=255), nullable=False),
        sa.Column("member_id", sa.Integer(), nullable=True),
        sa.Column("items", sa.String(), nullable=True),
        sa.Column("note", sa.String(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["mess_id"], ["messes.id"]),
        sa.ForeignKeyConstraint(["member_id"], ["members.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_bazars_mess_id", "bazars", ["mess_id"])
    op.create_index("idx_bazar_mess_date", "bazars", ["mess_id", "date"])

    op.create_table(
        "deposits",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("mess_id", sa.Integer(), nullable=False),
        sa.Column("member_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("note", sa.String(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["mess_id"], ["messes.id"]),
        sa.ForeignKeyConstraint(["member_id"], ["members.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_deposits_mess_id", "deposits", ["mess_id"])
    op.create_index("ix_deposits_member_id", "deposits", ["member_id"])
    op.create_index("idx_deposit_mess_date", "deposits", ["mess_id", "date"])

    op.create_table(
        "additional_costs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("mess_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("description", sa.String(length=255), nullable=False),
        sa.Column("note", sa.String(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["mess_id"], ["messes.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_additional_costs_mess_id", "additional_costs", ["mess_id"])
    op.create_index("idx_additional_cost_mess_date", "additional_costs", ["mess_id", "date"])

    op.create_table(
        "monthly_archives",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("mess_id", sa.Integer(), nullable=False),
        sa.Column("month", sa.String(length=7), nullable=False),
        sa.Column("total_bazar", sa.Numeric(12, 2), nullable=False),
        sa.Column("total_meals", sa.Integer(), nullable=False),
        sa.Column("total_additional_cost", sa.Numeric(12, 2), nullable=False),
        sa.Column("total_deposits", sa.Numeric(12, 2), nullable=False),
        sa.Column("meal_rate", sa.Numeric(18, 6), nullable=False),
        sa.Column("members_data", sa.JSON(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["mess_id"], ["messes.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("mess_id", "month", name="uq_archive_mess_month"),
    )
    op.create_index("ix_monthly_archives_mess_id", "monthly_archives", ["mess_id"])

    op.create_table(
        "subscriptions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("mess_id", sa.Integer(), nullable=False),
        sa.Column("plan_type", sa.String(length=20), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["mess_id"], ["messes.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_subscriptions_mess_id", "subscriptions", ["mess_id"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("mess_id", sa.Integer(), nullable=True),
        sa.Column("sender_type", sa.String(length=20), nullable=False),
        sa.Column("sender_id", sa.String(length=255), nullable=True),
        sa.Column("target_type", sa.String(length=20), nullable=False),
        sa.Column("to_member_id", sa.Integer(), nullable=True),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["mess_id"], ["messes.id"]),
        sa.ForeignKeyConstraint(["to_member_id"], ["members.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_notifications_mess_id", "notifications", ["mess_id"])
    op.create_index("ix_notifications_to_member_id", "notifications", ["to_member_id"])
    op.create_index("idx_notification_target", "notifications", ["target_type", "mess_id"])

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("entity_type", sa.String(length=50), nullable=False),
        sa.Column("entity_id", sa.Integer(), nullable=False),
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column("actor", sa.String(length=255), nullable=True),
        sa.Column("changes", sa.JSON(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    op.drop_table("audit_logs")
    op.drop_table("notifications")
    op.drop_table("subscriptions")
    op.drop_table("monthly_archives")
    op.drop_table("additional_costs")
    op.drop_table("deposits")
    op.drop_table("bazars")
    op.drop_table("meals")
    op.drop_table("members")
    op.drop_table("messes")
