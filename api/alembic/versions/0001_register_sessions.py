"""register sessions and denomination catalog

Revision ID: 0001_register_sessions
Revises:
Create Date: 2026-10-19 09:00:00

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_register_sessions"
down_revision = None
branch_labels = None
depends_on = None


# (name, value_cents, kind, sort_order)
PKR_DENOMINATIONS = [
    ("5000 Note", 500000, "note", 1),
    ("1000 Note", 100000, "note", 2),
    ("500 Note", 50000, "note", 3),
    ("100 Note", 10000, "note", 4),
    ("50 Note", 5000, "note", 5),
    ("20 Note", 2000, "note", 6),
    ("10 Note", 1000, "note", 7),
    ("5 Coin", 500, "coin", 8),
    ("2 Coin", 200, "coin", 9),
    ("1 Coin", 100, "coin", 10),
]


def upgrade() -> None:
    # denomination catalog
    denomination_types = op.create_table(
        "denomination_types",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=64), nullable=False),
        sa.Column("value_cents", sa.Integer(), nullable=False),
        sa.Column("kind", sa.String(length=8), nullable=False, server_default="note"),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.CheckConstraint("kind in ('note', 'coin')", name="ck_denomination_types_kind"),
        sa.CheckConstraint("value_cents > 0", name="ck_denomination_types_value"),
    )

    # registers
    op.create_table(
        "registers",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("branch_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.create_index("ix_registers_branch_id", "registers", ["branch_id"])

    # register sessions
    op.create_table(
        "register_sessions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("session_number", sa.String(length=64), nullable=False, unique=True),
        sa.Column("register_id", sa.Integer(), sa.ForeignKey("registers.id", ondelete="CASCADE"), nullable=False),
        sa.Column("branch_id", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="open"),
        sa.Column("opened_by", sa.String(length=64), nullable=True),
        sa.Column("closed_by", sa.String(length=64), nullable=True),
        sa.Column("declared_opening_cents", sa.Integer(), nullable=False),
        sa.Column("calculated_opening_cents", sa.Integer(), nullable=False),
        sa.Column("declared_closing_cents", sa.Integer(), nullable=True),
        sa.Column("calculated_closing_cents", sa.Integer(), nullable=True),
        sa.Column("expected_closing_cents", sa.Integer(), nullable=True),
        sa.Column("discrepancy_cents", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("opened_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("closed_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_register_sessions_register_id", "register_sessions", ["register_id"])
    op.create_index("ix_register_sessions_branch_id", "register_sessions", ["branch_id"])

    # per-session denomination lines
    op.create_table(
        "register_session_denominations",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("session_id", sa.Integer(), sa.ForeignKey("register_sessions.id", ondelete="CASCADE"), nullable=False),
        sa.Column("denomination_id", sa.Integer(), sa.ForeignKey("denomination_types.id"), nullable=False),
        sa.Column("type", sa.String(length=8), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("amount_cents", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_index("ix_register_session_denominations_session_id", "register_session_denominations", ["session_id"])

    # audit log
    op.create_table(
        "register_audit_log",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("register_id", sa.Integer(), sa.ForeignKey("registers.id", ondelete="CASCADE"), nullable=True),
        sa.Column("session_id", sa.Integer(), sa.ForeignKey("register_sessions.id", ondelete="CASCADE"), nullable=True),
        sa.Column("user_id", sa.String(length=64), nullable=True),
        sa.Column("action", sa.String(length=64), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("amount_cents", sa.Integer(), nullable=True),
        sa.Column("ip_address", sa.String(length=64), nullable=True),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column("at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("diff_json", sa.JSON(), nullable=True),
    )

    op.bulk_insert(
        denomination_types,
        [
            {"name": name, "value_cents": cents, "kind": kind, "sort_order": sort, "is_active": True}
            for name, cents, kind, sort in PKR_DENOMINATIONS
        ],
    )


def downgrade() -> None:
    op.drop_table("register_audit_log")
    op.drop_index("ix_register_session_denominations_session_id", table_name="register_session_denominations")
    op.drop_table("register_session_denominations")
    op.drop_index("ix_register_sessions_branch_id", table_name="register_sessions")
    op.drop_index("ix_register_sessions_register_id", table_name="register_sessions")
    op.drop_table("register_sessions")
    op.drop_index("ix_registers_branch_id", table_name="registers")
    op.drop_table("registers")
    op.drop_table("denomination_types")
