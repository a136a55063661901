"""initial

Revision ID: 0001_initial
Revises: 
Create Date: 2026-10-18
"""
from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "accounts",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("kind", sa.Enum("patient", "provider", name="accountkind"), nullable=False),
        sa.Column("display_name", sa.String(255), nullable=True),
        sa.Column("balance", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_accounts_id", "accounts", ["id"], unique=False)
    op.create_index("ix_accounts_kind", "accounts", ["kind"], unique=False)

    op.create_table(
        "appointments",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("patient_account_id", sa.Integer, sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("provider_account_id", sa.Integer, sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("appointment_type", sa.Enum("telemedicine", "in-person", name="appointmenttype"), nullable=False),
        sa.Column(
            "status",
            sa.Enum("pending", "booked", "in-progress", "completed", "cancelled", name="appointmentstatus"),
            nullable=False,
            server_default="pending",
        ),
        sa.Column("appointment_fee", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_appointments_id", "appointments", ["id"], unique=False)
    op.create_index("ix_appointments_status", "appointments", ["status"], unique=False)

    op.create_table(
        "ledger_entries",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("account_id", sa.Integer, sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("entry_type", sa.Enum("payment", "deposit", "refund", name="entrytype"), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("description", sa.String(500), nullable=False),
        sa.Column("payment_method", sa.String(50), nullable=False),
        sa.Column("reference_number", sa.String(100), nullable=True),
        sa.Column(
            "status",
            sa.Enum("pending", "completed", "cancelled", name="entrystatus"),
            nullable=False,
            server_default="pending",
        ),
        sa.Column(
            "related_appointment_id",
            sa.Integer,
            sa.ForeignKey("appointments.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint("amount > 0", name="ck_ledger_entries_amount_positive"),
    )
    op.create_index("ix_ledger_entries_id", "ledger_entries", ["id"], unique=False)
    op.create_index("ix_ledger_entries_account_id_type", "ledger_entries", ["account_id", "entry_type"], unique=False)
    op.create_index("ix_ledger_entries_related_appointment_id", "ledger_entries", ["related_appointment_id"], unique=False)
    op.create_index(
        "uq_ledger_entries_pending_payment",
        "ledger_entries",
        ["related_appointment_id", "account_id"],
        unique=True,
        postgresql_where=sa.text("entry_type = 'payment' AND status = 'pending'"),
    )

    op.create_table(
        "patient_payment_methods",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("account_id", sa.Integer, sa.ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "channel",
            sa.Enum("baridi_mob", "edahabia", "bank_transfer", "cash_deposit", name="depositchannel"),
            nullable=False,
        ),
        sa.Column("account_number", sa.String(100), nullable=True),
        sa.Column("account_name", sa.String(100), nullable=True),
        sa.Column("bank_name", sa.String(100), nullable=True),
        sa.Column("branch_code", sa.String(20), nullable=True),
        sa.Column("is_default", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_patient_payment_methods_id", "patient_payment_methods", ["id"], unique=False)
    op.create_index("ix_patient_payment_methods_account_id", "patient_payment_methods", ["account_id"], unique=False)
    op.create_index(
        "ix_patient_payment_methods_default",
        "patient_payment_methods",
        ["account_id", "is_default"],
        unique=False,
    )


def downgrade():
    op.drop_table("patient_payment_methods")
    op.drop_table("ledger_entries")
    op.drop_table("appointments")
    op.drop_table("accounts")
    op.execute("DROP TYPE IF EXISTS entrystatus")
    op.execute("DROP TYPE IF EXISTS entrytype")
    op.execute("DROP TYPE IF EXISTS appointmentstatus")
    op.execute("DROP TYPE IF EXISTS appointmenttype")
    op.execute("DROP TYPE IF EXISTS depositchannel")
    op.execute("DROP TYPE IF EXISTS accountkind")
