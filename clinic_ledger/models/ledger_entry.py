import enum
from sqlalchemy import CheckConstraint, Column, Integer, ForeignKey, Numeric, String, Enum, Index, text
from sqlalchemy.orm import relationship
from clinic_ledger.core.database import Base
from clinic_ledger.models.base import TimestampMixin, enum_values


class EntryType(str, enum.Enum):
    PAYMENT = "payment"
    DEPOSIT = "deposit"
    REFUND = "refund"


class EntryStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentMethod(str, enum.Enum):
    BALANCE = "balance"
    CASH = "cash"


class DepositChannel(str, enum.Enum):
    BARIDI_MOB = "baridi_mob"
    EDAHABIA = "edahabia"
    BANK_TRANSFER = "bank_transfer"
    CASH_DEPOSIT = "cash_deposit"


PENDING_PAYMENT_WHERE = text("entry_type = 'payment' AND status = 'pending'")


class LedgerEntry(Base, TimestampMixin):
    __tablename__ = "ledger_entries"
    __table_args__ = (CheckConstraint("amount > 0", name="ck_ledger_entries_amount_positive"),)

    id = Column(Integer, primary_key=True, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    entry_type = Column(Enum(EntryType, name="entrytype", values_callable=enum_values), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    description = Column(String(500), nullable=False)
    # "balance", "cash" or a DepositChannel value.
    payment_method = Column(String(50), nullable=False)
    reference_number = Column(String(100), nullable=True)
    status = Column(
        Enum(EntryStatus, name="entrystatus", values_callable=enum_values),
        nullable=False,
        default=EntryStatus.PENDING,
    )
    related_appointment_id = Column(Integer, ForeignKey("appointments.id", ondelete="SET NULL"), nullable=True)

    account = relationship("Account", back_populates="ledger_entries")
    appointment = relationship("Appointment", back_populates="ledger_entries")


Index("ix_ledger_entries_account_id_type", LedgerEntry.account_id, LedgerEntry.entry_type)
Index("ix_ledger_entries_related_appointment_id", LedgerEntry.related_appointment_id)
Index(
    "uq_ledger_entries_pending_payment",
    LedgerEntry.related_appointment_id,
    LedgerEntry.account_id,
    unique=True,
    postgresql_where=PENDING_PAYMENT_WHERE,
    sqlite_where=PENDING_PAYMENT_WHERE,
)
