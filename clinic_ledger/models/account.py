import enum
from sqlalchemy import Column, Integer, Numeric, String, Enum, Index
from sqlalchemy.orm import relationship
from clinic_ledger.core.database import Base
from clinic_ledger.models.base import TimestampMixin, enum_values


class AccountKind(str, enum.Enum):
    PATIENT = "patient"
    PROVIDER = "provider"


class Account(Base, TimestampMixin):
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, index=True)
    kind = Column(Enum(AccountKind, name="accountkind", values_callable=enum_values), nullable=False, default=AccountKind.PATIENT)
    display_name = Column(String(255), nullable=True)
    balance = Column(Numeric(12, 2), default=0, nullable=False)

    ledger_entries = relationship("LedgerEntry", back_populates="account")
    payment_methods = relationship("SavedPaymentMethod", back_populates="account")


Index("ix_accounts_kind", Account.kind)
