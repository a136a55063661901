from sqlalchemy import Boolean, Column, Integer, ForeignKey, String, Enum, Index
from sqlalchemy.orm import relationship
from clinic_ledger.core.database import Base
from clinic_ledger.models.base import TimestampMixin, enum_values
from clinic_ledger.models.ledger_entry import DepositChannel


class SavedPaymentMethod(Base, TimestampMixin):
    __tablename__ = "patient_payment_methods"

    id = Column(Integer, primary_key=True, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False)
    channel = Column(Enum(DepositChannel, name="depositchannel", values_callable=enum_values), nullable=False)
    account_number = Column(String(100), nullable=True)
    account_name = Column(String(100), nullable=True)
    bank_name = Column(String(100), nullable=True)
    branch_code = Column(String(20), nullable=True)
    is_default = Column(Boolean, nullable=False, default=False)
    # Removal only clears this flag; deposits may still reference the method.
    is_active = Column(Boolean, nullable=False, default=True)

    account = relationship("Account", back_populates="payment_methods")


Index("ix_patient_payment_methods_account_id", SavedPaymentMethod.account_id)
Index("ix_patient_payment_methods_default", SavedPaymentMethod.account_id, SavedPaymentMethod.is_default)
