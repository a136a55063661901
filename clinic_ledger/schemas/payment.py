from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict

from clinic_ledger.models import AppointmentStatus, AppointmentType, EntryStatus, EntryType


class AuthorizationResult(BaseModel):
    payment_processed: bool
    entry_id: Optional[int] = None
    new_balance: Decimal
    amount: Decimal
    status: EntryStatus = EntryStatus.PENDING
    message: str


class SettlementResult(BaseModel):
    payment_processed: bool
    payee_new_balance: Optional[Decimal] = None
    amount: Decimal = Decimal("0")
    settlement: Optional[str] = None
    message: str


class RefundResult(BaseModel):
    refund_processed: bool
    entry_id: Optional[int] = None
    new_balance: Optional[Decimal] = None
    amount: Decimal = Decimal("0")
    message: str


class PaymentStatus(BaseModel):
    appointment_fee: Decimal
    appointment_status: AppointmentStatus | str
    appointment_type: AppointmentType | str
    payment_processed: bool
    payment_status: Optional[EntryStatus | str] = None


class LedgerEntryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    account_id: int
    entry_type: EntryType | str
    amount: Decimal
    description: str
    payment_method: str
    reference_number: Optional[str] = None
    status: EntryStatus | str
    related_appointment_id: Optional[int] = None
    created_at: Optional[datetime] = None
