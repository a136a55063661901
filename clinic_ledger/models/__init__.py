from clinic_ledger.models.account import Account, AccountKind
from clinic_ledger.models.appointment import Appointment, AppointmentStatus, AppointmentType
from clinic_ledger.models.ledger_entry import (
    DepositChannel,
    EntryStatus,
    EntryType,
    LedgerEntry,
    PaymentMethod,
)
from clinic_ledger.models.saved_payment_method import SavedPaymentMethod

__all__ = [
    "Account",
    "AccountKind",
    "Appointment",
    "AppointmentStatus",
    "AppointmentType",
    "LedgerEntry",
    "EntryType",
    "EntryStatus",
    "PaymentMethod",
    "DepositChannel",
    "SavedPaymentMethod",
]
