from decimal import Decimal
from sqlalchemy.orm import Session
from clinic_ledger.core.errors import AccountNotFound, AppointmentNotFound
from clinic_ledger.models import (
    Account,
    Appointment,
    AppointmentStatus,
    EntryStatus,
    EntryType,
    LedgerEntry,
)


def as_money(value) -> Decimal:
    if value is None:
        return Decimal("0")
    return Decimal(str(value)).quantize(Decimal("0.01"))


def get_balance(db: Session, account_id: int) -> Decimal:
    row = db.query(Account.balance).filter(Account.id == account_id).first()
    if row is None:
        raise AccountNotFound(account_id)
    return as_money(row.balance)


def lock_balance(db: Session, account_id: int) -> Decimal:
    # SELECT ... FOR UPDATE; concurrent writers on this account queue here.
    row = db.query(Account.balance).filter(Account.id == account_id).with_for_update().first()
    if row is None:
        raise AccountNotFound(account_id)
    return as_money(row.balance)


def adjust_balance(db: Session, account_id: int, delta: Decimal) -> Decimal:
    updated = (
        db.query(Account)
        .filter(Account.id == account_id)
        .update({Account.balance: Account.balance + delta}, synchronize_session=False)
    )
    if updated != 1:
        raise AccountNotFound(account_id)
    return get_balance(db, account_id)


def debit_if_sufficient(db: Session, account_id: int, amount: Decimal) -> Decimal | None:
    """Atomically subtract ``amount``; return the new balance or None when short."""
    updated = (
        db.query(Account)
        .filter(Account.id == account_id, Account.balance >= amount)
        .update({Account.balance: Account.balance - amount}, synchronize_session=False)
    )
    if updated != 1:
        return None
    return get_balance(db, account_id)


def get_appointment(db: Session, appointment_id: int) -> Appointment:
    appointment = db.query(Appointment).filter(Appointment.id == appointment_id).first()
    if appointment is None:
        raise AppointmentNotFound(appointment_id)
    return appointment


def set_appointment_fee_and_status(db: Session, appointment: Appointment, fee: Decimal, status: AppointmentStatus) -> None:
    appointment.appointment_fee = fee
    appointment.status = status
    db.flush()


def set_appointment_status(db: Session, appointment: Appointment, status: AppointmentStatus) -> None:
    appointment.status = status
    db.flush()


def insert_entry(
    db: Session,
    *,
    account_id: int,
    entry_type: EntryType,
    amount: Decimal,
    description: str,
    payment_method: str,
    status: EntryStatus,
    appointment_id: int | None = None,
    reference_number: str | None = None,
) -> LedgerEntry:
    entry = LedgerEntry(
        account_id=account_id,
        entry_type=entry_type,
        amount=amount,
        description=description,
        payment_method=str(getattr(payment_method, "value", payment_method)),
        status=status,
        related_appointment_id=appointment_id,
        reference_number=reference_number,
    )
    db.add(entry)
    db.flush()
    return entry


def find_pending_payment(db: Session, appointment_id: int, account_id: int) -> LedgerEntry | None:
    return (
        db.query(LedgerEntry)
        .filter(
            LedgerEntry.related_appointment_id == appointment_id,
            LedgerEntry.account_id == account_id,
            LedgerEntry.entry_type == EntryType.PAYMENT,
            LedgerEntry.status == EntryStatus.PENDING,
        )
        .with_for_update()
        .first()
    )


def transition_entry(db: Session, entry_id: int, new_status: EntryStatus, description_suffix: str = "") -> bool:
    """Move a pending entry to ``new_status``.

    Returns False when the entry is no longer pending, i.e. another settle or
    refund got there first.
    """
    values = {LedgerEntry.status: new_status}
    if description_suffix:
        values[LedgerEntry.description] = LedgerEntry.description + description_suffix
    updated = (
        db.query(LedgerEntry)
        .filter(LedgerEntry.id == entry_id, LedgerEntry.status == EntryStatus.PENDING)
        .update(values, synchronize_session=False)
    )
    if updated == 1:
        entry = db.get(LedgerEntry, entry_id)
        if entry is not None:
            db.refresh(entry)
    return updated == 1


def has_settlement(db: Session, appointment_id: int, payer_account_id: int, payee_account_id: int) -> bool:
    settled_payment = (
        db.query(LedgerEntry.id)
        .filter(
            LedgerEntry.related_appointment_id == appointment_id,
            LedgerEntry.account_id == payer_account_id,
            LedgerEntry.entry_type == EntryType.PAYMENT,
            LedgerEntry.status == EntryStatus.COMPLETED,
        )
        .first()
    )
    if settled_payment is not None:
        return True
    cash_deposit = (
        db.query(LedgerEntry.id)
        .filter(
            LedgerEntry.related_appointment_id == appointment_id,
            LedgerEntry.account_id == payee_account_id,
            LedgerEntry.entry_type == EntryType.DEPOSIT,
        )
        .first()
    )
    return cash_deposit is not None
