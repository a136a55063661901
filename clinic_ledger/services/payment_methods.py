"""Saved deposit methods on file for an account.

At most one active method per account is the default. Removing a method only
deactivates it.
"""
import logging

from sqlalchemy.orm import Session

from clinic_ledger.core.errors import PaymentMethodNotFound
from clinic_ledger.models import SavedPaymentMethod
from clinic_ledger.schemas.balance import SavedPaymentMethodOut
from clinic_ledger.services import ledger
from clinic_ledger.services.balance import parse_channel
from clinic_ledger.services.transaction import TransactionContext, unit_of_work

logger = logging.getLogger(__name__)

_DETAIL_FIELDS = ("account_number", "account_name", "bank_name", "branch_code")


def _clean(value):
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _owned_method(db: Session, account_id: int, method_id: int) -> SavedPaymentMethod:
    method = (
        db.query(SavedPaymentMethod)
        .filter(SavedPaymentMethod.id == method_id, SavedPaymentMethod.account_id == account_id)
        .with_for_update()
        .first()
    )
    if method is None:
        raise PaymentMethodNotFound(method_id, account_id)
    return method


def _clear_default(db: Session, account_id: int, keep_id: int | None = None) -> None:
    query = db.query(SavedPaymentMethod).filter(
        SavedPaymentMethod.account_id == account_id,
        SavedPaymentMethod.is_default.is_(True),
    )
    if keep_id is not None:
        query = query.filter(SavedPaymentMethod.id != keep_id)
    query.update({SavedPaymentMethod.is_default: False}, synchronize_session=False)


def list_payment_methods(txn: TransactionContext, account_id: int) -> list[SavedPaymentMethodOut]:
    with unit_of_work(txn, label="list_payment_methods") as db:
        ledger.get_balance(db, account_id)
        rows = (
            db.query(SavedPaymentMethod)
            .filter(SavedPaymentMethod.account_id == account_id, SavedPaymentMethod.is_active.is_(True))
            .order_by(
                SavedPaymentMethod.is_default.desc(),
                SavedPaymentMethod.created_at.desc(),
                SavedPaymentMethod.id.desc(),
            )
            .all()
        )
        return [SavedPaymentMethodOut.model_validate(row) for row in rows]


def add_payment_method(
    txn: TransactionContext,
    account_id: int,
    channel,
    account_number: str | None = None,
    account_name: str | None = None,
    bank_name: str | None = None,
    branch_code: str | None = None,
    is_default: bool = False,
) -> SavedPaymentMethodOut:
    channel = parse_channel(channel)
    with unit_of_work(txn, label="add_payment_method") as db:
        ledger.lock_balance(db, account_id)
        if is_default:
            _clear_default(db, account_id)
        method = SavedPaymentMethod(
            account_id=account_id,
            channel=channel,
            account_number=_clean(account_number),
            account_name=_clean(account_name),
            bank_name=_clean(bank_name),
            branch_code=_clean(branch_code),
            is_default=bool(is_default),
            is_active=True,
        )
        db.add(method)
        db.flush()
        db.refresh(method)
        logger.info("Saved %s payment method #%s for account %s", channel.value, method.id, account_id)
        return SavedPaymentMethodOut.model_validate(method)


def update_payment_method(
    txn: TransactionContext,
    account_id: int,
    method_id: int,
    channel=None,
    is_default: bool | None = None,
    **details,
) -> SavedPaymentMethodOut:
    """Change a saved method in place.

    Only the fields passed are touched; ``details`` accepts the account number,
    account name, bank name and branch code. Marking the method as default
    clears the flag on every other method of the account.
    """
    unknown = set(details) - set(_DETAIL_FIELDS)
    if unknown:
        raise TypeError(f"Unknown payment method fields: {', '.join(sorted(unknown))}")
    if channel is not None:
        channel = parse_channel(channel)

    with unit_of_work(txn, label="update_payment_method") as db:
        ledger.lock_balance(db, account_id)
        method = _owned_method(db, account_id, method_id)
        if channel is not None:
            method.channel = channel
        for field, value in details.items():
            setattr(method, field, _clean(value))
        if is_default is not None:
            if is_default:
                _clear_default(db, account_id, keep_id=method.id)
            method.is_default = bool(is_default)
        db.flush()
        db.refresh(method)
        logger.info("Updated payment method #%s for account %s", method.id, account_id)
        return SavedPaymentMethodOut.model_validate(method)


def deactivate_payment_method(txn: TransactionContext, account_id: int, method_id: int) -> SavedPaymentMethodOut:
    with unit_of_work(txn, label="deactivate_payment_method") as db:
        method = _owned_method(db, account_id, method_id)
        method.is_active = False
        method.is_default = False
        db.flush()
        db.refresh(method)
        logger.info("Deactivated payment method #%s for account %s", method.id, account_id)
        return SavedPaymentMethodOut.model_validate(method)
