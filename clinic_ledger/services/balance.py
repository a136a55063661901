import logging
import math

from clinic_ledger.core.errors import InvalidPaymentMethod
from clinic_ledger.models import DepositChannel, EntryStatus, EntryType, LedgerEntry
from clinic_ledger.schemas.balance import BalanceSummary, DepositResult, LedgerPage, Pagination
from clinic_ledger.schemas.payment import LedgerEntryOut
from clinic_ledger.services import ledger
from clinic_ledger.services.payments import parse_amount
from clinic_ledger.services.transaction import TransactionContext, unit_of_work

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


def parse_channel(value) -> DepositChannel:
    try:
        return DepositChannel(str(getattr(value, "value", value) or "").strip().lower())
    except ValueError:
        raise InvalidPaymentMethod(
            f"Invalid deposit channel: {value!r}",
            hint="Use baridi_mob, edahabia, bank_transfer or cash_deposit.",
        ) from None


def deposit_funds(
    txn: TransactionContext,
    account_id: int,
    amount,
    channel,
    reference_number: str | None = None,
    description: str | None = None,
    currency: str = "DZD",
) -> DepositResult:
    amount = parse_amount(amount)
    channel = parse_channel(channel)
    with unit_of_work(txn, label="deposit_funds") as db:
        ledger.lock_balance(db, account_id)
        new_balance = ledger.adjust_balance(db, account_id, amount)
        entry = ledger.insert_entry(
            db,
            account_id=account_id,
            entry_type=EntryType.DEPOSIT,
            amount=amount,
            description=(description or "").strip() or "Balance deposit",
            payment_method=channel,
            status=EntryStatus.COMPLETED,
            reference_number=reference_number,
        )
        logger.info("Deposit #%s of %s %s to account %s via %s", entry.id, amount, currency, account_id, channel.value)
        return DepositResult(
            entry=LedgerEntryOut.model_validate(entry),
            new_balance=new_balance,
            message="Deposit successful",
        )


def get_balance_summary(txn: TransactionContext, account_id: int, limit: int = 20) -> BalanceSummary:
    with unit_of_work(txn, label="get_balance_summary") as db:
        balance = ledger.get_balance(db, account_id)
        entries = (
            db.query(LedgerEntry)
            .filter(LedgerEntry.account_id == account_id)
            .order_by(LedgerEntry.created_at.desc(), LedgerEntry.id.desc())
            .limit(max(1, min(int(limit), MAX_PAGE_SIZE)))
            .all()
        )
        return BalanceSummary(
            account_id=account_id,
            balance=balance,
            entries=[LedgerEntryOut.model_validate(entry) for entry in entries],
        )


def list_entries(
    txn: TransactionContext,
    account_id: int,
    page: int = 1,
    limit: int = 10,
    entry_type=None,
) -> LedgerPage:
    page = max(1, int(page or 1))
    limit = max(1, min(int(limit or 10), MAX_PAGE_SIZE))
    with unit_of_work(txn, label="list_entries") as db:
        ledger.get_balance(db, account_id)
        query = db.query(LedgerEntry).filter(LedgerEntry.account_id == account_id)
        if entry_type:
            query = query.filter(LedgerEntry.entry_type == EntryType(getattr(entry_type, "value", entry_type)))
        total = query.count()
        rows = (
            query.order_by(LedgerEntry.created_at.desc(), LedgerEntry.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return LedgerPage(
            entries=[LedgerEntryOut.model_validate(row) for row in rows],
            pagination=Pagination(page=page, limit=limit, total=total, pages=math.ceil(total / limit)),
        )
