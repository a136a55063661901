import logging
from decimal import Decimal, InvalidOperation

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from clinic_ledger.core.errors import (
    AppointmentNotFound,
    DuplicateAuthorization,
    InsufficientBalance,
    InvalidAmount,
    InvalidAppointmentType,
    InvalidPaymentMethod,
)
from clinic_ledger.models import (
    Appointment,
    AppointmentStatus,
    AppointmentType,
    EntryStatus,
    EntryType,
    LedgerEntry,
    PaymentMethod,
)
from clinic_ledger.schemas.payment import AuthorizationResult, PaymentStatus, RefundResult, SettlementResult
from clinic_ledger.services import ledger
from clinic_ledger.services.transaction import Owned, TransactionContext, unit_of_work

logger = logging.getLogger(__name__)

_TYPE_LABELS = {
    AppointmentType.TELEMEDICINE: "Telemedicine",
    AppointmentType.IN_PERSON: "In-person",
}


def parse_appointment_type(value) -> AppointmentType:
    try:
        return AppointmentType(str(getattr(value, "value", value) or "").strip().lower())
    except ValueError:
        raise InvalidAppointmentType(f"Invalid appointment type: {value!r}") from None


def parse_payment_method(value) -> PaymentMethod:
    try:
        return PaymentMethod(str(getattr(value, "value", value) or "").strip().lower())
    except ValueError:
        raise InvalidPaymentMethod(f"Invalid payment method: {value!r}") from None


def parse_amount(value) -> Decimal:
    try:
        amount = ledger.as_money(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmount(f"Invalid amount: {value!r}") from None
    if not amount.is_finite() or amount <= 0:
        raise InvalidAmount(f"Amount must be greater than zero, got {value!r}")
    return amount


class PaymentOrchestrator:
    """Moves appointment fees between patient and provider balances.

    Balance payments are debited from the patient at booking and held as a
    ``pending`` payment entry. Completion moves the fee to the provider;
    cancellation refunds it to the patient. Cash bookings touch no balance
    until completion, when the provider is credited with a ``deposit`` entry.

    Every operation takes a :data:`TransactionContext`. Passing ``None`` runs
    the operation in its own transaction from ``session_factory``.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        currency: str = "DZD",
        default_refund_reason: str = "Appointment cancelled",
    ):
        self.session_factory = session_factory
        self.currency = currency
        self.default_refund_reason = default_refund_reason

    def _txn(self, txn: TransactionContext | None) -> TransactionContext:
        return txn if txn is not None else Owned(self.session_factory)

    def authorize_payment(
        self,
        appointment_id: int,
        payer_account_id: int,
        payee_account_id: int,
        appointment_type,
        payment_method,
        amount,
        txn: TransactionContext | None = None,
    ) -> AuthorizationResult:
        appointment_type = parse_appointment_type(appointment_type)
        payment_method = parse_payment_method(payment_method)
        if appointment_type == AppointmentType.TELEMEDICINE and payment_method != PaymentMethod.BALANCE:
            raise InvalidPaymentMethod("Telemedicine appointments require balance payment")
        amount = parse_amount(amount)
        label = _TYPE_LABELS[appointment_type]

        logger.info(
            "Authorizing %s payment for appointment #%s: payer=%s payee=%s amount=%s method=%s",
            appointment_type.value,
            appointment_id,
            payer_account_id,
            payee_account_id,
            amount,
            payment_method.value,
        )

        with unit_of_work(self._txn(txn), label="authorize_payment") as db:
            appointment = ledger.get_appointment(db, appointment_id)
            available = ledger.lock_balance(db, payer_account_id)
            if ledger.find_pending_payment(db, appointment_id, payer_account_id) is not None:
                raise DuplicateAuthorization(appointment_id, payer_account_id)

            if payment_method == PaymentMethod.CASH:
                ledger.set_appointment_fee_and_status(db, appointment, amount, AppointmentStatus.BOOKED)
                logger.info("Appointment #%s booked with cash payment of %s %s", appointment_id, amount, self.currency)
                return AuthorizationResult(
                    payment_processed=False,
                    entry_id=None,
                    new_balance=available,
                    amount=amount,
                    message=f"{label} appointment confirmed with cash payment",
                )

            if available < amount:
                raise InsufficientBalance(amount, available, self.currency)

            new_balance = ledger.debit_if_sufficient(db, payer_account_id, amount)
            if new_balance is None:
                raise InsufficientBalance(amount, ledger.get_balance(db, payer_account_id), self.currency)

            try:
                entry = ledger.insert_entry(
                    db,
                    account_id=payer_account_id,
                    entry_type=EntryType.PAYMENT,
                    amount=amount,
                    description=f"{label} appointment payment - Appointment #{appointment_id} (PENDING)",
                    payment_method=PaymentMethod.BALANCE,
                    status=EntryStatus.PENDING,
                    appointment_id=appointment_id,
                )
            except IntegrityError as exc:
                raise DuplicateAuthorization(appointment_id, payer_account_id) from exc

            ledger.set_appointment_fee_and_status(db, appointment, amount, AppointmentStatus.BOOKED)
            logger.info(
                "Pending payment #%s for appointment #%s: payer %s debited %s %s, new balance %s",
                entry.id,
                appointment_id,
                payer_account_id,
                amount,
                self.currency,
                new_balance,
            )
            return AuthorizationResult(
                payment_processed=True,
                entry_id=entry.id,
                new_balance=new_balance,
                amount=amount,
                message=f"{label} appointment payment pending.",
            )

    def settle_on_completion(
        self,
        appointment_id: int,
        payer_account_id: int,
        payee_account_id: int,
        appointment_type,
        txn: TransactionContext | None = None,
    ) -> SettlementResult:
        appointment_type = parse_appointment_type(appointment_type)

        with unit_of_work(self._txn(txn), label="settle_on_completion") as db:
            appointment = ledger.get_appointment(db, appointment_id)
            fee = ledger.as_money(appointment.appointment_fee)
            if fee <= 0:
                logger.info("Appointment #%s has no fee to settle", appointment_id)
                return SettlementResult(payment_processed=False, message="No payment to process for this appointment")

            ledger.lock_balance(db, payee_account_id)
            pending = ledger.find_pending_payment(db, appointment_id, payer_account_id)

            if pending is not None:
                if not ledger.transition_entry(db, pending.id, EntryStatus.COMPLETED, " - COMPLETED"):
                    logger.warning("Payment #%s for appointment #%s was settled concurrently", pending.id, appointment_id)
                    return SettlementResult(payment_processed=False, message="Payment already settled")
                new_balance = ledger.adjust_balance(db, payee_account_id, fee)
                logger.info(
                    "Payee %s received %s %s for appointment #%s (payment #%s)",
                    payee_account_id,
                    fee,
                    self.currency,
                    appointment_id,
                    pending.id,
                )
                return SettlementResult(
                    payment_processed=True,
                    payee_new_balance=new_balance,
                    amount=fee,
                    settlement=PaymentMethod.BALANCE.value,
                    message=f"{appointment_type.value} payment completed and transferred to provider",
                )

            if ledger.has_settlement(db, appointment_id, payer_account_id, payee_account_id):
                logger.warning("Appointment #%s has no pending payment and was already settled or refunded", appointment_id)
                return SettlementResult(payment_processed=False, message="Payment already settled")

            new_balance = ledger.adjust_balance(db, payee_account_id, fee)
            ledger.insert_entry(
                db,
                account_id=payee_account_id,
                entry_type=EntryType.DEPOSIT,
                amount=fee,
                description=f"Cash {appointment_type.value} appointment income - Appointment #{appointment_id}",
                payment_method=PaymentMethod.CASH,
                status=EntryStatus.COMPLETED,
                appointment_id=appointment_id,
            )
            logger.info("Cash payment of %s %s recorded for payee %s (appointment #%s)", fee, self.currency, payee_account_id, appointment_id)
            return SettlementResult(
                payment_processed=True,
                payee_new_balance=new_balance,
                amount=fee,
                settlement=PaymentMethod.CASH.value,
                message=f"Cash {appointment_type.value} payment recorded and transferred to provider",
            )

    def refund(
        self,
        appointment_id: int,
        payer_account_id: int,
        reason: str | None = None,
        txn: TransactionContext | None = None,
    ) -> RefundResult:
        reason = (reason or "").strip() or self.default_refund_reason

        with unit_of_work(self._txn(txn), label="refund") as db:
            appointment = ledger.get_appointment(db, appointment_id)
            if ledger.as_money(appointment.appointment_fee) <= 0:
                logger.info("Appointment #%s has no fee to refund", appointment_id)
                return RefundResult(refund_processed=False, message="No payment to refund for this appointment")

            current = ledger.lock_balance(db, payer_account_id)
            pending = ledger.find_pending_payment(db, appointment_id, payer_account_id)
            if pending is None or not ledger.transition_entry(db, pending.id, EntryStatus.CANCELLED, f" - CANCELLED: {reason}"):
                logger.info("Appointment #%s has no pending payment for account %s; nothing refunded", appointment_id, payer_account_id)
                return RefundResult(
                    refund_processed=False,
                    new_balance=current,
                    message="No pending payment to refund for this appointment",
                )

            amount = ledger.as_money(pending.amount)
            new_balance = ledger.adjust_balance(db, payer_account_id, amount)
            refund_entry = ledger.insert_entry(
                db,
                account_id=payer_account_id,
                entry_type=EntryType.REFUND,
                amount=amount,
                description=f"Appointment refund - {reason} - Appointment #{appointment_id}",
                payment_method=PaymentMethod.BALANCE,
                status=EntryStatus.COMPLETED,
                appointment_id=appointment_id,
            )
            ledger.set_appointment_status(db, appointment, AppointmentStatus.CANCELLED)
            logger.info(
                "Refunded %s %s to account %s for appointment #%s: %s",
                amount,
                self.currency,
                payer_account_id,
                appointment_id,
                reason,
            )
            return RefundResult(
                refund_processed=True,
                entry_id=refund_entry.id,
                new_balance=new_balance,
                amount=amount,
                message=f"Refund of {amount} {self.currency} processed successfully",
            )

    def get_payment_status(self, appointment_id: int, txn: TransactionContext | None = None) -> PaymentStatus:
        with unit_of_work(self._txn(txn), label="get_payment_status") as db:
            row = (
                db.query(
                    Appointment.appointment_fee,
                    Appointment.status,
                    Appointment.appointment_type,
                    LedgerEntry.entry_type,
                    LedgerEntry.status.label("entry_status"),
                )
                .outerjoin(
                    LedgerEntry,
                    (LedgerEntry.related_appointment_id == Appointment.id)
                    & (LedgerEntry.entry_type == EntryType.PAYMENT),
                )
                .filter(Appointment.id == appointment_id)
                .order_by(LedgerEntry.id.desc())
                .first()
            )
            if row is None:
                raise AppointmentNotFound(appointment_id)

            return PaymentStatus(
                appointment_fee=ledger.as_money(row.appointment_fee),
                appointment_status=row.status,
                appointment_type=row.appointment_type,
                payment_processed=row.entry_type == EntryType.PAYMENT,
                payment_status=row.entry_status,
            )
