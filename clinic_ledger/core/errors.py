from decimal import Decimal


class PaymentError(Exception):
    """Base class for ledger failures surfaced to booking flows.

    Each error carries a stable ``code`` and a short ``hint`` so callers can map
    it onto their own response format without parsing the message.
    """

    code = "PAYMENT_ERROR"
    hint = "Retry the request or contact support."

    def __init__(self, message: str, *, hint: str | None = None):
        super().__init__(message)
        self.message = message
        if hint is not None:
            self.hint = hint

    def to_dict(self) -> dict:
        return {
            "message": self.message,
            "code": self.code,
            "hint": self.hint,
        }


class AccountNotFound(PaymentError):
    code = "ACCOUNT_NOT_FOUND"
    hint = "Check the payer or payee account id."

    def __init__(self, account_id: int):
        super().__init__(f"Account {account_id} not found")
        self.account_id = account_id


class AppointmentNotFound(PaymentError):
    code = "APPOINTMENT_NOT_FOUND"
    hint = "Check the appointment id."

    def __init__(self, appointment_id: int):
        super().__init__(f"Appointment {appointment_id} not found")
        self.appointment_id = appointment_id


class InsufficientBalance(PaymentError):
    code = "INSUFFICIENT_BALANCE"
    hint = "Top up the balance or choose another payment method."

    def __init__(self, required: Decimal, available: Decimal, currency: str = "DZD"):
        super().__init__(
            f"Insufficient balance. Required: {required} {currency}, Available: {available} {currency}"
        )
        self.required = required
        self.available = available

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["required"] = str(self.required)
        data["available"] = str(self.available)
        return data


class InvalidPaymentMethod(PaymentError):
    code = "INVALID_PAYMENT_METHOD"
    hint = "Telemedicine appointments must be paid from balance."


class InvalidAppointmentType(PaymentError):
    code = "INVALID_APPOINTMENT_TYPE"
    hint = "Use 'telemedicine' or 'in-person'."


class InvalidAmount(PaymentError):
    code = "INVALID_AMOUNT"
    hint = "Use a valid amount greater than zero."


class DuplicateAuthorization(PaymentError):
    code = "DUPLICATE_AUTHORIZATION"
    hint = "The appointment is already paid; refund it before paying again."

    def __init__(self, appointment_id: int, account_id: int):
        super().__init__(
            f"A pending payment already exists for appointment #{appointment_id} and account {account_id}"
        )
        self.appointment_id = appointment_id
        self.account_id = account_id


class PaymentMethodNotFound(PaymentError):
    code = "PAYMENT_METHOD_NOT_FOUND"
    hint = "Check the saved payment method id."

    def __init__(self, method_id: int, account_id: int):
        super().__init__(f"Payment method {method_id} not found for account {account_id}")
        self.method_id = method_id
        self.account_id = account_id
