import os
from decimal import Decimal

import pytest


def _set_test_env() -> None:
    defaults = {
        "APP_NAME": "Clinic Ledger Test",
        "ENVIRONMENT": "test",
        "DATABASE_URL": "sqlite:///./clinic_ledger_test.db",
        "DB_STATEMENT_TIMEOUT_MS": "0",
        "AUTO_CREATE_TABLES": "false",
        "LOG_LEVEL": "INFO",
        "CURRENCY": "DZD",
    }
    for key, value in defaults.items():
        os.environ.setdefault(key, value)


_set_test_env()

from clinic_ledger.core.database import Base, create_db_engine, create_session_factory  # noqa: E402
from clinic_ledger.models import Account, AccountKind, Appointment, AppointmentStatus, AppointmentType  # noqa: E402
from clinic_ledger.services.payments import PaymentOrchestrator  # noqa: E402


@pytest.fixture
def engine(tmp_path):
    # File-backed so that separate sessions (and threads) see each other's commits.
    engine = create_db_engine(f"sqlite:///{tmp_path / 'ledger.db'}")
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def orchestrator(session_factory):
    return PaymentOrchestrator(session_factory, currency="DZD")


@pytest.fixture
def make_account(session_factory):
    def _make(balance="0", kind=AccountKind.PATIENT, name=None) -> int:
        db = session_factory()
        try:
            account = Account(kind=kind, display_name=name, balance=Decimal(str(balance)))
            db.add(account)
            db.commit()
            return account.id
        finally:
            db.close()

    return _make


@pytest.fixture
def make_appointment(session_factory):
    def _make(patient_id: int, provider_id: int, appointment_type=AppointmentType.TELEMEDICINE, fee="0") -> int:
        db = session_factory()
        try:
            appointment = Appointment(
                patient_account_id=patient_id,
                provider_account_id=provider_id,
                appointment_type=appointment_type,
                status=AppointmentStatus.PENDING,
                appointment_fee=Decimal(str(fee)),
            )
            db.add(appointment)
            db.commit()
            return appointment.id
        finally:
            db.close()

    return _make


@pytest.fixture
def read_balance(session_factory):
    def _read(account_id: int) -> Decimal:
        db = session_factory()
        try:
            return Decimal(db.get(Account, account_id).balance)
        finally:
            db.close()

    return _read
