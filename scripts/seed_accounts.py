from decimal import Decimal
from clinic_ledger.core.database import create_db_engine, create_session_factory
from clinic_ledger.models import Account, AccountKind


SAMPLE_ACCOUNTS = [
    {"display_name": "Sample Patient 1", "kind": AccountKind.PATIENT, "balance": Decimal("5000.00")},
    {"display_name": "Sample Patient 2", "kind": AccountKind.PATIENT, "balance": Decimal("5000.00")},
    {"display_name": "Sample Provider", "kind": AccountKind.PROVIDER, "balance": Decimal("0.00")},
]


def main():
    SessionLocal = create_session_factory(create_db_engine())
    db = SessionLocal()
    try:
        for account in SAMPLE_ACCOUNTS:
            existing = db.query(Account).filter(Account.display_name == account["display_name"]).first()
            if not existing:
                db.add(Account(**account))
        db.commit()
    finally:
        db.close()


if __name__ == "__main__":
    main()
