import logging

from sqlalchemy.engine import Engine

from clinic_ledger.core.config import Settings, get_settings
from clinic_ledger.core.database import Base, check_database, create_db_engine, create_session_factory
from clinic_ledger.core.logging import configure_logging
from clinic_ledger.services.payments import PaymentOrchestrator

logger = logging.getLogger(__name__)


def ensure_tables(engine: Engine) -> None:
    # Optional local fallback for fresh environments; migrations own the schema.
    import clinic_ledger.models  # noqa: F401

    try:
        Base.metadata.create_all(bind=engine)
    except Exception as exc:
        logger.warning("DB unavailable on startup, skipping table creation: %s", exc)


def build_orchestrator(settings: Settings | None = None, engine: Engine | None = None) -> PaymentOrchestrator:
    """Wire logging, the engine and the session factory for one process."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    engine = engine or create_db_engine(settings.database_url, settings)
    if settings.auto_create_tables:
        ensure_tables(engine)
    if not check_database(engine):
        logger.warning("Database is not reachable yet; ledger operations will fail until it is")
    logger.info("%s ledger ready (environment=%s)", settings.app_name, settings.environment)
    return PaymentOrchestrator(
        create_session_factory(engine),
        currency=settings.currency,
        default_refund_reason=settings.default_refund_reason,
    )
