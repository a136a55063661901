import importlib.util
import logging
from urllib.parse import urlparse

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from clinic_ledger.core.config import Settings, get_settings


class Base(DeclarativeBase):
    pass


logger = logging.getLogger(__name__)


def _resolve_database_url(database_url: str) -> str:
    if not database_url.startswith("postgresql://"):
        return database_url
    has_psycopg2 = importlib.util.find_spec("psycopg2") is not None
    has_psycopg3 = importlib.util.find_spec("psycopg") is not None
    if not has_psycopg2 and has_psycopg3:
        return database_url.replace("postgresql://", "postgresql+psycopg://", 1)
    return database_url


_LOCAL_PG_HOSTS = frozenset({"localhost", "127.0.0.1", "db"})
_PG_KEEPALIVE = {"keepalives": 1, "keepalives_idle": 30, "keepalives_interval": 10, "keepalives_count": 5}

# Floors for the PostgreSQL pool. Booking bursts hold payer row locks briefly;
# a smaller pool turns that wait into checkout timeouts.
POOL_FLOORS = {"pool_size": 5, "max_overflow": 5, "pool_timeout": 8}


def _build_connect_args(database_url: str, statement_timeout_ms: int = 0) -> dict:
    parsed = urlparse(database_url)
    if parsed.scheme.startswith("sqlite"):
        # Concurrent writers wait on the database lock instead of failing fast.
        return {"timeout": 30}
    if not parsed.scheme.startswith("postgresql"):
        return {}

    connect_args = dict(_PG_KEEPALIVE)
    if parsed.hostname not in _LOCAL_PG_HOSTS:
        connect_args["sslmode"] = "require"
    if statement_timeout_ms > 0:
        connect_args["options"] = f"-c statement_timeout={int(statement_timeout_ms)}"
    return connect_args


def _pool_kwargs(database_url: str, settings: Settings) -> dict:
    if not database_url.startswith("postgresql"):
        return {}

    requested = {
        "pool_size": int(settings.db_pool_size),
        "max_overflow": int(settings.db_max_overflow),
        "pool_timeout": int(settings.db_pool_timeout),
    }
    effective = {name: max(POOL_FLOORS[name], value) for name, value in requested.items()}
    raised = [f"{name}={requested[name]}->{effective[name]}" for name in effective if effective[name] != requested[name]]
    if raised:
        logger.warning("Ledger DB pool below booking-safe floor, raising %s", ", ".join(raised))

    return {
        **effective,
        "pool_pre_ping": settings.db_pool_pre_ping,
        "pool_recycle": settings.db_pool_recycle,
        "pool_use_lifo": True,
    }


def create_db_engine(database_url: str | None = None, settings: Settings | None = None) -> Engine:
    settings = settings or get_settings()
    url = _resolve_database_url(str(database_url or settings.database_url))
    return create_engine(
        url,
        **_pool_kwargs(url, settings),
        connect_args=_build_connect_args(url, settings.db_statement_timeout_ms),
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def check_database(engine: Engine) -> bool:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception as exc:
        logger.warning("Ledger database unreachable: %s", exc)
        return False
