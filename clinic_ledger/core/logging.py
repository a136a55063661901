import logging

from clinic_ledger.core.config import get_settings, parse_log_level

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    settings = get_settings()
    resolved = parse_log_level(level or settings.log_level)
    fmt = LOG_FORMAT
    if settings.instance_name:
        fmt = f"%(asctime)s %(levelname)s {settings.instance_name} [%(name)s] %(message)s"
    logging.basicConfig(level=resolved, format=fmt)
    logging.getLogger().setLevel(resolved)
    # SQL echo is noisy at INFO; keep it for explicit debugging only.
    if resolved != "DEBUG":
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
