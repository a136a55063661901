"""Transaction ownership for ledger operations.

Callers say explicitly whether the ledger owns the unit of work:

* ``Owned(session_factory)``: the ledger opens a session, commits on success,
  rolls back on any failure and closes the session.
* ``Participant(session)``: the ledger runs every statement on the caller's
  session and never commits or rolls back; finalizing is the caller's job.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Union

from sqlalchemy.orm import Session, sessionmaker

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Owned:
    session_factory: sessionmaker


@dataclass(frozen=True)
class Participant:
    session: Session


TransactionContext = Union[Owned, Participant]


@contextmanager
def unit_of_work(txn: TransactionContext, label: str = "ledger") -> Iterator[Session]:
    if isinstance(txn, Participant):
        try:
            yield txn.session
            txn.session.flush()
        except Exception as exc:
            logger.info("%s failed inside caller transaction, rollback left to caller: %s", label, exc)
            raise
        return

    if not isinstance(txn, Owned):
        raise TypeError(f"Expected Owned or Participant, got {type(txn).__name__}")

    session = txn.session_factory()
    try:
        yield session
        session.commit()
    except Exception as exc:
        session.rollback()
        logger.error("%s transaction rolled back: %s", label, exc)
        raise
    finally:
        session.close()
