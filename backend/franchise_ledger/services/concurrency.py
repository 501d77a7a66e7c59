# Overview: Unit-of-work and retry helpers shared by the ledger write paths.

from __future__ import annotations

import logging
import time
from contextlib import contextmanager

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db

logger = logging.getLogger(__name__)


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    Stock safety never depends on this lock alone; see inventory_service.decrement.
    """
    return query.with_for_update()


@contextmanager
def unit_of_work():
    """
    Commit everything done inside the block, or nothing.

    Any exception (domain error or database error) rolls the session back
    before propagating, so callers never observe a half-applied write.
    """
    try:
        yield db.session
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (deadlocks, locks) and StaleDataError
    (optimistic locking conflicts). Domain errors propagate immediately.
    """
    last_exc = None
    for attempt in range(attempts):
        try:
            return func()
        except (OperationalError, StaleDataError) as exc:
            db.session.rollback()
            last_exc = exc
            if attempt >= attempts - 1:
                raise
            logger.warning("Retrying after concurrency conflict (attempt %s): %s", attempt + 1, exc)
            time.sleep(backoff_base * (2 ** attempt))
    if last_exc:
        raise last_exc
