# Overview: Transaction helpers; every mutation runs as one unit and leaves no partial state.

from __future__ import annotations

import time

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db


RETRYABLE = (OperationalError, StaleDataError)


def lock_for_update(query):
    """
    Row lock for read-modify-write of a lorry, route or shop.

    NOTE: a no-op on SQLite; honored by server databases.
    """
    return query.with_for_update()


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Run func as one transaction.

    func is expected to commit itself. Whatever it raises, the session is
    rolled back first, so callers translating IntegrityError into a conflict
    never see half-applied changes (e.g. reps unassigned from a lorry that
    survived). Lock timeouts and stale rows are retried with exponential
    backoff; everything else propagates on the first failure.
    """
    attempt = 0
    while True:
        attempt += 1
        try:
            return func()
        except RETRYABLE:
            db.session.rollback()
            if attempt >= attempts:
                raise
            time.sleep(backoff_base * (2 ** (attempt - 1)))
        except Exception:
            db.session.rollback()
            raise
