"""
Transaction Scope
Wraps a multi-statement write so it commits whole or not at all
"""
from contextlib import contextmanager
import logging

from sqlalchemy.exc import SQLAlchemyError, TimeoutError as PoolTimeoutError

from olpm.errors import OLPMError, PersistenceError, ServiceUnavailableError
from olpm.extensions import db

logger = logging.getLogger(__name__)


@contextmanager
def atomic(action):
    """
    Run the block inside the request session's transaction.
    Commits on success; on any failure rolls back before re-raising, so the
    pooled connection goes back clean when the session is removed.
    """
    try:
        yield db.session
        db.session.commit()
    except OLPMError:
        db.session.rollback()
        raise
    except PoolTimeoutError as exc:
        db.session.rollback()
        logger.error("No database connection available while trying to %s", action)
        raise ServiceUnavailableError(
            'Database is busy. Please try again shortly.'
        ) from exc
    except SQLAlchemyError as exc:
        logger.exception("Database failure while trying to %s; rolled back", action)
        db.session.rollback()
        raise PersistenceError(f'Failed to {action}') from exc
