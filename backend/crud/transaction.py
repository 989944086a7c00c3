import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from exceptions import InventoryError, PersistenceFailure

logger = logging.getLogger(__name__)


@contextmanager
def atomic(db: Session, action: str):
    """
    Run a block of crud work as one transaction.

    Commits when the block finishes, rolls everything back when it raises.
    Domain errors and anything unexpected propagate unchanged after the
    rollback; database errors are logged and re-raised as PersistenceFailure.
    """
    try:
        yield db
        db.commit()
    except InventoryError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Database error while trying to %s: %s", action, e)
        raise PersistenceFailure(f"Failed to {action}") from e
    except Exception:
        db.rollback()
        raise
