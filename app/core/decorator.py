import inspect
import logging
from functools import wraps

from sqlalchemy.exc import (
    DBAPIError,
    IntegrityError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from app.core.exceptions import ConflictError, TransientError

logger = logging.getLogger(__name__)


def _translate(exc: SQLAlchemyError, name: str):
    if isinstance(exc, IntegrityError):
        # Mostly a duplicate entry
        return ConflictError("Duplicate entry: already exists")
    if isinstance(exc, (OperationalError, PoolTimeoutError, DBAPIError)):
        logger.warning(f"Transient database failure in {name}: {exc}")
        return TransientError("Database temporarily unavailable, please retry")
    logger.error(f"Database error in {name}: {exc}")
    return TransientError("Database error occurred", 500)


def db_exception(func):
    """Turn SQLAlchemy errors raised by a service call into service errors."""
    if inspect.iscoroutinefunction(func):

        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except SQLAlchemyError as e:
                raise _translate(e, func.__qualname__) from e

        return async_wrapper

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except SQLAlchemyError as e:
            raise _translate(e, func.__qualname__) from e

    return wrapper
