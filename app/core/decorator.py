import logging
from functools import wraps

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.core.exceptions import APIException

logger = logging.getLogger(__name__)


class DBException(APIException):
    def __init__(
        self, message: str, status_code: int = 400, code: str = "DATABASE_ERROR"
    ):
        super().__init__(message, code, status_code)


def db_exception(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except IntegrityError as e:
            # Usually a duplicate entry that slipped past the service checks
            logger.warning(f"Integrity error in {func.__qualname__}: {e.orig}")
            raise DBException("Duplicate entry: already exists", 409, "DUPLICATE_ENTRY")
        except SQLAlchemyError as e:
            logger.error(f"Database error in {func.__qualname__}: {e}")
            raise DBException("Database error occurred", 500)

    return wrapper
