import logging
from contextlib import contextmanager
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from km_api.config.errors import ErrorMessages, StorageError

logger = logging.getLogger(__name__)


def escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SqlAlchemyRepository:
    """Holds the injected session and translates SQLAlchemy failures to ``StorageError``."""

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _storage(self, action: str):
        try:
            yield
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("DB 작업 실패 (%s): %s", action, e)
            raise StorageError(f"{ErrorMessages.DATABASE_ERROR}: failed to {action}", str(e)) from e

    def _commit(self, action: str) -> None:
        """Commit the unit of work.

        ``IntegrityError`` is rolled back and re-raised so the caller can
        decide which condition the violated constraint stands for.
        """
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning("제약 조건 위반 (%s)", action)
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("DB 커밋 실패 (%s): %s", action, e)
            raise StorageError(f"{ErrorMessages.DATABASE_ERROR}: failed to {action}", str(e)) from e
