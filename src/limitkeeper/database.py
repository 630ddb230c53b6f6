import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import (
    DBAPIError,
    IntegrityError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from limitkeeper.config import DEFAULT_DATABASE_URL
from limitkeeper.errors import FatalStorageError, InvalidInputError, TransientStorageError
from limitkeeper.models.base import Base
from limitkeeper.models.channel_limit_edits import ChannelLimitEdits  # noqa: F401
from limitkeeper.models.channel_limits import ChannelLimits  # noqa: F401

logger = logging.getLogger(__name__)

# Backends with a locking INSERT ... ON CONFLICT and DELETE ... RETURNING.
SUPPORTED_BACKENDS = ("sqlite", "postgresql")

# OperationalError messages that mean the schema or file is broken, not busy.
FATAL_OPERATIONAL_MARKERS = (
    "no such table",
    "no such column",
    "malformed",
    "not a database",
    "readonly database",
)


def is_transient(error: SQLAlchemyError) -> bool:
    if isinstance(error, (PoolTimeoutError, StaleDataError, IntegrityError)):
        return True
    if isinstance(error, DBAPIError) and error.connection_invalidated:
        return True
    if isinstance(error, OperationalError):
        reason = str(error.orig).lower()
        return not any(marker in reason for marker in FATAL_OPERATIONAL_MARKERS)
    return False


@contextmanager
def storage_errors(operation: str) -> Iterator[None]:
    """Re-raise SQLAlchemy failures as retryable or fatal storage errors.

    Wrap it around the session so the transaction is already rolled back when
    the mapped error reaches the caller.
    """
    try:
        yield
    except SQLAlchemyError as exc:
        details = {"operation": operation, "error": type(exc).__name__}
        if is_transient(exc):
            logger.warning(f"Transient storage error while {operation}: {exc}")
            raise TransientStorageError(
                code="storage_unavailable",
                message=f"Storage temporarily unavailable while {operation}",
                details=details,
            ) from exc
        logger.error(f"Fatal storage error while {operation}: {exc}")
        raise FatalStorageError(
            code="storage_failure",
            message=f"Storage failure while {operation}",
            details=details,
        ) from exc


def ensure_sqlite_directory(url: str):
    database_url = make_url(url)
    if database_url.get_backend_name() != "sqlite":
        return
    database = database_url.database
    if not database or database == ":memory:" or database.startswith("file:"):
        return
    Path(database).parent.mkdir(parents=True, exist_ok=True)


class Database:
    def __init__(self, url: str = DEFAULT_DATABASE_URL, timeout: float = 5.0, echo: bool = False):
        backend = make_url(url).get_backend_name()
        if backend not in SUPPORTED_BACKENDS:
            raise InvalidInputError(
                code="unsupported_database",
                message=f"Unsupported database backend {backend!r}, expected one of {SUPPORTED_BACKENDS}",
            )
        ensure_sqlite_directory(url)
        if backend == "sqlite":
            engine_args = {"connect_args": {"timeout": timeout, "check_same_thread": False}}
        else:
            engine_args = {"pool_timeout": timeout}
        self.url: str = url
        self.engine: Engine = create_engine(url, echo=echo, **engine_args)
        self.Session: sessionmaker[Session] = sessionmaker(bind=self.engine, expire_on_commit=False)

    def create_schema(self):
        with storage_errors("provisioning schema"):
            Base.metadata.create_all(self.engine)
        logger.info(f"Database schema ready at {self.engine.url!r}")

    def dispose(self):
        self.engine.dispose()
