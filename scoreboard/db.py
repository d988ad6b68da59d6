from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session, sessionmaker

from scoreboard.config import settings
from scoreboard.errors import StoreUnavailable
from scoreboard.logging import get_logger

logger = get_logger(__name__)


def _normalize_database_url(raw_url: str) -> str:
    url = (raw_url or "").strip()
    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://") :]
    if url.startswith("postgresql://") and "+psycopg" not in url:
        url = url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite ignores ON DELETE CASCADE unless asked per connection.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(url: str) -> Engine:
    url = _normalize_database_url(url)
    if url.startswith("sqlite"):
        connect_args = {"check_same_thread": False, "timeout": settings.DB_BUSY_TIMEOUT_SECONDS}
    else:
        connect_args = {}
    new_engine = create_engine(url, future=True, pool_pre_ping=True, connect_args=connect_args)
    if url.startswith("sqlite"):
        event.listen(new_engine, "connect", _enable_sqlite_foreign_keys)
    return new_engine


def make_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=bind, future=True)


DATABASE_URL = _normalize_database_url(settings.DATABASE_URL)
engine = make_engine(DATABASE_URL)
SessionLocal = make_session_factory(engine)


# Fragments of OperationalError messages that mean "try again later"
# rather than a deterministic failure such as an arithmetic overflow.
_TRANSIENT_MARKERS = (
    "locked",
    "busy",
    "timeout",
    "timed out",
    "unable to open",
    "could not connect",
    "connection",
    "server closed",
    "deadlock",
    "lock not available",
)


def _is_transient(exc: Exception) -> bool:
    if isinstance(exc, PoolTimeoutError):
        return True
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return True
    if isinstance(exc, OperationalError):
        message = str(exc.orig if exc.orig is not None else exc).lower()
        return any(marker in message for marker in _TRANSIENT_MARKERS)
    return False


@contextmanager
def store_errors(db: Session) -> Iterator[Session]:
    """Roll back on error and report transient store failures as :class:`StoreUnavailable`.

    Wraps reads as well as writes, so a lost connection or a lock timeout
    never reaches the caller as a raw driver error.
    """
    try:
        yield db
    except Exception as exc:
        db.rollback()
        if _is_transient(exc):
            logger.warning("store_unavailable", error=str(exc))
            raise StoreUnavailable(str(exc)) from exc
        raise


@contextmanager
def unit_of_work(db: Session) -> Iterator[Session]:
    """Run the enclosed block as one transaction, committed on success."""
    with store_errors(db):
        yield db
        db.commit()
