"""
Module: tax_kernel.db.engine
Responsibility: SQLAlchemy engine initialization, session factory management,
    and transactional scope utilities.  Single point of database connection
    configuration for the kernel.
Architecture position: Kernel > DB.  May import from db/base.py.  MUST NOT
    import from services/ or outer layers (create_tables imports models to
    register their tables).

Invariants enforced:
    - PostgreSQL is the production backend: READ COMMITTED isolation with
      explicit row locks (SELECT ... FOR UPDATE) on the configuration record.
    - SQLite is accepted for tests and local runs.  An in-memory SQLite URL
      uses a single shared connection (StaticPool) so every session sees the
      same database.
    - session_scope() is the transaction boundary of every public operation:
      commit on success, rollback on any exception.  This is what makes the
      legs of a taxed transfer all-or-nothing.

Failure modes:
    - RuntimeError if get_engine/get_session/get_session_factory is called
      before init_engine_from_url().
"""

import atexit
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from tax_kernel.logging_config import configure_logging, get_logger

logger = get_logger("db.engine")

_engine: Engine | None = None
_SessionFactory: sessionmaker[Session] | None = None


def _engine_options(url, pool_size: int, max_overflow: int) -> dict:
    """create_engine() keyword arguments for the URL's backend."""
    if url.get_backend_name() == "sqlite":
        options: dict = {"connect_args": {"check_same_thread": False}}
        if url.database in (None, "", ":memory:"):
            options["poolclass"] = StaticPool
        return options
    return {
        "poolclass": QueuePool,
        "pool_size": pool_size,
        "max_overflow": max_overflow,
        "pool_pre_ping": True,
        "pool_recycle": 1800,
        "isolation_level": "READ COMMITTED",
    }


def init_engine_from_url(
    database_url: str,
    echo: bool = False,
    pool_size: int = 10,
    max_overflow: int = 10,
) -> Engine:
    """
    Create the process-wide engine and session factory.

    A second call replaces the first; the old engine is not disposed, so
    call reset_engine() first when that matters.

    Args:
        database_url: postgresql:// for deployments, sqlite:// for tests and
            local runs.
        echo: Log every SQL statement.
        pool_size: Pooled connections (PostgreSQL only).
        max_overflow: Connections beyond pool_size (PostgreSQL only).
    """
    global _engine, _SessionFactory

    url = make_url(database_url)
    _engine = create_engine(url, echo=echo, **_engine_options(url, pool_size, max_overflow))
    _SessionFactory = sessionmaker(bind=_engine, expire_on_commit=False)

    configure_logging()
    logger.info(
        "engine_initialized",
        extra={"dialect": url.get_backend_name(), "database": url.database},
    )
    return _engine


def get_engine() -> Engine:
    if _engine is None:
        raise RuntimeError("Engine not initialized. Call init_engine_from_url() first.")
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    if _SessionFactory is None:
        raise RuntimeError("Engine not initialized. Call init_engine_from_url() first.")
    return _SessionFactory


def get_session() -> Session:
    """New session from the process-wide factory."""
    return get_session_factory()()


@contextmanager
def session_scope(
    factory: sessionmaker[Session] | None = None,
) -> Generator[Session, None, None]:
    """
    One transaction: commit on normal exit, rollback and re-raise otherwise.

    Usage:
        with session_scope() as session:
            TransferRouter(session, ledger, program_id).transfer_with_tax(...)
    """
    session = (factory or get_session_factory())()
    logger.debug("transaction_started")
    try:
        yield session
        session.commit()
        logger.debug("transaction_committed")
    except Exception:
        session.rollback()
        logger.warning("transaction_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def _metadata():
    from tax_kernel.db.base import Base
    import tax_kernel.models  # noqa: F401  (registers tables on Base.metadata)

    return Base.metadata


def create_tables() -> None:
    """Create every kernel table that does not exist yet."""
    _metadata().create_all(get_engine())


def drop_tables() -> None:
    """Drop every kernel table. Tests only."""
    _metadata().drop_all(get_engine())


def reset_engine() -> None:
    """Dispose the engine and forget the session factory."""
    global _engine, _SessionFactory

    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionFactory = None


@atexit.register
def _dispose_on_exit() -> None:
    if _engine is not None:
        _engine.dispose()
