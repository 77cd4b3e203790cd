# shopapi/database.py
from contextlib import contextmanager
from typing import Iterator

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from shopapi.core.config import Settings

# ---------------------------------------------------------
# Engine construction
#
# PostgreSQL (production):
#   - sslmode is appended when DB_SSLMODE is configured
#   - pool_size / max_overflow come from settings
#   - pool_pre_ping validates pooled connections before use
#
# SQLite (local dev / tests):
#   - foreign keys are OFF by default in SQLite, so every new
#     connection runs PRAGMA foreign_keys=ON; cascade and set-null
#     rules then behave like on PostgreSQL
#   - in-memory databases share one connection (StaticPool)
# ---------------------------------------------------------


def _with_sslmode(db_url: str, sslmode: str) -> str:
    if "sslmode=" in db_url:
        return db_url
    separator = "&" if "?" in db_url else "?"
    return f"{db_url}{separator}sslmode={sslmode}"


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(settings: Settings) -> Engine:
    """
    Build the SQLAlchemy engine for the configured DATABASE_URL.
    """
    db_url = settings.DATABASE_URL

    if db_url.startswith("sqlite"):
        kwargs: dict = {"connect_args": {"check_same_thread": False}}
        if db_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(db_url, echo=settings.DB_ECHO, **kwargs)
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    if settings.DB_SSLMODE:
        db_url = _with_sslmode(db_url, settings.DB_SSLMODE)

    return create_engine(
        db_url,
        echo=settings.DB_ECHO,
        pool_pre_ping=True,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
    )


def create_db_and_tables(engine: Engine) -> None:
    """
    Create all tables defined in SQLModel metadata if they do not exist.

    Called once on application startup (and by seed_db.py).
    """
    # Table modules must be imported so SQLModel.metadata is populated.
    from shopapi.models import order, product, rider, user  # noqa: F401

    SQLModel.metadata.create_all(engine)


def get_session(request: Request) -> Iterator[Session]:
    """
    FastAPI dependency that yields a SQLModel Session bound to the
    engine owned by the running application.

    Usage:

        @router.get("/example")
        def example_endpoint(session: Session = Depends(get_session)):
            ...
    """
    with Session(request.app.state.engine) as session:
        yield session


@contextmanager
def atomic(session: Session) -> Iterator[Session]:
    """
    Run a block of writes as one transaction.

    Commits when the block finishes, rolls back on any exception
    (including HTTPException raised by business rules) and re-raises.
    """
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
