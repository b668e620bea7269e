from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from fee_ledger.core.config import settings


def _is_sqlite(dsn: str) -> bool:
    return dsn.startswith("sqlite")


def enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    """Turn on FK enforcement so payments keep blocking invoice deletes."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_ledger_engine(dsn: str) -> Engine:
    if _is_sqlite(dsn):
        ledger_engine = create_engine(
            dsn,
            # Writers of the same period wait on the counter row instead of failing
            connect_args={"check_same_thread": False, "timeout": 30},
        )
        event.listen(ledger_engine, "connect", enable_sqlite_foreign_keys)
        return ledger_engine
    return create_engine(dsn, pool_pre_ping=True)


engine = create_ledger_engine(settings.APP_DATABASE_DSN)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base: Any = declarative_base()


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create the ledger tables on a fresh database."""
    import fee_ledger.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
