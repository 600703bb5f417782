"""Database engine and session factory. SQLite and PostgreSQL compatible."""
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from pharmasales.core.config import settings


def enable_sqlite_savepoints(engine: Engine) -> None:
    """
    Let the pysqlite driver honour SAVEPOINT.

    pysqlite defers BEGIN on its own, which breaks nested transactions;
    bulk inserts rely on one savepoint per item, so BEGIN is emitted here.
    """

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")


if settings.DATABASE_URL.startswith("sqlite"):
    from sqlalchemy.pool import NullPool

    engine = create_engine(
        settings.DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=NullPool,
    )
    enable_sqlite_savepoints(engine)
else:
    engine = create_engine(
        settings.DATABASE_URL,
        pool_size=5,
        max_overflow=10,
        pool_timeout=30,
        pool_recycle=3600,
        pool_pre_ping=True,
    )

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
