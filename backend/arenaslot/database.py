from pathlib import Path

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker

from .config import settings


def create_db_engine(url: str) -> Engine:
    """
    Create an engine with the connection hooks booking writes rely on.

    SQLite: pysqlite's implicit BEGIN is disabled and every transaction is
    opened with BEGIN IMMEDIATE, so the database write lock is taken before
    the first read. Two check-and-insert transactions on the same file
    therefore run one after another and the second one sees the first
    one's row. Other backends use row locks (SELECT ... FOR UPDATE) in
    BookingStore.
    """
    if not url.startswith("sqlite"):
        return create_engine(url, pool_pre_ping=True)

    # check_same_thread=False is required for SQLite under the FastAPI threadpool
    engine = create_engine(
        url,
        connect_args={"check_same_thread": False, "timeout": 15},
    )

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, _):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


def _ensure_sqlite_dir(url) -> None:
    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite" and parsed.database not in (None, "", ":memory:"):
        Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)


engine = create_db_engine(settings.resolved_database_url)

# SessionLocal: the main way to work with the database
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


def init_db(bind: Engine | None = None) -> None:
    """Create all tables (local runs and tests; production uses alembic)."""
    from .models.generated import Base

    bind = bind or engine
    _ensure_sqlite_dir(bind.url)
    Base.metadata.create_all(bind=bind)


# Dependency for FastAPI
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
