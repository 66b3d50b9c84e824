from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from .config import settings

PROJECT_ROOT = Path(__file__).resolve().parents[2]


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def make_engine(url: str, **kwargs) -> Engine:
    """Create an engine for *url*.

    SQLite connections are shared across the API threadpool and the
    hotspot job, so they get WAL journaling and a busy timeout from settings.
    """
    if not _is_sqlite(url):
        return create_engine(url, echo=settings.database_echo, **kwargs)

    kwargs.setdefault("connect_args", {"check_same_thread": False})
    engine = create_engine(url, echo=settings.database_echo, **kwargs)

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        if settings.sqlite_wal:
            cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute(f"PRAGMA busy_timeout={int(settings.sqlite_busy_timeout_ms)}")
        cursor.close()

    return engine


engine = make_engine(settings.database_url)
SessionLocal = sessionmaker(bind=engine, autoflush=False)


class Base(DeclarativeBase):
    pass


def get_db() -> Session:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def run_migrations(url: str | None = None) -> None:
    """Upgrade the schema at *url* (default: the configured database) to head."""
    root = PROJECT_ROOT if (PROJECT_ROOT / "alembic").exists() else Path.cwd()
    alembic_cfg = Config(str(root / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(root / "alembic"))
    alembic_cfg.set_main_option("sqlalchemy.url", url or settings.database_url)
    command.upgrade(alembic_cfg, "head")
