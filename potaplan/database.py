"""Database engine, session factory and schema migrations.

``Store`` is the single handle to the local database. It is opened once,
migrated to the latest Alembic revision, and passed to every repository.
"""

import logging
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterator, Optional

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .models.base import utcnow
from .result import Result, infrastructure_error

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"

Clock = Callable[[], datetime]


def _set_sqlite_pragmas(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def run_migrations(engine: Engine) -> None:
    """Upgrade the database behind ``engine`` to the head revision."""
    cfg = Config()
    cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
    with engine.connect() as connection:
        cfg.attributes["connection"] = connection
        command.upgrade(cfg, "head")
        connection.commit()


class Store:
    """Local store handle: engine, session factory and the clock used for timestamps."""

    def __init__(self, engine: Engine, clock: Optional[Clock] = None):
        self.engine = engine
        self.clock: Clock = clock or utcnow
        self.SessionLocal = sessionmaker(
            bind=engine, autocommit=False, autoflush=False, expire_on_commit=False,
        )

    @classmethod
    def open(cls, url: str, clock: Optional[Clock] = None) -> Result["Store"]:
        """Open (creating if needed) and migrate the database at ``url``."""
        try:
            parsed = make_url(url)
            if parsed.get_backend_name() == "sqlite" and parsed.database not in (None, "", ":memory:"):
                Path(parsed.database).expanduser().parent.mkdir(parents=True, exist_ok=True)

            engine = create_engine(url, pool_pre_ping=True)
            if engine.dialect.name == "sqlite":
                event.listen(engine, "connect", _set_sqlite_pragmas)
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Failed to initialize database at {url}: {e}")
            return infrastructure_error(
                f"Failed to initialize database: {e}",
                "DATABASE_INIT_ERROR",
                ["Check that the data directory is writable", "Verify the database URL"],
            )

        try:
            run_migrations(engine)
        except Exception as e:
            engine.dispose()
            logger.error(f"Database migration failed: {e}")
            return infrastructure_error(
                f"Database migration failed: {e}",
                "MIGRATION_ERROR",
                ["Back up and remove the database file, then sync again"],
            )

        logger.debug(f"Database ready at {url}")
        return Result.ok(cls(engine, clock))

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Provide a session that is closed on exit. Callers commit explicitly."""
        db = self.SessionLocal()
        try:
            yield db
        finally:
            db.close()

    def now(self) -> datetime:
        return self.clock()

    def close(self) -> None:
        self.engine.dispose()
