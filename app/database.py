"""
Storage layer shared by the whole application.

One `Storage` interface with two variants, chosen once at startup:
- `EmbeddedStorage`: single SQLite file, used outside production.
- `NetworkedStorage`: PostgreSQL server, used when PRODUCTION=true.

Queries are written once with SQLAlchemy named parameters (`:make`) and the
engine's dialect renders its own placeholder style, so callers never branch
on the backend.
"""
import logging
from typing import Any, Dict, List, Mapping, Optional

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from app.core.config import get_database_url, get_sqlite_path, is_production
from app.exceptions import ConfigurationError, StorageError

logger = logging.getLogger(__name__)

Base = declarative_base()


class Storage:
    """A SQLAlchemy engine plus session factory for one backend."""

    backend = "generic"

    def __init__(self, url: str, **engine_kwargs: Any):
        self.url = url
        self.engine = create_engine(url, future=True, **engine_kwargs)
        self.SessionLocal = sessionmaker(bind=self.engine, autoflush=False, autocommit=False)

    def session(self) -> Session:
        return self.SessionLocal()

    def execute(self, query: str, params: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        """Run one parameterized statement and return its rows as dicts.

        Statements that return no rows (INSERT/UPDATE/DELETE) give an empty
        list; they are committed before returning.
        """
        with self.engine.begin() as conn:
            result = conn.execute(text(query), dict(params or {}))
            if not result.returns_rows:
                return []
            return [dict(row) for row in result.mappings()]

    def init_schema(self) -> None:
        """Create the `vehicles` table if it does not exist yet.

        Raises:
            StorageError: the database is unreachable or the DDL failed.
        """
        from app.models import vehicle  # noqa: F401

        try:
            Base.metadata.create_all(bind=self.engine)
            self.execute("SELECT 1")
        except SQLAlchemyError as e:
            raise StorageError(f"Could not initialize {self.backend} database: {e}") from e
        logger.info("Database schema ready", extra={"backend": self.backend})

    def ping(self) -> bool:
        try:
            self.execute("SELECT 1")
        except SQLAlchemyError:
            logger.warning("Database ping failed", exc_info=True)
            return False
        return True

    def dispose(self) -> None:
        self.engine.dispose()


class EmbeddedStorage(Storage):
    backend = "sqlite"

    def __init__(self, path: str):
        self.path = str(path)
        # get_db opens the session in the threadpool, async routes then use it on the event loop
        super().__init__(
            f"sqlite:///{self.path}",
            connect_args={"check_same_thread": False},
        )


class NetworkedStorage(Storage):
    backend = "postgresql"

    def __init__(self, url: str):
        super().__init__(normalize_postgres_url(url), pool_pre_ping=True)


def normalize_postgres_url(url: str) -> str:
    """Map `postgres://` / `postgresql://` URLs onto the psycopg2 driver."""
    for prefix in ("postgres://", "postgresql://"):
        if url.startswith(prefix):
            return "postgresql+psycopg2://" + url[len(prefix):]
    return url


def create_storage() -> Storage:
    """Select the backend from the environment. Called once per process."""
    if is_production():
        url = get_database_url()
        if not url:
            raise ConfigurationError("DATABASE_URL must be set when PRODUCTION=true")
        logger.info("Using networked database backend")
        return NetworkedStorage(url)

    path = get_sqlite_path()
    logger.info("Using embedded database backend", extra={"path": path})
    return EmbeddedStorage(path)


def get_db(request: Request):
    """FastAPI dependency: one ORM session per request."""
    storage: Storage = request.app.state.storage
    db = storage.session()
    try:
        yield db
    finally:
        db.close()
