from contextlib import contextmanager
from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine, pool, event
from sqlalchemy.orm import declarative_base, sessionmaker, Session
import logging

logger = logging.getLogger(__name__)

Base = declarative_base()

# Applied to every new SQLite connection
PRAGMAS = [
    "PRAGMA foreign_keys = ON",
    "PRAGMA journal_mode = WAL",
    "PRAGMA synchronous = NORMAL",
    "PRAGMA busy_timeout = 5000",
]


def normalize_url(db_url: str) -> str:
    """Accept either a SQLAlchemy URL or a bare SQLite file path"""
    db_url = (db_url or "").strip()
    if not db_url:
        raise ValueError("sqlite database url is empty")
    if db_url.startswith("sqlite"):
        return db_url
    if db_url == ":memory:":
        return "sqlite://"
    return f"sqlite:///{db_url}"


def _is_memory(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:")


class Database:
    """
    Owns the engine and session factory for one embedded SQLite database.

    A file database gets a pool of exactly one connection, so every write is
    serialized at the store boundary. An in-memory database shares a single
    connection through StaticPool (otherwise each connection would see its
    own empty database).

    Usage:
        database = open_database("movies.db")
        with database.session() as db:
            ...
        database.close()
    """

    def __init__(self, db_url: str, echo: bool = False):
        self.url = normalize_url(db_url)
        if _is_memory(self.url):
            self.engine = create_engine(
                self.url,
                connect_args={"check_same_thread": False},
                poolclass=pool.StaticPool,
                echo=echo,
            )
        else:
            self.engine = create_engine(
                self.url,
                connect_args={"check_same_thread": False},
                poolclass=pool.QueuePool,
                pool_size=1,
                max_overflow=0,
                pool_timeout=30,
                echo=echo,
            )

        event.listen(self.engine, "connect", _apply_pragmas)
        event.listen(self.engine, "checkout", _log_checkout)

        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def migrate(self) -> None:
        """Create tables and indexes that do not exist yet"""
        # Import models so they are registered on Base.metadata
        from catalog_api import models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)
        logger.info("Database schema ready")

    def session(self) -> Session:
        """New session; caller closes it"""
        return self.SessionLocal()

    def close(self) -> None:
        self.engine.dispose()
        logger.info("Database connections closed")


def _apply_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    try:
        for stmt in PRAGMAS:
            cursor.execute(stmt)
    finally:
        cursor.close()
    logger.debug("Database connection established")


def _log_checkout(dbapi_conn, connection_record, connection_proxy):
    logger.debug("Connection checked out from pool")


def open_database(db_url: str, echo: bool = False) -> Database:
    """Open the database and bring its schema up to date"""
    database = Database(db_url, echo=echo)
    database.migrate()
    logger.info(f"Opened database {database.url}")
    return database


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """
    Scoped transaction: commit on success, roll back in full on any error.

    Usage:
        with transaction(db):
            db.execute(...)
            db.execute(...)
    """
    try:
        yield db
        db.commit()
    except BaseException:
        db.rollback()
        raise


# Dependency for FastAPI routes
def get_db(request: Request) -> Iterator[Session]:
    """
    Database session dependency for FastAPI.
    The Database handle lives on app.state and is set up by the app lifespan.
    """
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()
