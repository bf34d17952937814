"""
Database connection and session management for the auth service
"""
import logging
from typing import Generator

from fastapi import Request
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

logger = logging.getLogger(__name__)

Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """
    One pooled engine per process.

    Created in the application lifespan, stored on ``app.state.database`` and
    handed to request handlers through :func:`get_db`. ``dispose`` releases
    the pool on shutdown.
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        is_sqlite = url.startswith("sqlite")
        self.engine: Engine = create_engine(
            url,
            connect_args={"check_same_thread": False} if is_sqlite else {},
            echo=echo,
        )
        if is_sqlite:
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)
        self.SessionLocal = sessionmaker(bind=self.engine, autocommit=False, autoflush=False)

    def init_db(self) -> None:
        """Create all tables. Should be called on application startup."""
        # Import models so they are registered with Base
        from . import models  # noqa: F401

        try:
            Base.metadata.create_all(bind=self.engine)
            logger.info("Database initialized successfully")
        except SQLAlchemyError as e:
            logger.error("Failed to initialize database: %s", e)
            raise

    def session(self) -> Session:
        return self.SessionLocal()

    def check_connection(self) -> bool:
        """
        Check if database connection is working.

        Returns:
            bool: True if connection is successful, False otherwise
        """
        try:
            with self.session() as db:
                db.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.error("Database connection check failed: %s", e)
            return False

    def dispose(self) -> None:
        self.engine.dispose()
        logger.info("Database connections released")


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Dependency function to get database session.

    Yields:
        Session: SQLAlchemy database session
    """
    db = get_database(request).session()
    try:
        yield db
    finally:
        db.close()
