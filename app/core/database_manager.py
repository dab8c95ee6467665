"""
Database Management with Connection Pooling
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import DisconnectionError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from app.core.settings import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

# SQLAlchemy declarative base
Base = declarative_base()

ASYNC_DRIVERS = {"postgresql": "postgresql+asyncpg", "sqlite": "sqlite+aiosqlite"}


def async_database_url(url: str) -> str:
    """Swap a plain postgresql:// or sqlite:// URL to its async driver."""
    parsed = make_url(url)
    driver = ASYNC_DRIVERS.get(parsed.drivername)
    if driver is None:
        return url
    return parsed.set(drivername=driver).render_as_string(hide_password=False)


class DatabaseManager:
    """Database manager owning the async engine and session factory"""

    def __init__(self, database_url: Optional[str] = None) -> None:
        self.engine: Optional[AsyncEngine] = None
        self.session_factory: Optional[async_sessionmaker[AsyncSession]] = None
        self._setup_engine(database_url)

    def _setup_engine(self, database_url: Optional[str]) -> None:
        """Setup database engine"""
        db_url = database_url or self._prepare_database_url()

        engine_kwargs = self._get_engine_kwargs(db_url)

        self.engine = create_async_engine(db_url, **engine_kwargs)

        self.session_factory = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

        self._setup_event_listeners()

        logger.info(f"Database engine initialized with URL: {self._mask_url(db_url)}")

    def _prepare_database_url(self) -> str:
        """Prepare database URL with appropriate async driver"""
        # Handle SQLite for testing
        if settings.TESTING:
            return "sqlite+aiosqlite:///:memory:"

        return async_database_url(settings.database.database_url)

    def _get_engine_kwargs(self, db_url: str) -> Dict[str, Any]:
        """Get engine configuration based on database type"""
        base_kwargs: Dict[str, Any] = {}
        base_kwargs["echo"] = settings.database.DB_ECHO
        base_kwargs["pool_pre_ping"] = settings.database.DB_POOL_PRE_PING

        if "sqlite" in db_url:
            sqlite_connect_args: Dict[str, Any] = {
                "check_same_thread": False,
                "timeout": 20,
            }
            base_kwargs["connect_args"] = sqlite_connect_args
            if ":memory:" in db_url:
                # One shared connection, otherwise every checkout sees an empty database
                base_kwargs["poolclass"] = StaticPool
        else:
            postgres_server_settings: Dict[str, str] = {
                "application_name": settings.PROJECT_NAME.lower().replace(" ", "_"),
                "statement_timeout": str(settings.database.DB_STATEMENT_TIMEOUT),
                "lock_timeout": str(settings.database.DB_LOCK_TIMEOUT),
            }
            postgres_connect_args: Dict[str, Any] = {
                "command_timeout": settings.database.DB_COMMAND_TIMEOUT,
                "server_settings": postgres_server_settings,
            }
            base_kwargs.update(
                {
                    "pool_size": settings.database.DB_POOL_SIZE,
                    "max_overflow": settings.database.DB_MAX_OVERFLOW,
                    "pool_timeout": settings.database.DB_POOL_TIMEOUT,
                    "pool_recycle": settings.database.DB_POOL_RECYCLE,
                    "connect_args": postgres_connect_args,
                }
            )

        return base_kwargs

    def _setup_event_listeners(self) -> None:
        """Setup database event listeners for connection setup and monitoring"""
        if not self.engine:
            return

        is_sqlite = self.engine.dialect.name == "sqlite"

        @event.listens_for(self.engine.sync_engine, "connect")  # type: ignore
        def set_sqlite_pragmas(dbapi_connection: Any, connection_record: Any) -> None:
            """SQLite ignores foreign keys (and ON DELETE CASCADE) unless enabled per connection"""
            if not is_sqlite:
                return
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        @event.listens_for(self.engine.sync_engine, "checkout")  # type: ignore
        def receive_checkout(
            dbapi_connection: Any, connection_record: Any, connection_proxy: Any
        ) -> None:
            connection_record.info["checkout_time"] = time.time()
            logger.debug("Database connection checked out")

        @event.listens_for(self.engine.sync_engine, "checkin")  # type: ignore
        def receive_checkin(dbapi_connection: Any, connection_record: Any) -> None:
            if "checkout_time" in connection_record.info:
                checkout_duration = (
                    time.time() - connection_record.info["checkout_time"]
                )
                if checkout_duration > 30:
                    logger.warning(
                        f"Long-running database connection: {checkout_duration:.2f}s"
                    )
            logger.debug("Database connection checked in")

        @event.listens_for(self.engine.sync_engine, "invalidate")  # type: ignore
        def receive_invalidate(
            dbapi_connection: Any, connection_record: Any, exception: Any
        ) -> None:
            logger.warning(f"Database connection invalidated: {exception}")

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get database session; commits on success, rolls back on error"""
        if not self.session_factory:
            raise RuntimeError("Database not initialized")

        session = self.session_factory()
        try:
            yield session
            await session.commit()
        except Exception as e:
            await session.rollback()
            logger.warning(f"Database session rolled back: {e}")
            raise
        finally:
            await session.close()

    async def create_all(self) -> None:
        """Create all tables known to the declarative base"""
        if not self.engine:
            raise RuntimeError("Database not initialized")

        # Register models on Base.metadata
        import app.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created")

    async def drop_all(self) -> None:
        """Drop all tables known to the declarative base"""
        if not self.engine:
            raise RuntimeError("Database not initialized")

        import app.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        logger.info("Database tables dropped")

    async def health_check(self) -> dict[str, Any]:
        """Database connectivity check"""
        if not self.engine:
            return {"status": "error", "message": "Database engine not initialized"}

        try:
            start_time = time.time()

            async with self.get_session() as session:
                result = await session.execute(text("SELECT 1 as health_check"))
                health_result = result.scalar()

                if health_result != 1:
                    return {"status": "error", "message": "Health check query failed"}

            response_time = (time.time() - start_time) * 1000

            return {
                "status": "healthy",
                "response_time_ms": round(response_time, 2),
                "database_url": str(self.engine.url),
            }

        except DisconnectionError as e:
            logger.error(f"Database disconnection error: {e}")
            return {"status": "error", "message": "Database disconnected"}
        except SQLAlchemyError as e:
            logger.error(f"Database health check failed: {e}")
            return {"status": "error", "message": str(e)}
        except OSError as e:
            logger.error(f"Database unreachable during health check: {e}")
            return {"status": "error", "message": "Database unreachable"}

    async def close(self) -> None:
        """Close database engine and all connections"""
        if self.engine:
            await self.engine.dispose()
            logger.info("Database engine closed")

    def _mask_url(self, url: str) -> str:
        """Mask sensitive information in database URL"""
        if "@" in url:
            parts = url.split("@")
            if len(parts) == 2:
                auth_part = parts[0]
                if auth_part.count(":") > 1:
                    protocol_user = auth_part.rsplit(":", 1)[0]
                    return f"{protocol_user}:***@{parts[1]}"
        return url


# Global database manager instance
db_manager = DatabaseManager()

