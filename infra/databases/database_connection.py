from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from typing import Any, Dict
import logging

from infra.databases.models.queue_entry_model import Base

logger = logging.getLogger(__name__)


class DatabaseConnection:
    """
    Connection manager for the queue store with async SQLAlchemy.

    PostgreSQL is the production store and gets a pooled engine shared by
    the API process and the drain workers. SQLite runs without a pool and
    with a busy timeout, so concurrent writers wait for the lock instead of
    failing straight away.
    """

    SQLITE_BUSY_TIMEOUT_SECONDS = 30

    def __init__(self,
                 database_url: str,
                 echo: bool = False,
                 pool_size: int = 10,
                 max_overflow: int = 20,
                 pool_timeout: int = 30,
                 pool_recycle: int = 3600):
        """
        Initialize database connection with the provided configuration.

        Args:
            database_url: Async SQLAlchemy connection string
            echo: Whether to log SQL queries for debugging
            pool_size: Number of pooled connections (ignored for SQLite)
            max_overflow: Connections allowed above the pool size (ignored for SQLite)
            pool_timeout: Seconds to wait for a pooled connection
            pool_recycle: Seconds after which pooled connections are replaced
        """
        self.database_url = database_url
        self.echo = echo
        self.pool_size = pool_size
        self.max_overflow = max_overflow
        self.pool_timeout = pool_timeout
        self.pool_recycle = pool_recycle
        self._engine = None
        self._session_factory = None

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    def _engine_options(self) -> Dict[str, Any]:
        if self.is_sqlite:
            return {
                "poolclass": NullPool,
                "connect_args": {"timeout": self.SQLITE_BUSY_TIMEOUT_SECONDS},
            }

        return {
            "pool_size": self.pool_size,
            "max_overflow": self.max_overflow,
            "pool_timeout": self.pool_timeout,
            "pool_recycle": self.pool_recycle,
            "pool_pre_ping": True,
        }

    def initialize(self) -> None:
        """
        Create the async engine and the session factory handed to repositories.
        """
        try:
            self._engine = create_async_engine(self.database_url, echo=self.echo, **self._engine_options())
            self._session_factory = async_sessionmaker(
                bind=self._engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=True
            )

            logger.info(f"✅ Queue store engine ready ({'sqlite' if self.is_sqlite else 'pooled'})")
        except Exception as e:
            logger.error(f"❌ Failed to initialize queue store engine: {str(e)}")
            raise

    async def create_schema(self) -> None:
        """Create the queue tables when they do not exist (local runs and tests)."""
        async with self._engine.begin() as connection:
            await connection.run_sync(Base.metadata.create_all)

    async def health_check(self) -> bool:
        """
        Check that the queue store answers a trivial query.

        Returns:
            bool: True if the store is reachable, False otherwise
        """
        if self._engine is None:
            return False

        try:
            async with self._engine.connect() as connection:
                result = await connection.execute(text("SELECT 1"))
                return result.scalar() == 1
        except Exception as e:
            logger.error(f"❌ Queue store health check failed: {str(e)}")
            return False

    async def close(self) -> None:
        if self._engine:
            await self._engine.dispose()
            logger.info("Queue store connection closed")

    @property
    def session_factory(self):
        """
        Get the session factory for creating database sessions.

        Returns:
            async_sessionmaker: Session factory for creating database sessions
        """
        return self._session_factory
