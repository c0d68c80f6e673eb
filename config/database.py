from urllib.parse import quote_plus
import os


class DatabaseConfig:
    """Safe URL construction for the queue store database."""

    @staticmethod
    def get_postgresql_url(async_driver: bool = True,
                           host: str = None,
                           port: int = None,
                           name: str = None,
                           user: str = None,
                           password: str = None) -> str:
        """
        Build a PostgreSQL URL with the appropriate driver.

        Values not passed explicitly are read from the DATABASE_* environment.

        Args:
            async_driver: If True uses asyncpg, otherwise psycopg2 (Alembic)
        """
        db_host = host or os.getenv("DATABASE_HOST", "localhost")
        db_port = port or os.getenv("DATABASE_PORT", "5432")
        db_name = name or os.getenv("DATABASE_NAME", "pim_asset_sync")
        db_user = user or os.getenv("DATABASE_USER", "postgres")
        db_password = password if password is not None else os.getenv("DATABASE_PASSWORD", "password")

        escaped_password = quote_plus(db_password)

        if async_driver:
            driver = "postgresql+asyncpg"
        else:
            driver = "postgresql+psycopg2"

        return f"{driver}://{db_user}:{escaped_password}@{db_host}:{db_port}/{db_name}"

    @staticmethod
    def get_sqlite_url(async_driver: bool = True, db_path: str = None) -> str:
        """Build a SQLite URL, used for local runs and tests."""
        db_path = db_path or os.getenv("DATABASE_PATH", "./pim_asset_sync.db")

        if async_driver:
            driver = "sqlite+aiosqlite"
        else:
            driver = "sqlite"

        return f"{driver}:///{db_path}"

    @staticmethod
    def to_sync_url(url: str) -> str:
        """Swap an async driver for its synchronous counterpart."""
        return (url
                .replace("postgresql+asyncpg://", "postgresql+psycopg2://", 1)
                .replace("sqlite+aiosqlite://", "sqlite://", 1))
