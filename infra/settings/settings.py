from pydantic_settings import BaseSettings
from typing import Optional
from pydantic import Field

from config.database import DatabaseConfig


class DatabaseSettings(BaseSettings):
    """Database configuration settings for the queue store and connection pool management."""
    host: str = "localhost"
    port: int = 5432
    name: str = "pim_asset_sync"
    user: str = "postgres"
    password: str = ""
    url: Optional[str] = None
    echo: bool = False
    pool_size: int = 10
    max_overflow: int = 20
    pool_timeout: int = 30
    pool_recycle: int = 3600

    class Config:
        env_prefix = "DATABASE_"


class QueueSettings(BaseSettings):
    """Drain cycle configuration settings for queue throughput and stuck entry detection."""
    drain_batch_size: int = 50
    max_concurrent_entries: int = 4
    entry_timeout_seconds: int = 120
    poll_interval_seconds: int = 10
    max_poll_interval_seconds: int = 60
    stale_processing_minutes: int = 60

    class Config:
        env_prefix = "QUEUE_"


class VideoSettings(BaseSettings):
    """Video provider configuration settings for metadata APIs and thumbnail downloads."""
    youtube_api_key: str = ""
    youtube_api_url: str = "https://www.googleapis.com/youtube/v3/videos"
    vimeo_oembed_url: str = "https://vimeo.com/api/oembed.json"
    request_timeout_seconds: int = 15

    class Config:
        env_prefix = "VIDEO_"


class CatalogSettings(BaseSettings):
    """Catalog integration settings pointing at the adapter that provides catalog collaborators."""
    adapter: str = ""
    default_store_view_id: int = 0

    class Config:
        env_prefix = "CATALOG_"


class Settings(BaseSettings):
    """
    Main application settings aggregating all configuration sections.

    This class serves as the central configuration hub for the PIM asset
    synchronization service, providing access to the queue store, drain cycle
    tuning, video provider APIs and the catalog integration.
    """
    app_name: str = "PIM Asset Sync Service"
    app_version: str = "1.0.0"
    environment: str = "development"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8001

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    queue: QueueSettings = Field(default_factory=QueueSettings)
    video: VideoSettings = Field(default_factory=VideoSettings)
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)

    def __init__(self, **kwargs):
        """Initialize settings with automatic database URL configuration if not provided."""
        super().__init__(**kwargs)
        if not self.database.url:
            self.database.url = DatabaseConfig.get_postgresql_url(
                async_driver=True,
                host=self.database.host,
                port=self.database.port,
                name=self.database.name,
                user=self.database.user,
                password=self.database.password,
            )

    class Config:
        env_prefix = "APP_"
        case_sensitive = False
        extra = "ignore"


def get_settings() -> Settings:
    """Get configured application settings instance with all environment variables loaded."""
    return Settings()
