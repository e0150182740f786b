"""Application configuration settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Rehearsal Room Reservations API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Database
    DB_HOST: str = "localhost"
    DB_PORT: int = 3306
    DB_USER: str = "root"
    DB_PASSWORD: str = "password"
    DB_NAME: str = "rehearsal"
    # Set to False for storage engines without multi-statement transactions;
    # bookings are then serialized by the Redis room lock only.
    DB_TRANSACTIONS_ENABLED: bool = True
    DB_ISOLATION_LEVEL: str = "SERIALIZABLE"

    # Redis
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_PASSWORD: str | None = None
    REDIS_DB: int = 0

    # Booking policy (applies to non-admin actors)
    BOOKING_HORIZON_DAYS: int = 7
    MAX_BOOKING_HOURS: int = 5
    # Weekly series keep this zone's wall-clock time across DST changes
    LOCAL_TIMEZONE: str = "UTC"

    # Distributed Lock settings
    LOCK_TIMEOUT_SECONDS: int = 30
    LOCK_RETRY_DELAY_MS: int = 100
    LOCK_MAX_RETRIES: int = 50

    @property
    def database_url(self) -> str:
        """Get async database URL."""
        return (
            f"mysql+aiomysql://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

    @property
    def redis_url(self) -> str:
        """Get Redis URL."""
        if self.REDIS_PASSWORD:
            return f"redis://:{self.REDIS_PASSWORD}@{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
