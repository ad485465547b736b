"""
Product Service configuration using shared patterns
"""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Get the product service directory path
PRODUCT_SERVICE_DIR = Path(__file__).parent.parent.parent
ENV_FILE = PRODUCT_SERVICE_DIR / ".env"


class ProductSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Products API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Service specific
    SERVICE_NAME: str = "product-service"
    HTTP_HOST: str = "0.0.0.0"
    HTTP_PORT: int = 8080
    SHUTDOWN_TIMEOUT: float = 10.0

    # Database
    PRODUCT_DATABASE_URL: str
    DATABASE_POOL_SIZE: int = 25
    DATABASE_MAX_OVERFLOW: int = 5
    DATABASE_POOL_RECYCLE: int = 300
    DB_PING_TIMEOUT: float = 2.0

    # Kafka for events
    KAFKA_BOOTSTRAP_SERVERS: str
    KAFKA_TOPIC_PRODUCT_EVENTS: str = "products.events"
    KAFKA_CONNECT_RETRIES: int = 3
    KAFKA_CONNECT_TIMEOUT: float = 10.0


@lru_cache
def get_settings() -> ProductSettings:
    """Get settings singleton instance"""
    return ProductSettings()  # type: ignore[call-arg]
