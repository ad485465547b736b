"""
Notification Service configuration using shared patterns
"""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

NOTIFICATION_SERVICE_DIR = Path(__file__).parent.parent.parent
ENV_FILE = NOTIFICATION_SERVICE_DIR / ".env"


class NotificationServiceSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    SERVICE_NAME: str = "notifications-service"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    SHUTDOWN_TIMEOUT: float = 10.0

    # Kafka for events
    KAFKA_BOOTSTRAP_SERVERS: str
    KAFKA_GROUP_ID: str = "notifications-service"
    KAFKA_TOPIC_PRODUCT_EVENTS: str = "products.events"


@lru_cache
def get_settings() -> NotificationServiceSettings:
    """Get settings singleton instance"""
    return NotificationServiceSettings()  # type: ignore[call-arg]
