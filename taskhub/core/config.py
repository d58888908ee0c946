"""
Configuration settings for Task Hub.
"""
import os
from functools import lru_cache
from typing import List

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _env_bool(name: str, default: str = "False") -> bool:
    return os.getenv(name, default).lower() == "true"


class Settings:
    """Application settings"""

    def __init__(self):
        # Service information
        self.service_name: str = os.getenv("SERVICE_NAME", "taskhub")
        self.service_version: str = "1.0.0"
        self.debug: bool = _env_bool("DEBUG")
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO")

        # Database configuration
        self.database_url: str = os.getenv("DATABASE_URL", "sqlite:///./taskhub.db")
        self.db_pool_timeout: int = int(os.getenv("DB_POOL_TIMEOUT", "30"))

        # API configuration
        self.api_prefix: str = os.getenv("API_PREFIX", "/api")
        self.request_timeout_seconds: int = int(os.getenv("REQUEST_TIMEOUT_SECONDS", "30"))
        self.allowed_origins: List[str] = [
            origin.strip() for origin in os.getenv("ALLOWED_ORIGINS", "*").split(",") if origin.strip()
        ]

        # Token verification; the secret is shared with the auth service
        self.jwt_secret: str = os.getenv(
            "JWT_SECRET",
            os.getenv("SECRET_KEY", "taskhub-secret-key-change-in-production"),
        )
        self.algorithm: str = os.getenv("ALGORITHM", "HS256")
        self.admin_role: str = os.getenv("ADMIN_ROLE", "admin")

        # RabbitMQ fan-out for assignment notifications
        self.rabbitmq_enabled: bool = _env_bool("RABBITMQ_ENABLED")
        self.rabbitmq_host: str = os.getenv("RABBITMQ_HOST", "rabbitmq")
        self.rabbitmq_port: int = int(os.getenv("RABBITMQ_PORT", "5672"))
        self.rabbitmq_user: str = os.getenv("RABBITMQ_USER", "admin")
        self.rabbitmq_password: str = os.getenv("RABBITMQ_PASSWORD", "admin123")


@lru_cache()
def get_settings() -> Settings:
    """Get settings instance."""
    return Settings()
