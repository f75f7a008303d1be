"""
Configuration management for the Business Card Extraction API.

Handles environment variables and application settings.
"""

import os
import logging
from typing import Optional
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)


class Config:
    """Application configuration class.

    Attributes:
        DEBUG: Enable debug mode
        TESTING: Enable testing mode
        SECRET_KEY: Flask secret key
        MAX_CONTENT_LENGTH: Maximum request body size (1MB default)
        MAX_TEXT_LENGTH: Maximum characters accepted per OCR text or QR payload
        MAX_BATCH_SIZE: Maximum number of cards per batch request
        CORS_ORIGINS: Allowed CORS origins for /api/*
    """

    # Flask Settings
    DEBUG: bool = os.getenv("CARD_EXTRACT_DEBUG", "False").lower() == "true"
    TESTING: bool = os.getenv("CARD_EXTRACT_TESTING", "False").lower() == "true"
    SECRET_KEY: str = os.getenv("CARD_EXTRACT_SECRET_KEY", "dev-secret-key-change-in-production")

    # Request limits
    MAX_CONTENT_LENGTH: int = int(os.getenv("CARD_EXTRACT_MAX_CONTENT_LENGTH", str(1024 * 1024)))
    MAX_TEXT_LENGTH: int = int(os.getenv("CARD_EXTRACT_MAX_TEXT_LENGTH", "20000"))
    MAX_BATCH_SIZE: int = int(os.getenv("CARD_EXTRACT_MAX_BATCH_SIZE", "50"))

    # CORS
    CORS_ORIGINS: str = os.getenv("CARD_EXTRACT_CORS_ORIGINS", "*")

    # Logging
    LOG_LEVEL: str = os.getenv("CARD_EXTRACT_LOG_LEVEL", "INFO")
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @classmethod
    def init_app(cls, app) -> None:
        """Initialize Flask app with configuration.

        Args:
            app: Flask application instance
        """
        app.config.from_object(cls)

        # Configure logging
        logging.basicConfig(
            level=getattr(logging, cls.LOG_LEVEL.upper()),
            format=cls.LOG_FORMAT
        )

        logger.info("Configuration initialized successfully")


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    LOG_LEVEL = "DEBUG"


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    LOG_LEVEL = "INFO"


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    DEBUG = True
    LOG_LEVEL = "DEBUG"
    MAX_TEXT_LENGTH = 2000
    MAX_BATCH_SIZE = 5


# Configuration mapping
config_by_name = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
    "default": DevelopmentConfig
}


def get_config(config_name: Optional[str] = None) -> Config:
    """Get configuration class by name.

    Args:
        config_name: Configuration name (development, production, testing)

    Returns:
        Configuration class
    """
    if config_name is None:
        config_name = os.getenv("CARD_EXTRACT_ENV", "development")
    return config_by_name.get(config_name, DevelopmentConfig)
