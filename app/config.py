"""
Application configuration
"""
import logging
import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Settings from environment variables"""

    # Storage
    DATABASE_PATH: str = os.getenv("DATABASE_PATH", "scorewise.db")

    # Snapshot saves are retried with a linear backoff: 1x, 2x, 3x the base delay
    SAVE_RETRY_ATTEMPTS: int = int(os.getenv("SAVE_RETRY_ATTEMPTS", "3"))
    SAVE_RETRY_BACKOFF_SECONDS: float = float(os.getenv("SAVE_RETRY_BACKOFF_SECONDS", "2.0"))

    # Comma-separated extra CORS origins
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "")

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()


def configure_logging(level: str = None):
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
