import logging
import os
from dataclasses import dataclass, field
from typing import List
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


@dataclass
class Settings:
    # API settings
    api_host: str = os.getenv("API_HOST", "127.0.0.1")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    cors_origins: List[str] = field(
        default_factory=lambda: [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
    )

    # Application settings
    app_name: str = os.getenv("APP_NAME", "Library Catalog")
    app_version: str = os.getenv("APP_VERSION", "1.0.0")
    debug: bool = _env_bool("DEBUG", "False")
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Loan rules
    loan_days: int = int(os.getenv("LOAN_DAYS", "14"))
    penalty_grace_days: int = int(os.getenv("PENALTY_GRACE_DAYS", "14"))
    penalty_per_day: int = int(os.getenv("PENALTY_PER_DAY", "2"))

    # Recommendation settings
    recommendation_limit: int = int(os.getenv("RECOMMENDATION_LIMIT", "3"))
    popular_genre_count: int = int(os.getenv("POPULAR_GENRE_COUNT", "3"))
    popular_books_per_genre: int = int(os.getenv("POPULAR_BOOKS_PER_GENRE", "10"))


settings = Settings()


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once for the API process and the CLI."""
    level_name = (level or settings.log_level or "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
