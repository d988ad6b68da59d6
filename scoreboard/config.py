import os
from pathlib import Path

from dotenv import load_dotenv

ROOT_DIR = Path(__file__).resolve().parents[1]
load_dotenv(ROOT_DIR / ".env")


def _env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Settings:
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./scoreboard.db")
    AUTO_CREATE_SCHEMA: bool = _env_flag("AUTO_CREATE_SCHEMA")
    # When off, a user row must exist before its first unlock.
    AUTO_REGISTER_ON_UNLOCK: bool = _env_flag("AUTO_REGISTER_ON_UNLOCK")
    ADMIN_API_TOKEN: str = os.getenv("ADMIN_API_TOKEN", "").strip()
    DB_BUSY_TIMEOUT_SECONDS: float = float(os.getenv("DB_BUSY_TIMEOUT_SECONDS", "30"))
    LEADERBOARD_MAX_LIMIT: int = int(os.getenv("LEADERBOARD_MAX_LIMIT", "500"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    LOG_FORMAT: str = os.getenv("LOG_FORMAT", "console").strip().lower()
    CORS_ORIGINS: list[str] = [
        item.strip()
        for item in os.getenv("CORS_ORIGINS", "*").split(",")
        if item.strip()
    ]


settings = Settings()
