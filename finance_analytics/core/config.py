from datetime import time
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    APP_NAME: str = "Finance Analytics Backend"
    ENV: str = "dev"

    # SQLite file next to the package so the path does not depend on the CWD
    _default_db_path = Path(__file__).resolve().parents[2] / "db.sqlite3"
    DATABASE_URL: str = f"sqlite:///{_default_db_path}"

    CORS_ORIGINS: list[str] = ["*"]
    TIMEZONE: str = "UTC"
    LOG_LEVEL: str = "INFO"

    # Recurring obligations fire once a day, budget templates on day 1 of each month
    SCHEDULER_ENABLED: bool = True
    RECURRING_RUN_TIME: time = time(1, 0)
    BUDGET_RUN_TIME: time = time(0, 0)
    SCHEDULER_POLL_SECONDS: float = 60.0

    model_config = SettingsConfigDict(env_file=(".env",), env_prefix="FA_", case_sensitive=False)


settings = Settings()
