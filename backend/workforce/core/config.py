from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    DATABASE_URL: str = "postgresql+asyncpg://workforce:workforce_secret@db:5432/workforce"
    SECRET_KEY: str = "change-me-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    CORS_ORIGINS: list[str] = ["http://localhost:5173", "http://localhost:3000"]
    LOG_LEVEL: str = "INFO"
    RUN_MIGRATIONS_ON_STARTUP: bool = True

    # Working day is computed in the organization's timezone; this is the fallback.
    DEFAULT_TIMEZONE: str = "UTC"

    # Attendance status thresholds
    SCHEDULED_START_TIME: str = "09:00"
    LATE_GRACE_MINUTES: int = 10
    STANDARD_SHIFT_HOURS: float = 8.0
    HALF_DAY_THRESHOLD_HOURS: float = 4.0
    ABSENT_THRESHOLD_MINUTES: int = 15
    CLOCK_SKEW_SECONDS: int = 300

    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 200

    # Origin subsystems learn about approval resolutions through this hook (empty = disabled)
    APPROVAL_WEBHOOK_URL: str = ""
    APPROVAL_WEBHOOK_TIMEOUT_SEC: float = 5.0


settings = Settings()
