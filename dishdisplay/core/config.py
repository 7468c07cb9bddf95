from zoneinfo import ZoneInfo

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = "postgresql://dishdisplay:dishdisplay@db:5432/dishdisplay"
    APP_ENV: str = "development"

    # Comma-separated allowed origins, or "*" to allow all.
    # Example: "https://dishdisplay.app,https://admin.dishdisplay.app"
    CORS_ORIGINS: str = "*"

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # IANA zone that defines "today" for the daily review cap, visit streaks,
    # visit_day and the Monday-Sunday competition week.
    TIMEZONE: str = "UTC"

    LEADERBOARD_CACHE_TTL_SECONDS: int = 300

    @property
    def cors_origins_list(self) -> list[str]:
        if self.CORS_ORIGINS.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.TIMEZONE)


settings = Settings()
