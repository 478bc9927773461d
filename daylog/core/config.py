from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = "postgresql://daylog:daylog@db:5432/daylog"
    APP_ENV: str = "development"

    # Comma-separated allowed origins, or "*" to allow all.
    # Example: "https://myapp.com,https://api.myapp.com"
    CORS_ORIGINS: str = "*"

    LOG_LEVEL: str = "INFO"
    # "text" or "json"; production always logs JSON.
    LOG_FORMAT: str = "text"

    # Window sizes (days) for the numeric recent-stats rows.
    RECENT_WINDOWS: str = "7,30,90"
    DEFAULT_MA_PERIOD: int = 30

    @property
    def cors_origins_list(self) -> list[str]:
        if self.CORS_ORIGINS.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def recent_windows_list(self) -> list[int]:
        windows = []
        for part in self.RECENT_WINDOWS.split(","):
            part = part.strip()
            if part.isdigit() and int(part) > 0:
                windows.append(int(part))
        return sorted(set(windows))


settings = Settings()
