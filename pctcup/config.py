from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "pctcup"
    APP_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"

    SECRET_KEY: str = "dev-secret-key-change-me"
    DATABASE_URL: str = "sqlite:///pctcup.db"

    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30 * 24 * 60
    AUTH_COOKIE_NAME: str = "pctcup_session"
    SESSION_COOKIE_SAMESITE: str = "Lax"
    SESSION_COOKIE_SECURE: bool = False

    CORS_ORIGINS: list[str] = ["http://localhost:5173", "http://localhost:5174"]

    SCHEDULE_LOOKBACK_DAYS: int = 7
    DEFAULT_BRO_PASSWORD: str = "password"


settings = Settings()
