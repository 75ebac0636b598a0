from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./workdesk.db"
    SECRET_KEY: str = "dev_default_jwt_secret_key"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7
    BCRYPT_ROUNDS: int = 10

    # local | keycloak
    AUTH_STRATEGY: str = "local"
    KEYCLOAK_BASE_URL: str | None = None
    KEYCLOAK_REALM: str | None = None
    KEYCLOAK_AUDIENCE: str | None = None
    KEYCLOAK_AUDIENCE_SECRET: str | None = None
    KEYCLOAK_TIMEOUT_SECONDS: float = 10.0

    WORKDAY_UTC_OFFSET_MINUTES: int = 0
    UPLOAD_DIR: str = "uploads"
    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
    ]
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", frozen=True)


@lru_cache
def get_settings() -> Settings:
    return Settings()
