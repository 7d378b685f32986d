from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    app_name: str = "Monteerly Studio"
    app_env: str = "development"  # development, testing, production
    debug: bool = False
    enable_openapi: bool = True

    # Database
    database_url: str = "sqlite+aiosqlite:///./monteerly.db"
    database_pool_size: int = 5
    database_max_overflow: int = 10
    auto_migrate: bool = False  # Run Alembic migrations on startup

    # Session tokens
    jwt_secret_key: str
    jwt_algorithm: str = "HS256"
    session_token_expire_minutes: int = 60 * 24 * 7
    argon2_time_cost: int = 3
    argon2_memory_cost: int = 65536
    argon2_parallelism: int = 1
    min_password_score: int = 2  # zxcvbn 0-4 scale

    # Federated sign-in (OIDC ID tokens)
    federated_provider: str = "google"
    federated_issuer: str | None = None
    federated_audience: str | None = None
    federated_signing_key: str | None = None  # Shared secret or PEM public key
    federated_algorithms: list[str] = ["RS256"]

    # Redis (optional - revocation list and cross-process change relay)
    redis_url: str | None = None
    redis_pool_size: int = 10
    # Seconds between liveness checks on idle connections (the change relay holds one)
    redis_health_check_interval: int = 30
    change_channel_prefix: str = "monteerly:changes"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Rate limiting (sign-in endpoints)
    signin_rate_limit: str = "10/minute"

    @field_validator("jwt_secret_key")
    @classmethod
    def validate_jwt_secret(cls, v: str) -> str:
        if v == "change-this-to-a-secure-random-string":
            raise ValueError(
                "JWT_SECRET_KEY must be changed from default value. "
                "Generate a secure secret with: openssl rand -hex 32"
            )
        if len(v) < 32:
            raise ValueError("JWT_SECRET_KEY must be at least 32 characters")
        return v

    @field_validator("change_channel_prefix")
    @classmethod
    def validate_channel_prefix(cls, v: str) -> str:
        v = v.strip().rstrip(":")
        if not v:
            raise ValueError("CHANGE_CHANNEL_PREFIX cannot be empty")
        return v

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    return Settings()
