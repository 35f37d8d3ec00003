from __future__ import annotations
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
import secrets

class Settings(BaseSettings):
    database_url: str = Field("sqlite+aiosqlite:///./egghunt.db", alias="DATABASE_URL")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    # comma separated
    cors_origins: str = Field(
        "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000,http://127.0.0.1:3000",
        alias="CORS_ORIGINS",
    )
    public_base_url: str = Field("http://localhost:8000", alias="PUBLIC_BASE_URL")

    # Admin tokens
    admin_token_secret: str | None = Field(default=None, alias="ADMIN_TOKEN_SECRET")
    admin_token_ttl_minutes: int = Field(default=60, alias="ADMIN_TOKEN_TTL_MINUTES")
    token_issuer: str = Field("egghunt-svc", alias="TOKEN_ISSUER")
    admin_bootstrap_username: str | None = Field(default=None, alias="ADMIN_BOOTSTRAP_USERNAME")
    admin_bootstrap_password: str | None = Field(default=None, alias="ADMIN_BOOTSTRAP_PASSWORD")
    admin_bootstrap_email: str = Field("admin@localhost", alias="ADMIN_BOOTSTRAP_EMAIL")

    # Sessions
    session_expiration_days: int = Field(default=30, alias="SESSION_EXPIRATION_DAYS")
    session_cleanup_enabled: bool = Field(default=True, alias="SESSION_CLEANUP_ENABLED")
    session_cleanup_interval_hours: float = Field(default=24, alias="SESSION_CLEANUP_INTERVAL_HOURS")
    session_cleanup_initial_delay_seconds: float = Field(default=30, alias="SESSION_CLEANUP_INITIAL_DELAY_SECONDS")

    # Performance
    slow_request_threshold_ms: float = Field(default=1000, alias="SLOW_REQUEST_THRESHOLD_MS")

    class Config:
        env_file = ".env"
        env_prefix = ""
        case_sensitive = False
        populate_by_name = True
        extra = "ignore"

    @field_validator(
        "admin_token_ttl_minutes",
        "session_expiration_days",
        "session_cleanup_interval_hours",
        "slow_request_threshold_ms",
    )
    @classmethod
    def _positive(cls, v):
        if v <= 0:
            raise ValueError("must be greater than zero")
        return v

    @field_validator("session_cleanup_initial_delay_seconds")
    @classmethod
    def _non_negative(cls, v):
        if v < 0:
            raise ValueError("must not be negative")
        return v

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def admin_token_secret_effective(self) -> str:
        if self.admin_token_secret is None:
            # tokens do not survive a restart without a configured secret
            self.admin_token_secret = secrets.token_urlsafe(48)
        return self.admin_token_secret

_settings: Settings | None = None
def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
