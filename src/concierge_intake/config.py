"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Built once at startup and handed to ``create_app``; the model is frozen so
    components can hold a reference without worrying about runtime edits.
    """

    model_config = SettingsConfigDict(
        env_prefix="INTAKE_",
        env_file=".env",
        extra="ignore",
        frozen=True,
    )

    # Application
    app_name: str = "concierge-intake"
    environment: str = "production"
    debug: bool = False
    log_level: str = "INFO"
    log_format: str = "json"

    # Server
    host: str = "0.0.0.0"
    port: int = 5000

    # Session cookie
    session_secret: str = "change-me"
    session_cookie_name: str = "nhx.sid"
    session_max_age_seconds: int = 60 * 60 * 8
    cookie_secure: bool = False

    # Gate
    access_codes: str = ""
    access_code_hashes: str = ""
    gate_cooldown_ms: int = 900

    # Signed invites
    invite_signing_secret: str = ""
    invite_base_url: str = "http://localhost:5000"
    invite_expiry_days: int = 14

    # Storage: "json", "sql" or "json+sql"
    storage_backend: str = "json"
    data_dir: Path = Path("data")
    database_url: str = "sqlite+aiosqlite:///./data/intake.db"

    # Rate limiting
    rate_limit_enabled: bool = True
    rate_limit_gate: str = "60/minute"
    rate_limit_intake: str = "60/minute"

    # CORS
    cors_origins: str = "http://localhost:3000,http://localhost:5000,http://localhost:5173"

    # Notifications
    notify_enabled: bool = False
    notify_to: str = ""
    notify_from: str = "noreply@localhost"
    notify_queue_size: int = 100
    smtp_host: str = "localhost"
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_tls: bool = True

    # Admin
    admin_email: str = ""
    admin_password_hash: str = ""

    @property
    def access_code_list(self) -> list[str]:
        """Plain access codes from the comma-separated setting."""
        return _split_csv(self.access_codes)

    @property
    def access_code_hash_list(self) -> list[str]:
        """SHA-256 hex digests of normalized access codes."""
        return [h.lower() for h in _split_csv(self.access_code_hashes)]

    @property
    def cors_origin_list(self) -> list[str]:
        return _split_csv(self.cors_origins)

    @property
    def notify_recipients(self) -> list[str]:
        return _split_csv(self.notify_to)

    @property
    def invite_ttl_seconds(self) -> int:
        return self.invite_expiry_days * 24 * 60 * 60


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def clear_settings_cache() -> None:
    """Drop the cached settings (tests and CLI reloads)."""
    get_settings.cache_clear()
