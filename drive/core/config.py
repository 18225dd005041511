# drive/core/config.py
from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    environment: str = "production"

    # HTTP server
    host: str = "0.0.0.0"
    port: int = 5000
    cors_origins: str = "*"  # comma separated

    # Database (any SQLAlchemy URL)
    database_url: str = f"sqlite:///{BASE_DIR / 'drive.db'}"

    # Local file storage, one sub-directory per user
    upload_dir: Path = BASE_DIR / "uploads"
    public_uploads_prefix: str = "/uploads"
    max_upload_size: int = 100 * 1024 * 1024  # 100 MiB

    # Bearer tokens
    jwt_secret: str = "jwt-secret"
    jwt_algorithm: str = "HS256"
    token_expire_hours: int = 24

    # Default administrator created at start-up if missing
    admin_bootstrap: bool = True
    admin_name: str = "Admin User"
    admin_email: str = "admin@example.com"
    admin_password: str = "Admin@123"

    log_level: str = "INFO"
    log_json: bool = True

    # Tell pydantic-settings to load from .env at project root
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # ignore any extra stuff in .env
    )

    @field_validator("upload_dir")
    @classmethod
    def absolute_upload_dir(cls, value: Path) -> Path:
        return value.expanduser().resolve()

    @property
    def allowed_origins(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def is_development(self) -> bool:
        return self.environment.lower() in ("development", "dev", "local")


@lru_cache
def get_settings() -> Settings:
    return Settings()
