from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env from the project root so it loads regardless of cwd
_BACKEND_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _BACKEND_ROOT / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(str(_ENV_FILE), ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str
    database_ssl: bool = True
    auto_create_tables: bool = False

    # JWT / passwords
    secret_key: str
    access_token_expire_minutes: int = 60
    algorithm: str = "HS256"
    password_hash_rounds: int = 12

    # CORS
    cors_origins: str = "http://localhost:3000"

    # Dashboard
    recent_appointments_limit: int = 5

    # First admin account, created on startup if missing
    bootstrap_admin_email: str = ""
    bootstrap_admin_password: str = ""

    # Env
    env: str = "development"

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def bootstrap_admin_enabled(self) -> bool:
        return bool(self.bootstrap_admin_email and self.bootstrap_admin_password)


settings = Settings()
