"""
Application Configuration

Settings are read once from the environment (and an optional .env file)
and passed explicitly into each component. Nothing else in the package
reads environment variables.
"""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Typed settings for the Gold 2 Money API."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    python_env: str = "development"
    log_level: str = "INFO"

    # Mail delivery (Resend)
    resend_api_key: str | None = None
    email_from: str = "noreply@gold2money.in"
    notifier_sender_name: str = "Gold 2 Money Notifier"
    notification_recipient: str | None = None

    # Branding used in outgoing emails
    company_name: str = "Gold 2 Money"
    company_phone: str = "+91 95946 07030"

    # Admin access
    admin_password: str | None = None
    admin_password_hash: str | None = None

    # Sessions
    session_secret: str = "a-very-secret-key-for-sessions"
    session_ttl_seconds: int = 24 * 60 * 60
    session_cookie_name: str = "g2m_session"
    session_cookie_secure: bool = False

    # Storage and static assets
    upload_dir: Path = Path("uploads")
    static_dir: Path = PACKAGE_DIR / "web"

    # Infrastructure
    redis_url: str | None = None
    cors_origins: str = "http://localhost:3000"
    scheduler_enabled: bool = True

    # Rate limits (requests per window)
    login_rate_limit: int = 10
    login_rate_window_seconds: int = 60
    submit_rate_limit: int = 20
    submit_rate_window_seconds: int = 60 * 60

    @property
    def is_development(self) -> bool:
        return self.python_env.lower() == "development"

    @property
    def is_production(self) -> bool:
        return self.python_env.lower() == "production"

    @property
    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def public_dir(self) -> Path:
        """Directory served to everyone."""
        return self.static_dir / "public"

    @property
    def protected_dir(self) -> Path:
        """Directory for pages that sit behind the admin session."""
        return self.static_dir / "protected"

    @property
    def sender(self) -> str:
        return f'"{self.notifier_sender_name}" <{self.email_from}>'

    @property
    def auto_reply_sender(self) -> str:
        return f'"{self.company_name}" <{self.email_from}>'


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings, loaded on first use."""
    return Settings()
