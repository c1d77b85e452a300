"""Session store configuration via environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    session_cookie_name: str = "perfect-session"
    session_expiration: float = 365 * 24 * 3600  # 1 year
    sweep_interval: float = 60
    session_secret: str = "change-me-in-production"
    session_https_only: bool = False
    session_same_site: str = "lax"
    session_token_bytes: int = 32

    model_config = {"env_prefix": "", "case_sensitive": False}


settings: Settings | None = None


def get_settings() -> Settings:
    global settings
    if settings is None:
        settings = Settings()
    return settings


def override_settings(s: Settings | None) -> None:
    """For testing: inject a Settings instance (``None`` resets)."""
    global settings
    settings = s
