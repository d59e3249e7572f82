"""Application settings using Pydantic BaseSettings."""

import re

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServiceTarget(BaseModel):
    """A service the probe runner checks on every health-check run."""

    name: str
    url: str
    service_type: str = "website"  # website, database, api

    model_config = {"frozen": True}


DEFAULT_MONITORED_SERVICES = [
    ServiceTarget(name="craudiovizai.com", url="https://craudiovizai.com", service_type="website"),
    ServiceTarget(name="javariai.com", url="https://javariai.com", service_type="website"),
    ServiceTarget(name="orlandotripdeal.com", url="https://orlandotripdeal.com", service_type="website"),
    ServiceTarget(
        name="supabase",
        url="https://kteobfyferrukqeolofj.supabase.co/rest/v1/",
        service_type="database",
    ),
]


def get_async_database_url(url: str | None = None) -> str:
    """Get database URL converted for asyncpg driver."""
    if url is None:
        url = settings.database_url
    # Convert postgres:// to postgresql+asyncpg:// for SQLAlchemy async
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+asyncpg://", 1)
    elif url.startswith("postgresql://") and "+asyncpg" not in url:
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    # asyncpg doesn't support sslmode, it uses ssl parameter
    if "sslmode=" in url:
        url = re.sub(r'[?&]sslmode=[^&]*', '', url)
        url = url.rstrip('?&')
    return url


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database (Postgres). Empty means the backend is not configured.
    database_url: str = ""

    # Application
    environment: str = "development"
    log_level: str = "INFO"
    api_v1_prefix: str = "/api/v1"

    # Probing
    monitored_services: list[ServiceTarget] = DEFAULT_MONITORED_SERVICES
    probe_timeout_seconds: float = 10.0
    probe_max_concurrency: int = 0  # 0 = one worker per target
    probe_user_agent: str = "observatory-probe/0.1"

    # Read paths
    health_sample_limit: int = 50
    dashboard_health_sample_limit: int = 20
    dashboard_error_sample_limit: int = 10
    dashboard_timeout_seconds: float = 15.0
    uptime_rollup_days: int = 7

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def is_backend_configured(self) -> bool:
        return bool(self.database_url)


settings = Settings()
