"""Settings — every tunable of the likes service, read from the environment.

Invariants:
    - Secrets (database password, push gateway token) only arrive via env or .env
    - get_settings() is cached: one Settings instance per process
    - Leaving PUSH_GATEWAY_URL unset disables push; realtime still runs

Design Decisions:
    - pydantic-settings: typed parsing of env vars, .env support for local runs
    - Dispatcher sizing exposed here so operators can trade memory for burst capacity
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # ─── storage ─────────────────────────────────────────────────
    database_url: str = "postgresql+asyncpg://likes:likes@db:5432/likes"
    database_pool_size: int = 20
    database_max_overflow: int = 10

    # ─── caller identity (set by the auth gateway in front) ──────
    identity_header: str = "X-User-Id"

    # ─── push gateway ────────────────────────────────────────────
    push_gateway_url: str | None = None
    push_gateway_token: str | None = None
    push_timeout_seconds: float = 10
    push_channel_id: str = "likes"

    # ─── notification dispatcher ─────────────────────────────────
    dispatch_queue_size: int = 1000
    dispatch_workers: int = 2
    dispatch_timeout_seconds: float = 15
    dispatch_shutdown_grace_seconds: float = 5

    # ─── http / logging ──────────────────────────────────────────
    cors_origins: list[str] = ["http://localhost:5173"]
    log_level: str = "INFO"
    log_format: str = "json"

    @field_validator("database_url", mode="before")
    @classmethod
    def use_asyncpg_driver(cls, v: str) -> str:
        """Managed Postgres hands out postgresql:// URLs; the engine needs asyncpg."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return "postgresql+asyncpg://" + v[len("postgresql://"):]
        return v


@lru_cache
def get_settings() -> Settings:
    return Settings()
