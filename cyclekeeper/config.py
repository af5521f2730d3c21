"""Application configuration loaded from environment variables."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All configuration is loaded from environment variables (or .env file)."""

    # --- App ---
    app_name: str = "CycleKeeper"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"
    environment: str = "development"  # development | staging | production

    # --- Supabase (optional; local-only mode when either is empty) ---
    supabase_url: str = ""
    supabase_anon_key: str = ""
    supabase_table: str = "cycles"
    remote_timeout_seconds: float = 10.0

    # --- Local cache ---
    cache_dir: Path = Path.home() / ".cyclekeeper"
    cache_key: str = "menstrualCycles"

    # --- Connectivity ---
    start_online: bool = True  # initial host connectivity signal

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def remote_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_anon_key)


@lru_cache
def get_settings() -> Settings:
    return Settings()
