from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    app_name: str = "App Builder"
    debug: bool = False

    # API
    frontend_url: str = "http://localhost:3000"

    # Anthropic (key-based adapter)
    anthropic_api_key: str = ""
    llm_model: str = "claude-sonnet-4-20250514"
    # Off by default: the key-based adapter renders templates without a network call
    llm_remote_generation: bool = False  # env: LLM_REMOTE_GENERATION

    # Local LLM endpoint (Ollama-compatible)
    local_llm_url: str = "http://localhost:11434"
    local_llm_model: str = "codellama"
    local_llm_probe_timeout: float = 2.0
    local_llm_generate_timeout: float = 120.0

    # Admission
    rate_limit_window_seconds: float = 60
    rate_limit_max_requests: int = 10
    rate_limit_cleanup_interval: float = 60

    # Job queue
    job_wait_timeout: float = 30
    job_poll_interval: float = 0.5
    worker_idle_interval: float = 1.0
    job_retention_seconds: float = 3600
    job_cleanup_interval: float = 3600


@lru_cache
def get_settings() -> Settings:
    return Settings()
