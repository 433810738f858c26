from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    environment: str = "development"
    database_url: str = "sqlite:///./data/cvbuilder.db"
    secret_key: str = "dev-secret-key-change-in-production"
    token_expire_days: int = 7
    log_level: str = "INFO"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # OpenAI configuration
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    ai_timeout_seconds: float = 60.0
    ai_max_retries: int = 3

    # Redis configuration (AI extraction cache)
    redis_url: str = "redis://localhost:6379"
    extraction_cache_ttl: int = 24 * 60 * 60

    # Rate limiting (requests per window)
    rate_limit_window_seconds: int = 60
    api_rate_limit: int = 100
    ai_rate_limit: int = 20

    # Response caching
    theme_cache_ttl: int = 3600

    # Uploads
    max_upload_bytes: int = 10 * 1024 * 1024

    # PDF rendering
    pdf_timeout_seconds: float = 120.0

    class Config:
        env_file = ".env"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


@lru_cache
def get_settings() -> Settings:
    return Settings()
