"""
Configuration for the Evidence-Coverage & Strategy Engine
=========================================================

Environment variables:
- LLM_MODE: none|openrouter (default: none)
- OPENROUTER_API_KEY: API key for OpenRouter
- OPENROUTER_MODEL: Model for the generative fallback (default: anthropic/claude-3-haiku)
- LLM_TIMEOUT: Seconds before the generative call is abandoned (default: 30)
- ANALYSIS_MIN_DOCUMENTS / ANALYSIS_MIN_RAW_CHARS: admission thresholds
- CACHE_BACKEND: memory|redis (default: memory)
- REDIS_URL: Redis connection for the result cache
- DATABASE_URL: SQLAlchemy URL for the case repository
"""

from typing import Optional, List
from pydantic_settings import BaseSettings
from functools import lru_cache

from .schemas import LLMMode, CacheBackend


class Settings(BaseSettings):
    """Application settings from environment variables"""

    # LLM Configuration
    llm_mode: LLMMode = LLMMode.NONE

    # OpenRouter (generative fallback)
    openrouter_api_key: Optional[str] = None
    openrouter_model: str = "anthropic/claude-3-haiku"
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    llm_max_tokens: int = 2048

    # Timeouts (seconds)
    llm_timeout: float = 30.0

    # Analysis admission
    analysis_min_documents: int = 2
    analysis_min_raw_chars: int = 1000
    scanned_raw_chars_threshold: int = 800
    scanned_json_chars_threshold: int = 400

    # Result cache
    cache_backend: CacheBackend = CacheBackend.MEMORY
    redis_url: str = "redis://localhost:6379/0"
    cache_ttl_seconds: int = 60 * 60 * 24 * 30
    cache_prefix: str = "casebrain:llm"

    # Database
    database_url: str = "sqlite:///./dev.db"

    # Service info
    service_version: str = "1.0.0"
    cors_allow_origins: str = "http://localhost:3000,http://localhost:5173"

    class Config:
        env_prefix = ""
        case_sensitive = False
        env_file = ".env"
        env_file_encoding = "utf-8"

    def validate_llm_config(self) -> List[str]:
        """Validate LLM configuration, return list of warnings"""
        warnings = []

        if self.llm_mode == LLMMode.OPENROUTER and not self.openrouter_api_key:
            warnings.append("LLM_MODE=openrouter but OPENROUTER_API_KEY not set")

        if self.llm_timeout <= 0:
            warnings.append("LLM_TIMEOUT must be positive; generative fallback will always time out")

        if self.analysis_min_documents < 2:
            warnings.append("ANALYSIS_MIN_DOCUMENTS below 2 admits single-document cases")

        return warnings


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


# Convenience function
def get_llm_mode() -> LLMMode:
    """Get current LLM mode"""
    return get_settings().llm_mode
