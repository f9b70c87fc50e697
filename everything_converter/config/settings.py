"""
Configuration settings for the Everything Converter API
"""
import os
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings"""

    # OpenRouter (OpenAI-compatible gateway)
    OPENROUTER_API_KEY: str = os.getenv("OPENROUTER_API_KEY", "")
    OPENROUTER_BASE_URL: str = os.getenv("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1")
    OPENROUTER_MODEL: str = os.getenv("OPENROUTER_MODEL", "openai/gpt-5")
    # Attribution headers sent upstream
    OPENROUTER_REFERRER: str = os.getenv("OPENROUTER_REFERRER", "")
    OPENROUTER_SITE_NAME: str = os.getenv("OPENROUTER_SITE_NAME", "my-website")

    # Exchange rates (Open Exchange Rates)
    OPEN_EXCHANGE_RATES_API_KEY: Optional[str] = os.getenv("OPEN_EXCHANGE_RATES_API_KEY")
    EXCHANGE_RATES_URL: str = os.getenv(
        "EXCHANGE_RATES_URL",
        "https://openexchangerates.org/api/latest.json"
    )
    RATES_CACHE_TTL_SECONDS: int = int(os.getenv("RATES_CACHE_TTL_SECONDS", "3600"))
    EXCHANGE_RATES_TIMEOUT_SECONDS: float = float(os.getenv("EXCHANGE_RATES_TIMEOUT_SECONDS", "10.0"))

    # Conversion pipeline
    DEFAULT_TEMPERATURE: float = 0.7
    VALIDATOR_MAX_TOKENS: int = int(os.getenv("VALIDATOR_MAX_TOKENS", "300"))
    SUGGESTIONS_MODEL: str = os.getenv("SUGGESTIONS_MODEL", "google/gemini-2.5-flash")
    SUGGESTIONS_MAX_TOKENS: int = 100
    BENCHMARK_MAX_MODELS: int = 10

    # Performance & Monitoring
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    ENABLE_METRICS: bool = os.getenv("ENABLE_METRICS", "true").lower() == "true"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Allow unused env vars for flexible deployments


# Global settings instance
settings = Settings()


# OpenRouter client configuration
OPENROUTER_CONFIG = {
    "api_key": settings.OPENROUTER_API_KEY,
    "base_url": settings.OPENROUTER_BASE_URL,
    "default_model": settings.OPENROUTER_MODEL,
    "referrer": settings.OPENROUTER_REFERRER,
    "site_name": settings.OPENROUTER_SITE_NAME,
}

# Exchange-rate cache configuration
FX_CONFIG = {
    "api_key": settings.OPEN_EXCHANGE_RATES_API_KEY,
    "url": settings.EXCHANGE_RATES_URL,
    "ttl_seconds": settings.RATES_CACHE_TTL_SECONDS,
    "timeout_seconds": settings.EXCHANGE_RATES_TIMEOUT_SECONDS,
}

# Conversion pipeline configuration
PIPELINE_CONFIG = {
    "temperature": settings.DEFAULT_TEMPERATURE,
    "validator_max_tokens": settings.VALIDATOR_MAX_TOKENS,
    "suggestions_model": settings.SUGGESTIONS_MODEL,
    "suggestions_max_tokens": settings.SUGGESTIONS_MAX_TOKENS,
    "benchmark_max_models": settings.BENCHMARK_MAX_MODELS,
}

# Models offered by the model picker
MODEL_OPTIONS = [
    {"label": "GPT OSS 20B", "value": "openai/gpt-oss-20b:free"},
    {"label": "GLM 4.5 Air", "value": "z-ai/glm-4.5-air:free"},
    {"label": "Qwen3 Coder", "value": "qwen/qwen3-coder:free"},
    {"label": "Kimi K2", "value": "moonshotai/kimi-k2:free"},
    {"label": "Llama 3.3 70B", "value": "meta-llama/llama-3.3-70b-instruct:free"},
]
