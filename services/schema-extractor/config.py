"""Environment-based configuration for the schema extractor service."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Schema extractor settings, loaded from environment variables."""

    # Server
    PORT: int = 8092
    APP_TITLE: str = "Schema Extractor"

    # Hosted model connection (empty key = extraction disabled, local dev default)
    OPENROUTER_API_KEY: str = ""
    OPENROUTER_BASE_URL: str = "https://openrouter.ai/api/v1"
    LLM_MODEL: str = "google/gemini-2.5-flash"

    # Generation options
    LLM_TEMPERATURE: float = 0.1
    LLM_MAX_TOKENS: int = 4096

    # Model call timeouts and retry (1 attempt = report failures once)
    LLM_TIMEOUT_SECONDS: int = 120
    LLM_CONNECT_TIMEOUT: int = 10
    LLM_RETRY_ATTEMPTS: int = 1
    LLM_RETRY_DELAY: float = 2.0
    LLM_RETRY_BACKOFF: float = 2.0

    model_config = {"env_prefix": "", "case_sensitive": True}


settings = Settings()
