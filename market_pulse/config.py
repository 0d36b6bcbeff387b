from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_prefix": "MP_", "env_file": ".env", "env_file_encoding": "utf-8"}

    llm_provider: str = Field(default="gemini", pattern=r"^(gemini|openai|anthropic)$")
    # Empty picks the provider default from llm.config.DEFAULT_MODELS
    llm_model: str = Field(default="")
    gemini_api_key: str = Field(default="")
    openai_api_key: str = Field(default="")
    anthropic_api_key: str = Field(default="")
    use_search_grounding: bool = Field(default=True)

    # Retry policy for the news fetcher
    fetch_max_attempts: int = Field(default=3, ge=1)
    retry_base_delay_ms: int = Field(default=2000, ge=0)
    retry_jitter_ms: int = Field(default=1000, ge=0)

    category_stagger_seconds: float = Field(default=1.5, ge=0.0)
    news_poll_interval_seconds: int = Field(default=300, ge=0)
    chart_history_days: int = Field(default=7, ge=1, le=365)

    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=False)
    cors_origins: str = Field(default="http://localhost:3000")


settings = Settings()
