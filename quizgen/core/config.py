from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    db_url: str = Field("sqlite:///./quizgen.db", alias="DB_URL")

    # Which completion gateway builds quizzes: an OpenAI-compatible chat endpoint (Groq) or Gemini.
    ai_provider: Literal["groq", "gemini"] = Field("groq", alias="AI_PROVIDER")
    ai_temperature: float = Field(0.7, alias="AI_TEMPERATURE")
    ai_max_tokens: int = Field(2048, alias="AI_MAX_TOKENS")
    ai_timeout_seconds: int = Field(60, alias="AI_TIMEOUT_SECONDS")

    groq_api_key: str | None = Field(None, alias="GROQ_API_KEY")
    groq_base_url: str = Field("https://api.groq.com/openai/v1/chat/completions", alias="GROQ_BASE_URL")
    groq_model: str = Field("llama-3.3-70b-versatile", alias="GROQ_MODEL")

    gemini_api_key: str | None = Field(None, alias="GEMINI_API_KEY")
    gemini_model: str = Field("models/gemini-2.5-flash", alias="GEMINI_MODEL")
    gemini_model_preferences: list[str] = Field(
        default_factory=lambda: [
            "models/gemini-2.5-flash",
            "models/gemini-2.0-flash",
        ],
        alias="GEMINI_MODEL_PREFERRED",
    )

    # Client orchestrator tuning: 15 polls x 2s matches the 30s wait window players see.
    quiz_api_base_url: str = Field("http://localhost:8000", alias="QUIZ_API_BASE_URL")
    quiz_poll_interval_seconds: float = Field(2.0, alias="QUIZ_POLL_INTERVAL_SECONDS")
    quiz_poll_max_attempts: int = Field(15, alias="QUIZ_POLL_MAX_ATTEMPTS")
    quiz_generate_timeout_seconds: float = Field(60.0, alias="QUIZ_GENERATE_TIMEOUT_SECONDS")

    @field_validator("gemini_model_preferences", mode="before")
    @classmethod
    def _split_preferences(cls, value):
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @property
    def ai_configured(self) -> bool:
        if self.ai_provider == "gemini":
            return bool(self.gemini_api_key)
        return bool(self.groq_api_key)


@lru_cache
def get_settings() -> Settings:
    return Settings()
