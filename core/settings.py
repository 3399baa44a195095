from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, PostgresDsn, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CustomSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


class AppSettings(CustomSettings):
    ENVIRONMENT: Literal["local", "dev", "prod"] = Field(default="local")
    LOG_LEVEL: str = Field(default="INFO")
    JSON_LOGS: bool = Field(default=True)
    CORS_ORIGINS: List[str] = Field(default_factory=lambda: ["*"])


class PgDbSettings(CustomSettings):
    POSTGRES_ENGINE: str = Field(default="postgresql+asyncpg")
    POSTGRES_USER: str = Field(default="postgres")
    POSTGRES_PASSWORD: SecretStr = Field(default="postgres")
    POSTGRES_DB: str = Field(default="chat")
    POSTGRES_HOST: str = Field(default="localhost")
    POSTGRES_PORT: int = Field(default=5432)
    DATABASE_URL: PostgresDsn | str = Field(default="")

    @model_validator(mode="before")
    def validate_postgres_dsn(cls, data: dict):
        if isinstance(data, dict) and not data.get("DATABASE_URL"):
            _built_uri = PostgresDsn.build(
                scheme=data.get("POSTGRES_ENGINE", "postgresql+asyncpg"),
                username=data.get("POSTGRES_USER", "postgres"),
                password=data.get("POSTGRES_PASSWORD", "postgres"),
                host=data.get("POSTGRES_HOST", "localhost"),
                port=int(data.get("POSTGRES_PORT", 5432)),
                path=data.get("POSTGRES_DB", "chat"),
            ).unicode_string()
            data["DATABASE_URL"] = _built_uri
        return data


class LLMSettings(CustomSettings):
    """Configuration for the OpenAI-compatible model provider.

    Env vars:
    - LLM_API_KEY
    - LLM_BASE_URL
    - CHAT_MODEL
    - TITLE_MODEL
    - TEMPERATURE
    """

    LLM_API_KEY: SecretStr = Field(default="")
    LLM_BASE_URL: str = Field(default="https://api.groq.com/openai/v1")
    CHAT_MODEL: str = Field(default="llama-3.3-70b-versatile")
    TITLE_MODEL: str = Field(default="llama-3.3-70b-versatile")
    TEMPERATURE: Optional[float] = Field(default=None)


class AuthSettings(CustomSettings):
    """Where to find the session token issued by the auth service."""

    SESSION_COOKIE_NAME: str = Field(default="better-auth.session_token")


class Settings(BaseModel):
    APP: AppSettings = Field(default_factory=AppSettings)
    DATABASE: PgDbSettings = Field(default_factory=PgDbSettings)
    LLM: LLMSettings = Field(default_factory=LLMSettings)
    AUTH: AuthSettings = Field(default_factory=AuthSettings)


@lru_cache
def get_settings() -> Settings:
    return Settings()


SETTINGS = get_settings()
