from __future__ import annotations

from functools import lru_cache

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.completions.options import CompletionDefaults


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "llm-gateway"
    app_env: str = Field(
        default="production",
        validation_alias=AliasChoices("APP_ENV", "app_env"),
        description="Runtime environment: development|production.",
    )

    # Provider credentials / transport
    openai_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("OPENAI_API_KEY", "openai_api_key"),
        description="OpenAI API key. Without it every generation endpoint returns 502.",
    )
    openai_organization: str | None = Field(
        default=None,
        validation_alias=AliasChoices("OPENAI_ORGANIZATION", "openai_organization"),
        description="Optional OpenAI organization id sent with every request.",
    )
    openai_base_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("OPENAI_BASE_URL", "openai_base_url"),
        description="Base URL override for proxies/emulators (api.openai.com when unset).",
    )
    openai_timeout_seconds: float = Field(
        default=30.0,
        ge=1.0,
        validation_alias=AliasChoices("OPENAI_TIMEOUT_SECONDS", "openai_timeout_seconds"),
        description="Client-level timeout for provider requests (seconds).",
    )
    openai_max_retries: int = Field(
        default=3,
        ge=0,
        validation_alias=AliasChoices("OPENAI_MAX_RETRIES", "openai_max_retries"),
        description="Retry count handed to the provider SDK; no retries happen in this service.",
    )

    # Generation defaults. Unset values fall back to the resolver's fixed constants.
    openai_default_model: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "OPENAI_DEFAULT_MODEL",
            "OPENAI_MODEL",
            "openai_default_model",
        ),
        description="Model identifier used when a request does not name one.",
    )
    openai_temperature: float | None = Field(
        default=None,
        ge=0.0,
        le=1.0,
        validation_alias=AliasChoices("OPENAI_TEMPERATURE", "openai_temperature"),
    )
    openai_max_tokens: int | None = Field(
        default=None,
        ge=1,
        validation_alias=AliasChoices("OPENAI_MAX_TOKENS", "openai_max_tokens"),
    )
    openai_top_p: float | None = Field(
        default=None,
        ge=0.0,
        le=1.0,
        validation_alias=AliasChoices("OPENAI_TOP_P", "openai_top_p"),
    )
    openai_frequency_penalty: float | None = Field(
        default=None,
        ge=-2.0,
        le=2.0,
        validation_alias=AliasChoices("OPENAI_FREQUENCY_PENALTY", "openai_frequency_penalty"),
    )
    openai_presence_penalty: float | None = Field(
        default=None,
        ge=-2.0,
        le=2.0,
        validation_alias=AliasChoices("OPENAI_PRESENCE_PENALTY", "openai_presence_penalty"),
    )

    @field_validator(
        "openai_api_key",
        "openai_organization",
        "openai_base_url",
        "openai_default_model",
        "openai_temperature",
        "openai_max_tokens",
        "openai_top_p",
        "openai_frequency_penalty",
        "openai_presence_penalty",
        mode="before",
    )
    @classmethod
    def _blank_as_unset(cls, value):
        # Blank env values (e.g. `OPENAI_ORGANIZATION=` from .env.example) mean unset.
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def is_development(self) -> bool:
        return str(self.app_env).strip().lower() == "development"

    def completion_defaults(self) -> CompletionDefaults:
        """Service-level generation defaults, resolved once per settings instance."""
        return CompletionDefaults(
            model=self.openai_default_model,
            temperature=self.openai_temperature,
            max_tokens=self.openai_max_tokens,
            top_p=self.openai_top_p,
            frequency_penalty=self.openai_frequency_penalty,
            presence_penalty=self.openai_presence_penalty,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
