from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx
import openai
from openai import AsyncOpenAI

from app.core.settings import Settings

logger = logging.getLogger("app.llm")

# Anything the SDK raises (connection, auth, rate limit, bad request, ...).
# Callers let it propagate untouched and map it to 502 at the edge.
ProviderError = openai.OpenAIError

# Passed explicitly so the SDK never falls back to a blank OPENAI_BASE_URL from the environment.
DEFAULT_OPENAI_BASE_URL = "https://api.openai.com/v1"


@dataclass(frozen=True)
class OpenAIConfig:
    api_key: str
    organization: str | None
    base_url: str
    timeout_seconds: float
    max_retries: int

    @classmethod
    def from_settings(cls, settings: Settings) -> OpenAIConfig | None:
        if not settings.openai_api_key:
            return None
        return cls(
            api_key=settings.openai_api_key,
            organization=settings.openai_organization,
            base_url=settings.openai_base_url or DEFAULT_OPENAI_BASE_URL,
            timeout_seconds=float(settings.openai_timeout_seconds),
            max_retries=int(settings.openai_max_retries),
        )


def create_openai_client(*, config: OpenAIConfig) -> AsyncOpenAI:
    """Build the process-wide SDK client. Retries and timeouts are handled by the SDK."""

    return AsyncOpenAI(
        api_key=config.api_key,
        organization=config.organization,
        base_url=config.base_url,
        timeout=httpx.Timeout(config.timeout_seconds),
        max_retries=config.max_retries,
    )


def build_openai_client(settings: Settings) -> AsyncOpenAI | None:
    """
    Return a configured client, or None when no API key is available.

    A missing key is not fatal at startup: the service still serves /health,
    /metrics and the docs, and generation endpoints report 502.
    """

    config = OpenAIConfig.from_settings(settings)
    if config is None:
        logger.warning("OpenAI API key not provided; generation endpoints are disabled")
        return None

    client = create_openai_client(config=config)
    logger.info(
        "OpenAI client initialized",
        extra={"max_retries": config.max_retries, "timeout_seconds": config.timeout_seconds},
    )
    return client
