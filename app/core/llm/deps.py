from __future__ import annotations

from fastapi import Depends, Request
from openai import AsyncOpenAI

from app.completions.service import CompletionService
from app.core.llm.openai_client import build_openai_client
from app.core.settings import get_settings


def get_openai_client(request: Request) -> AsyncOpenAI | None:
    """
    Dependency provider for the shared SDK client.

    The lifespan hook normally builds it at startup; apps without a lifespan
    (e.g. bare test apps) build it on first use. Returns None when no API key
    is configured.
    """

    state = request.app.state
    if not hasattr(state, "openai_client"):
        state.openai_client = build_openai_client(get_settings())
    return state.openai_client


def get_completion_service(
    request: Request,
    openai_client: AsyncOpenAI | None = Depends(get_openai_client),
) -> CompletionService:
    # Set by HttpLoggingMiddleware so invoker logs correlate with the request log.
    request_id = getattr(request.state, "request_id", None) or request.headers.get(
        "X-Request-ID"
    )
    return CompletionService(
        client=openai_client,
        defaults=get_settings().completion_defaults(),
        request_id=request_id,
    )
