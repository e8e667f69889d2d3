from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.openapi.docs import get_redoc_html

from app.api.exception_handlers import register_exception_handlers
from app.api.schemas import HealthOut
from app.completions.router import router as completions_router
from app.core.llm.openai_client import build_openai_client
from app.core.logging import setup_logging
from app.core.metrics import PrometheusMetricsMiddleware, metrics_router
from app.core.middleware.http_logging import HttpLoggingMiddleware
from app.core.settings import get_settings

setup_logging()

_REDOC_JS_URL = "https://cdn.jsdelivr.net/npm/redoc@2.1.4/bundles/redoc.standalone.js"


def create_app() -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Settings are read at startup, not import time, so tests can set env first.
        app.state.openai_client = build_openai_client(get_settings())
        yield
        client = getattr(app.state, "openai_client", None)
        if client is not None:
            await client.close()

    app = FastAPI(
        title="LLM Completion Gateway",
        description=(
            "Thin HTTP API relaying text-generation and chat-completion requests to OpenAI.\n\n"
            "Design principles:\n"
            "- Per-request parameters override server defaults, which override fixed fallbacks.\n"
            "- One provider call per request; retries and timeouts belong to the provider SDK.\n"
            "- Logs and metrics carry metadata only, never prompt or completion text."
        ),
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/swagger",  # Swagger UI ("Try it out")
        redoc_url=None,  # custom ReDoc page at /docs
        openapi_tags=[
            {
                "name": "health",
                "description": "Basic uptime check for load balancers and monitoring.",
            },
            {
                "name": "openai",
                "description": (
                    "Generate text from a prompt, a system+user prompt pair or a conversation."
                ),
            },
            {
                "name": "metrics",
                "description": "Prometheus-compatible metrics endpoint.",
            },
        ],
    )

    app.add_middleware(PrometheusMetricsMiddleware)
    app.add_middleware(HttpLoggingMiddleware)

    register_exception_handlers(app)

    @app.get("/docs", include_in_schema=False)
    async def redoc_docs():
        return get_redoc_html(
            openapi_url=app.openapi_url or "/openapi.json",
            title=f"{app.title} - ReDoc",
            redoc_js_url=_REDOC_JS_URL,
        )

    @app.get(
        "/health",
        response_model=HealthOut,
        tags=["health"],
        summary="Health check",
        description=(
            "Lightweight endpoint to verify the API process is running.\n\n"
            "It does not call the provider, so it stays green without an API key."
        ),
    )
    async def health() -> HealthOut:
        return HealthOut(status="ok")

    app.include_router(metrics_router)
    app.include_router(completions_router)
    return app


app = create_app()
