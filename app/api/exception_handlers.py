from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from app.core.llm.openai_client import ProviderError
from app.domain.exceptions import ClientNotReadyError, InvalidInputError

logger = logging.getLogger("app.api_errors")


def _log_failure(request: Request, *, status_code: int, error: str) -> None:
    # Metadata only: request bodies carry prompts.
    request_id = getattr(request.state, "request_id", None) or request.headers.get(
        "X-Request-ID"
    )
    logger.info(
        "Request failed",
        extra={
            "request_id": request_id,
            "http_method": request.method,
            "request_path": request.url.path,  # no query string
            "status_code": status_code,
            "error": error,
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register application exception handlers."""

    @app.exception_handler(InvalidInputError)
    async def handle_invalid_input(request: Request, exc: InvalidInputError) -> JSONResponse:
        _log_failure(request, status_code=status.HTTP_400_BAD_REQUEST, error="invalid_input")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST, content={"detail": exc.message}
        )

    @app.exception_handler(ClientNotReadyError)
    async def handle_client_not_ready(request: Request, exc: ClientNotReadyError) -> JSONResponse:
        _log_failure(request, status_code=status.HTTP_502_BAD_GATEWAY, error="client_not_ready")
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"detail": "LLM service unavailable"},
        )

    @app.exception_handler(ProviderError)
    async def handle_provider_error(request: Request, exc: ProviderError) -> JSONResponse:
        # Upstream details are not echoed to callers; the invoker already logged them.
        _log_failure(request, status_code=status.HTTP_502_BAD_GATEWAY, error="provider_error")
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"detail": "LLM service failed"},
        )
