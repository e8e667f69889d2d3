from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Protocol

from app.completions.messages import (
    ChatMessage,
    MultiTurn,
    SinglePrompt,
    SystemGuided,
    UsagePattern,
    compose_messages,
)
from app.completions.options import (
    CompletionDefaults,
    EffectiveParameters,
    GenerationOptions,
    resolve_parameters,
)
from app.core.metrics import llm_completions_total
from app.domain.exceptions import ClientNotReadyError

logger = logging.getLogger("app.completions")


class ChatCompletionsAPI(Protocol):
    async def create(self, **kwargs: Any) -> Any: ...


class ChatAPI(Protocol):
    @property
    def completions(self) -> ChatCompletionsAPI: ...


class ModelsAPI(Protocol):
    async def list(self) -> Any: ...


class ProviderClient(Protocol):
    """The subset of `openai.AsyncOpenAI` used here."""

    @property
    def chat(self) -> ChatAPI: ...

    @property
    def models(self) -> ModelsAPI: ...


def _first_choice_text(response: Any) -> str:
    choices = getattr(response, "choices", None) or []
    if not choices:
        return ""
    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None)
    return content or ""


class CompletionService:
    """
    Relays one chat completion per call to the provider.

    - Parameters are resolved per call (override -> service default -> fallback).
    - Provider errors are logged and re-raised unchanged; there is no local retry.
    - Prompt and completion text are never logged.
    """

    def __init__(
        self,
        *,
        client: ProviderClient | None,
        defaults: CompletionDefaults | None = None,
        request_id: str | None = None,
    ):
        self._client = client
        self._defaults = defaults or CompletionDefaults()
        self._request_id = request_id
        # Only the configured default model gets its own metric series.
        self._default_model = resolve_parameters(None, self._defaults).model

    def _model_label(self, model: str) -> str:
        # Request-supplied ids are unbounded; keep label cardinality fixed.
        return model if model == self._default_model else "other"

    def _require_client(self) -> ProviderClient:
        if self._client is None:
            raise ClientNotReadyError()
        return self._client

    async def create_chat_completion(
        self,
        *,
        messages: Sequence[ChatMessage],
        options: GenerationOptions | None = None,
    ) -> str:
        params: EffectiveParameters = resolve_parameters(options, self._defaults)
        model_label = self._model_label(params.model)
        log_extra = {
            "request_id": self._request_id,
            "model": params.model,
            "message_count": len(messages),
        }

        try:
            client = self._require_client()
        except ClientNotReadyError:
            llm_completions_total.labels(model=model_label, outcome="not_ready").inc()
            logger.warning("Chat completion skipped: provider client not ready", extra=log_extra)
            raise

        try:
            response = await client.chat.completions.create(
                model=params.model,
                messages=[m.to_provider() for m in messages],
                temperature=params.temperature,
                max_tokens=params.max_tokens,
                top_p=params.top_p,
                frequency_penalty=params.frequency_penalty,
                presence_penalty=params.presence_penalty,
            )
        except Exception as exc:
            llm_completions_total.labels(model=model_label, outcome="error").inc()
            logger.exception("Error creating chat completion: %s", exc, extra=log_extra)
            raise

        llm_completions_total.labels(model=model_label, outcome="success").inc()
        logger.info("Chat completion created", extra=log_extra)
        return _first_choice_text(response)

    async def complete(
        self, pattern: UsagePattern, options: GenerationOptions | None = None
    ) -> str:
        return await self.create_chat_completion(
            messages=compose_messages(pattern), options=options
        )

    async def generate_text(self, prompt: str, options: GenerationOptions | None = None) -> str:
        return await self.complete(SinglePrompt(text=prompt), options)

    async def generate_with_system_prompt(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        options: GenerationOptions | None = None,
    ) -> str:
        return await self.complete(
            SystemGuided(system_text=system_prompt, user_text=user_prompt), options
        )

    async def continue_conversation(
        self,
        *,
        conversation: Sequence[ChatMessage],
        new_message: str,
        options: GenerationOptions | None = None,
    ) -> str:
        return await self.complete(
            MultiTurn(prior_turns=tuple(conversation), new_text=new_message), options
        )

    async def list_models(self) -> list[str]:
        """Model identifiers visible to the configured credential."""

        client = self._require_client()
        try:
            page = await client.models.list()
        except Exception as exc:
            logger.exception(
                "Error getting available models: %s", exc, extra={"request_id": self._request_id}
            )
            raise
        return [model.id for model in page.data]
