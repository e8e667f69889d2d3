from __future__ import annotations

from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.completions.messages import ChatMessage, ChatRole
from app.completions.options import GenerationOptions


def _not_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be empty")
    return value


NonBlankStr = Annotated[str, AfterValidator(_not_blank)]


class _CamelModel(BaseModel):
    # Public payloads use camelCase (maxTokens, systemPrompt, ...); snake_case is accepted too.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GenerationOptionsIn(_CamelModel):
    """Optional per-request overrides shared by every generation endpoint."""

    model: str | None = Field(
        default=None,
        description="Provider model identifier. Falls back to the server default.",
        examples=["gpt-3.5-turbo"],
    )
    temperature: float | None = Field(
        default=None,
        ge=0.0,
        le=1.0,
        description="Sampling randomness (0-1).",
        examples=[0.7],
    )
    max_tokens: int | None = Field(
        default=None,
        ge=1,
        description="Maximum number of tokens to generate.",
        examples=[150],
    )
    top_p: float | None = Field(
        default=None,
        ge=0.0,
        le=1.0,
        description="Nucleus sampling mass (0-1).",
        examples=[1],
    )
    frequency_penalty: float | None = Field(
        default=None,
        ge=-2.0,
        le=2.0,
        description="Penalty for token frequency (-2.0 to 2.0).",
        examples=[0],
    )
    presence_penalty: float | None = Field(
        default=None,
        ge=-2.0,
        le=2.0,
        description="Penalty for tokens already present (-2.0 to 2.0).",
        examples=[0],
    )

    def generation_options(self) -> GenerationOptions:
        return GenerationOptions(
            model=self.model,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            top_p=self.top_p,
            frequency_penalty=self.frequency_penalty,
            presence_penalty=self.presence_penalty,
        )


class ChatMessageIn(_CamelModel):
    role: ChatRole = Field(description="Role of the message author.", examples=["user"])
    content: NonBlankStr = Field(
        description="Message text.",
        examples=["Can you explain what FastAPI is and why I should use it?"],
    )
    name: str | None = Field(
        default=None,
        description="Optional name identifying the author.",
        examples=["user1"],
    )

    def to_domain(self) -> ChatMessage:
        return ChatMessage(role=self.role, content=self.content, name=self.name)


class GenerateTextIn(GenerationOptionsIn):
    prompt: NonBlankStr = Field(
        description="Prompt used to generate content.",
        examples=["Write a short poem about artificial intelligence"],
    )


class SystemPromptIn(GenerationOptionsIn):
    system_prompt: NonBlankStr = Field(
        description="System instructions defining the assistant's behaviour.",
        examples=["You are a digital marketing expert who gives concise, practical advice"],
    )
    user_prompt: NonBlankStr = Field(
        description="The user's message or question.",
        examples=["What are the best strategies to increase social media engagement?"],
    )


class ChatCompletionIn(GenerationOptionsIn):
    messages: list[ChatMessageIn] = Field(
        min_length=1,
        description="Ordered messages forming the conversation.",
    )


class ContinueConversationIn(GenerationOptionsIn):
    conversation: list[ChatMessageIn] = Field(
        default_factory=list,
        description="Prior turns, oldest first. Sent to the provider verbatim.",
    )
    new_message: NonBlankStr = Field(
        description="New user message appended after the prior turns.",
        examples=["And how does it compare to Flask?"],
    )


class CompletionOut(BaseModel):
    result: str = Field(description="Text of the first generated choice (may be empty).")


class ModelsOut(BaseModel):
    models: list[str] = Field(description="Model identifiers available to the configured key.")


class ExampleOut(BaseModel):
    title: str
    endpoint: str
    payload: dict


class ExamplesOut(BaseModel):
    examples: list[ExampleOut]
