from __future__ import annotations

from fastapi import APIRouter, Depends

from app.completions.messages import MultiTurn, SinglePrompt, SystemGuided, validate_turns
from app.completions.schemas import (
    ChatCompletionIn,
    CompletionOut,
    ContinueConversationIn,
    ExamplesOut,
    GenerateTextIn,
    ModelsOut,
    SystemPromptIn,
)
from app.completions.service import CompletionService
from app.core.llm.deps import get_completion_service

router = APIRouter(prefix="/openai", tags=["openai"])

_EXAMPLES: list[dict] = [
    {
        "title": "Simple text generation",
        "endpoint": "/openai/generate-text",
        "payload": {
            "prompt": "Write a short poem about artificial intelligence",
            "temperature": 0.7,
            "maxTokens": 150,
        },
    },
    {
        "title": "Chat conversation",
        "endpoint": "/openai/chat-completion",
        "payload": {
            "messages": [
                {"role": "system", "content": "You are an expert programming assistant"},
                {
                    "role": "user",
                    "content": "Can you explain what FastAPI is and why I should use it?",
                },
            ],
            "temperature": 0.5,
        },
    },
    {
        "title": "System prompt",
        "endpoint": "/openai/system-prompt",
        "payload": {
            "systemPrompt": (
                "You are a digital marketing expert who gives concise, practical advice"
            ),
            "userPrompt": "What are the best strategies to increase social media engagement?",
            "temperature": 0.6,
            "maxTokens": 300,
        },
    },
    {
        "title": "Continue a conversation",
        "endpoint": "/openai/continue-conversation",
        "payload": {
            "conversation": [
                {"role": "user", "content": "Hi"},
                {"role": "assistant", "content": "Hello! How can I help you today?"},
            ],
            "newMessage": "Recommend a book about distributed systems.",
        },
    },
]


@router.post(
    "/generate-text",
    response_model=CompletionOut,
    summary="Generate text from a single prompt",
)
async def generate_text(
    payload: GenerateTextIn,
    service: CompletionService = Depends(get_completion_service),
) -> CompletionOut:
    result = await service.complete(
        SinglePrompt(text=payload.prompt), payload.generation_options()
    )
    return CompletionOut(result=result)


@router.post(
    "/chat-completion",
    response_model=CompletionOut,
    summary="Generate a reply to an explicit conversation",
)
async def chat_completion(
    payload: ChatCompletionIn,
    service: CompletionService = Depends(get_completion_service),
) -> CompletionOut:
    messages = validate_turns(m.to_domain() for m in payload.messages)
    result = await service.create_chat_completion(
        messages=messages, options=payload.generation_options()
    )
    return CompletionOut(result=result)


@router.post(
    "/system-prompt",
    response_model=CompletionOut,
    summary="Generate a reply guided by a system prompt",
)
async def system_prompt(
    payload: SystemPromptIn,
    service: CompletionService = Depends(get_completion_service),
) -> CompletionOut:
    result = await service.complete(
        SystemGuided(system_text=payload.system_prompt, user_text=payload.user_prompt),
        payload.generation_options(),
    )
    return CompletionOut(result=result)


@router.post(
    "/continue-conversation",
    response_model=CompletionOut,
    summary="Append a user message to prior turns and generate a reply",
)
async def continue_conversation(
    payload: ContinueConversationIn,
    service: CompletionService = Depends(get_completion_service),
) -> CompletionOut:
    pattern = MultiTurn(
        prior_turns=tuple(m.to_domain() for m in payload.conversation),
        new_text=payload.new_message,
    )
    result = await service.complete(pattern, payload.generation_options())
    return CompletionOut(result=result)


@router.get(
    "/models",
    response_model=ModelsOut,
    summary="List models available to the configured API key",
)
async def list_models(
    service: CompletionService = Depends(get_completion_service),
) -> ModelsOut:
    return ModelsOut(models=await service.list_models())


@router.get("/examples", response_model=ExamplesOut, summary="Example request payloads")
async def get_examples() -> ExamplesOut:
    return ExamplesOut.model_validate({"examples": _EXAMPLES})
