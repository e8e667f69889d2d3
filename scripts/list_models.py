"""Print the model identifiers available to the configured OpenAI key.

Development helper for picking OPENAI_DEFAULT_MODEL:
- It only runs when APP_ENV=development
- It reads the same settings as the API (env vars / .env)
"""

from __future__ import annotations

import asyncio

from app.completions.service import CompletionService
from app.core.llm.openai_client import build_openai_client
from app.core.settings import get_settings


async def list_models() -> list[str]:
    settings = get_settings()
    client = build_openai_client(settings)
    service = CompletionService(client=client, defaults=settings.completion_defaults())
    try:
        return sorted(await service.list_models())
    finally:
        if client is not None:
            await client.close()


def main() -> None:
    """Entry point."""
    settings = get_settings()
    if not settings.is_development:
        print(f"Skipped: APP_ENV={settings.app_env!r} (only runs in development).")
        return

    if not settings.openai_api_key:
        raise SystemExit("OPENAI_API_KEY is not set")

    for model_id in asyncio.run(list_models()):
        print(model_id)


if __name__ == "__main__":
    main()
