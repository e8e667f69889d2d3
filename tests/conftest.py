from __future__ import annotations

from collections.abc import Iterator

import pytest

_OPENAI_ENV_VARS = (
    "OPENAI_ORGANIZATION",
    "OPENAI_BASE_URL",
    "OPENAI_DEFAULT_MODEL",
    "OPENAI_MODEL",
    "OPENAI_TEMPERATURE",
    "OPENAI_MAX_TOKENS",
    "OPENAI_TOP_P",
    "OPENAI_FREQUENCY_PENALTY",
    "OPENAI_PRESENCE_PENALTY",
    "OPENAI_TIMEOUT_SECONDS",
    "OPENAI_MAX_RETRIES",
)


@pytest.fixture(autouse=True)
def _isolate_openai_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    # An empty key keeps the real SDK client from being built, even if a local .env has one.
    monkeypatch.setenv("OPENAI_API_KEY", "")
    for name in _OPENAI_ENV_VARS:
        monkeypatch.delenv(name, raising=False)

    # Settings are cached via @lru_cache; clear so each test sees its own env.
    from app.core.settings import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def client():
    from fastapi.testclient import TestClient

    from app.main import create_app

    app = create_app()
    with TestClient(app) as c:
        yield c
