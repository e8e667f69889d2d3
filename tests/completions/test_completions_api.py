from __future__ import annotations

import logging

import httpx
import openai
import pytest
from fastapi.testclient import TestClient
from prometheus_client import REGISTRY

from app.core.llm.deps import get_openai_client
from app.main import create_app
from tests.completions._fakes import FakeOpenAIClient, make_response


@pytest.fixture
def fake_openai() -> FakeOpenAIClient:
    return FakeOpenAIClient(
        response=make_response("Stub reply."),
        model_ids=["gpt-3.5-turbo", "gpt-4o-mini"],
    )


@pytest.fixture
def api_client(fake_openai: FakeOpenAIClient) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_openai_client] = lambda: fake_openai
    with TestClient(app) as c:
        yield c


def test_generate_text_success(api_client: TestClient, fake_openai: FakeOpenAIClient) -> None:
    res = api_client.post(
        "/openai/generate-text",
        json={"prompt": "Write a haiku", "temperature": 0.2, "maxTokens": 50},
    )

    assert res.status_code == 200, res.text
    assert res.json() == {"result": "Stub reply."}
    assert "X-Request-ID" in res.headers

    call = fake_openai.calls[0]
    assert call["messages"] == [{"role": "user", "content": "Write a haiku"}]
    assert call["temperature"] == 0.2
    assert call["max_tokens"] == 50
    assert call["model"] == "gpt-3.5-turbo"


def test_server_defaults_apply_when_request_omits_them(
    monkeypatch: pytest.MonkeyPatch, fake_openai: FakeOpenAIClient
) -> None:
    monkeypatch.setenv("OPENAI_DEFAULT_MODEL", "gpt-4o-mini")
    monkeypatch.setenv("OPENAI_MAX_TOKENS", "321")

    app = create_app()
    app.dependency_overrides[get_openai_client] = lambda: fake_openai
    with TestClient(app) as c:
        res = c.post("/openai/generate-text", json={"prompt": "hi", "maxTokens": 7})

    assert res.status_code == 200, res.text
    call = fake_openai.calls[0]
    assert call["model"] == "gpt-4o-mini"
    assert call["max_tokens"] == 7
    assert call["temperature"] == 0.7


def test_system_prompt_success(api_client: TestClient, fake_openai: FakeOpenAIClient) -> None:
    res = api_client.post(
        "/openai/system-prompt",
        json={"systemPrompt": "be terse", "userPrompt": "2+2?", "topP": 0.5},
    )

    assert res.status_code == 200, res.text
    assert fake_openai.calls[0]["messages"] == [
        {"role": "system", "content": "be terse"},
        {"role": "user", "content": "2+2?"},
    ]
    assert fake_openai.calls[0]["top_p"] == 0.5


def test_chat_completion_forwards_messages_in_order(
    api_client: TestClient, fake_openai: FakeOpenAIClient
) -> None:
    messages = [
        {"role": "system", "content": "You are an expert programming assistant"},
        {"role": "user", "content": "What is FastAPI?", "name": "user1"},
    ]

    res = api_client.post(
        "/openai/chat-completion",
        json={"messages": messages, "frequencyPenalty": 1.5, "presencePenalty": -1},
    )

    assert res.status_code == 200, res.text
    call = fake_openai.calls[0]
    assert call["messages"] == messages
    assert call["frequency_penalty"] == 1.5
    assert call["presence_penalty"] == -1


def test_continue_conversation_appends_new_message(
    api_client: TestClient, fake_openai: FakeOpenAIClient
) -> None:
    res = api_client.post(
        "/openai/continue-conversation",
        json={
            "conversation": [
                {"role": "user", "content": "hi"},
                {"role": "assistant", "content": "hello"},
            ],
            "newMessage": "bye",
        },
    )

    assert res.status_code == 200, res.text
    assert fake_openai.calls[0]["messages"] == [
        {"role": "user", "content": "hi"},
        {"role": "assistant", "content": "hello"},
        {"role": "user", "content": "bye"},
    ]


def test_snake_case_fields_are_accepted(
    api_client: TestClient, fake_openai: FakeOpenAIClient
) -> None:
    res = api_client.post(
        "/openai/system-prompt",
        json={"system_prompt": "rules", "user_prompt": "go", "max_tokens": 12},
    )

    assert res.status_code == 200, res.text
    assert fake_openai.calls[0]["max_tokens"] == 12


@pytest.mark.parametrize(
    "path,body",
    [
        ("/openai/generate-text", {"prompt": ""}),
        ("/openai/generate-text", {"prompt": "   "}),
        ("/openai/generate-text", {"prompt": "ok", "temperature": 1.5}),
        ("/openai/generate-text", {"prompt": "ok", "maxTokens": 0}),
        ("/openai/generate-text", {"prompt": "ok", "topP": -0.1}),
        ("/openai/generate-text", {"prompt": "ok", "frequencyPenalty": 2.5}),
        ("/openai/generate-text", {"prompt": "ok", "presencePenalty": -3}),
        ("/openai/system-prompt", {"systemPrompt": "rules"}),
        ("/openai/chat-completion", {"messages": []}),
        ("/openai/chat-completion", {"messages": [{"role": "robot", "content": "hi"}]}),
        ("/openai/chat-completion", {"messages": [{"role": "user", "content": " "}]}),
        ("/openai/continue-conversation", {"conversation": [], "newMessage": ""}),
    ],
)
def test_invalid_payloads_return_422(
    api_client: TestClient, fake_openai: FakeOpenAIClient, path: str, body: dict
) -> None:
    res = api_client.post(path, json=body)

    assert res.status_code == 422, res.text
    assert fake_openai.calls == []


def test_empty_choices_return_empty_result() -> None:
    fake = FakeOpenAIClient(response=make_response())
    app = create_app()
    app.dependency_overrides[get_openai_client] = lambda: fake
    with TestClient(app) as c:
        res = c.post("/openai/generate-text", json={"prompt": "hi"})

    assert res.status_code == 200
    assert res.json() == {"result": ""}


def test_missing_api_key_returns_502(client: TestClient) -> None:
    res = client.post("/openai/generate-text", json={"prompt": "hi"})

    assert res.status_code == 502
    assert res.json() == {"detail": "LLM service unavailable"}


def test_provider_failure_returns_502() -> None:
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    fake = FakeOpenAIClient(error=openai.APIConnectionError(request=request))
    app = create_app()
    app.dependency_overrides[get_openai_client] = lambda: fake
    with TestClient(app) as c:
        res = c.post("/openai/generate-text", json={"prompt": "hi"})

    assert res.status_code == 502
    assert res.json() == {"detail": "LLM service failed"}
    assert len(fake.calls) == 1


def test_list_models(api_client: TestClient) -> None:
    res = api_client.get("/openai/models")

    assert res.status_code == 200, res.text
    assert res.json() == {"models": ["gpt-3.5-turbo", "gpt-4o-mini"]}


def test_list_models_without_api_key_returns_502(client: TestClient) -> None:
    res = client.get("/openai/models")
    assert res.status_code == 502


def test_examples_are_served(client: TestClient) -> None:
    res = client.get("/openai/examples")

    assert res.status_code == 200
    endpoints = {e["endpoint"] for e in res.json()["examples"]}
    assert {
        "/openai/generate-text",
        "/openai/chat-completion",
        "/openai/system-prompt",
        "/openai/continue-conversation",
    } <= endpoints


def test_completion_metrics_are_exported(api_client: TestClient) -> None:
    api_client.post("/openai/generate-text", json={"prompt": "hi"})

    res = api_client.get("/metrics")

    assert res.status_code == 200
    assert "llm_completions_total" in res.text
    assert 'route="/openai/generate-text"' in res.text


def _completion_series() -> set[tuple[str, str]]:
    return {
        (sample.labels["model"], sample.labels["outcome"])
        for metric in REGISTRY.collect()
        if metric.name == "llm_completions"
        for sample in metric.samples
        if sample.name == "llm_completions_total"
    }


def test_request_model_ids_do_not_create_metric_series(
    api_client: TestClient, fake_openai: FakeOpenAIClient
) -> None:
    for i in range(50):
        res = api_client.post(
            "/openai/generate-text", json={"prompt": "hi", "model": f"junk-{i}"}
        )
        assert res.status_code == 200, res.text

    assert len(fake_openai.calls) == 50
    assert fake_openai.calls[-1]["model"] == "junk-49"
    models = {model for model, _ in _completion_series()}
    assert not any(m.startswith("junk-") for m in models)
    assert "other" in models


def test_completion_logs_carry_request_id(
    api_client: TestClient, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.INFO, logger="app.completions")

    res = api_client.post(
        "/openai/generate-text",
        json={"prompt": "hi"},
        headers={"X-Request-ID": "req_corr_42"},
    )

    assert res.status_code == 200
    records = [r for r in caplog.records if r.name == "app.completions"]
    assert len(records) == 1
    assert records[0].__dict__["request_id"] == "req_corr_42"
