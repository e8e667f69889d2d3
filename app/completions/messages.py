from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from app.domain.exceptions import InvalidInputError


class ChatRole(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    FUNCTION = "function"


@dataclass(frozen=True)
class ChatMessage:
    role: ChatRole
    content: str
    name: str | None = None

    def to_provider(self) -> dict[str, Any]:
        """Shape expected by the provider's chat completion endpoint."""
        message: dict[str, Any] = {"role": self.role.value, "content": self.content}
        if self.name is not None:
            message["name"] = self.name
        return message


@dataclass(frozen=True)
class SinglePrompt:
    text: str


@dataclass(frozen=True)
class SystemGuided:
    system_text: str
    user_text: str


@dataclass(frozen=True)
class MultiTurn:
    prior_turns: tuple[ChatMessage, ...]
    new_text: str


UsagePattern = SinglePrompt | SystemGuided | MultiTurn


def _require_text(value: str, *, field: str) -> str:
    # Checked on a stripped copy only; the content itself is forwarded untouched.
    if not value or not value.strip():
        raise InvalidInputError(f"'{field}' must not be empty")
    return value


def validate_turns(turns: Iterable[ChatMessage]) -> list[ChatMessage]:
    """Return the turns as a new list, failing on any turn with blank content."""

    out: list[ChatMessage] = []
    for idx, turn in enumerate(turns):
        _require_text(turn.content, field=f"messages[{idx}].content")
        out.append(turn)
    return out


def compose_messages(pattern: UsagePattern) -> list[ChatMessage]:
    """Compile a usage pattern into the ordered conversation sent to the provider."""

    if isinstance(pattern, SinglePrompt):
        return [
            ChatMessage(role=ChatRole.USER, content=_require_text(pattern.text, field="prompt"))
        ]

    if isinstance(pattern, SystemGuided):
        return [
            ChatMessage(
                role=ChatRole.SYSTEM,
                content=_require_text(pattern.system_text, field="systemPrompt"),
            ),
            ChatMessage(
                role=ChatRole.USER,
                content=_require_text(pattern.user_text, field="userPrompt"),
            ),
        ]

    if isinstance(pattern, MultiTurn):
        prior = validate_turns(pattern.prior_turns)
        new_turn = ChatMessage(
            role=ChatRole.USER, content=_require_text(pattern.new_text, field="newMessage")
        )
        return [*prior, new_turn]

    raise TypeError(f"Unsupported usage pattern: {type(pattern).__name__}")
