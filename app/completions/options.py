"""Generation parameter resolution.

Each parameter is taken from the first layer that provides it:

1. per-call overrides (``GenerationOptions``)
2. service defaults (``CompletionDefaults``, built from settings)
3. the fixed fallbacks below

Inputs are assumed to be range-checked already (request schemas / settings).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeVar

FALLBACK_MODEL = "gpt-3.5-turbo"
FALLBACK_TEMPERATURE = 0.7
FALLBACK_MAX_TOKENS = 1000
FALLBACK_TOP_P = 1.0
FALLBACK_FREQUENCY_PENALTY = 0.0
FALLBACK_PRESENCE_PENALTY = 0.0

T = TypeVar("T")


@dataclass(frozen=True)
class GenerationOptions:
    """Optional per-call overrides."""

    model: str | None = None
    temperature: float | None = None
    max_tokens: int | None = None
    top_p: float | None = None
    frequency_penalty: float | None = None
    presence_penalty: float | None = None


@dataclass(frozen=True)
class CompletionDefaults:
    """Service-level defaults; any field may be unset."""

    model: str | None = None
    temperature: float | None = None
    max_tokens: int | None = None
    top_p: float | None = None
    frequency_penalty: float | None = None
    presence_penalty: float | None = None


@dataclass(frozen=True)
class EffectiveParameters:
    model: str
    temperature: float
    max_tokens: int
    top_p: float
    frequency_penalty: float
    presence_penalty: float


def _first_set(*values: T | None, fallback: T) -> T:
    for value in values:
        if value is not None:
            return value
    return fallback


def resolve_parameters(
    overrides: GenerationOptions | None,
    defaults: CompletionDefaults | None,
) -> EffectiveParameters:
    """Merge overrides, defaults and fallbacks into a fully populated parameter set."""

    overrides = overrides or GenerationOptions()
    defaults = defaults or CompletionDefaults()

    # An empty model name counts as "not provided".
    model = overrides.model or defaults.model or FALLBACK_MODEL

    return EffectiveParameters(
        model=model,
        temperature=_first_set(
            overrides.temperature, defaults.temperature, fallback=FALLBACK_TEMPERATURE
        ),
        max_tokens=_first_set(
            overrides.max_tokens, defaults.max_tokens, fallback=FALLBACK_MAX_TOKENS
        ),
        top_p=_first_set(overrides.top_p, defaults.top_p, fallback=FALLBACK_TOP_P),
        frequency_penalty=_first_set(
            overrides.frequency_penalty,
            defaults.frequency_penalty,
            fallback=FALLBACK_FREQUENCY_PENALTY,
        ),
        presence_penalty=_first_set(
            overrides.presence_penalty,
            defaults.presence_penalty,
            fallback=FALLBACK_PRESENCE_PENALTY,
        ),
    )
