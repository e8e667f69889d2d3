from __future__ import annotations

from pydantic import BaseModel, Field


class HealthOut(BaseModel):
    """Liveness payload; does not reflect provider reachability."""

    status: str = Field(
        description="`ok` whenever the gateway process is up and serving requests.",
        examples=["ok"],
    )
