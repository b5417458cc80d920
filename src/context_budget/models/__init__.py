"""Pydantic models for messages, facts and assembled prompts."""

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["system", "user", "assistant", "tool"]


class Message(BaseModel):
    """Chat message model."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str


class Fact(BaseModel):
    """A durable key/value record extracted from conversation."""

    model_config = ConfigDict(frozen=True)

    key: str
    value: str
    source: str | None = None
    updated_at: datetime | None = None


class DegradationStage(str, Enum):
    """How far the assembler had to degrade to approach the budget."""

    NONE = "none"
    TURN_SHRINK = "turn_shrink"
    FALLBACK_NUDGE = "fallback_nudge"


class PromptResult(BaseModel):
    """An assembled prompt and its measured token cost."""

    messages: list[Message]
    approx_tokens: int
    kept_messages: int = 0
    stage: DegradationStage = DegradationStage.NONE
    budget: int | None = Field(default=None, description="Budget the prompt was built for")

    @property
    def over_budget(self) -> bool:
        """Whether the measured count still exceeds the budget."""
        return self.budget is not None and self.approx_tokens > self.budget
