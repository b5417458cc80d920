"""Deterministic test doubles."""

from datetime import datetime, timedelta, timezone
from typing import Sequence

from context_budget.models import Message


class ContentLengthCounter:
    """Counts one token per content character, so budgets are easy to reason about."""

    def __init__(self) -> None:
        self.calls = 0

    def count(self, messages: Sequence[Message]) -> int:
        self.calls += 1
        return sum(len(m.content) for m in messages)


class TickingClock:
    """Clock that advances one second per call."""

    def __init__(self) -> None:
        self.now = datetime(2025, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


def turn(user: str, assistant: str) -> list[Message]:
    """One user/assistant pair."""
    return [Message(role="user", content=user), Message(role="assistant", content=assistant)]
