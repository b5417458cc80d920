"""Shared fixtures."""

import pytest

from context_budget.models import Message

from tests.helpers import ContentLengthCounter, TickingClock


@pytest.fixture
def counter() -> ContentLengthCounter:
    """Create content-length token counter."""
    return ContentLengthCounter()


@pytest.fixture
def clock() -> TickingClock:
    """Create ticking clock."""
    return TickingClock()


@pytest.fixture
def system_prefix() -> list[Message]:
    """Short static prefix."""
    return [Message(role="system", content="You are a coding agent.")]
