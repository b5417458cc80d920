"""Bounded recency window over raw conversation messages."""

from typing import Iterable

from context_budget.models import Message
from context_budget.utils import get_logger

logger = get_logger(__name__)


class RecencyWindow:
    """Holds the most recent raw messages, evicting the oldest first."""

    def __init__(self, cap: int = 6) -> None:
        """Initialize window.

        Args:
            cap: Maximum number of retained messages (whole turn-pairs)
        """
        self.cap = cap
        self._messages: list[Message] = []

    def __len__(self) -> int:
        return len(self._messages)

    @property
    def messages(self) -> list[Message]:
        """Copy of the retained messages, oldest first."""
        return list(self._messages)

    def append(self, messages: Iterable[Message]) -> None:
        """Push messages to the tail, then drop from the head down to cap.

        Args:
            messages: Messages in conversation order
        """
        self._messages.extend(messages)

        overflow = len(self._messages) - self.cap
        if overflow > 0:
            del self._messages[:overflow]
            logger.debug("window.evicted", evicted=overflow, size=len(self._messages))

    def slice(self, n: int) -> list[Message]:
        """Return the last n messages in order.

        Args:
            n: Number of messages wanted

        Returns:
            Fresh list with at most n messages
        """
        if n <= 0:
            return []
        return self._messages[-n:]

    def clear(self) -> None:
        """Drop all messages."""
        self._messages.clear()
