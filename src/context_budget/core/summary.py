"""Holder for the externally produced session summary."""

from context_budget.utils import get_logger

logger = get_logger(__name__)


class SessionSummary:
    """Single compacted-narrative string, replaced wholesale."""

    def __init__(self) -> None:
        self._text = ""

    def __bool__(self) -> bool:
        return bool(self._text)

    def get(self) -> str:
        """Current summary, empty string if never set."""
        return self._text

    def set(self, text: str) -> None:
        """Replace the summary unconditionally.

        Args:
            text: New summary text
        """
        self._text = text
        logger.debug("summary.replaced", chars=len(text))
