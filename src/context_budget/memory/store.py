"""In-process fact store keyed by case-insensitive fact key."""

from datetime import datetime, timezone
from typing import Callable, Iterable

from context_budget.models import Fact
from context_budget.utils import get_logger

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def canonical_key(key: str) -> str:
    """Canonical index for a fact key."""
    return key.casefold()


class FactStore:
    """Bounded map of canonical key to fact, evicting least recently updated.

    State is process-local and lost on restart.
    """

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        """Initialize store.

        Args:
            clock: Source of update timestamps
        """
        self._clock = clock
        self._facts: dict[str, Fact] = {}

    def __len__(self) -> int:
        return len(self._facts)

    def __contains__(self, key: str) -> bool:
        return canonical_key(key) in self._facts

    def upsert(self, facts: Iterable[Fact]) -> int:
        """Write or replace facts, stamping each with the current time.

        Args:
            facts: Facts to merge

        Returns:
            Number of facts written
        """
        written = 0
        for fact in facts:
            stored = fact.model_copy(update={"updated_at": self._clock()})
            self._facts[canonical_key(fact.key)] = stored
            written += 1

        if written:
            logger.debug("facts.upserted", written=written, total=len(self._facts))
        return written

    def get(self, key: str) -> Fact | None:
        """Look up a fact by key, ignoring case."""
        return self._facts.get(canonical_key(key))

    def all(self) -> list[Fact]:
        """All facts in insertion order."""
        return list(self._facts.values())

    def delete(self, key: str) -> bool:
        """Delete a fact by key, ignoring case.

        Args:
            key: Fact key

        Returns:
            True if a fact was removed
        """
        removed = self._facts.pop(canonical_key(key), None) is not None
        logger.debug("facts.deleted", key=key, success=removed)
        return removed

    def render_bullet_list(self, max_items: int = 30) -> str:
        """Format facts as "- key: value" lines sorted by stored key.

        Args:
            max_items: Maximum number of lines

        Returns:
            Newline-joined bullet list, empty string if nothing to show
        """
        if max_items <= 0:
            return ""
        items = sorted(self._facts.values(), key=lambda f: f.key)[:max_items]
        return "\n".join(f"- {f.key}: {f.value}" for f in items)

    def cleanup(self, max_facts: int = 80) -> int:
        """Keep only the max_facts most recently updated facts.

        Ties on update time keep insertion order.

        Args:
            max_facts: Maximum facts to retain

        Returns:
            Number of facts evicted
        """
        excess = len(self._facts) - max(0, max_facts)
        if excess <= 0:
            return 0

        ranked = sorted(
            self._facts.items(),
            key=lambda item: item[1].updated_at,
            reverse=True,
        )
        keep = {k for k, _ in ranked[: max(0, max_facts)]}
        self._facts = {k: f for k, f in self._facts.items() if k in keep}

        logger.info("facts.cleanup", evicted=excess, retained=len(self._facts))
        return excess

    def clear(self) -> None:
        """Remove all facts."""
        self._facts.clear()
