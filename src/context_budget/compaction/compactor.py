"""Background compaction: summary refresh and fact extraction after a turn."""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Sequence

from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential
from tenacity.wait import wait_base

from context_budget.compaction.prompts import facts_prompt, summarize_prompt
from context_budget.config import Settings
from context_budget.manager import ContextManager
from context_budget.memory.extractor import ParseStatus, parse_facts
from context_budget.metrics import MetricsExporter
from context_budget.models import Message
from context_budget.utils import get_logger

logger = get_logger(__name__)

# (messages, max_tokens) -> completion text; model invocation lives with the caller
Completion = Callable[[Sequence[Message], int], Awaitable[str]]


@dataclass
class CompactionReport:
    """What one compaction pass changed."""

    summary_updated: bool = False
    facts_status: ParseStatus | None = None
    facts_upserted: int = 0
    facts_evicted: int = 0
    summary_error: str | None = None
    facts_error: str | None = None


class Compactor:
    """Runs the summarizer and fact extractor and writes results back.

    Passes are serialized with a lock so the manager has a single writer.
    A failing step is logged and reported, leaving prior state intact.
    """

    def __init__(
        self,
        manager: ContextManager,
        complete: Completion,
        summary_max_tokens: int = 300,
        facts_max_tokens: int = 250,
        max_facts: int = 80,
        attempts: int = 3,
        wait: wait_base | None = None,
    ) -> None:
        """Initialize compactor.

        Args:
            manager: Session whose summary and facts are updated
            complete: Async completion callable
            summary_max_tokens: Reply cap for the summarizer call
            facts_max_tokens: Reply cap for the extractor call
            max_facts: Facts retained after each pass
            attempts: Attempts per step before giving up
            wait: Tenacity wait strategy between attempts
        """
        self.manager = manager
        self.complete = complete
        self.summary_max_tokens = summary_max_tokens
        self.facts_max_tokens = facts_max_tokens
        self.max_facts = max_facts
        self.attempts = attempts
        self.wait = wait or wait_exponential(multiplier=1, min=1, max=10)
        self._lock = asyncio.Lock()

    async def compact(self, new_turns: Sequence[Message]) -> CompactionReport:
        """Fold new turns into the summary and fact store.

        Args:
            new_turns: Turns completed since the last pass

        Returns:
            Report of what changed
        """
        report = CompactionReport()
        if not new_turns:
            return report

        async with self._lock:
            # Step 1: refresh session summary
            try:
                prompt = summarize_prompt(self.manager.get_current_summary(), new_turns)
                text = (await self._call(prompt, self.summary_max_tokens)).strip()
                if text:
                    self.manager.set_session_summary(text)
                    report.summary_updated = True
            except Exception as e:
                report.summary_error = str(e)
                MetricsExporter.record_compaction_failure("summary")
                logger.warning("compaction.summary_failed", error=str(e))

            # Step 2: extract facts
            try:
                raw = await self._call(facts_prompt(new_turns), self.facts_max_tokens)
                parsed = parse_facts(raw)
                report.facts_status = parsed.status
                if parsed.ok:
                    report.facts_upserted = self.manager.upsert_facts(parsed.facts)
                report.facts_evicted = self.manager.cleanup_facts(self.max_facts)
            except Exception as e:
                report.facts_error = str(e)
                MetricsExporter.record_compaction_failure("facts")
                logger.warning("compaction.facts_failed", error=str(e))

        logger.info(
            "compaction.complete",
            turns=len(new_turns),
            summary_updated=report.summary_updated,
            facts_upserted=report.facts_upserted,
            facts_evicted=report.facts_evicted,
        )
        return report

    async def _call(self, messages: Sequence[Message], max_tokens: int) -> str:
        """Invoke the completion with retries."""
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.attempts),
            wait=self.wait,
            reraise=True,
        ):
            with attempt:
                result = await self.complete(messages, max_tokens)
        return result or ""


def create_compactor(
    manager: ContextManager,
    complete: Completion,
    settings: Settings | None = None,
) -> Compactor:
    """Factory for compactor.

    Args:
        manager: Session to compact into
        complete: Async completion callable
        settings: Library settings (defaults if None)

    Returns:
        Configured compactor
    """
    settings = settings or Settings()
    return Compactor(
        manager,
        complete,
        summary_max_tokens=settings.summary_max_tokens,
        facts_max_tokens=settings.facts_max_tokens,
        max_facts=settings.max_facts,
        attempts=settings.compaction_attempts,
    )
