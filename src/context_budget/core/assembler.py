"""Prompt assembler - builds each call's prompt under a token budget."""

from typing import Sequence

from context_budget.core.assembly_config import AssemblyConfig
from context_budget.core.sliding_window import RecencyWindow
from context_budget.core.summary import SessionSummary
from context_budget.memory.store import FactStore
from context_budget.metrics import MetricsExporter
from context_budget.models import DegradationStage, Message, PromptResult
from context_budget.utils import get_logger
from context_budget.utils.token_counter import TokenCounter

logger = get_logger(__name__)

SUMMARY_HEADER = "Session summary (compact):"
FACTS_HEADER = "Key facts:"
BUDGET_NUDGE = (
    "Context trimmed for token budget. "
    "Rely on 'Session summary' + 'Key facts' above."
)


class PromptAssembler:
    """Assembles prompts from prefix, summary, facts and recent window.

    Segment order is fixed:
    1. Static prefix
    2. Session summary (when non-empty)
    3. Key facts (when non-empty)
    4. Last k window messages
    5. The new user message

    When the candidate is over budget, whole turn-pairs are dropped from
    the window first. If nothing is left to drop, the window segment is
    replaced by a nudge message and the result is returned as measured,
    even when still over budget.
    """

    def __init__(
        self,
        static_prefix: Sequence[Message],
        window: RecencyWindow,
        summary: SessionSummary,
        facts: FactStore,
        counter: TokenCounter,
        config: AssemblyConfig | None = None,
    ) -> None:
        """Initialize assembler.

        Args:
            static_prefix: Messages that always open the prompt
            window: Recency window to read recent turns from
            summary: Session summary holder
            facts: Fact store
            counter: Token counter used to measure candidates
            config: Assembly configuration
        """
        self.static_prefix = tuple(static_prefix)
        self.window = window
        self.summary = summary
        self.facts = facts
        self.counter = counter
        self.config = config or AssemblyConfig()

    def build_prompt(
        self,
        user_message: Message,
        max_input_tokens: int | None = None,
        keep_turns: int | None = None,
    ) -> PromptResult:
        """Build the prompt for one model call.

        Args:
            user_message: The new user message, always placed last
            max_input_tokens: Token budget (config default if None)
            keep_turns: Starting number of window messages (config default if None)

        Returns:
            Assembled messages with their measured token count
        """
        budget = self.config.max_input_tokens if max_input_tokens is None else max_input_tokens
        k = self.config.keep_turns if keep_turns is None else keep_turns

        head = self._head_segments()
        messages = self._compose(head, self.window.slice(k), user_message)
        tokens = self.counter.count(messages)
        stage = DegradationStage.NONE
        initial_tokens = tokens

        while tokens > budget and k > 0:
            k -= 2
            messages = self._compose(head, self.window.slice(max(0, k)), user_message)
            tokens = self.counter.count(messages)
            stage = DegradationStage.TURN_SHRINK
            logger.debug("assembly.shrink", keep=max(0, k), tokens=tokens, budget=budget)

        kept = len(self.window.slice(max(0, k)))

        if tokens > budget:
            nudge = Message(role="system", content=BUDGET_NUDGE)
            messages = self._compose(head, [nudge], user_message)
            tokens = self.counter.count(messages)
            stage = DegradationStage.FALLBACK_NUDGE
            kept = 0
            logger.warning(
                "assembly.fallback_nudge",
                tokens=tokens,
                budget=budget,
                over_budget=tokens > budget,
            )

        result = PromptResult(
            messages=messages,
            approx_tokens=tokens,
            kept_messages=kept,
            stage=stage,
            budget=budget,
        )
        MetricsExporter.record_build(stage.value, tokens, result.over_budget)

        logger.info(
            "assembly.complete",
            messages=len(messages),
            initial_tokens=initial_tokens,
            tokens=tokens,
            budget=budget,
            stage=stage.value,
        )
        return result

    def _head_segments(self) -> list[Message]:
        """Prefix, summary and facts segments, which never shrink."""
        head = list(self.static_prefix)

        if self.summary:
            head.append(
                Message(role="system", content=f"{SUMMARY_HEADER}\n{self.summary.get()}")
            )

        bullets = self.facts.render_bullet_list(self.config.facts_in_prompt)
        if bullets:
            head.append(Message(role="system", content=f"{FACTS_HEADER}\n{bullets}"))

        return head

    @staticmethod
    def _compose(
        head: list[Message],
        window_segment: list[Message],
        user_message: Message,
    ) -> list[Message]:
        return [*head, *window_segment, user_message]


def create_assembler(
    static_prefix: Sequence[Message],
    window: RecencyWindow,
    summary: SessionSummary,
    facts: FactStore,
    counter: TokenCounter,
    config: AssemblyConfig | None = None,
) -> PromptAssembler:
    """Factory for prompt assembler.

    Returns:
        Configured assembler
    """
    return PromptAssembler(static_prefix, window, summary, facts, counter, config)
