"""Per-session context manager tying window, summary, facts and assembly together."""

from typing import Any, Iterable, Sequence

from context_budget.config import Settings
from context_budget.core.assembler import create_assembler
from context_budget.core.assembly_config import AssemblyConfig
from context_budget.core.digest import make_tool_digest
from context_budget.core.sliding_window import RecencyWindow
from context_budget.core.summary import SessionSummary
from context_budget.memory.store import FactStore
from context_budget.metrics import MetricsExporter
from context_budget.models import Fact, Message, PromptResult
from context_budget.utils import configure_logging, get_logger
from context_budget.utils.token_counter import ApproximateTokenCounter, TokenCounter, get_counter

logger = get_logger(__name__)


class ContextManager:
    """Context state for one conversation session.

    Each session owns its own instance; nothing is shared between
    sessions. Calls are expected to be serialized by the agent loop:
    compaction for one turn finishes before the next build_prompt.
    """

    def __init__(
        self,
        static_prefix: Sequence[Message],
        counter: TokenCounter | None = None,
        config: AssemblyConfig | None = None,
        facts: FactStore | None = None,
    ) -> None:
        """Initialize manager.

        Args:
            static_prefix: Messages that open every prompt
            counter: Token counter (approximate if None)
            config: Assembly configuration
            facts: Fact store (fresh in-memory store if None)
        """
        self.config = config or AssemblyConfig()
        self.window = RecencyWindow(self.config.window_cap)
        self.summary = SessionSummary()
        self.facts = facts if facts is not None else FactStore()
        self.assembler = create_assembler(
            static_prefix,
            self.window,
            self.summary,
            self.facts,
            counter if counter is not None else ApproximateTokenCounter(),
            self.config,
        )

    @property
    def static_prefix(self) -> tuple[Message, ...]:
        return self.assembler.static_prefix

    def add_turn(self, messages: Iterable[Message]) -> None:
        """Record a visible turn (user, assistant and tool digests)."""
        self.window.append(messages)

    @staticmethod
    def make_tool_digest(name: str, raw: str, max_chars: int = 800) -> Message:
        """Replace a long tool blob with a digest before add_turn."""
        return make_tool_digest(name, raw, max_chars)

    def add_tool_output(self, name: str, raw: str, max_chars: int | None = None) -> Message:
        """Digest tool output and push it into the window.

        Returns:
            The digest message that was recorded
        """
        limit = self.config.digest_max_chars if max_chars is None else max_chars
        digest = make_tool_digest(name, raw, limit)
        self.window.append([digest])
        return digest

    def set_session_summary(self, summary: str) -> None:
        self.summary.set(summary)

    def get_current_summary(self) -> str:
        return self.summary.get()

    def upsert_facts(self, facts: Iterable[Fact]) -> int:
        """Merge facts; keys differing only in case collapse to one."""
        return self.facts.upsert(facts)

    def get_facts_as_bullet_list(self, max_items: int = 30) -> str:
        return self.facts.render_bullet_list(max_items)

    def get_current_facts(self) -> list[Fact]:
        return self.facts.all()

    def delete_fact(self, key: str) -> bool:
        return self.facts.delete(key)

    def cleanup_facts(self, max_facts: int = 80) -> int:
        """Evict least recently updated facts beyond max_facts.

        Returns:
            Number of facts evicted
        """
        evicted = self.facts.cleanup(max_facts)
        MetricsExporter.record_eviction(evicted)
        return evicted

    def build_prompt(
        self,
        user_message: Message,
        max_input_tokens: int | None = None,
        keep_turns: int | None = None,
    ) -> PromptResult:
        """Build the prompt for the next model call under the token budget."""
        return self.assembler.build_prompt(user_message, max_input_tokens, keep_turns)

    def get_context_info(self) -> dict[str, Any]:
        """Current context state for debugging or external compaction."""
        return {
            "session_summary": self.summary.get(),
            "facts": self.facts.all(),
            "facts_as_bullets": self.facts.render_bullet_list(self.config.facts_in_prompt),
            "window_size": len(self.window),
        }

    def reset(self) -> None:
        """Drop window, summary and facts; the static prefix stays."""
        self.window.clear()
        self.summary.set("")
        self.facts.clear()
        logger.info("session.reset")


def create_context_manager(
    static_prefix: Sequence[Message],
    settings: Settings | None = None,
    counter: TokenCounter | None = None,
) -> ContextManager:
    """Factory for a session context manager.

    Args:
        static_prefix: Messages that open every prompt
        settings: Library settings; when given, logging is configured
            at settings.log_level
        counter: Token counter overriding the configured one

    Returns:
        Configured manager
    """
    if settings is None:
        settings = Settings()
    else:
        configure_logging(settings.log_level)
    if counter is None:
        kwargs = {"model": settings.tokenizer_model} if settings.token_counter == "tiktoken" else {}
        counter = get_counter(settings.token_counter, **kwargs)
    return ContextManager(static_prefix, counter, settings.assembly_config())
