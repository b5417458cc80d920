"""Tests for budgeted prompt assembly."""

import pytest

from context_budget.core import AssemblyConfig, PromptAssembler, RecencyWindow, SessionSummary
from context_budget.core.assembler import BUDGET_NUDGE
from context_budget.memory import FactStore
from context_budget.models import DegradationStage, Fact, Message

from tests.helpers import ContentLengthCounter

PREFIX = Message(role="system", content="You are a coding agent.")  # 23 chars
USER = Message(role="user", content="hello")  # 5 chars


@pytest.fixture
def window() -> RecencyWindow:
    """Window holding three 10-char turns."""
    window = RecencyWindow()
    for i in range(3):
        window.append([
            Message(role="user", content=f"user-{i}".ljust(10, ".")),
            Message(role="assistant", content=f"asst-{i}".ljust(10, ".")),
        ])
    return window


@pytest.fixture
def summary() -> SessionSummary:
    return SessionSummary()


@pytest.fixture
def facts() -> FactStore:
    return FactStore()


@pytest.fixture
def assembler(
    window: RecencyWindow,
    summary: SessionSummary,
    facts: FactStore,
    counter: ContentLengthCounter,
) -> PromptAssembler:
    return PromptAssembler([PREFIX], window, summary, facts, counter)


def contents(messages: list[Message]) -> list[str]:
    return [m.content for m in messages]


class TestNoDegradation:
    """Candidate within budget is returned as built."""

    def test_empty_state(self, counter: ContentLengthCounter) -> None:
        assembler = PromptAssembler([PREFIX], RecencyWindow(), SessionSummary(), FactStore(), counter)

        result = assembler.build_prompt(USER)

        assert result.messages == [PREFIX, USER]
        assert result.approx_tokens == 28
        assert result.stage is DegradationStage.NONE
        assert result.kept_messages == 0
        assert counter.calls == 1

    def test_keeps_last_keep_turns_messages(self, assembler: PromptAssembler) -> None:
        result = assembler.build_prompt(USER)

        assert contents(result.messages[1:-1]) == [
            "user-1....", "asst-1....", "user-2....", "asst-2....",
        ]
        assert result.approx_tokens == 68
        assert result.kept_messages == 4
        assert result.stage is DegradationStage.NONE
        assert not result.over_budget

    def test_segment_order(
        self,
        assembler: PromptAssembler,
        summary: SessionSummary,
        facts: FactStore,
    ) -> None:
        summary.set("Built the login page.")
        facts.upsert([Fact(key="b", value="2"), Fact(key="a", value="1")])

        result = assembler.build_prompt(USER, keep_turns=2)

        assert result.messages[0] == PREFIX
        assert result.messages[1].role == "system"
        assert result.messages[1].content == "Session summary (compact):\nBuilt the login page."
        assert result.messages[2].role == "system"
        assert result.messages[2].content == "Key facts:\n- a: 1\n- b: 2"
        assert contents(result.messages[3:5]) == ["user-2....", "asst-2...."]
        assert result.messages[-1] == USER

    def test_empty_summary_and_facts_omitted(self, assembler: PromptAssembler) -> None:
        result = assembler.build_prompt(USER, keep_turns=0)

        assert result.messages == [PREFIX, USER]

    def test_facts_segment_uses_configured_limit(
        self,
        window: RecencyWindow,
        summary: SessionSummary,
        facts: FactStore,
        counter: ContentLengthCounter,
    ) -> None:
        facts.upsert([Fact(key=f"k{i}", value="v") for i in range(5)])
        assembler = PromptAssembler(
            [PREFIX], window, summary, facts, counter, AssemblyConfig(facts_in_prompt=2)
        )

        result = assembler.build_prompt(USER, keep_turns=0)

        assert result.messages[1].content == "Key facts:\n- k0: v\n- k1: v"


class TestTurnShrink:
    """Stage 1 drops whole turn-pairs from the window."""

    def test_drops_one_turn(self, assembler: PromptAssembler) -> None:
        result = assembler.build_prompt(USER, max_input_tokens=60)

        assert contents(result.messages) == [PREFIX.content, "user-2....", "asst-2....", "hello"]
        assert result.approx_tokens == 48
        assert result.kept_messages == 2
        assert result.stage is DegradationStage.TURN_SHRINK

    def test_drops_all_turns_before_nudging(self, assembler: PromptAssembler, counter: ContentLengthCounter) -> None:
        result = assembler.build_prompt(USER, max_input_tokens=30)

        assert result.messages == [PREFIX, USER]
        assert result.approx_tokens == 28
        assert result.kept_messages == 0
        assert result.stage is DegradationStage.TURN_SHRINK
        # initial + k=2 + k=0
        assert counter.calls == 3

    def test_odd_keep_turns(self, assembler: PromptAssembler) -> None:
        result = assembler.build_prompt(USER, max_input_tokens=40, keep_turns=3)

        # k: 3 -> 1 leaves one message (38 tokens)
        assert contents(result.messages) == [PREFIX.content, "asst-2....", "hello"]
        assert result.kept_messages == 1

    def test_summary_and_facts_survive_shrink(
        self,
        assembler: PromptAssembler,
        summary: SessionSummary,
        facts: FactStore,
    ) -> None:
        summary.set("S")
        facts.upsert([Fact(key="k", value="v")])

        result = assembler.build_prompt(USER, max_input_tokens=80)

        assert result.stage is DegradationStage.TURN_SHRINK
        assert result.messages[1].content.startswith("Session summary")
        assert result.messages[2].content.startswith("Key facts")


class TestFallbackNudge:
    """Stage 2 replaces the window with a nudge and never raises."""

    def test_tiny_budget_reaches_nudge(self, assembler: PromptAssembler, counter: ContentLengthCounter) -> None:
        result = assembler.build_prompt(USER, max_input_tokens=1)

        assert result.stage is DegradationStage.FALLBACK_NUDGE
        assert result.messages == [PREFIX, Message(role="system", content=BUDGET_NUDGE), USER]
        assert result.approx_tokens == 23 + len(BUDGET_NUDGE) + 5
        assert result.over_budget
        assert result.kept_messages == 0
        # initial + k=2 + k=0 + nudge
        assert counter.calls == 4

    def test_nudge_follows_summary_and_facts(
        self,
        assembler: PromptAssembler,
        summary: SessionSummary,
        facts: FactStore,
    ) -> None:
        summary.set("S")
        facts.upsert([Fact(key="k", value="v")])

        result = assembler.build_prompt(USER, max_input_tokens=1)

        assert [m.content.split("\n")[0] for m in result.messages] == [
            PREFIX.content,
            "Session summary (compact):",
            "Key facts:",
            BUDGET_NUDGE,
            "hello",
        ]

    def test_user_message_never_altered(self, assembler: PromptAssembler) -> None:
        long_user = Message(role="user", content="q" * 10_000)

        result = assembler.build_prompt(long_user, max_input_tokens=100)

        assert result.messages[-1] is long_user
        assert result.approx_tokens > 100


class TestIsolation:
    """Returned sequences are fresh."""

    def test_result_does_not_alias_state(self, assembler: PromptAssembler, window: RecencyWindow) -> None:
        result = assembler.build_prompt(USER)
        result.messages.clear()

        assert len(window) == 6
        assert len(assembler.build_prompt(USER).messages) == 6

    def test_reads_state_at_call_time(self, assembler: PromptAssembler, summary: SessionSummary) -> None:
        assert len(assembler.build_prompt(USER, keep_turns=0).messages) == 2

        summary.set("later")

        assert len(assembler.build_prompt(USER, keep_turns=0).messages) == 3
