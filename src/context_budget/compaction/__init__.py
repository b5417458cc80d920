"""Summary and fact compaction package."""

from context_budget.compaction.compactor import (
    CompactionReport,
    Compactor,
    Completion,
    create_compactor,
)
from context_budget.compaction.prompts import facts_prompt, format_turns, summarize_prompt

__all__ = [
    "CompactionReport",
    "Compactor",
    "Completion",
    "create_compactor",
    "facts_prompt",
    "format_turns",
    "summarize_prompt",
]
