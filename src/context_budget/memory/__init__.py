"""Durable fact memory package."""

from context_budget.memory.extractor import FactParseResult, ParseStatus, parse_facts
from context_budget.memory.store import FactStore, canonical_key

__all__ = [
    "FactParseResult",
    "ParseStatus",
    "parse_facts",
    "FactStore",
    "canonical_key",
]
