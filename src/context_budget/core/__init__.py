"""Core assembly modules."""

from context_budget.core.assembler import PromptAssembler, create_assembler
from context_budget.core.assembly_config import AssemblyConfig
from context_budget.core.digest import TRUNCATION_MARKER, make_tool_digest
from context_budget.core.sliding_window import RecencyWindow
from context_budget.core.summary import SessionSummary

__all__ = [
    "PromptAssembler",
    "create_assembler",
    "AssemblyConfig",
    "TRUNCATION_MARKER",
    "make_tool_digest",
    "RecencyWindow",
    "SessionSummary",
]
