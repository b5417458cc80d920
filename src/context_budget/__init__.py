"""Token-budgeted context assembly for multi-turn LLM agents."""

__version__ = "0.1.0"

from context_budget.manager import ContextManager, create_context_manager
from context_budget.models import DegradationStage, Fact, Message, PromptResult

__all__ = [
    "__version__",
    "ContextManager",
    "create_context_manager",
    "DegradationStage",
    "Fact",
    "Message",
    "PromptResult",
]
