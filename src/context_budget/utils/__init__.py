"""Utility functions package."""

from context_budget.utils.logger import configure_logging, get_logger
from context_budget.utils.token_counter import TokenCounter, get_counter

__all__ = ["configure_logging", "get_logger", "get_counter", "TokenCounter"]
