"""Token counting over message sequences."""

import json
import re
from typing import Protocol, Sequence

from context_budget.models import Message


def serialize_messages(messages: Sequence[Message]) -> str:
    """Render messages as the compact JSON text that counters measure.

    Args:
        messages: Ordered messages

    Returns:
        JSON array of role/content objects
    """
    return json.dumps(
        [{"role": m.role, "content": m.content} for m in messages],
        ensure_ascii=False,
        separators=(",", ":"),
    )


class TokenCounter(Protocol):
    """Protocol for token counting implementations."""

    def count(self, messages: Sequence[Message]) -> int:
        """Count tokens in an ordered message sequence.

        Args:
            messages: Messages to measure

        Returns:
            Token count
        """
        ...


class ApproximateTokenCounter:
    """Approximate token counter using character-based heuristic.

    English: ~4 characters per token
    Chinese: ~1.5 characters per token

    Deterministic and dependency-free. For precise counts use
    TiktokenCounter.
    """

    CJK_RANGE = re.compile(r'[\u4e00-\u9fff\u3040-\u309f\u30a0-\u30ff]')

    def count(self, messages: Sequence[Message]) -> int:
        """Estimate token count of the serialized messages."""
        if not messages:
            return 0
        return self.count_text(serialize_messages(messages))

    def count_text(self, text: str) -> int:
        """Estimate token count of raw text.

        Args:
            text: Input text

        Returns:
            Estimated token count
        """
        if not text:
            return 0

        cjk_chars = len(self.CJK_RANGE.findall(text))
        other_chars = len(text) - cjk_chars

        return int(cjk_chars / 1.5 + other_chars / 4) + 1


class TiktokenCounter:
    """Precise token counter using tiktoken.

    Unknown model names fall back to the o200k_base encoding.
    """

    FALLBACK_ENCODING = "o200k_base"

    def __init__(self, model: str = "gpt-4.1") -> None:
        """Initialize tiktoken counter.

        Args:
            model: Model name for encoding
        """
        import tiktoken

        try:
            self.encoding = tiktoken.encoding_for_model(model)
        except KeyError:
            self.encoding = tiktoken.get_encoding(self.FALLBACK_ENCODING)
        self.model = model

    def count(self, messages: Sequence[Message]) -> int:
        """Count tokens of the serialized messages exactly."""
        if not messages:
            return 0
        return len(self.encoding.encode(serialize_messages(messages)))


def get_counter(method: str = "approximate", **kwargs) -> TokenCounter:
    """Get token counter instance.

    Args:
        method: "approximate" or "tiktoken"
        **kwargs: Additional args for specific counter

    Returns:
        TokenCounter instance
    """
    if method == "tiktoken":
        return TiktokenCounter(**kwargs)
    if method == "approximate":
        return ApproximateTokenCounter()
    raise ValueError(f"Unknown token counter: {method}")
