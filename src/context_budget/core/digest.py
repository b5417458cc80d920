"""Length-capped digests of raw tool output."""

from context_budget.models import Message

TRUNCATION_MARKER = " ...[truncated]"


def make_tool_digest(name: str, raw: str, max_chars: int = 800) -> Message:
    """Replace a long tool blob with a short tool message.

    Args:
        name: Tool name
        raw: Raw tool output
        max_chars: Characters of output kept before truncating

    Returns:
        Tool message with a TOOL/SUMMARY header
    """
    body = raw[:max_chars] + TRUNCATION_MARKER if len(raw) > max_chars else raw
    return Message(role="tool", content=f"TOOL={name}\nSUMMARY:\n{body}")
