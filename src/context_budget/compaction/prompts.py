"""Prompts for the external summarizer and fact extractor."""

from typing import Sequence

from context_budget.models import Message

SUMMARIZE_SYSTEM = """\
You are a razor-concise meeting clerk.
Update the running "Session summary" with only durable decisions, constraints, and intermediate results.
Keep it under 450 tokens. Use bullet points and short headers. Omit chit-chat."""

SUMMARIZE_USER = """\
Current session summary (may be empty):
---
{summary}

New conversation to incorporate:
---
{conversation}

Return ONLY the updated summary."""

FACTS_SYSTEM = """\
Extract stable, reusable FACTS as key:value pairs.
Only include items likely to stay valid in future turns (IDs, URLs, masked API keys, file paths, user preferences, model choices).
Return a JSON array of {"key": ..., "value": ...} objects. At most 25 facts. No duplicates."""


def format_turns(turns: Sequence[Message]) -> str:
    """Render turns as "ROLE: content" blocks separated by blank lines."""
    return "\n\n".join(f"{m.role.upper()}: {m.content}" for m in turns)


def summarize_prompt(running_summary: str, new_turns: Sequence[Message]) -> list[Message]:
    """Messages asking the summarizer to fold new turns into the summary.

    Args:
        running_summary: Current summary, possibly empty
        new_turns: Turns to incorporate

    Returns:
        System and user messages for the summarizer call
    """
    return [
        Message(role="system", content=SUMMARIZE_SYSTEM),
        Message(
            role="user",
            content=SUMMARIZE_USER.format(
                summary=running_summary or "(none)",
                conversation=format_turns(new_turns),
            ),
        ),
    ]


def facts_prompt(new_turns: Sequence[Message]) -> list[Message]:
    """Messages asking the extractor for {key, value} facts."""
    return [
        Message(role="system", content=FACTS_SYSTEM),
        Message(role="user", content=format_turns(new_turns)),
    ]
