"""Configuration for prompt assembly."""

from dataclasses import dataclass


@dataclass
class AssemblyConfig:
    """Configuration for prompt assembly."""

    max_input_tokens: int = 3500
    keep_turns: int = 4
    window_cap: int = 6
    facts_in_prompt: int = 30
    digest_max_chars: int = 800
