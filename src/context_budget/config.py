"""Configuration management using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from context_budget.core.assembly_config import AssemblyConfig


class Settings(BaseSettings):
    """Library settings, read from CONTEXT_BUDGET_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CONTEXT_BUDGET_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = Field(default="info", description="Logging level")

    # Assembly settings
    max_input_tokens: int = Field(
        default=3500,
        ge=1,
        description="Token budget for one model call",
    )
    keep_turns: int = Field(
        default=4,
        ge=0,
        description="Window messages offered before any shrinking",
    )
    window_cap: int = Field(
        default=6,
        ge=0,
        description="Maximum raw messages retained in the recency window",
    )
    facts_in_prompt: int = Field(
        default=30,
        ge=0,
        description="Maximum facts rendered into the prompt",
    )
    digest_max_chars: int = Field(
        default=800,
        ge=0,
        description="Tool output characters kept in a digest",
    )

    # Memory settings
    max_facts: int = Field(default=80, ge=0, description="Facts retained after cleanup")

    # Token counting
    token_counter: Literal["approximate", "tiktoken"] = Field(
        default="approximate",
        description="Token counter implementation",
    )
    tokenizer_model: str = Field(
        default="gpt-4.1",
        description="Model name used to pick the tiktoken encoding",
    )

    # Compaction settings
    summary_max_tokens: int = Field(default=300, ge=1, description="Summarizer reply cap")
    facts_max_tokens: int = Field(default=250, ge=1, description="Fact extractor reply cap")
    compaction_attempts: int = Field(
        default=3,
        ge=1,
        description="Attempts per compaction step before giving up",
    )

    @field_validator("window_cap")
    @classmethod
    def _whole_turn_pairs(cls, v: int) -> int:
        if v % 2:
            raise ValueError("window_cap must hold whole user/assistant pairs (even)")
        return v

    def assembly_config(self) -> AssemblyConfig:
        """Assembler knobs derived from these settings."""
        return AssemblyConfig(
            max_input_tokens=self.max_input_tokens,
            keep_turns=self.keep_turns,
            window_cap=self.window_cap,
            facts_in_prompt=self.facts_in_prompt,
            digest_max_chars=self.digest_max_chars,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
