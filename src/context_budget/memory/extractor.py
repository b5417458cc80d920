"""Parsing of fact-extractor output into validated facts."""

import json
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, ValidationError, field_validator

from context_budget.models import Fact
from context_budget.utils import get_logger

logger = get_logger(__name__)

_FENCE_OPEN = re.compile(r"^\s*```(?:json)?\s*", re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"\s*```\s*$")


class ParseStatus(str, Enum):
    """Outcome of parsing extractor output."""

    OK = "ok"
    EMPTY = "empty"
    INVALID = "invalid"


@dataclass(frozen=True)
class FactParseResult:
    """Tagged parse result: facts are only present when status is OK."""

    status: ParseStatus
    facts: list[Fact] = field(default_factory=list)
    skipped: int = 0

    @property
    def ok(self) -> bool:
        return self.status is ParseStatus.OK


class FactCandidate(BaseModel):
    """A single {key, value} item as returned by the extractor."""

    key: str
    value: str

    @field_validator("key", "value", mode="before")
    @classmethod
    def _scalar_to_str(cls, v: Any) -> Any:
        # numbers and booleans keep their JSON spelling ("8080", "true")
        if isinstance(v, (bool, int, float)):
            return json.dumps(v)
        return v

    def to_fact(self, source: str | None) -> Fact:
        return Fact(key=self.key, value=self.value, source=source)


def strip_code_fences(text: str) -> str:
    """Remove a surrounding markdown code fence, if any."""
    return _FENCE_CLOSE.sub("", _FENCE_OPEN.sub("", text)).strip()


def parse_facts(raw: str | None, source: str | None = "extractor") -> FactParseResult:
    """Parse extractor output into facts without raising.

    Accepts a JSON array of {key, value} objects, or an object holding
    that array under "facts". Items that fail validation are skipped.

    Args:
        raw: Raw extractor response text
        source: Source label stamped on each fact

    Returns:
        Parse result; INVALID when the payload is not usable at all
    """
    if raw is None or not raw.strip():
        return FactParseResult(ParseStatus.EMPTY)

    try:
        data: Any = json.loads(strip_code_fences(raw))
    except json.JSONDecodeError as e:
        logger.warning("facts.parse_failed", error=str(e), preview=raw[:200])
        return FactParseResult(ParseStatus.INVALID)

    if isinstance(data, dict):
        data = data.get("facts")
    if not isinstance(data, list):
        logger.warning("facts.invalid_structure", type=type(data).__name__)
        return FactParseResult(ParseStatus.INVALID)

    facts: list[Fact] = []
    skipped = 0
    for item in data:
        try:
            facts.append(FactCandidate.model_validate(item).to_fact(source))
        except ValidationError:
            skipped += 1
            logger.warning("facts.item_skipped", item=repr(item)[:200])

    if not facts:
        return FactParseResult(ParseStatus.EMPTY, skipped=skipped)
    return FactParseResult(ParseStatus.OK, facts=facts, skipped=skipped)
