"""Prometheus metrics for prompt assembly and fact memory."""

from prometheus_client import Counter, Histogram, Info, generate_latest, CONTENT_TYPE_LATEST

from context_budget import __version__

# Application info
APP_INFO = Info("context_budget", "Library information")
APP_INFO.info({"version": __version__})

PROMPTS_BUILT_TOTAL = Counter(
    "context_budget_prompts_built_total",
    "Prompts assembled, by degradation stage reached",
    ["stage"]
)

OVER_BUDGET_TOTAL = Counter(
    "context_budget_over_budget_total",
    "Prompts returned still above their token budget",
)

PROMPT_TOKENS = Histogram(
    "context_budget_prompt_tokens",
    "Measured token count of assembled prompts",
    buckets=[100, 500, 1000, 2000, 3500, 4000, 8000, 16000, 32000]
)

FACTS_EVICTED_TOTAL = Counter(
    "context_budget_facts_evicted_total",
    "Facts discarded by cleanup",
)

COMPACTION_FAILURES_TOTAL = Counter(
    "context_budget_compaction_failures_total",
    "Compaction steps that failed after retries",
    ["step"]
)


class MetricsExporter:
    """Exports metrics in Prometheus format."""

    @staticmethod
    def get_prometheus_format() -> tuple[str, bytes]:
        """Get metrics in Prometheus exposition format.

        Returns:
            Tuple of (content_type, metrics_body)
        """
        return CONTENT_TYPE_LATEST, generate_latest()

    @staticmethod
    def record_build(stage: str, tokens: int, over_budget: bool) -> None:
        """Record one prompt assembly.

        Args:
            stage: Degradation stage reached
            tokens: Measured token count
            over_budget: Whether the result exceeds its budget
        """
        PROMPTS_BUILT_TOTAL.labels(stage=stage).inc()
        PROMPT_TOKENS.observe(tokens)
        if over_budget:
            OVER_BUDGET_TOTAL.inc()

    @staticmethod
    def record_eviction(count: int) -> None:
        """Record facts evicted by cleanup."""
        if count > 0:
            FACTS_EVICTED_TOTAL.inc(count)

    @staticmethod
    def record_compaction_failure(step: str) -> None:
        """Record a failed compaction step."""
        COMPACTION_FAILURES_TOTAL.labels(step=step).inc()
