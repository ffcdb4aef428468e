"""Hardcoded pricing table and cost estimation for decision service usage."""

from dataclasses import dataclass

from .base import UsageStats


@dataclass(frozen=True, slots=True)
class ModelPricing:
    input: float       # $ per 1M tokens
    output: float      # $ per 1M tokens
    cache_read: float  # $ per 1M tokens


# Keys are matched as substrings of the model name, longest first, so dated
# snapshots such as "computer-use-preview-2025-03-11" use the base entry.
PRICING: dict[str, ModelPricing] = {
    "computer-use-preview": ModelPricing(3.00, 12.00, 3.00),
}


def estimate_cost(model: str, usage: UsageStats) -> float | None:
    """Estimate dollar cost for a given model and usage.

    Cached tokens are part of input_tokens and are billed at the cache rate instead.
    Returns None if no pricing entry matches the model name.
    """
    for key in sorted(PRICING, key=len, reverse=True):
        if key in model:
            p = PRICING[key]
            uncached = max(usage.input_tokens - usage.cache_read_tokens, 0)
            return (
                uncached * p.input
                + usage.cache_read_tokens * p.cache_read
                + usage.output_tokens * p.output
            ) / 1_000_000
    return None
