"""Unit tests for usage cost estimation."""

import pytest

from decision_service import UsageStats
from decision_service import pricing
from decision_service.pricing import ModelPricing, estimate_cost


@pytest.mark.unit
def test_estimate_cost_computer_use_basic():
    """Test cost calculation without caching."""
    usage = UsageStats(input_tokens=1000, output_tokens=500)

    cost = estimate_cost("computer-use-preview", usage)

    # $3 per 1M input, $12 per 1M output
    expected = 0.003 + 0.006
    assert cost == pytest.approx(expected, abs=0.0001)


@pytest.mark.unit
def test_estimate_cost_matches_dated_model_name():
    usage = UsageStats(input_tokens=1_000_000, output_tokens=0)

    assert estimate_cost("computer-use-preview-2025-03-11", usage) == pytest.approx(3.0)


@pytest.mark.unit
def test_estimate_cost_cached_tokens_billed_at_cache_rate(monkeypatch):
    monkeypatch.setitem(pricing.PRICING, "cached-model", ModelPricing(2.50, 10.00, 1.25))
    usage = UsageStats(input_tokens=10_000, output_tokens=0, cache_read_tokens=4_000)

    cost = estimate_cost("cached-model", usage)

    # 6000 uncached at $2.50, 4000 cached at $1.25
    expected = (6000 * 2.50 + 4000 * 1.25) / 1_000_000
    assert cost == pytest.approx(expected)


@pytest.mark.unit
def test_estimate_cost_longest_match_wins(monkeypatch):
    monkeypatch.setitem(pricing.PRICING, "computer-use-preview-2025-03-11", ModelPricing(1.00, 4.00, 1.00))
    usage = UsageStats(input_tokens=1_000_000)

    assert estimate_cost("computer-use-preview-2025-03-11", usage) == pytest.approx(1.0)
    assert estimate_cost("computer-use-preview", usage) == pytest.approx(3.0)


@pytest.mark.unit
def test_estimate_cost_unknown_model():
    """Test that unknown models return None."""
    assert estimate_cost("unknown-model-xyz", UsageStats(input_tokens=1000)) is None


@pytest.mark.unit
def test_estimate_cost_zero_tokens():
    assert estimate_cost("computer-use-preview", UsageStats()) == 0.0
