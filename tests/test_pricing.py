"""
Unit tests for pricing calculations.

Tests cost accuracy for cached and uncached tokens and configured rates.
"""

import pytest
from decimal import Decimal

from ai_cloud_doctor.config.loader import AppConfig
from ai_cloud_doctor.core.pricing import DEFAULT_PRICING, ModelPricing, calculate_cost
from ai_cloud_doctor.core.token_counter import TokenUsage


class TestTokenUsage:
    """Test TokenUsage dataclass."""

    def test_total_tokens_calculation(self):
        usage = TokenUsage(input_tokens=100, output_tokens=50, cached_tokens=40)
        assert usage.total_tokens == 150

    def test_uncached_input(self):
        usage = TokenUsage(input_tokens=100, output_tokens=50, cached_tokens=40)
        assert usage.uncached_input_tokens == 60

    def test_zero_tokens(self):
        usage = TokenUsage(input_tokens=0, output_tokens=0)
        assert usage.total_tokens == 0
        assert usage.cached_tokens == 0


class TestModelPricing:
    """Test rate resolution from configuration."""

    def test_defaults_when_unconfigured(self):
        assert ModelPricing.from_config(AppConfig()) == DEFAULT_PRICING

    def test_configured_rates(self):
        config = AppConfig(
            input_cost_per_million=1.25,
            output_cost_per_million=10.0,
            cached_cost_per_million=0.125
        )
        pricing = ModelPricing.from_config(config)

        assert pricing.input_cost_per_million == Decimal("1.25")
        assert pricing.output_cost_per_million == Decimal("10.0")
        assert pricing.cached_cost_per_million == Decimal("0.125")

    def test_partially_configured_rates(self):
        pricing = ModelPricing.from_config(AppConfig(output_cost_per_million=2.0))

        assert pricing.input_cost_per_million == DEFAULT_PRICING.input_cost_per_million
        assert pricing.output_cost_per_million == Decimal("2.0")

    def test_zero_rate_is_respected(self):
        pricing = ModelPricing.from_config(AppConfig(cached_cost_per_million=0.0))
        assert pricing.cached_cost_per_million == Decimal("0.0")


class TestCostCalculation:
    """Test the cost formula."""

    def test_formula_with_cache(self):
        pricing = ModelPricing(
            input_cost_per_million=Decimal("1.00"),
            output_cost_per_million=Decimal("4.00"),
            cached_cost_per_million=Decimal("0.10")
        )
        usage = TokenUsage(input_tokens=2_000_000, output_tokens=500_000, cached_tokens=1_000_000)

        # (2M - 1M) * 1.00 + 0.5M * 4.00 + 1M * 0.10
        assert calculate_cost(usage, pricing) == pytest.approx(1.0 + 2.0 + 0.1)

    def test_default_rates(self):
        usage = TokenUsage(input_tokens=1_000_000, output_tokens=1_000_000)
        expected = float(DEFAULT_PRICING.input_cost_per_million + DEFAULT_PRICING.output_cost_per_million)
        assert calculate_cost(usage) == pytest.approx(expected)

    def test_small_usage_not_rounded_away(self):
        usage = TokenUsage(input_tokens=1200, output_tokens=300)
        cost = calculate_cost(usage)
        assert cost > 0
        assert cost < 0.01

    def test_zero_usage_costs_nothing(self):
        assert calculate_cost(TokenUsage(input_tokens=0, output_tokens=0)) == 0.0
