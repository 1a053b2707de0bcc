"""
Pricing calculations.

Computes completion cost from token counters and per-million-token rates.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from .token_counter import TokenUsage

ONE_MILLION = Decimal("1000000")


@dataclass(frozen=True)
class ModelPricing:
    """Per-million-token pricing for one model."""
    input_cost_per_million: Decimal
    output_cost_per_million: Decimal
    cached_cost_per_million: Decimal

    @classmethod
    def from_config(cls, config) -> "ModelPricing":
        """Configured rates, falling back to the defaults rate by rate."""
        def rate(value: Optional[float], default: Decimal) -> Decimal:
            return default if value is None else Decimal(str(value))

        return cls(
            input_cost_per_million=rate(
                getattr(config, "input_cost_per_million", None),
                DEFAULT_PRICING.input_cost_per_million
            ),
            output_cost_per_million=rate(
                getattr(config, "output_cost_per_million", None),
                DEFAULT_PRICING.output_cost_per_million
            ),
            cached_cost_per_million=rate(
                getattr(config, "cached_cost_per_million", None),
                DEFAULT_PRICING.cached_cost_per_million
            ),
        )


# gpt-5-nano list prices, USD
DEFAULT_PRICING = ModelPricing(
    input_cost_per_million=Decimal("0.05"),
    output_cost_per_million=Decimal("0.40"),
    cached_cost_per_million=Decimal("0.005")
)


def calculate_cost(usage: TokenUsage, pricing: Optional[ModelPricing] = None) -> float:
    """Calculate the cost of one completion call.

    Cached input tokens are billed at the cached rate, the rest of the
    input at the input rate:

        (input - cached) / 1e6 * input_rate
        + output / 1e6 * output_rate
        + cached / 1e6 * cached_rate

    Args:
        usage: Token usage data
        pricing: Rates to apply, defaults to DEFAULT_PRICING

    Returns:
        Total cost in USD
    """
    pricing = pricing or DEFAULT_PRICING

    input_cost = (Decimal(usage.uncached_input_tokens) / ONE_MILLION) * pricing.input_cost_per_million
    output_cost = (Decimal(usage.output_tokens) / ONE_MILLION) * pricing.output_cost_per_million
    cached_cost = (Decimal(usage.cached_tokens) / ONE_MILLION) * pricing.cached_cost_per_million

    return float(input_cost + output_cost + cached_cost)
