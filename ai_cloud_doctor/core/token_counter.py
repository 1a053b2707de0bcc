"""
Token usage tracking.

Holds the token counters reported by the completion endpoint.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class TokenUsage:
    """Token usage data for cost calculation.

    ``cached_tokens`` is the share of ``input_tokens`` served from the
    provider's prompt cache.
    """
    input_tokens: int
    output_tokens: int
    cached_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        """Total tokens used (input + output)."""
        return self.input_tokens + self.output_tokens

    @property
    def uncached_input_tokens(self) -> int:
        """Input tokens billed at the full input rate."""
        return max(self.input_tokens - self.cached_tokens, 0)
