"""
Data models for the storage layer.

Defines the job ledger entities.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

# Ledger keys as spelled by earlier releases
LEGACY_KEYS = {
    "input_tokens": "inputTokens",
    "output_tokens": "outputTokens",
    "total_tokens": "totalTokens",
    "cached_tokens": "cachedTokens",
}


@dataclass(frozen=True)
class JobRecord:
    """Immutable record of one completion call.

    Append-only entries that form a local ledger of tokens and cost.
    Once written, these records are never modified.
    """
    id: str
    name: str
    timestamp: str
    input_tokens: int
    output_tokens: int
    total_tokens: int
    cost: float
    cached_tokens: int = 0
    model: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JobRecord":
        """Build a record from a ledger entry.

        camelCase keys (``inputTokens``) written by earlier releases are
        accepted alongside the snake_case ones.
        """
        def field_value(name: str) -> Any:
            if data.get(name) is not None:
                return data[name]
            return data.get(LEGACY_KEYS.get(name, name))

        input_tokens = int(field_value("input_tokens") or 0)
        output_tokens = int(field_value("output_tokens") or 0)
        return cls(
            id=str(data.get("id", "")),
            name=str(data.get("name", "")),
            timestamp=str(data.get("timestamp", "")),
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            total_tokens=int(field_value("total_tokens") or input_tokens + output_tokens),
            cost=float(data.get("cost") or 0.0),
            cached_tokens=int(field_value("cached_tokens") or 0),
            model=data.get("model")
        )


@dataclass(frozen=True)
class UsageSummary:
    """Totals over the whole ledger, recomputed on every read."""
    total_jobs: int
    input_tokens: int
    output_tokens: int
    cached_tokens: int
    total_tokens: int
    total_cost: float
