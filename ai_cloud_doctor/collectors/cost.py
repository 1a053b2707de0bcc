"""
Cost Explorer collector.

Summarizes blended cost per service over the configured scan period.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from .base import Collector, UNKNOWN, as_dict, as_dicts, as_list, run_aws, text_or_unknown

TOP_SERVICES = 20


@dataclass
class ServiceCost:
    service: str
    amount: float
    unit: str


@dataclass
class CostPeriod:
    start: str
    end: str
    total: float
    services: List[ServiceCost] = field(default_factory=list)


@dataclass
class CostSummary:
    start: str
    end: str
    scan_period_days: int
    total: float
    unit: str
    periods: List[CostPeriod] = field(default_factory=list)


def _amount(group: Dict[str, Any]) -> float:
    metric = as_dict(as_dict(group.get("Metrics")).get("BlendedCost"))
    try:
        return float(metric.get("Amount", 0))
    except (TypeError, ValueError):
        return 0.0


def project_cost(data: Dict[str, Any], start: str, end: str, scan_period: int) -> CostSummary:
    """Reduce a get-cost-and-usage response to the top services per period."""
    periods = []
    unit = UNKNOWN
    for result in as_dicts(data.get("ResultsByTime")):
        time_period = as_dict(result.get("TimePeriod"))
        services = []
        for group in as_dicts(result.get("Groups")):
            keys = as_list(group.get("Keys"))
            metric = as_dict(as_dict(group.get("Metrics")).get("BlendedCost"))
            services.append(ServiceCost(
                service=text_or_unknown(keys[0] if keys else None),
                amount=_amount(group),
                unit=text_or_unknown(metric.get("Unit"))
            ))
        services.sort(key=lambda s: s.amount, reverse=True)
        if services and unit == UNKNOWN:
            unit = services[0].unit
        periods.append(CostPeriod(
            start=text_or_unknown(time_period.get("Start")),
            end=text_or_unknown(time_period.get("End")),
            total=round(sum(s.amount for s in services), 2),
            services=services[:TOP_SERVICES]
        ))

    return CostSummary(
        start=start,
        end=end,
        scan_period_days=scan_period,
        total=round(sum(p.total for p in periods), 2),
        unit=unit,
        periods=periods
    )


class CostCollector(Collector):
    """Blended cost per AWS service."""

    surface = "AWS cost"

    def __init__(self, config, today: Optional[date] = None):
        super().__init__(config)
        self.today = today or datetime.now(timezone.utc).date()

    def gather(self) -> CostSummary:
        end = self.today.isoformat()
        start = (self.today - timedelta(days=self.config.scan_period)).isoformat()
        data = run_aws([
            "ce", "get-cost-and-usage",
            "--time-period", f"Start={start},End={end}",
            "--granularity", "MONTHLY",
            "--metrics", "BlendedCost",
            "--group-by", "Type=DIMENSION,Key=SERVICE",
        ], self.config)
        return project_cost(data, start, end, self.config.scan_period)
