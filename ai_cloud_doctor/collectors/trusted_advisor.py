"""
Trusted Advisor collector.

The Support API is only served from us-east-1 and needs a Business or
Enterprise support plan; checks whose results can't be fetched are skipped.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

from .base import SECONDARY_TIMEOUT, Collector, CollectorError, as_dict, as_dicts, run_aws, text_or_unknown

logger = logging.getLogger(__name__)

CHECK_LIMIT = 10
SUPPORT_REGION = "us-east-1"


@dataclass
class AdvisorCheck:
    name: str
    category: str
    status: str
    resources_summary: Dict[str, Any] = field(default_factory=dict)


@dataclass
class AdvisorSummary:
    checks: List[AdvisorCheck] = field(default_factory=list)


def _support_args(*args: str) -> List[str]:
    return ["support", *args, "--language", "en", "--region", SUPPORT_REGION]


class TrustedAdvisorCollector(Collector):
    """Status of the first Trusted Advisor checks."""

    surface = "Trusted Advisor"

    def gather(self) -> AdvisorSummary:
        # Region is pinned to the support endpoint, not taken from config
        checks = run_aws(_support_args("describe-trusted-advisor-checks"))

        results = []
        for check in as_dicts(checks.get("checks"))[:CHECK_LIMIT]:
            try:
                data = run_aws(
                    _support_args("describe-trusted-advisor-check-result", "--check-id", str(check.get("id"))),
                    timeout=SECONDARY_TIMEOUT
                )
            except CollectorError as e:
                logger.debug("Skipping check %s: %s", check.get("id"), e)
                continue
            result = as_dict(data.get("result"))
            results.append(AdvisorCheck(
                name=text_or_unknown(check.get("name")),
                category=text_or_unknown(check.get("category")),
                status=text_or_unknown(result.get("status")),
                resources_summary=as_dict(result.get("resourcesSummary"))
            ))
        return AdvisorSummary(checks=results)
