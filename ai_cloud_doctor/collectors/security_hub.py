"""
Security Hub collector.

Recent findings plus the AWS Config compliance summary when available.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from .base import Collector, as_dict, as_dicts, run_aws, run_aws_optional, text_or_unknown

FINDING_LIMIT = 50


@dataclass
class Finding:
    id: str
    title: str
    severity: str
    compliance_status: str
    resource_type: str
    description: str


@dataclass
class SecuritySummary:
    findings: List[Finding] = field(default_factory=list)
    compliance: Dict[str, Any] = field(default_factory=dict)


def project_finding(finding: Dict[str, Any]) -> Finding:
    resources = as_dicts(finding.get("Resources")) or [{}]
    return Finding(
        id=text_or_unknown(finding.get("Id")),
        title=text_or_unknown(finding.get("Title")),
        severity=text_or_unknown(as_dict(finding.get("Severity")).get("Label")),
        compliance_status=text_or_unknown(as_dict(finding.get("Compliance")).get("Status")),
        resource_type=text_or_unknown(resources[0].get("Type")),
        description=text_or_unknown(finding.get("Description"))
    )


class SecurityHubCollector(Collector):
    """Security Hub findings and Config rule compliance."""

    surface = "Security Hub"

    def gather(self) -> SecuritySummary:
        findings = run_aws(["securityhub", "get-findings", "--max-results", str(FINDING_LIMIT)], self.config)
        # Compliance summary is not available in every region
        compliance = run_aws_optional(["configservice", "get-compliance-summary-by-config-rule"], self.config)
        return SecuritySummary(
            findings=[project_finding(f) for f in as_dicts(findings.get("Findings"))],
            compliance=compliance
        )
