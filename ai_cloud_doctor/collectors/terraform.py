"""
Terraform plan collector.

Reads a ``terraform show -json`` plan file and summarizes resource changes.
"""

import json
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List

from .base import Collector, CollectorError, as_dict, as_dicts, text_or_unknown


@dataclass
class ResourceChange:
    address: str
    type: str
    action: str
    provider: str


@dataclass
class PlanSummary:
    total_changes: int
    actions: Dict[str, int] = field(default_factory=dict)
    resource_changes: List[ResourceChange] = field(default_factory=list)


def project_plan(plan: Dict[str, Any]) -> PlanSummary:
    raw_changes = as_dicts(plan.get("resource_changes"))

    changes = []
    action_counts = Counter()
    for change in raw_changes:
        actions = as_dict(change.get("change")).get("actions")
        if not isinstance(actions, list) or not actions:
            actions = ["no-op"]
        actions = [str(action) for action in actions]
        action_counts.update(actions)
        changes.append(ResourceChange(
            address=text_or_unknown(change.get("address")),
            type=text_or_unknown(change.get("type")),
            action=",".join(actions),
            provider=text_or_unknown(change.get("provider_name"))
        ))

    return PlanSummary(
        total_changes=len(raw_changes),
        actions=dict(action_counts),
        resource_changes=changes
    )


class TerraformPlanCollector(Collector):
    """Resource changes from a local plan file. No AWS calls."""

    surface = "Terraform plan"

    def __init__(self, config, plan_path: str):
        super().__init__(config)
        self.plan_path = plan_path

    def gather(self) -> PlanSummary:
        try:
            with open(self.plan_path, "r", encoding="utf-8") as f:
                content = f.read()
        except OSError:
            raise CollectorError(f"Unable to read Terraform plan file at {self.plan_path}.")
        try:
            plan = json.loads(content)
        except ValueError:
            raise CollectorError(f"Invalid JSON in Terraform plan file {self.plan_path}.")
        if not isinstance(plan, dict):
            raise CollectorError(f"Invalid JSON in Terraform plan file {self.plan_path}.")
        return project_plan(plan)
