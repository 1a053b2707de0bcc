"""
CloudWatch Logs collector.

Lists log groups and turns a natural-language question into a Logs
Insights query.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .base import Collector, as_dicts, run_aws, text_or_unknown

LOG_GROUP_LIMIT = 10
DEFAULT_QUESTION = "recent errors"


@dataclass
class LogGroup:
    name: str
    stored_bytes: int
    retention_days: Optional[int]


@dataclass
class LogsSummary:
    query: str
    log_groups: List[LogGroup] = field(default_factory=list)


def build_query(question: str) -> str:
    """Logs Insights query for a question, used when querying live."""
    lowered = question.lower()
    if "error" in lowered:
        return "fields @timestamp, @message | filter @message like /ERROR/ | sort @timestamp desc | limit 100"
    if "timeout" in lowered:
        return "fields @timestamp, @message | filter @message like /timeout/i | sort @timestamp desc | limit 100"
    pattern = re.sub(r"[\\/.]", "", question)
    return f"fields @timestamp, @message | filter @message like /{pattern}/i | sort @timestamp desc | limit 100"


def build_offline_query(question: str) -> str:
    """Per-minute match count query proposed when AWS is not reachable."""
    sanitized = re.sub(r"\s+", " ", question.replace("\r", " ").replace("\n", " ")).strip()
    escaped = sanitized.replace("/", "\\/")
    return (
        "fields @timestamp, @message\n"
        f"| filter @message like /{escaped}/\n"
        "| stats count() by bin(60s)"
    )


def project_log_group(group: Dict[str, Any]) -> LogGroup:
    return LogGroup(
        name=text_or_unknown(group.get("logGroupName")),
        stored_bytes=int(group.get("storedBytes") or 0),
        retention_days=group.get("retentionInDays")
    )


class LogsCollector(Collector):
    """Log groups plus the query matching the user's question."""

    surface = "AWS logs"

    def __init__(self, config, question: Optional[str] = None):
        super().__init__(config)
        self.question = question or DEFAULT_QUESTION

    def gather(self) -> LogsSummary:
        data = run_aws(["logs", "describe-log-groups", "--limit", str(LOG_GROUP_LIMIT)], self.config)
        return LogsSummary(
            query=build_query(self.question),
            log_groups=[project_log_group(g) for g in as_dicts(data.get("logGroups"))]
        )
