"""
Lambda collector.

Lists functions and pulls account-wide daily duration and invocation
metrics for the scan period.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from .base import Collector, as_dicts, as_list, run_aws, run_aws_optional, text_or_unknown

METRIC_QUERIES = [
    {
        "Id": "duration",
        "MetricStat": {
            "Metric": {"Namespace": "AWS/Lambda", "MetricName": "Duration"},
            "Period": 86400,
            "Stat": "Average"
        },
        "ReturnData": True
    },
    {
        "Id": "invocations",
        "MetricStat": {
            "Metric": {"Namespace": "AWS/Lambda", "MetricName": "Invocations"},
            "Period": 86400,
            "Stat": "Sum"
        },
        "ReturnData": True
    },
]


@dataclass
class LambdaFunction:
    name: str
    runtime: str
    memory_size: Optional[int]
    timeout: Optional[int]
    architecture: str
    last_modified: str
    code_size: Optional[int]


@dataclass
class MetricSummary:
    id: str
    label: str
    datapoints: int
    total: float
    average: Optional[float]


@dataclass
class LambdaSummary:
    functions: List[LambdaFunction] = field(default_factory=list)
    metrics: List[MetricSummary] = field(default_factory=list)


def project_function(function: Dict[str, Any]) -> LambdaFunction:
    architectures = as_list(function.get("Architectures")) or ["x86_64"]
    return LambdaFunction(
        name=text_or_unknown(function.get("FunctionName")),
        runtime=text_or_unknown(function.get("Runtime")),
        memory_size=function.get("MemorySize"),
        timeout=function.get("Timeout"),
        architecture=text_or_unknown(architectures[0]),
        last_modified=text_or_unknown(function.get("LastModified")),
        code_size=function.get("CodeSize")
    )


def project_metrics(data: Dict[str, Any]) -> List[MetricSummary]:
    summaries = []
    for result in as_dicts(data.get("MetricDataResults")):
        values = [float(v) for v in as_list(result.get("Values"))]
        summaries.append(MetricSummary(
            id=text_or_unknown(result.get("Id")),
            label=text_or_unknown(result.get("Label")),
            datapoints=len(values),
            total=round(sum(values), 2),
            average=round(sum(values) / len(values), 2) if values else None
        ))
    return summaries


class LambdaCollector(Collector):
    """Lambda functions with duration and invocation metrics."""

    surface = "AWS Lambda"

    def gather(self) -> LambdaSummary:
        functions = run_aws(["lambda", "list-functions"], self.config)

        end = datetime.now(timezone.utc)
        start = end - timedelta(days=self.config.scan_period)
        metrics = run_aws_optional([
            "cloudwatch", "get-metric-data",
            "--metric-data-queries", json.dumps(METRIC_QUERIES),
            "--start-time", start.strftime("%Y-%m-%dT%H:%M:%SZ"),
            "--end-time", end.strftime("%Y-%m-%dT%H:%M:%SZ"),
        ], self.config)

        return LambdaSummary(
            functions=[project_function(f) for f in as_dicts(functions.get("Functions"))],
            metrics=project_metrics(metrics)
        )
