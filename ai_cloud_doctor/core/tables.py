"""
Console tables for collected AWS data.
"""

import json
from typing import Any, Dict, List

from rich.console import Group
from rich.table import Table
from rich.text import Text

from .formatter import to_ansi

FUNCTION_ROWS = 15
NAME_WIDTH = 30


def _truncate(value: str, width: int) -> str:
    return value if len(value) <= width else value[:width - 3] + "..."


def _cost_tables(data: Dict[str, Any]) -> List[Any]:
    tables = []
    for period in data.get("periods") or []:
        table = Table(
            title=f"💰 AWS Cost {period.get('start')} to {period.get('end')}",
            title_style="bold cyan",
            header_style="bold white"
        )
        table.add_column("Service", style="white")
        table.add_column("Cost (USD)", justify="right", style="cyan")
        for service in period.get("services") or []:
            name = str(service.get("service"))
            style = "yellow" if "EC2" in name else "blue" if "VPC" in name else "green" if "Lambda" in name else None
            table.add_row(Text(name, style=style or "white"), f"${service.get('amount', 0):,.2f}")
        table.add_row(Text("Total", style="bold"), f"${period.get('total', 0):,.2f}")
        tables.append(table)
    return tables


def _lambda_tables(data: Dict[str, Any]) -> List[Any]:
    table = Table(title="⚡ Lambda Functions", title_style="bold yellow", header_style="bold white")
    for column in ("Function Name", "Runtime", "Mem", "Timeout", "Arch", "Modified"):
        table.add_column(column)
    for function in (data.get("functions") or [])[:FUNCTION_ROWS]:
        runtime = str(function.get("runtime"))
        runtime_style = "green" if "python" in runtime else "yellow" if "node" in runtime else "white"
        arch = str(function.get("architecture"))
        table.add_row(
            Text(_truncate(str(function.get("name")), NAME_WIDTH), style="cyan"),
            Text(runtime, style=runtime_style),
            str(function.get("memory_size") or "-"),
            str(function.get("timeout") or "-"),
            Text(arch, style="green" if arch == "arm64" else "yellow"),
            Text(str(function.get("last_modified"))[:10], style="dim")
        )
    renderables = [table]

    metrics = data.get("metrics") or []
    if metrics:
        summary = Text("\n📊 Metrics Summary\n", style="bold yellow")
        for metric in metrics:
            summary.append(f"{metric.get('label')}: ", style="white")
            summary.append(f"{metric.get('datapoints', 0)} data points\n", style="cyan")
        renderables.append(summary)
    return renderables


def _logs_tables(data: Dict[str, Any]) -> List[Any]:
    table = Table(title="📋 CloudWatch Log Groups", title_style="bold blue", header_style="bold white")
    table.add_column("Log Group", style="cyan")
    table.add_column("Size (bytes)", justify="right")
    table.add_column("Retention")
    for group in data.get("log_groups") or []:
        size = int(group.get("stored_bytes") or 0)
        if size > 50_000_000:
            size_style = "red"
        elif size > 10_000_000:
            size_style = "yellow"
        elif size > 0:
            size_style = "green"
        else:
            size_style = "dim"
        retention = group.get("retention_days")
        table.add_row(
            _truncate(str(group.get("name")), 50),
            Text(f"{size:,}", style=size_style),
            f"{retention} days" if retention else "Never expires"
        )
    renderables = [table]
    if data.get("query"):
        renderables.append(Text("\n🔍 Suggested Query\n", style="bold blue"))
        renderables.append(Text(str(data["query"]), style="cyan"))
    return renderables


def build_data_renderable(data: Any):
    """Pick a table layout from the shape of the collected data."""
    if isinstance(data, dict):
        if "periods" in data:
            return Group(*_cost_tables(data))
        if "functions" in data:
            return Group(*_lambda_tables(data))
        if "log_groups" in data:
            return Group(*_logs_tables(data))
    return Text(json.dumps(data, indent=2), style="white")


def render_data(json_text: str) -> str:
    """Render collected JSON data as coloured console text.

    Anything that isn't JSON, such as a collector error message, is shown
    as-is in red.
    """
    try:
        data = json.loads(json_text)
    except ValueError:
        return to_ansi(Text(json_text, style="red"))
    return to_ansi(build_data_renderable(data))
