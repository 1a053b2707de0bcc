"""
CLI interface for AI Cloud Doctor.

Provides command-line access to the analyzers, configuration and the
usage ledger.
"""

import logging
import os
import sys
from typing import Callable, List, Optional, Tuple

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ai_cloud_doctor.analyzers import (
    analyze_cost,
    analyze_iam,
    analyze_lambda,
    analyze_logs,
    analyze_security_hub,
    analyze_terraform,
    analyze_trusted_advisor,
)
from ai_cloud_doctor.config.loader import (
    AppConfig,
    ConfigurationError,
    load_config,
    read_config_file,
    save_config,
)
from ai_cloud_doctor.detectors.live import LiveStatus, Mode, ensure_aws_live
from ai_cloud_doctor.storage.repository import JobRepository, summarize_jobs

app = typer.Typer(help="AI-assisted analysis of AWS cost, usage and security.")
console = Console()

EXIT_CODE_PASS = 0
EXIT_CODE_FAIL = 1

SCAN_SEPARATOR = "\n\n---\n\n"

MODE_OPTION = typer.Option(Mode.AUTO, "--mode", help="Analysis mode")
REGION_OPTION = typer.Option(None, "--region", help="AWS region override")
SCAN_PERIOD_OPTION = typer.Option(
    None, "--scan-period", "--scanPeriod",
    help="Days to analyze: 1, 7, 30, 120 or 365"
)
QUESTION_OPTION = typer.Option(None, "--question", "-q", help="Question for the analysis")
MODEL_OPTION = typer.Option(None, "--model", help="OpenAI model")
MAX_TOKENS_OPTION = typer.Option(None, "--max-tokens", help="Maximum completion tokens")
OPENAI_KEY_OPTION = typer.Option(None, "--openai-key", help="OpenAI API key")
TF_PLAN_OPTION = typer.Option(None, "--tf-plan", help="Path to a terraform plan JSON file")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging")
):
    """AI Cloud Doctor CLI."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True
    )
    if ctx.invoked_subcommand is None:
        console.print("AI Cloud Doctor - Use --help to see available commands")


def _resolve(
    mode: Mode,
    region: Optional[str],
    scan_period: Optional[int],
    model: Optional[str],
    max_tokens: Optional[int],
    openai_key: Optional[str]
) -> Tuple[AppConfig, LiveStatus]:
    config = load_config(
        {
            "mode": mode.value,
            "region": region,
            "scan_period": scan_period,
            "model": model,
            "max_tokens": max_tokens,
            "openai_key": openai_key,
        },
        env=os.environ
    )
    return config, ensure_aws_live(config, mode)


def _run(analyses: List[Callable[[AppConfig, LiveStatus], str]], **options) -> None:
    """Resolve configuration, run the analyses in order and print results."""
    try:
        config, live = _resolve(**options)
        results = [analysis(config, live) for analysis in analyses]
    except ConfigurationError as e:
        console.print(f"[red]Error:[/] {e}")
        sys.exit(EXIT_CODE_FAIL)

    output = SCAN_SEPARATOR.join(result for result in results if result)
    if output:
        typer.echo(output)


@app.command()
def scan(
    mode: Mode = MODE_OPTION,
    region: Optional[str] = REGION_OPTION,
    scan_period: Optional[int] = SCAN_PERIOD_OPTION,
    question: Optional[str] = QUESTION_OPTION,
    model: Optional[str] = MODEL_OPTION,
    max_tokens: Optional[int] = MAX_TOKENS_OPTION,
    openai_key: Optional[str] = OPENAI_KEY_OPTION,
    tf_plan: Optional[str] = TF_PLAN_OPTION
):
    """Run all analyzers, one after another."""
    _run(
        [
            lambda config, live: analyze_terraform(config, tf_plan, question),
            lambda config, live: analyze_cost(config, live, question),
            lambda config, live: analyze_lambda(config, live, question),
            lambda config, live: analyze_logs(config, live, question),
            lambda config, live: analyze_iam(config, live, question),
            lambda config, live: analyze_trusted_advisor(config, live, question),
            lambda config, live: analyze_security_hub(config, live, question),
        ],
        mode=mode, region=region, scan_period=scan_period,
        model=model, max_tokens=max_tokens, openai_key=openai_key
    )


@app.command()
def cost(
    mode: Mode = MODE_OPTION,
    region: Optional[str] = REGION_OPTION,
    scan_period: Optional[int] = SCAN_PERIOD_OPTION,
    question: Optional[str] = QUESTION_OPTION,
    model: Optional[str] = MODEL_OPTION,
    max_tokens: Optional[int] = MAX_TOKENS_OPTION,
    openai_key: Optional[str] = OPENAI_KEY_OPTION
):
    """Analyze AWS spend per service."""
    _run(
        [lambda config, live: analyze_cost(config, live, question)],
        mode=mode, region=region, scan_period=scan_period,
        model=model, max_tokens=max_tokens, openai_key=openai_key
    )


@app.command("lambda")
def lambda_(
    mode: Mode = MODE_OPTION,
    region: Optional[str] = REGION_OPTION,
    scan_period: Optional[int] = SCAN_PERIOD_OPTION,
    question: Optional[str] = QUESTION_OPTION,
    model: Optional[str] = MODEL_OPTION,
    max_tokens: Optional[int] = MAX_TOKENS_OPTION,
    openai_key: Optional[str] = OPENAI_KEY_OPTION
):
    """Analyze Lambda functions for performance and cost."""
    _run(
        [lambda config, live: analyze_lambda(config, live, question)],
        mode=mode, region=region, scan_period=scan_period,
        model=model, max_tokens=max_tokens, openai_key=openai_key
    )


@app.command()
def logs(
    mode: Mode = MODE_OPTION,
    region: Optional[str] = REGION_OPTION,
    scan_period: Optional[int] = SCAN_PERIOD_OPTION,
    question: Optional[str] = QUESTION_OPTION,
    model: Optional[str] = MODEL_OPTION,
    max_tokens: Optional[int] = MAX_TOKENS_OPTION,
    openai_key: Optional[str] = OPENAI_KEY_OPTION
):
    """Analyze CloudWatch logs for a question."""
    _run(
        [lambda config, live: analyze_logs(config, live, question)],
        mode=mode, region=region, scan_period=scan_period,
        model=model, max_tokens=max_tokens, openai_key=openai_key
    )


@app.command()
def tf(
    tf_plan: Optional[str] = TF_PLAN_OPTION,
    mode: Mode = MODE_OPTION,
    region: Optional[str] = REGION_OPTION,
    question: Optional[str] = QUESTION_OPTION,
    model: Optional[str] = MODEL_OPTION,
    max_tokens: Optional[int] = MAX_TOKENS_OPTION,
    openai_key: Optional[str] = OPENAI_KEY_OPTION
):
    """Analyze a Terraform plan file."""
    _run(
        [lambda config, live: analyze_terraform(config, tf_plan, question)],
        mode=mode, region=region, scan_period=None,
        model=model, max_tokens=max_tokens, openai_key=openai_key
    )


@app.command()
def iam(
    mode: Mode = MODE_OPTION,
    region: Optional[str] = REGION_OPTION,
    question: Optional[str] = QUESTION_OPTION,
    model: Optional[str] = MODEL_OPTION,
    max_tokens: Optional[int] = MAX_TOKENS_OPTION,
    openai_key: Optional[str] = OPENAI_KEY_OPTION
):
    """Analyze IAM users, roles and policies."""
    _run(
        [lambda config, live: analyze_iam(config, live, question)],
        mode=mode, region=region, scan_period=None,
        model=model, max_tokens=max_tokens, openai_key=openai_key
    )


@app.command()
def advisor(
    mode: Mode = MODE_OPTION,
    region: Optional[str] = REGION_OPTION,
    question: Optional[str] = QUESTION_OPTION,
    model: Optional[str] = MODEL_OPTION,
    max_tokens: Optional[int] = MAX_TOKENS_OPTION,
    openai_key: Optional[str] = OPENAI_KEY_OPTION
):
    """Analyze Trusted Advisor checks."""
    _run(
        [lambda config, live: analyze_trusted_advisor(config, live, question)],
        mode=mode, region=region, scan_period=None,
        model=model, max_tokens=max_tokens, openai_key=openai_key
    )


@app.command()
def security(
    mode: Mode = MODE_OPTION,
    region: Optional[str] = REGION_OPTION,
    question: Optional[str] = QUESTION_OPTION,
    model: Optional[str] = MODEL_OPTION,
    max_tokens: Optional[int] = MAX_TOKENS_OPTION,
    openai_key: Optional[str] = OPENAI_KEY_OPTION
):
    """Analyze Security Hub findings."""
    _run(
        [lambda config, live: analyze_security_hub(config, live, question)],
        mode=mode, region=region, scan_period=None,
        model=model, max_tokens=max_tokens, openai_key=openai_key
    )


@app.command()
def configure():
    """Configure credentials and API keys."""
    console.print("Configure ai-cloud-doctor credentials:\n")

    openai_key = typer.prompt("OpenAI API Key (sk-...)", default="", show_default=False, hide_input=True)
    region = typer.prompt("AWS Region", default="us-east-1")
    access_key_id = typer.prompt("AWS Access Key ID", default="", show_default=False)
    secret_access_key = typer.prompt("AWS Secret Access Key", default="", show_default=False, hide_input=True)
    session_token = typer.prompt("AWS Session Token (optional)", default="", show_default=False, hide_input=True)

    data = read_config_file()
    if openai_key:
        data["openai_key"] = openai_key
    data["region"] = region
    if access_key_id and secret_access_key:
        credentials = {"access_key_id": access_key_id, "secret_access_key": secret_access_key}
        if session_token:
            credentials["session_token"] = session_token
        data["aws_credentials"] = credentials

    try:
        path = save_config(data)
    except OSError as e:
        console.print(f"[red]Error saving configuration:[/] {e}")
        sys.exit(EXIT_CODE_FAIL)
    console.print(f"\n[green]✓[/] Configuration saved to {path}")


def _format_currency(amount: float) -> str:
    """Format currency; sub-cent amounts keep four decimals."""
    if 0 < abs(amount) < 0.01:
        return f"${amount:,.4f}"
    return f"${amount:,.2f}"


@app.command()
def usage(
    limit: int = typer.Option(20, "--limit", "-n", help="Number of recent jobs to show")
):
    """Show recorded jobs and total token usage and cost."""
    jobs = JobRepository().read_all()
    if not jobs:
        console.print("\n[bold yellow]No jobs recorded yet[/]")
        console.print("Run an analyzer (e.g. `ai-cloud-doctor cost`) to record usage.\n")
        return

    table = Table(title="AI Cloud Doctor Usage", header_style="bold white")
    table.add_column("Job", style="cyan")
    table.add_column("Name")
    table.add_column("Timestamp", style="dim")
    table.add_column("Model")
    table.add_column("Tokens in", justify="right")
    table.add_column("Tokens out", justify="right")
    table.add_column("Cached", justify="right")
    table.add_column("Cost", justify="right", style="green")
    for job in jobs[-limit:]:
        table.add_row(
            job.id,
            job.name,
            job.timestamp,
            job.model or "-",
            f"{job.input_tokens:,}",
            f"{job.output_tokens:,}",
            f"{job.cached_tokens:,}",
            _format_currency(job.cost)
        )
    console.print(table)

    summary = summarize_jobs(jobs)
    console.print(f"\n[bold]Total jobs:[/bold] {summary.total_jobs}")
    console.print(
        f"[bold]Total tokens:[/bold] {summary.total_tokens:,} "
        f"({summary.input_tokens:,} in, {summary.output_tokens:,} out, {summary.cached_tokens:,} cached)"
    )
    console.print(f"[bold]Total cost:[/bold] {_format_currency(summary.total_cost)}")


if __name__ == "__main__":
    app()
