"""
Analyzers for AI Cloud Doctor.

Each analyzer collects data for one AWS surface, asks the completion
endpoint about it, renders the answer and records the job.
"""

from .aws import analyze_cost, analyze_iam, analyze_lambda, analyze_security_hub, analyze_trusted_advisor
from .logs import analyze_logs
from .terraform import analyze_terraform

__all__ = [
    "analyze_cost",
    "analyze_iam",
    "analyze_lambda",
    "analyze_logs",
    "analyze_security_hub",
    "analyze_terraform",
    "analyze_trusted_advisor",
]
