"""
Analyzers backed by live AWS calls.

Cost, Lambda, IAM, Trusted Advisor and Security Hub share one shape: they
need live mode and an API key, then collect and ask.
"""

from typing import Callable, Optional

from ai_cloud_doctor.collectors.base import Collector
from ai_cloud_doctor.collectors.cost import CostCollector
from ai_cloud_doctor.collectors.iam import IamCollector
from ai_cloud_doctor.collectors.lambda_functions import LambdaCollector
from ai_cloud_doctor.collectors.security_hub import SecurityHubCollector
from ai_cloud_doctor.collectors.trusted_advisor import TrustedAdvisorCollector
from ai_cloud_doctor.config.analyzers import get_definition
from ai_cloud_doctor.config.loader import AppConfig
from ai_cloud_doctor.detectors.live import LiveStatus
from ai_cloud_doctor.storage.repository import JobRepository

from .base import ClientFactory, header, missing_key_message, run_analysis


def analyze_live(
    key: str,
    collector_class: Callable[[AppConfig], Collector],
    config: AppConfig,
    live: LiveStatus,
    question: Optional[str] = None,
    repository: Optional[JobRepository] = None,
    client_factory: Optional[ClientFactory] = None
) -> str:
    definition = get_definition(key)
    if not live.live:
        return header(definition, definition.offline_message)
    if not config.openai_key:
        return missing_key_message(definition)

    data = collector_class(config).collect()
    return run_analysis(definition, config, data, question, repository, client_factory)


def analyze_cost(config: AppConfig, live: LiveStatus, question: Optional[str] = None, **kwargs) -> str:
    """Cost Explorer spend per service."""
    return analyze_live("cost", CostCollector, config, live, question, **kwargs)


def analyze_lambda(config: AppConfig, live: LiveStatus, question: Optional[str] = None, **kwargs) -> str:
    """Lambda function configuration and metrics."""
    return analyze_live("lambda", LambdaCollector, config, live, question, **kwargs)


def analyze_iam(config: AppConfig, live: LiveStatus, question: Optional[str] = None, **kwargs) -> str:
    """IAM users, roles, groups and policies."""
    return analyze_live("iam", IamCollector, config, live, question, **kwargs)


def analyze_trusted_advisor(config: AppConfig, live: LiveStatus, question: Optional[str] = None, **kwargs) -> str:
    """Trusted Advisor check results."""
    return analyze_live("advisor", TrustedAdvisorCollector, config, live, question, **kwargs)


def analyze_security_hub(config: AppConfig, live: LiveStatus, question: Optional[str] = None, **kwargs) -> str:
    """Security Hub findings and Config compliance."""
    return analyze_live("security", SecurityHubCollector, config, live, question, **kwargs)
