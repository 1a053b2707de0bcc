"""
Terraform plan analyzer.

Works from a local plan file, so it runs in offline mode too.
"""

from typing import Optional

from ai_cloud_doctor.collectors.base import CollectorError, to_json
from ai_cloud_doctor.collectors.terraform import TerraformPlanCollector
from ai_cloud_doctor.config.analyzers import get_definition
from ai_cloud_doctor.config.loader import AppConfig

from .base import header, missing_key_message, run_analysis


def analyze_terraform(config: AppConfig, plan_path: Optional[str] = None,
                      question: Optional[str] = None, **kwargs) -> str:
    definition = get_definition("terraform")
    if not plan_path:
        return header(definition, definition.offline_message)

    try:
        plan = TerraformPlanCollector(config, plan_path).gather()
    except CollectorError as e:
        return header(definition, str(e))

    if not config.openai_key:
        return missing_key_message(definition)

    return run_analysis(definition, config, to_json(plan), question, **kwargs)
