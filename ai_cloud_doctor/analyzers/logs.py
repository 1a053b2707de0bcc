"""
Logs analyzer.

Offline it still proposes a Logs Insights query for the question.
"""

from typing import Optional

from ai_cloud_doctor.collectors.logs import DEFAULT_QUESTION, LogsCollector, build_offline_query
from ai_cloud_doctor.config.analyzers import get_definition
from ai_cloud_doctor.config.loader import AppConfig
from ai_cloud_doctor.detectors.live import LiveStatus

from .base import header, missing_key_message, run_analysis


def analyze_logs(config: AppConfig, live: LiveStatus, question: Optional[str] = None, **kwargs) -> str:
    definition = get_definition("logs")
    question = question or DEFAULT_QUESTION

    if not live.live:
        return header(definition, "\n".join([
            "**Proposed Logs Insights query:**",
            "```",
            build_offline_query(question),
            "```",
            f"_{definition.offline_message}_",
        ]))
    if not config.openai_key:
        return missing_key_message(definition)

    data = LogsCollector(config, question).collect()
    return run_analysis(definition, config, data, f"Question: {question}", **kwargs)
