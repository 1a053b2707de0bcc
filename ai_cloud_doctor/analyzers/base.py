"""
Shared analysis pipeline.

collect → prompt → ask → render → log, with the early returns for
offline mode and a missing API key.
"""

import logging
from typing import Callable, Optional

from ai_cloud_doctor.config.analyzers import AnalyzerDefinition
from ai_cloud_doctor.config.loader import AppConfig
from ai_cloud_doctor.core.formatter import parse_sections, render
from ai_cloud_doctor.core.pricing import ModelPricing
from ai_cloud_doctor.core.prompts import build_system_prompt, build_user_prompt
from ai_cloud_doctor.core.tables import render_data
from ai_cloud_doctor.sdk.openai_client import CompletionClient, make_openai
from ai_cloud_doctor.storage.repository import JobRepository

logger = logging.getLogger(__name__)

ClientFactory = Callable[[AppConfig], CompletionClient]


def header(definition: AnalyzerDefinition, body: str) -> str:
    return f"### {definition.title}\n{body}"


def missing_key_message(definition: AnalyzerDefinition) -> str:
    return header(
        definition,
        f"OpenAI API key missing; cannot perform {definition.title} analysis."
    )


def run_analysis(
    definition: AnalyzerDefinition,
    config: AppConfig,
    data: str,
    question: Optional[str] = None,
    repository: Optional[JobRepository] = None,
    client_factory: Optional[ClientFactory] = None
) -> str:
    """Ask the model about collected data and record the job.

    Args:
        definition: Analyzer titles and response sections
        config: Effective configuration
        data: Collected data (JSON, or an error message in its place)
        question: User question, defaults to the analyzer's own
        repository: Job ledger, defaults to the one in the user's home
        client_factory: Builds the completion client

    Returns:
        Printable analysis text
    """
    client = (client_factory or make_openai)(config)
    response = client.ask(
        build_system_prompt(definition, data),
        build_user_prompt(definition, question)
    )

    repository = repository or JobRepository(pricing=ModelPricing.from_config(config))
    job_id = repository.append(
        definition.job_name,
        response.input_tokens,
        response.output_tokens,
        cached_tokens=response.cached_tokens,
        cost=response.cost,
        model=response.model
    )
    logger.info("Recorded %s job %s", definition.job_name, job_id)

    parts = [
        f"### {definition.title}",
        f"{definition.icon} Tokens: {response.input_tokens} in, {response.output_tokens} out, "
        f"{response.cached_tokens} cached | Job: {job_id}",
        render(response.content, title=f"{definition.icon} {definition.title} Analysis Results",
               markers=definition.markers),
    ]
    if parse_sections(response.content, definition.markers).unparsed:
        parts.append(response.content)
    parts.append(render_data(data))
    return "\n".join(parts)
