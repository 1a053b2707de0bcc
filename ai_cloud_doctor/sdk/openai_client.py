"""
OpenAI completion client.

Sends one system/user prompt pair and reports generated text with token
usage. Remote failures come back as response content, never as exceptions.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from openai import OpenAI

from ..config.loader import AppConfig, ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-5-nano"
DEFAULT_SERVICE_TIER = "flex"
DEFAULT_REASONING_EFFORT = "low"
DEFAULT_VERBOSITY = "low"
DEFAULT_TEMPERATURE = 1.0

NOT_AVAILABLE = "N/A"


@dataclass(frozen=True)
class CompletionResponse:
    """Generated text and token counters for one completion call."""
    content: str
    input_tokens: int = 0
    output_tokens: int = 0
    cached_tokens: int = 0
    cost: Optional[float] = None
    model: Optional[str] = None

    @classmethod
    def failure(cls, message: str) -> "CompletionResponse":
        return cls(content=message, cost=0.0, model=NOT_AVAILABLE)


class CompletionClient:
    """Chat Completions wrapper configured from AppConfig."""

    def __init__(self, config: Optional[AppConfig]):
        """Initialize the client.

        Args:
            config: Effective configuration carrying the API key and tunables

        Raises:
            ConfigurationError: If no API key is configured
        """
        if config is None or not config.openai_key:
            raise ConfigurationError(
                "OPENAI_API_KEY missing.  Set it via environment variable "
                "or ~/.ai-cloud-doctor-configs.json"
            )
        self.config = config
        self.model = config.model or DEFAULT_MODEL
        self.client = OpenAI(api_key=config.openai_key)

    def build_request(self, system: str, user: str) -> Dict[str, Any]:
        config = self.config
        request = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "service_tier": config.service_tier or DEFAULT_SERVICE_TIER,
            "reasoning_effort": config.reasoning_effort or DEFAULT_REASONING_EFFORT,
            "verbosity": config.verbosity or DEFAULT_VERBOSITY,
            "temperature": config.temperature if config.temperature is not None else DEFAULT_TEMPERATURE,
            "prompt_cache_key": f"ai-cloud-doctor-{self.model}",
            "n": 1,
        }
        if config.max_tokens:
            request["max_completion_tokens"] = config.max_tokens
        return request

    def ask(self, system: str, user: str) -> CompletionResponse:
        """Run one completion.

        Args:
            system: System prompt (instructions and collected data)
            user: User prompt (the question)

        Returns:
            CompletionResponse; on any failure its content holds the error
            text and all token counts are zero
        """
        request = self.build_request(system, user)
        try:
            completion = self.client.chat.completions.create(**request)
        except Exception as e:
            logger.debug("Completion request failed", exc_info=True)
            return CompletionResponse.failure(f"OpenAI API error: {e}")

        if not completion.choices:
            return CompletionResponse.failure("OpenAI returned no choices")

        choice = completion.choices[0]
        content = choice.message.content if choice.message else None
        if not content:
            return CompletionResponse.failure(
                f"OpenAI returned empty content. Response: {_describe_choice(choice)}"
            )

        usage = completion.usage
        details = getattr(usage, "prompt_tokens_details", None) if usage else None
        return CompletionResponse(
            content=content,
            input_tokens=(usage.prompt_tokens or 0) if usage else 0,
            output_tokens=(usage.completion_tokens or 0) if usage else 0,
            cached_tokens=(getattr(details, "cached_tokens", None) or 0) if details else 0,
            cost=getattr(usage, "total_cost", None) if usage else None,
            model=completion.model
        )


def _describe_choice(choice: Any) -> str:
    dump = getattr(choice, "model_dump", None)
    if callable(dump):
        return json.dumps(dump(), default=str)
    return str(choice)


def make_openai(config: Optional[AppConfig]) -> CompletionClient:
    """Create a completion client, failing fast without an API key."""
    return CompletionClient(config)
