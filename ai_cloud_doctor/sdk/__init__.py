"""
SDK for AI Cloud Doctor.

Provides the completion client used by the analyzers.
"""

from .openai_client import CompletionClient, CompletionResponse, make_openai

__all__ = ["CompletionClient", "CompletionResponse", "make_openai"]
