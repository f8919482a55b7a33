"""Text-generation backends used by the relevance oracle."""

from .runner import CompletionError, CompletionRequest, LLMRunner

__all__ = ["CompletionError", "CompletionRequest", "LLMRunner"]
