"""Completion service client."""

from .client import LLMClient

__all__ = ["LLMClient"]
