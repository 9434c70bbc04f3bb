"""LLM provider adapters."""

from court_vision.adapters.llm.base import LLMMessage, LLMProvider, LLMResponse
from court_vision.adapters.llm.openai import OpenAIProvider
from court_vision.adapters.llm.stub import StubLLMProvider

__all__ = [
    "LLMMessage",
    "LLMProvider",
    "LLMResponse",
    "OpenAIProvider",
    "StubLLMProvider",
]
