# src/rv/providers/__init__.py
from .base import LLMProvider
from .client import ProviderClient, create_provider
from .gemini import GeminiProvider
from .openai_compat import OpenAICompatibleProvider

__all__ = ["LLMProvider", "ProviderClient", "create_provider", "GeminiProvider", "OpenAICompatibleProvider"]
