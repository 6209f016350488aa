# src/rv/providers/base.py
from abc import ABC, abstractmethod
from rv.models.config import Sampling


class LLMProvider(ABC):
    name: str = "provider"

    @abstractmethod
    async def send(self, prompt: str, model_id: str, sampling: Sampling) -> str:
        """Send prompt to the model and return its raw text reply.

        Raises NetworkError, Timeout, RateLimited or ProviderError.
        """
        pass
