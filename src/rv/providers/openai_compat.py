# src/rv/providers/openai_compat.py
import logging
import openai
from openai import AsyncOpenAI
from .base import LLMProvider
from rv.errors import NetworkError, ProviderError, RateLimited, Timeout
from rv.models.config import Sampling


logger = logging.getLogger(__name__)


class OpenAICompatibleProvider(LLMProvider):
    """OpenAI, OpenRouter and any endpoint speaking the chat completions API."""

    def __init__(self, api_key: str, base_url: str, timeout: float = 60.0, name: str = "openai"):
        self.api_key = api_key
        self.base_url = base_url
        self.name = name
        default_headers = {"X-Title": "rv"} if "openrouter" in base_url else None
        # Retries are owned by ProviderClient, never by the SDK
        self.client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=0,
            default_headers=default_headers,
        )

    def _request_kwargs(self, prompt: str, model_id: str, sampling: Sampling) -> dict:
        kwargs = {
            "model": model_id,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": sampling.temperature,
            "top_p": sampling.top_p,
        }
        if sampling.seed is not None:
            kwargs["seed"] = sampling.seed
        if sampling.max_tokens is not None:
            kwargs["max_tokens"] = sampling.max_tokens
        if sampling.top_k is not None:
            kwargs["extra_body"] = {"top_k": sampling.top_k}
        return kwargs

    async def send(self, prompt: str, model_id: str, sampling: Sampling) -> str:
        try:
            response = await self.client.chat.completions.create(
                **self._request_kwargs(prompt, model_id, sampling)
            )
        except openai.APITimeoutError as e:
            raise Timeout(f"no reply from {self.base_url}", provider=self.name) from e
        except openai.APIConnectionError as e:
            raise NetworkError(f"cannot reach {self.base_url}: {e}", provider=self.name) from e
        except openai.RateLimitError as e:
            raise RateLimited("rate limit reached, try again later", provider=self.name, status_code=429) from e
        except openai.APIStatusError as e:
            raise ProviderError(
                f"{model_id} request failed: {e.message}",
                provider=self.name,
                status_code=e.status_code,
            ) from e

        if not response.choices:
            raise ProviderError(f"{model_id} returned no choices", provider=self.name)

        text = response.choices[0].message.content or ""
        logger.info(f"{self.name} response length: {len(text)} chars")

        if not text.strip():
            raise ProviderError(f"{model_id} returned an empty response", provider=self.name)
        return text
