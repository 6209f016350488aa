# src/rv/providers/gemini.py
import logging
import httpx
from .base import LLMProvider
from rv.errors import NetworkError, ProviderError, RateLimited, Timeout
from rv.models.config import PROVIDER_ENDPOINTS, ProviderKind, Sampling


logger = logging.getLogger(__name__)


class GeminiProvider(LLMProvider):
    name = "gemini"

    def __init__(self, api_key: str, base_url: str = PROVIDER_ENDPOINTS[ProviderKind.GEMINI], timeout: float = 60.0):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _generation_config(self, sampling: Sampling) -> dict:
        config = {
            "temperature": sampling.temperature,
            "topP": sampling.top_p,
        }
        if sampling.top_k is not None:
            config["topK"] = sampling.top_k
        if sampling.seed is not None:
            config["seed"] = sampling.seed
        if sampling.max_tokens is not None:
            config["maxOutputTokens"] = sampling.max_tokens
        return config

    async def send(self, prompt: str, model_id: str, sampling: Sampling) -> str:
        url = f"{self.base_url}/models/{model_id}:generateContent"
        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    url,
                    params={"key": self.api_key},
                    json={
                        "contents": [{
                            "parts": [{"text": prompt}]
                        }],
                        "generationConfig": self._generation_config(sampling),
                    },
                    timeout=self.timeout,
                )
        except httpx.TimeoutException as e:
            raise Timeout(f"no reply from {self.base_url} within {self.timeout:g}s", provider=self.name) from e
        except httpx.TransportError as e:
            raise NetworkError(f"cannot reach {self.base_url}: {e}", provider=self.name) from e

        if response.status_code == 429:
            raise RateLimited("rate limit reached, try again later", provider=self.name, status_code=429)
        if response.is_error:
            raise ProviderError(
                f"request to {url} failed: {response.text[:200]}",
                provider=self.name,
                status_code=response.status_code,
            )

        try:
            data = response.json()
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ProviderError(f"unexpected response shape from {model_id}", provider=self.name) from e

        logger.info(f"Gemini response length: {len(text)} chars")
        if not text.strip():
            raise ProviderError(f"{model_id} returned an empty response", provider=self.name)
        return text
