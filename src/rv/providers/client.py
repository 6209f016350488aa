# src/rv/providers/client.py
import logging

from tenacity import AsyncRetrying, before_sleep_log, retry_if_exception_type, stop_after_attempt, wait_exponential

from rv.errors import NetworkError, Timeout
from rv.models.config import Profile
from rv.models.request import ReviewRequest
from rv.review.prompts import render_prompt
from .base import LLMProvider
from .gemini import GeminiProvider
from .openai_compat import OpenAICompatibleProvider


logger = logging.getLogger(__name__)

GEMINI_HOST = "generativelanguage.googleapis.com"


def create_provider(profile: Profile, timeout: float = 60.0) -> LLMProvider:
    """Pick the provider adapter that speaks to the profile's endpoint."""
    if profile.endpoint_host == GEMINI_HOST:
        return GeminiProvider(api_key=profile.api_key, base_url=profile.endpoint, timeout=timeout)
    return OpenAICompatibleProvider(
        api_key=profile.api_key,
        base_url=profile.endpoint,
        timeout=timeout,
        name=profile.provider.value,
    )


class ProviderClient:
    """Sends a review request, retrying only transient transport failures."""

    def __init__(self, provider: LLMProvider, max_retries: int = 2, backoff: float = 0.5, max_backoff: float = 8.0):
        self.provider = provider
        self.max_retries = max_retries
        self.backoff = backoff
        self.max_backoff = max_backoff

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            retry=retry_if_exception_type((NetworkError, Timeout)),
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(multiplier=self.backoff, max=self.max_backoff),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

    async def complete(self, request: ReviewRequest) -> str:
        profile = request.profile
        prompt = render_prompt(profile, request.context)
        logger.info(f"Sending {len(prompt)} chars to {profile.endpoint} ({profile.model_id})")

        # Same prompt and sampling on every attempt
        return await self._retrying()(self.provider.send, prompt, profile.model_id, profile.sampling)
