# src/rv/review/engine.py
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from rv.models.config import Profile
from rv.models.diff import ChangeSet
from rv.models.request import ReviewRequest
from rv.models.review import ReviewContext, ReviewResponse, Severity
from rv.providers.base import LLMProvider
from rv.providers.client import ProviderClient, create_provider
from .context import ContextAssembler
from .formatter import parse_response, render_interactive, render_pipe
from .profiles import ProfileResolver
from .sources import DiffSourceResolver, SourceSelector


logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    IDLE = "idle"
    RESOLVING_SOURCE = "resolving-source"
    ASSEMBLING_CONTEXT = "assembling-context"
    RESOLVING_PROFILE = "resolving-profile"
    INVOKING = "invoking"
    FORMATTING = "formatting"
    DONE = "done"
    FAILED = "failed"


@dataclass
class EngineReviewResult:
    """Result of one review invocation."""
    output: str
    response: ReviewResponse
    context: ReviewContext
    profile: Profile


class ReviewEngine:
    """Runs one review: source, context, profile, provider call, formatting.

    Each stage runs once; the first failure moves the engine to FAILED and
    propagates to the caller. Output is only produced once every stage
    succeeded.
    """

    def __init__(
        self,
        resolver: DiffSourceResolver,
        assembler: ContextAssembler,
        profiles: ProfileResolver,
        provider_factory: Callable[[Profile], LLMProvider] = create_provider,
        docs_loader: Callable[[ChangeSet], dict[str, str]] | None = None,
        min_severity: Severity = Severity.INFO,
        max_retries: int = 2,
        retry_backoff: float = 0.5,
    ):
        self.resolver = resolver
        self.assembler = assembler
        self.profiles = profiles
        self.provider_factory = provider_factory
        self.docs_loader = docs_loader
        self.min_severity = min_severity
        self.max_retries = max_retries
        self.retry_backoff = retry_backoff

        self.state = PipelineState.IDLE
        self.failure: BaseException | None = None
        self.context: ReviewContext | None = None

    def _enter(self, state: PipelineState) -> None:
        logger.debug(f"Review pipeline: {self.state.value} -> {state.value}")
        self.state = state

    async def run(
        self,
        selector: SourceSelector,
        profile_name: str | None = None,
        pipe: bool = False,
        color: bool = False,
    ) -> EngineReviewResult:
        try:
            self._enter(PipelineState.RESOLVING_SOURCE)
            change_set = self.resolver.resolve(selector)

            self._enter(PipelineState.ASSEMBLING_CONTEXT)
            docs = self.docs_loader(change_set) if self.docs_loader else {}
            self.context = self.assembler.assemble(change_set, docs)

            self._enter(PipelineState.RESOLVING_PROFILE)
            profile = self.profiles.resolve(profile_name)

            self._enter(PipelineState.INVOKING)
            client = ProviderClient(
                self.provider_factory(profile),
                max_retries=self.max_retries,
                backoff=self.retry_backoff,
            )
            raw_text = await client.complete(ReviewRequest(context=self.context, profile=profile))

            self._enter(PipelineState.FORMATTING)
            response = parse_response(raw_text, self.min_severity)
            if pipe:
                output = render_pipe(response, self.context)
            else:
                output = render_interactive(response, self.context, color=color)
        except BaseException as e:
            self.failure = e
            logger.debug(f"Review pipeline failed while {self.state.value}: {e!r}")
            self._enter(PipelineState.FAILED)
            raise

        self._enter(PipelineState.DONE)
        return EngineReviewResult(output=output, response=response, context=self.context, profile=profile)
