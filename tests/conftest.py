# tests/conftest.py
import pytest

from fakes import FOO_DIFF, FOO_REPLY, FakeVcs, MissingGh, StubProvider
from rv.models.config import RvConfig
from rv.providers.base import LLMProvider
from rv.review.context import ContextAssembler
from rv.review.engine import ReviewEngine
from rv.review.profiles import ProfileResolver
from rv.review.sources import DiffSourceResolver
from rv.vcs.base import PullRequestSource, VcsSource


@pytest.fixture
def make_engine():
    def _make(
        vcs: VcsSource | None = None,
        pull_requests: PullRequestSource | None = None,
        provider: LLMProvider | None = None,
        config: RvConfig | None = None,
        environ: dict[str, str] | None = None,
        max_chars: int = 120_000,
        docs: dict[str, str] | None = None,
        max_retries: int = 2,
    ) -> ReviewEngine:
        provider = provider or StubProvider(FOO_REPLY)
        return ReviewEngine(
            resolver=DiffSourceResolver(
                vcs=vcs or FakeVcs(staged=FOO_DIFF),
                pull_requests=pull_requests or MissingGh(),
            ),
            assembler=ContextAssembler(max_chars=max_chars),
            profiles=ProfileResolver(
                config or RvConfig(),
                environ={"OPENROUTER_API_KEY": "test-key"} if environ is None else environ,
            ),
            provider_factory=lambda profile: provider,
            docs_loader=(lambda change_set: dict(docs)) if docs else None,
            max_retries=max_retries,
            retry_backoff=0,
        )

    return _make
