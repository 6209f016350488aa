# tests/unit/test_engine.py
import re

import pytest

from fakes import FOO_DIFF, FOO_REPLY, FakeVcs, StubProvider
from rv.errors import CredentialMissing, NetworkError, RateLimited, SourceUnavailable, Timeout, ToolMissing
from rv.review.engine import PipelineState
from rv.review.sources import PullRequest, StagedOrLastCommit


MULTI_DIFF = FOO_DIFF + """diff --git a/new.py b/new.py
new file mode 100644
index 0000000..3333333
--- /dev/null
+++ b/new.py
@@ -0,0 +1,2 @@
+import os
+print(os.getcwd())
diff --git a/gone.py b/gone.py
deleted file mode 100644
index 4444444..0000000
--- a/gone.py
+++ /dev/null
@@ -1 +0,0 @@
-print("bye")
"""


@pytest.mark.asyncio
async def test_engine_reviews_staged_changes(make_engine):
    provider = StubProvider(FOO_REPLY)
    engine = make_engine(provider=provider)

    result = await engine.run(StagedOrLastCommit(), pipe=True)

    records = [line for line in result.output.splitlines() if not line.startswith("#")]
    assert records == ["foo.rs\t1\tSuggestion\tprefer explicit typing"]
    assert engine.state is PipelineState.DONE
    assert result.profile.name == "default"
    assert len(provider.calls) == 1


@pytest.mark.asyncio
async def test_pipe_output_is_stable_across_runs(make_engine):
    first = await make_engine().run(StagedOrLastCommit(), pipe=True)
    second = await make_engine().run(StagedOrLastCommit(), pipe=True)

    assert first.output == second.output


@pytest.mark.asyncio
async def test_prompt_carries_every_file(make_engine):
    def echo_files(prompt: str) -> str:
        findings = ",".join(
            f'{{"path": "{path}", "severity": "info", "message": "{kind}"}}'
            for path, kind in re.findall(r'<diff path="(.*?)" kind="(\w+)"', prompt)
        )
        return f'{{"findings": [{findings}]}}'

    engine = make_engine(vcs=FakeVcs(staged=MULTI_DIFF), provider=StubProvider(echo_files))

    result = await engine.run(StagedOrLastCommit(), pipe=True)

    echoed = [(str(f.location), f.message) for f in result.response.findings]
    assert echoed == [("foo.rs", "modified"), ("new.py", "added"), ("gone.py", "deleted")]


@pytest.mark.asyncio
async def test_missing_gh_fails_before_provider(make_engine):
    provider = StubProvider(FOO_REPLY)
    engine = make_engine(provider=provider)

    with pytest.raises(ToolMissing):
        await engine.run(PullRequest(id="42"))

    assert engine.state is PipelineState.FAILED
    assert isinstance(engine.failure, ToolMissing)
    assert provider.calls == []


@pytest.mark.asyncio
async def test_nothing_to_review(make_engine):
    engine = make_engine(vcs=FakeVcs())

    with pytest.raises(SourceUnavailable):
        await engine.run(StagedOrLastCommit())

    assert engine.state is PipelineState.FAILED
    assert engine.context is None


@pytest.mark.asyncio
async def test_missing_credential_stops_at_profile(make_engine):
    provider = StubProvider(FOO_REPLY)
    engine = make_engine(provider=provider, environ={})

    with pytest.raises(CredentialMissing):
        await engine.run(StagedOrLastCommit())

    assert engine.context is not None
    assert provider.calls == []


@pytest.mark.asyncio
async def test_network_errors_exhaust_retry_budget(make_engine):
    provider = StubProvider(NetworkError("a"), NetworkError("b"), NetworkError("c"))
    engine = make_engine(provider=provider, max_retries=2)

    with pytest.raises(NetworkError):
        await engine.run(StagedOrLastCommit(), pipe=True)

    assert len(provider.calls) == 3
    assert engine.state is PipelineState.FAILED


@pytest.mark.asyncio
async def test_timeout_then_success(make_engine):
    provider = StubProvider(Timeout("slow"), FOO_REPLY)

    result = await make_engine(provider=provider).run(StagedOrLastCommit(), pipe=True)

    assert len(provider.calls) == 2
    assert provider.calls[0] == provider.calls[1]
    assert "foo.rs\t1\tSuggestion\tprefer explicit typing" in result.output


@pytest.mark.asyncio
async def test_rate_limit_is_not_retried(make_engine):
    provider = StubProvider(RateLimited("slow down", status_code=429), FOO_REPLY)
    engine = make_engine(provider=provider)

    with pytest.raises(RateLimited):
        await engine.run(StagedOrLastCommit())

    assert len(provider.calls) == 1


@pytest.mark.asyncio
async def test_unstructured_reply_is_shown_verbatim(make_engine):
    engine = make_engine(provider=StubProvider("Looks fine, ship it."))

    result = await engine.run(StagedOrLastCommit(), pipe=True)

    assert result.response.structured is False
    assert result.output == "# unstructured\nLooks fine, ship it.\n"
    assert engine.state is PipelineState.DONE


@pytest.mark.asyncio
async def test_project_docs_reach_the_prompt(make_engine):
    provider = StubProvider(FOO_REPLY)
    engine = make_engine(provider=provider, docs={"guideline:.rv_guidelines": "No unwrap()."})

    await engine.run(StagedOrLastCommit())

    prompt = provider.calls[0][0]
    assert "No unwrap()." in prompt
    assert prompt.index("+let x = 2;") < prompt.index("No unwrap().")
