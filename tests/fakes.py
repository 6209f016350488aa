# tests/fakes.py
from pathlib import Path

from rv.errors import SourceUnavailable, ToolMissing
from rv.models.config import Sampling
from rv.models.diff import ChangeSet
from rv.providers.base import LLMProvider
from rv.vcs.base import PullRequestSource, VcsSource
from rv.vcs.parser import parse_diff


FOO_DIFF = """diff --git a/foo.rs b/foo.rs
index 1111111..2222222 100644
--- a/foo.rs
+++ b/foo.rs
@@ -1 +1 @@
-let x = 1;
+let x = 2;
"""

FOO_REPLY = (
    '{"findings": [{"path": "foo.rs", "line": 1, "severity": "suggestion",'
    ' "message": "prefer explicit typing"}], "summary": "One nit."}'
)


def change_set_from(diff_text: str, label: str = "staged changes") -> ChangeSet:
    return ChangeSet(files=tuple(parse_diff(diff_text)), source_label=label)


class FakeVcs(VcsSource):
    def __init__(self, staged: str = "", commits: dict[str, str] | None = None, branches: dict[str, str] | None = None):
        self.staged = staged
        self.commits = commits or {}
        self.branches = branches or {}
        self.calls: list[tuple] = []

    def repo_root(self) -> Path:
        return Path(".")

    def get_staged_diff(self) -> ChangeSet:
        self.calls.append(("staged",))
        return change_set_from(self.staged)

    def get_commit_diff(self, commit_id: str) -> ChangeSet:
        self.calls.append(("commit", commit_id))
        if commit_id not in self.commits:
            raise SourceUnavailable(f"Commit {commit_id!r} does not exist")
        return change_set_from(self.commits[commit_id], f"commit {commit_id}")

    def get_branch_diff(self, name: str, base: str) -> ChangeSet:
        self.calls.append(("branch", name, base))
        return change_set_from(self.branches.get(name, ""), f"branch {name} against {base}")

    def get_range_diff(self, base: str, head: str) -> ChangeSet:
        self.calls.append(("range", base, head))
        return ChangeSet()

    def list_changed_files(self, paths: list[Path], recursive: bool = False) -> ChangeSet:
        self.calls.append(("files", tuple(paths), recursive))
        return ChangeSet()


class MissingGh(PullRequestSource):
    def get_pr_diff(self, pr_id: str) -> ChangeSet:
        raise ToolMissing("GitHub CLI (gh) is not installed or not in PATH")


class StubProvider(LLMProvider):
    """Replays canned replies (or raises canned errors) in order."""

    name = "stub"

    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls: list[tuple[str, str, Sampling]] = []

    async def send(self, prompt: str, model_id: str, sampling: Sampling) -> str:
        self.calls.append((prompt, model_id, sampling))
        reply = self.replies[min(len(self.calls), len(self.replies)) - 1]
        if isinstance(reply, BaseException):
            raise reply
        if callable(reply):
            return reply(prompt)
        return reply

