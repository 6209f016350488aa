# src/rv/vcs/github.py
import json
import logging
import shutil

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from rv.errors import SourceUnavailable, ToolMissing
from rv.models.diff import ChangeSet
from .base import PullRequestSource
from .git import GitClient, run_command


logger = logging.getLogger(__name__)


class PullRequestMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    number: int
    base_ref_name: str = Field(alias="baseRefName")
    base_ref_oid: str = Field(alias="baseRefOid")
    head_ref_oid: str = Field(alias="headRefOid")


class GitHubCliClient(PullRequestSource):
    """Pull request retrieval through the authenticated `gh` CLI."""

    def __init__(self, git: GitClient, remote: str = "origin", gh_binary: str = "gh"):
        self.git = git
        self.remote = remote
        self.gh_binary = gh_binary

    def ensure_available(self) -> None:
        if shutil.which(self.gh_binary) is None:
            raise ToolMissing("GitHub CLI (gh) is not installed or not in PATH")

    def fetch_metadata(self, pr_id: str) -> PullRequestMetadata:
        result = run_command(
            [self.gh_binary, "pr", "view", pr_id, "--json", "number,baseRefName,baseRefOid,headRefOid"],
            cwd=self.git.cwd,
            timeout=self.git.timeout,
            check=False,
        )
        if result.returncode != 0:
            raise SourceUnavailable(f"Pull request {pr_id} not found: {result.stderr.strip()}")
        try:
            return PullRequestMetadata(**json.loads(result.stdout))
        except (json.JSONDecodeError, ValidationError) as e:
            raise SourceUnavailable(f"Unable to parse `gh pr view` output for {pr_id}: {e}") from e

    def _ensure_commit(self, sha: str, refspec: str) -> None:
        if self.git.commit_exists(sha):
            return
        logger.info(f"Fetching {refspec} from {self.remote}")
        self.git.fetch(self.remote, refspec)
        if not self.git.commit_exists(sha):
            raise SourceUnavailable(f"Commit {sha} is still missing after fetching {refspec}")

    def get_pr_diff(self, pr_id: str) -> ChangeSet:
        self.ensure_available()
        metadata = self.fetch_metadata(pr_id)

        self._ensure_commit(metadata.base_ref_oid, metadata.base_ref_name)
        number = metadata.number
        self._ensure_commit(metadata.head_ref_oid, f"pull/{number}/head:refs/rv/pr/{number}")

        change_set = self.git.get_range_diff(metadata.base_ref_oid, metadata.head_ref_oid)
        return change_set.model_copy(update={"source_label": f"PR #{number}"})
