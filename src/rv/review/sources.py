# src/rv/review/sources.py
import fnmatch
import logging
from dataclasses import dataclass
from pathlib import Path

from rv.errors import SourceUnavailable
from rv.models.config import BranchAgainst
from rv.models.diff import ChangeSet
from rv.vcs.base import PullRequestSource, VcsSource


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StagedOrLastCommit:
    pass


@dataclass(frozen=True)
class Commit:
    id: str


@dataclass(frozen=True)
class Branch:
    name: str
    against: BranchAgainst | None = None


@dataclass(frozen=True)
class PullRequest:
    id: str


@dataclass(frozen=True)
class Raw:
    paths: tuple[Path, ...]
    recursive: bool = False


SourceSelector = StagedOrLastCommit | Commit | Branch | PullRequest | Raw


class DiffSourceResolver:
    """Turns a source selector into a normalized ChangeSet."""

    def __init__(
        self,
        vcs: VcsSource,
        pull_requests: PullRequestSource,
        exclude: list[str] | None = None,
        default_branch_mode: BranchAgainst = BranchAgainst.MAIN,
        main_branch: str = "main",
    ):
        self.vcs = vcs
        self.pull_requests = pull_requests
        self.exclude = exclude or []
        self.default_branch_mode = default_branch_mode
        self.main_branch = main_branch

    def resolve(self, selector: SourceSelector) -> ChangeSet:
        if isinstance(selector, StagedOrLastCommit):
            change_set = self._staged_or_last_commit()
        elif isinstance(selector, Commit):
            change_set = self.vcs.get_commit_diff(selector.id)
        elif isinstance(selector, Branch):
            change_set = self.vcs.get_branch_diff(selector.name, self._branch_base(selector.against))
        elif isinstance(selector, PullRequest):
            change_set = self.pull_requests.get_pr_diff(selector.id)
        elif isinstance(selector, Raw):
            change_set = self.vcs.list_changed_files(list(selector.paths), recursive=selector.recursive)
        else:
            raise TypeError(f"Unknown source selector: {selector!r}")

        change_set = self._apply_exclusions(change_set)
        if not change_set.files:
            raise SourceUnavailable(f"Nothing to review in {change_set.source_label or 'the selected source'}")
        logger.info(f"Resolved {len(change_set.files)} changed file(s) from {change_set.source_label}")
        return change_set

    def _staged_or_last_commit(self) -> ChangeSet:
        staged = self.vcs.get_staged_diff()
        if staged.files:
            return staged
        logger.info("Staged is empty, switching to HEAD")
        return self.vcs.get_commit_diff("HEAD")

    def _branch_base(self, against: BranchAgainst | None) -> str:
        mode = against or self.default_branch_mode
        return "HEAD" if mode is BranchAgainst.CURRENT else self.main_branch

    def _is_excluded(self, path: str) -> bool:
        name = Path(path).name
        return any(fnmatch.fnmatch(path, p) or fnmatch.fnmatch(name, p) for p in self.exclude)

    def _apply_exclusions(self, change_set: ChangeSet) -> ChangeSet:
        kept = tuple(change for change in change_set.files if not self._is_excluded(change.path))
        skipped = len(change_set.files) - len(kept)
        if skipped:
            logger.info(f"Excluded {skipped} file(s) by pattern")
        return change_set.model_copy(update={"files": kept})
