from abc import ABC, abstractmethod
from pathlib import Path

from rv.models.diff import ChangeSet


class VcsSource(ABC):
    """Version-control access used to collect changes for review."""

    @abstractmethod
    def repo_root(self) -> Path:
        pass

    @abstractmethod
    def get_staged_diff(self) -> ChangeSet:
        pass

    @abstractmethod
    def get_commit_diff(self, commit_id: str) -> ChangeSet:
        pass

    @abstractmethod
    def get_branch_diff(self, name: str, base: str) -> ChangeSet:
        pass

    @abstractmethod
    def get_range_diff(self, base: str, head: str) -> ChangeSet:
        pass

    @abstractmethod
    def list_changed_files(self, paths: list[Path], recursive: bool = False) -> ChangeSet:
        pass


class PullRequestSource(ABC):
    @abstractmethod
    def get_pr_diff(self, pr_id: str) -> ChangeSet:
        pass
