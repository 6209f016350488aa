from .base import PullRequestSource, VcsSource
from .git import GitClient
from .github import GitHubCliClient
from .parser import parse_diff

__all__ = ["PullRequestSource", "VcsSource", "GitClient", "GitHubCliClient", "parse_diff"]
