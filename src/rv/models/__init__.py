from .config import BranchAgainst, Profile, ProviderKind, RepoConfig, RvConfig, Sampling
from .diff import ChangeKind, ChangeSet, FileChange, Hunk, HunkLine, LineOrigin, LineRange
from .request import ReviewRequest
from .review import Finding, Location, ReviewContext, ReviewResponse, Severity

__all__ = [
    "BranchAgainst",
    "Profile",
    "ProviderKind",
    "RepoConfig",
    "RvConfig",
    "Sampling",
    "ChangeKind",
    "ChangeSet",
    "FileChange",
    "Hunk",
    "HunkLine",
    "LineOrigin",
    "LineRange",
    "ReviewRequest",
    "Finding",
    "Location",
    "ReviewContext",
    "ReviewResponse",
    "Severity",
]
