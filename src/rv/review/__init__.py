from .context import ContextAssembler, load_project_docs
from .formatter import parse_response, render_interactive, render_pipe
from .profiles import ProfileResolver
from .prompts import render_prompt, serialize_context
from .sources import Branch, Commit, DiffSourceResolver, PullRequest, Raw, SourceSelector, StagedOrLastCommit

__all__ = [
    "ContextAssembler",
    "load_project_docs",
    "parse_response",
    "render_interactive",
    "render_pipe",
    "ProfileResolver",
    "render_prompt",
    "serialize_context",
    "Branch",
    "Commit",
    "DiffSourceResolver",
    "PullRequest",
    "Raw",
    "SourceSelector",
    "StagedOrLastCommit",
]
