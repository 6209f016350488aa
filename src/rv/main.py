# src/rv/main.py
import asyncio
import logging
import sys
from functools import partial
from pathlib import Path

import click
from pydantic import ValidationError

from rv.config import LOG_LEVELS, Settings, load_config, load_repo_config
from rv.errors import ConfigError, ReviewError
from rv.models.config import BranchAgainst, RvConfig
from rv.providers.client import create_provider
from rv.review.context import ContextAssembler, load_project_docs
from rv.review.engine import ReviewEngine
from rv.review.profiles import ProfileResolver
from rv.review.prompts import serialize_context
from rv.review.sources import (
    Branch,
    Commit,
    DiffSourceResolver,
    PullRequest,
    Raw,
    SourceSelector,
    StagedOrLastCommit,
)
from rv.vcs.git import GitClient
from rv.vcs.github import GitHubCliClient


logger = logging.getLogger(__name__)

EXIT_INTERRUPTED = 130


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def find_project_root(git: GitClient) -> Path:
    """Repository root, or the working directory outside of a repository."""
    try:
        return git.repo_root()
    except ReviewError as e:
        logger.info(f"Not inside a git repository ({e}), using {Path.cwd()}")
        return Path.cwd()


def build_engine(settings: Settings, config: RvConfig, cwd: Path | None = None) -> ReviewEngine:
    git = GitClient(cwd=cwd, timeout=settings.subprocess_timeout)
    root = find_project_root(git)
    repo_config = load_repo_config(root)

    resolver = DiffSourceResolver(
        vcs=git,
        pull_requests=GitHubCliClient(git),
        exclude=repo_config.exclude,
        default_branch_mode=config.default_branch_mode,
        main_branch=config.main_branch,
    )
    return ReviewEngine(
        resolver=resolver,
        assembler=ContextAssembler(max_chars=settings.max_context_chars),
        profiles=ProfileResolver(config),
        provider_factory=partial(create_provider, timeout=settings.request_timeout),
        docs_loader=partial(load_project_docs, root, config, repo_config),
        min_severity=repo_config.min_severity,
        max_retries=settings.max_retries,
        retry_backoff=settings.retry_backoff,
    )


def build_selector(
    commit: str | None,
    branch: str | None,
    branch_mode: str | None,
    pr: str | None,
    raw: bool,
    files: tuple[Path, ...],
    dirs: tuple[Path, ...],
    recursive: bool,
) -> SourceSelector:
    chosen = [name for name, value in (("--commit", commit), ("--branch", branch), ("--pr", pr), ("--raw", raw)) if value]
    if len(chosen) > 1:
        raise click.UsageError(f"You can enable only one of --commit, --branch, --pr or --raw (got {', '.join(chosen)})")
    if (files or dirs) and not raw:
        raise click.UsageError("--file and --dir are only used together with --raw")

    if raw:
        if not files and not dirs:
            raise click.UsageError("In order to use the RAW mode, you need to specify a --file or a --dir input")
        return Raw(paths=tuple(files) + tuple(dirs), recursive=recursive)
    if commit:
        return Commit(id=commit)
    if branch:
        return Branch(name=branch, against=BranchAgainst(branch_mode) if branch_mode else None)
    if pr:
        return PullRequest(id=pr)
    return StagedOrLastCommit()


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("-l", "--llm", "profile_name", help="LLM profile to use (defaults to the configured default).")
@click.option("-c", "--commit", help="Git commit to review.")
@click.option("-b", "--branch", help="Git branch to review.")
@click.option(
    "--branch-mode",
    type=click.Choice([mode.value for mode in BranchAgainst]),
    help="Compare the branch against the current HEAD or the main branch.",
)
@click.option("-p", "--pr", help="GitHub pull request to review (needs the gh CLI).")
@click.option("-R", "--raw", is_flag=True, help="Review source files without interfacing with git.")
@click.option("-f", "--file", "files", multiple=True, type=click.Path(path_type=Path), help="File to review in raw mode.")
@click.option("-d", "--dir", "dirs", multiple=True, type=click.Path(path_type=Path), help="Directory to review in raw mode.")
@click.option("-r", "--recursive", is_flag=True, help="Review all subfiles, used with --dir.")
@click.option("-P", "--pipe", is_flag=True, help="Line-oriented output for stdout pipes.")
@click.option("--show-context", is_flag=True, help="Print the assembled review context to stderr.")
@click.option("--config", "config_path", type=click.Path(path_type=Path), help="Configuration file to use.")
@click.option("--log-level", type=click.Choice(LOG_LEVELS, case_sensitive=False), help="Logging level (default WARNING).")
@click.version_option(package_name="rv-review")
@click.pass_context
def cli(
    ctx: click.Context,
    profile_name: str | None,
    commit: str | None,
    branch: str | None,
    branch_mode: str | None,
    pr: str | None,
    raw: bool,
    files: tuple[Path, ...],
    dirs: tuple[Path, ...],
    recursive: bool,
    pipe: bool,
    show_context: bool,
    config_path: Path | None,
    log_level: str | None,
) -> None:
    """Review code changes with an LLM.

    Reviews staged edits by default (or the last commit when nothing is staged).
    """
    selector = build_selector(commit, branch, branch_mode, pr, raw, files, dirs, recursive)

    try:
        settings = Settings()
    except ValidationError as e:
        details = "; ".join(f"RV_{str(err['loc'][0]).upper()}: {err['msg']}" for err in e.errors())
        error = ConfigError(f"Invalid environment settings: {details}")
        click.echo(f"rv: error[{error.kind}]: {error}", err=True)
        ctx.exit(error.exit_code)
    if config_path:
        settings.config_path = config_path
    setup_logging(log_level or settings.log_level)

    engine = None
    try:
        config = load_config(settings.resolved_config_path())
        engine = build_engine(settings, config)
        result = asyncio.run(engine.run(selector, profile_name, pipe=pipe, color=not pipe))
    except ReviewError as e:
        click.echo(f"rv: error[{e.kind}]: {e}", err=True)
        ctx.exit(e.exit_code)
    except KeyboardInterrupt:
        click.echo("rv: interrupted", err=True)
        ctx.exit(EXIT_INTERRUPTED)
    finally:
        if show_context and engine is not None and engine.context is not None:
            click.echo(serialize_context(engine.context), err=True)

    click.echo(result.output, nl=False)


if __name__ == "__main__":
    cli()
