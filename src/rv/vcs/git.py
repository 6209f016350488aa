# src/rv/vcs/git.py
import logging
import subprocess
from pathlib import Path

from rv.errors import SourceUnavailable, ToolMissing
from rv.models.diff import ChangeKind, ChangeSet, FileChange, Hunk, HunkLine, LineOrigin, LineRange
from .base import VcsSource
from .parser import parse_diff


logger = logging.getLogger(__name__)

DIFF_FLAGS = ["-M", "--no-color", "--no-ext-diff"]
# Non-ASCII paths come through verbatim instead of C-quoted
GIT_OPTIONS = ["-c", "core.quotePath=false"]
BINARY_SNIFF_BYTES = 8000


def run_command(
    args: list[str],
    cwd: Path | None = None,
    timeout: float = 30.0,
    check: bool = True,
) -> subprocess.CompletedProcess:
    """Run an external command, mapping launch failures to review errors."""
    logger.debug(f"Running: {' '.join(args)}")
    try:
        result = subprocess.run(
            args,
            cwd=cwd,
            capture_output=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
        )
    except FileNotFoundError as e:
        raise ToolMissing(f"`{args[0]}` is not installed or not in PATH") from e
    except subprocess.TimeoutExpired as e:
        raise SourceUnavailable(f"`{' '.join(args)}` timed out after {timeout:g}s") from e

    if check and result.returncode != 0:
        stderr = result.stderr.strip() or f"exit status {result.returncode}"
        raise SourceUnavailable(f"`{' '.join(args)}` failed: {stderr}")
    return result


def _is_binary(data: bytes) -> bool:
    return b"\0" in data[:BINARY_SNIFF_BYTES]


def _collect_files(path: Path, recursive: bool) -> list[Path]:
    files = []
    for entry in sorted(path.iterdir()):
        if entry.name == ".git":
            continue
        if entry.is_dir():
            if recursive:
                files.extend(_collect_files(entry, recursive))
        elif entry.is_file():
            files.append(entry)
    return files


def _file_as_addition(path: Path) -> FileChange:
    try:
        data = path.read_bytes()
    except OSError as e:
        raise SourceUnavailable(f"Cannot read {path}: {e.strerror or e}") from e
    if _is_binary(data):
        return FileChange(path=path.as_posix(), change_kind=ChangeKind.ADDED, is_binary=True)

    lines = data.decode("utf-8", errors="replace").splitlines()
    if not lines:
        return FileChange(path=path.as_posix(), change_kind=ChangeKind.ADDED)

    hunk = Hunk(
        old_range=LineRange(),
        new_range=LineRange(start=1, length=len(lines)),
        lines=tuple(HunkLine(origin=LineOrigin.ADDED, text=line) for line in lines),
    )
    return FileChange(path=path.as_posix(), change_kind=ChangeKind.ADDED, hunks=(hunk,))


class GitClient(VcsSource):
    def __init__(self, cwd: Path | None = None, timeout: float = 30.0):
        self.cwd = cwd
        self.timeout = timeout

    def _git(self, *args: str, check: bool = True) -> subprocess.CompletedProcess:
        return run_command(["git", *GIT_OPTIONS, *args], cwd=self.cwd, timeout=self.timeout, check=check)

    def _diff(self, *args: str, label: str) -> ChangeSet:
        output = self._git(*args).stdout
        return ChangeSet(files=tuple(parse_diff(output)), source_label=label)

    def repo_root(self) -> Path:
        return Path(self._git("rev-parse", "--show-toplevel").stdout.strip())

    def has_commits(self) -> bool:
        return self._git("rev-parse", "--verify", "--quiet", "HEAD", check=False).returncode == 0

    def commit_exists(self, ref: str) -> bool:
        result = self._git("rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}", check=False)
        return result.returncode == 0

    def fetch(self, remote: str, refspec: str) -> None:
        self._git("fetch", remote, refspec)

    def get_staged_diff(self) -> ChangeSet:
        return self._diff("diff", "--cached", *DIFF_FLAGS, label="staged changes")

    def get_commit_diff(self, commit_id: str) -> ChangeSet:
        if not self.commit_exists(commit_id):
            raise SourceUnavailable(f"Commit {commit_id!r} does not exist")
        return self._diff(
            "show", "--format=", "--diff-merges=first-parent", *DIFF_FLAGS, commit_id,
            label=f"commit {commit_id}",
        )

    def get_branch_diff(self, name: str, base: str) -> ChangeSet:
        if not self.commit_exists(name):
            raise SourceUnavailable(f"Branch {name!r} does not exist")
        if not self.commit_exists(base):
            raise SourceUnavailable(f"Base {base!r} for branch {name!r} does not exist")
        return self._diff("diff", *DIFF_FLAGS, f"{base}...{name}", label=f"branch {name} against {base}")

    def get_range_diff(self, base: str, head: str) -> ChangeSet:
        return self._diff("diff", *DIFF_FLAGS, f"{base}...{head}", label=f"{base[:12]}...{head[:12]}")

    def list_changed_files(self, paths: list[Path], recursive: bool = False) -> ChangeSet:
        """Present files on disk as full additions, without consulting git."""
        changes = []
        for path in paths:
            if path.is_file():
                changes.append(_file_as_addition(path))
            elif path.is_dir():
                changes.extend(_file_as_addition(f) for f in _collect_files(path, recursive))
            else:
                raise SourceUnavailable(f"Path does not exist: {path}")
        label = ", ".join(p.as_posix() for p in paths)
        return ChangeSet(files=tuple(changes), source_label=f"files {label}")
