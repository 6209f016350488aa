# tests/integration/test_git_client.py
import shutil
import subprocess
from pathlib import Path

import pytest
from rv.errors import SourceUnavailable, ToolMissing
from rv.models.diff import ChangeKind
from rv.vcs.git import GitClient, run_command


pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


def _git(repo: Path, *args: str) -> str:
    result = subprocess.run(["git", *args], cwd=repo, capture_output=True, text=True, check=True)
    return result.stdout.strip()


@pytest.fixture
def repo(tmp_path):
    _git(tmp_path, "init", "-q")
    _git(tmp_path, "config", "user.email", "dev@example.com")
    _git(tmp_path, "config", "user.name", "Dev")
    _git(tmp_path, "config", "commit.gpgsign", "false")
    (tmp_path / "foo.rs").write_text("let x = 1;\n")
    (tmp_path / "util.py").write_text("def helper():\n    return 42\n")
    _git(tmp_path, "add", ".")
    _git(tmp_path, "commit", "-q", "-m", "initial")
    return tmp_path


def test_repo_root(repo):
    assert GitClient(cwd=repo).repo_root().resolve() == repo.resolve()


def test_staged_diff(repo):
    (repo / "foo.rs").write_text("let x = 2;\n")
    _git(repo, "add", "foo.rs")

    change_set = GitClient(cwd=repo).get_staged_diff()

    assert change_set.paths == ["foo.rs"]
    change = change_set.files[0]
    assert change.change_kind is ChangeKind.MODIFIED
    assert "+let x = 2;" in change.render()
    assert "-let x = 1;" in change.render()


def test_nothing_staged(repo):
    (repo / "foo.rs").write_text("let x = 2;\n")

    assert GitClient(cwd=repo).get_staged_diff().files == ()


def test_commit_diff(repo):
    change_set = GitClient(cwd=repo).get_commit_diff("HEAD")

    assert sorted(change_set.paths) == ["foo.rs", "util.py"]
    assert all(f.change_kind is ChangeKind.ADDED for f in change_set.files)
    assert change_set.source_label == "commit HEAD"


def test_unknown_commit(repo):
    with pytest.raises(SourceUnavailable):
        GitClient(cwd=repo).get_commit_diff("0123456789abcdef")


def test_staged_rename(repo):
    _git(repo, "mv", "util.py", "helpers.py")

    change_set = GitClient(cwd=repo).get_staged_diff()

    assert change_set.paths == ["helpers.py"]
    change = change_set.files[0]
    assert change.change_kind is ChangeKind.RENAMED
    assert change.old_path == "util.py"
    assert change.hunks == ()


def test_staged_binary(repo):
    (repo / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\n\x00\x00\x00")
    _git(repo, "add", "logo.png")

    change = GitClient(cwd=repo).get_staged_diff().files[0]

    assert change.path == "logo.png"
    assert change.is_binary is True
    assert change.hunks == ()


def test_branch_diff(repo):
    main = _git(repo, "rev-parse", "--abbrev-ref", "HEAD")
    _git(repo, "checkout", "-q", "-b", "feature")
    (repo / "foo.rs").write_text("let x = 3;\n")
    _git(repo, "commit", "-q", "-am", "bump")
    _git(repo, "checkout", "-q", main)

    change_set = GitClient(cwd=repo).get_branch_diff("feature", main)

    assert change_set.paths == ["foo.rs"]
    assert "+let x = 3;" in change_set.files[0].render()


def test_unknown_branch(repo):
    with pytest.raises(SourceUnavailable):
        GitClient(cwd=repo).get_branch_diff("no-such-branch", "HEAD")


def test_raw_files(tmp_path):
    (tmp_path / "src" / "pkg").mkdir(parents=True)
    (tmp_path / "src" / "app.py").write_text("print('hi')\nprint('bye')\n")
    (tmp_path / "src" / "pkg" / "mod.py").write_text("x = 1\n")
    (tmp_path / "src" / "blob.bin").write_bytes(b"\x00\x01")
    client = GitClient(cwd=tmp_path)

    shallow = client.list_changed_files([tmp_path / "src"])
    deep = client.list_changed_files([tmp_path / "src"], recursive=True)

    assert [Path(p).name for p in shallow.paths] == ["app.py", "blob.bin"]
    assert [Path(p).name for p in deep.paths] == ["app.py", "blob.bin", "mod.py"]
    app = shallow.files[0]
    assert app.change_kind is ChangeKind.ADDED
    assert app.hunks[0].new_range.length == 2
    assert shallow.files[1].is_binary is True


def test_raw_missing_path(tmp_path):
    with pytest.raises(SourceUnavailable):
        GitClient(cwd=tmp_path).list_changed_files([tmp_path / "missing.py"])


def test_run_command_missing_binary():
    with pytest.raises(ToolMissing):
        run_command(["definitely-not-a-real-tool-rv"])


def test_staged_non_ascii_path(repo):
    (repo / "café.py").write_text("print('olé')\n", encoding="utf-8")
    _git(repo, "add", "café.py")

    change_set = GitClient(cwd=repo).get_staged_diff()

    assert change_set.paths == ["café.py"]
    assert "+print('olé')" in change_set.files[0].render()


def test_raw_unreadable_file(tmp_path, monkeypatch):
    target = tmp_path / "secret.py"
    target.write_text("x = 1\n")

    def deny(self):
        raise PermissionError(13, "Permission denied", str(self))

    monkeypatch.setattr(Path, "read_bytes", deny)

    with pytest.raises(SourceUnavailable) as exc_info:
        GitClient(cwd=tmp_path).list_changed_files([target])

    assert "secret.py" in str(exc_info.value)
    assert "Permission denied" in str(exc_info.value)
