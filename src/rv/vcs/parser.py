# src/rv/vcs/parser.py
from unidiff import PatchSet
from unidiff.patch import PatchedFile

from rv.models.diff import ChangeKind, FileChange, Hunk, HunkLine, LineOrigin, LineRange


LINE_ORIGINS = {
    " ": LineOrigin.CONTEXT,
    "+": LineOrigin.ADDED,
    "-": LineOrigin.REMOVED,
}

C_ESCAPES = {
    "a": 7,
    "b": 8,
    "t": 9,
    "n": 10,
    "v": 11,
    "f": 12,
    "r": 13,
    '"': 34,
    "\\": 92,
}


def _strip_prefix(path: str) -> str:
    if path.startswith(("a/", "b/")):
        return path[2:]
    return path


def _unquote(text: str) -> str:
    """Decode a C-style quoted git path body (octal bytes and backslash escapes)."""
    out = bytearray()
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\\" and i + 1 < len(text):
            escaped = text[i + 1]
            if escaped in "01234567":
                out.append(int(text[i + 1:i + 4], 8))
                i += 4
                continue
            if escaped in C_ESCAPES:
                out.append(C_ESCAPES[escaped])
                i += 2
                continue
        out.extend(ch.encode("utf-8"))
        i += 1
    return out.decode("utf-8", errors="replace")


def _git_path(path: str, prefixed: bool) -> str:
    # Quoted paths keep their a/ or b/ prefix inside the quotes
    quoted = len(path) >= 2 and path[0] == path[-1] == '"'
    if quoted:
        path = _unquote(path[1:-1])
    if prefixed or quoted:
        return _strip_prefix(path)
    return path


def _change_kind(patched_file: PatchedFile) -> ChangeKind:
    if patched_file.is_added_file:
        return ChangeKind.ADDED
    if patched_file.is_removed_file:
        return ChangeKind.DELETED
    if patched_file.is_rename:
        return ChangeKind.RENAMED
    return ChangeKind.MODIFIED


def _convert_hunk(hunk) -> Hunk:
    lines = tuple(
        HunkLine(origin=LINE_ORIGINS[line.line_type], text=line.value.rstrip("\n"))
        for line in hunk
        if line.line_type in LINE_ORIGINS
    )
    return Hunk(
        old_range=LineRange(start=hunk.source_start, length=hunk.source_length),
        new_range=LineRange(start=hunk.target_start, length=hunk.target_length),
        lines=lines,
    )


def parse_diff(diff_text: str) -> list[FileChange]:
    """Parse unified diff text into FileChanges, hunks ordered by new-file position."""
    patch = PatchSet(diff_text)
    files = []

    for patched_file in patch:
        kind = _change_kind(patched_file)
        is_binary = patched_file.is_binary_file
        hunks = [] if is_binary else [_convert_hunk(hunk) for hunk in patched_file]
        hunks.sort(key=lambda h: h.new_range.start)

        # Mode-only changes carry nothing to review
        if kind is ChangeKind.MODIFIED and not hunks and not is_binary:
            continue

        old_path = None
        if kind is ChangeKind.RENAMED:
            old_path = _git_path(patched_file.source_file, prefixed=True)

        files.append(FileChange(
            path=_git_path(patched_file.path, prefixed=False),
            change_kind=kind,
            hunks=tuple(hunks),
            old_path=old_path,
            is_binary=is_binary,
        ))

    return files
