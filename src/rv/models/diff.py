from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, model_validator


class ChangeKind(str, Enum):
    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"


class LineOrigin(str, Enum):
    CONTEXT = "context"
    ADDED = "added"
    REMOVED = "removed"


ORIGIN_PREFIX = {
    LineOrigin.CONTEXT: " ",
    LineOrigin.ADDED: "+",
    LineOrigin.REMOVED: "-",
}


class LineRange(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: int = 0
    length: int = 0

    @property
    def is_empty(self) -> bool:
        return self.start == 0 and self.length == 0


class HunkLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    origin: LineOrigin
    text: str


class Hunk(BaseModel):
    model_config = ConfigDict(frozen=True)

    old_range: LineRange
    new_range: LineRange
    lines: tuple[HunkLine, ...] = ()

    def header(self) -> str:
        return (
            f"@@ -{self.old_range.start},{self.old_range.length}"
            f" +{self.new_range.start},{self.new_range.length} @@"
        )

    def render(self) -> str:
        body = "\n".join(f"{ORIGIN_PREFIX[line.origin]}{line.text}" for line in self.lines)
        return f"{self.header()}\n{body}" if body else self.header()


class FileChange(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str
    change_kind: ChangeKind
    hunks: tuple[Hunk, ...] = ()
    old_path: str | None = None
    is_binary: bool = False

    @model_validator(mode="after")
    def check_hunks(self):
        starts = [hunk.new_range.start for hunk in self.hunks]
        if starts != sorted(starts):
            raise ValueError(f"hunks of {self.path} are not ordered by new-file position")
        if not self.hunks and not self.is_binary and self.change_kind not in (
            ChangeKind.DELETED,
            ChangeKind.RENAMED,
            ChangeKind.ADDED,
        ):
            raise ValueError(f"{self.path} has no hunks")
        return self

    def render(self) -> str:
        return "\n".join(hunk.render() for hunk in self.hunks)


class ChangeSet(BaseModel):
    model_config = ConfigDict(frozen=True)

    files: tuple[FileChange, ...] = Field(default_factory=tuple)
    source_label: str = ""

    @property
    def paths(self) -> list[str]:
        return [change.path for change in self.files]
