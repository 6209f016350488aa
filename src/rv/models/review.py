from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .diff import ChangeSet


class Severity(str, Enum):
    INFO = "info"
    SUGGESTION = "suggestion"
    WARNING = "warning"
    CRITICAL = "critical"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @property
    def rank(self) -> int:
        return SEVERITY_ORDER[self]


SEVERITY_ORDER = {
    Severity.INFO: 0,
    Severity.SUGGESTION: 1,
    Severity.WARNING: 2,
    Severity.CRITICAL: 3,
}


class Location(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str
    line: int | None = None
    end_line: int | None = None

    def __str__(self) -> str:
        if self.line is None:
            return self.path
        return f"{self.path}:{self.line_spec}"

    @property
    def line_spec(self) -> str:
        if self.line is None:
            return ""
        if self.end_line is not None and self.end_line != self.line:
            return f"{self.line}-{self.end_line}"
        return str(self.line)


class Finding(BaseModel):
    model_config = ConfigDict(frozen=True)

    location: Location | None = None
    severity: Severity
    message: str


class ReviewContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    change_set: ChangeSet
    supplemental_docs: dict[str, str] = Field(default_factory=dict)
    truncated: tuple[str, ...] = ()

    @property
    def is_truncated(self) -> bool:
        return bool(self.truncated)


class ReviewResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    raw_text: str
    findings: tuple[Finding, ...] = ()
    summary: str = ""
    structured: bool = True


class FindingPayload(BaseModel):
    """One finding as the model is asked to emit it."""

    path: str | None = None
    line: int | None = None
    end_line: int | None = None
    severity: Severity
    message: str

    @field_validator("severity", mode="before")
    @classmethod
    def normalize_severity(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    def to_finding(self) -> Finding:
        location = None
        if self.path:
            location = Location(path=self.path, line=self.line, end_line=self.end_line)
        return Finding(location=location, severity=self.severity, message=self.message.strip())


class ReviewPayload(BaseModel):
    findings: list[FindingPayload] = Field(default_factory=list)
    summary: str = ""
