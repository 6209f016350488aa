# src/rv/errors.py


class ReviewError(Exception):
    """Base class for failures that abort a review invocation."""

    kind = "ReviewError"
    exit_code = 1

    def __str__(self) -> str:
        return self.args[0] if self.args else self.kind


class SourceUnavailable(ReviewError):
    kind = "SourceUnavailable"
    exit_code = 3


class ToolMissing(ReviewError):
    kind = "ToolMissing"
    exit_code = 4


class ConfigError(ReviewError):
    kind = "ConfigError"
    exit_code = 5


class ProfileNotFound(ReviewError):
    kind = "ProfileNotFound"
    exit_code = 6


class ProfileInvalid(ReviewError):
    kind = "ProfileInvalid"
    exit_code = 7


class CredentialMissing(ReviewError):
    kind = "CredentialMissing"
    exit_code = 8


class ProviderFailure(ReviewError):
    """Failure raised while talking to an LLM provider."""

    def __init__(self, message: str, provider: str = "", status_code: int | None = None):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code

    def __str__(self) -> str:
        code = f" (status {self.status_code})" if self.status_code is not None else ""
        prefix = f"{self.provider}: " if self.provider else ""
        return f"{prefix}{self.args[0]}{code}"


class NetworkError(ProviderFailure):
    kind = "NetworkError"
    exit_code = 9


class Timeout(ProviderFailure):
    kind = "Timeout"
    exit_code = 10


class RateLimited(ProviderFailure):
    kind = "RateLimited"
    exit_code = 11


class ProviderError(ProviderFailure):
    kind = "ProviderError"
    exit_code = 12


class ResponseParseFailure(ReviewError):
    """Model output could not be parsed. Never aborts a review."""

    kind = "ResponseParseFailure"
