from enum import Enum
from urllib.parse import urlparse
from pydantic import BaseModel, ConfigDict, Field, model_validator

from .review import Severity


PLACEHOLDER_API_KEY = "[insert api key here]"


class ProviderKind(str, Enum):
    OPENAI = "openai"
    OPENROUTER = "openrouter"
    GEMINI = "gemini"

    @property
    def default_endpoint(self) -> str:
        return PROVIDER_ENDPOINTS[self]

    @property
    def default_api_key_env(self) -> str:
        return f"{self.name}_API_KEY"


PROVIDER_ENDPOINTS = {
    ProviderKind.OPENAI: "https://api.openai.com/v1",
    ProviderKind.OPENROUTER: "https://openrouter.ai/api/v1",
    ProviderKind.GEMINI: "https://generativelanguage.googleapis.com/v1beta",
}


class BranchAgainst(str, Enum):
    CURRENT = "current"
    MAIN = "main"


class Sampling(BaseModel):
    model_config = ConfigDict(frozen=True)

    temperature: float = 0.0
    top_p: float = 1.0
    top_k: int | None = None
    seed: int | None = 0
    max_tokens: int | None = 8000


class Profile(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    provider: ProviderKind = ProviderKind.OPENROUTER
    endpoint: str = ""
    model_id: str
    api_key: str = ""
    api_key_env: str = ""
    sampling: Sampling = Field(default_factory=Sampling)
    # Must be set to run with a non-zero temperature.
    nondeterministic: bool = False
    prompt_template: str | None = None
    prompt_suffix: str = ""

    @model_validator(mode="before")
    @classmethod
    def fill_provider_defaults(cls, data):
        if not isinstance(data, dict):
            return data
        data = dict(data)
        provider = ProviderKind(data.get("provider") or ProviderKind.OPENROUTER)
        if not data.get("endpoint"):
            data["endpoint"] = provider.default_endpoint
        if not data.get("api_key_env"):
            data["api_key_env"] = provider.default_api_key_env
        return data

    @property
    def endpoint_host(self) -> str:
        return urlparse(self.endpoint).hostname or ""


def default_profiles() -> list[Profile]:
    return [
        Profile(name="default", model_id="deepseek/deepseek-r1-distill-qwen-32b"),
        Profile(name="think", model_id="deepseek/deepseek-r1"),
    ]


class RvConfig(BaseModel):
    """Contents of the user configuration file."""

    profiles: list[Profile] = Field(default_factory=default_profiles)
    default_profile: str = "default"
    default_branch_mode: BranchAgainst = BranchAgainst.MAIN
    main_branch: str = "main"
    load_readme: bool = True
    load_rv_context: bool = True
    load_rv_guidelines: bool = True
    context_files: list[str] = Field(default_factory=list)
    guideline_files: list[str] = Field(default_factory=list)
    report_sources: bool = True

    def profiles_by_name(self) -> dict[str, Profile]:
        return {profile.name: profile for profile in self.profiles}


class RepoConfig(BaseModel):
    """Per-repository settings read from `.rv.yaml`."""

    exclude: list[str] = Field(
        default_factory=lambda: [
            "*.lock",
            "Cargo.lock",
            "package-lock.json",
            "yarn.lock",
            "pnpm-lock.yaml",
            "*.min.js",
            "*.min.css",
        ]
    )
    context_files: list[str] = Field(default_factory=list)
    guideline_files: list[str] = Field(default_factory=list)
    min_severity: Severity = Severity.INFO
