# src/rv/review/profiles.py
import logging
import os
from collections.abc import Mapping

from rv.errors import CredentialMissing, ProfileInvalid, ProfileNotFound
from rv.models.config import PLACEHOLDER_API_KEY, Profile, RvConfig


logger = logging.getLogger(__name__)


class ProfileResolver:
    """Selects a profile from the configuration and validates it for use."""

    def __init__(self, config: RvConfig, environ: Mapping[str, str] | None = None):
        self.config = config
        self.environ = os.environ if environ is None else environ

    def resolve(self, name: str | None = None) -> Profile:
        profiles = self.config.profiles_by_name()
        selected = name or self.config.default_profile

        profile = profiles.get(selected)
        if profile is None:
            known = ", ".join(sorted(profiles)) or "none"
            raise ProfileNotFound(
                f"No profile named {selected!r} (known profiles: {known}); "
                "create it in the configuration file or pick another with --llm"
            )

        self._check_determinism(profile)
        api_key = self._resolve_api_key(profile)
        logger.info(f"Using profile {profile.name!r}: {profile.model_id} at {profile.endpoint}")
        return profile.model_copy(update={"api_key": api_key})

    def _check_determinism(self, profile: Profile) -> None:
        temperature = profile.sampling.temperature
        if temperature != 0 and not profile.nondeterministic:
            raise ProfileInvalid(
                f"Profile {profile.name!r} sets temperature={temperature:g}; "
                "set `nondeterministic = true` in the profile to allow non-zero temperature"
            )
        if temperature != 0:
            logger.warning(f"Profile {profile.name!r} runs with non-zero temperature {temperature:g}")

    def _resolve_api_key(self, profile: Profile) -> str:
        from_env = self.environ.get(profile.api_key_env, "").strip()
        if from_env:
            return from_env

        stored = profile.api_key.strip()
        if stored and stored != PLACEHOLDER_API_KEY:
            return stored

        raise CredentialMissing(
            f"No API key for profile {profile.name!r}: set {profile.api_key_env} "
            "or `api_key` in the configuration file"
        )
