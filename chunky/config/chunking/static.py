"""Static delimiter profile loader. Read-only; no business logic."""

import json
from pathlib import Path

from chunky.config.chunking.models import DelimiterProfile

_config_dir = Path(__file__).resolve().parent
_config_path = _config_dir / "static.json"

_cached: dict[str, DelimiterProfile] | None = None
_active_profile: str | None = None


def _load_raw_data() -> dict:
    """Load raw JSON; used to read both profiles and active."""
    raw = _config_path.read_text(encoding="utf-8")
    return json.loads(raw)


def load_delimiter_profiles() -> dict[str, DelimiterProfile]:
    """Load delimiter profiles from static.json. Keys are profile names."""
    global _cached
    if _cached is not None:
        return _cached
    data = _load_raw_data()
    profiles = data.get("profiles", {})
    _cached = {k: DelimiterProfile.model_validate(v) for k, v in profiles.items()}
    return _cached


def get_delimiter_profile(profile_name: str) -> DelimiterProfile | None:
    """Return the delimiter profile with the given name, or None if missing."""
    return load_delimiter_profiles().get(profile_name)


def get_active_profile_name() -> str:
    """Return the profile name marked as active in static.json. Defaults to 'whitespace' if missing."""
    global _active_profile
    if _active_profile is not None:
        return _active_profile
    data = _load_raw_data()
    _active_profile = data.get("active", "whitespace")
    return _active_profile


def resolve_delimiter_profile(profile_name: str) -> DelimiterProfile:
    """
    Resolve a delimiter profile by name. "active" means the profile marked as active
    in static.json. Raises ValueError for unknown names.
    """
    if profile_name == "active":
        profile_name = get_active_profile_name()
    profile = get_delimiter_profile(profile_name)
    if profile is None:
        known = ", ".join(sorted(load_delimiter_profiles()))
        raise ValueError(f"Unknown delimiter profile: {profile_name!r} (known: {known})")
    return profile
