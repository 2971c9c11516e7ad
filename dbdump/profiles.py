"""
Saved connection profiles for dbdump.
"""

import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from .config import get_config_dir
from .exceptions import ConfigError
from .models import ConnectionSettings


@dataclass
class ConnectionProfile:
    """A named set of connection parameters."""
    name: str
    host: str = "127.0.0.1"
    port: int = 3306
    user: str = ""
    password: Optional[str] = None
    database: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ConnectionProfile":
        if not isinstance(data, dict) or 'name' not in data:
            raise ConfigError(f"Invalid profile entry: {data!r}")
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)

    def to_dict(self) -> dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}

    def to_settings(self) -> ConnectionSettings:
        return ConnectionSettings(
            host=self.host,
            port=self.port,
            user=self.user,
            password=self.password or "",
            database=self.database or ""
        )


@dataclass
class ProfilesConfig:
    """Contents of the profiles file."""
    profiles: list[ConnectionProfile] = field(default_factory=list)

    def get_profile(self, name: str) -> ConnectionProfile:
        for profile in self.profiles:
            if profile.name == name:
                return profile
        raise ValueError(f"Profile '{name}' not found")

    def add_profile(self, profile: ConnectionProfile) -> None:
        """Add a profile, replacing any existing profile with the same name."""
        for i, existing in enumerate(self.profiles):
            if existing.name == profile.name:
                self.profiles[i] = profile
                return
        self.profiles.append(profile)

    def remove_profile(self, name: str) -> None:
        for i, existing in enumerate(self.profiles):
            if existing.name == name:
                del self.profiles[i]
                return
        raise ValueError(f"Profile '{name}' not found")


def get_profiles_path() -> Path:
    return get_config_dir() / "profiles.yaml"


def load_profiles(path: Optional[Path] = None) -> ProfilesConfig:
    """Load saved profiles. A missing file yields an empty config."""
    path = path or get_profiles_path()
    if not path.is_file():
        return ProfilesConfig()

    with open(path, 'r') as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ConfigError(f"Top level of '{path}' must be a mapping")

    entries = data.get('profiles') or []
    return ProfilesConfig(profiles=[ConnectionProfile.from_dict(entry) for entry in entries])


def save_profiles(config: ProfilesConfig, path: Optional[Path] = None) -> None:
    """Write profiles to disk, readable by the owner only."""
    path = path or get_profiles_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    data = {'profiles': [profile.to_dict() for profile in config.profiles]}
    fd = os.open(path, os.O_CREAT | os.O_TRUNC | os.O_WRONLY, 0o600)
    with os.fdopen(fd, 'w') as f:
        yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)

    logging.debug(f"Saved {len(config.profiles)} profile(s) to {path}")
