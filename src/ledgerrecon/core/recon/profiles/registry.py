"""
Profile Registry for ledgerrecon reconciliation profiles.

A profile is a named, versioned YAML file holding a reconciliation
configuration (match keys, tolerance, tolerance mode). This module handles
loading, caching and validating profiles, and returns a SHA256 hash of the
file so a run can record exactly which configuration it used.

Key Functions:
    - load_profile: Load and validate a profile from YAML
    - get_profile_hash: Calculate SHA256 hash of a profile file
    - get_profile: Get profile with caching (preferred method)
"""

import hashlib
import logging
import os
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

import yaml

from ledgerrecon.core.recon.models import ConfigurationError, ReconciliationConfig

logger = logging.getLogger(__name__)


PROFILE_DIR_ENV = "LEDGERRECON_PROFILE_DIR"

REQUIRED_FIELDS = ["name", "version", "description", "key_columns", "tolerance", "tolerance_mode"]

# Profile names are plain file stems (no path separators, no "..")
_PROFILE_NAME_PATTERN = re.compile(r"[A-Za-z0-9_-]+")


@dataclass(frozen=True)
class ReconciliationProfile:
    """
    A named reconciliation configuration loaded from YAML.

    Attributes:
        name: Profile name (matches the file stem)
        version: Profile version number (integer, >= 1)
        description: Human-readable description
        config: Validated reconciliation configuration
    """
    name: str
    version: int
    description: str
    config: ReconciliationConfig

    def __post_init__(self):
        if self.version < 1:
            raise ValueError(f"Profile version must be >= 1, got {self.version}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "description": self.description,
            **self.config.to_dict(),
        }


def get_profiles_dir() -> Path:
    """
    Get the path to the profiles directory.

    Uses ``LEDGERRECON_PROFILE_DIR`` when set, otherwise the directory
    containing this module.
    """
    override = os.environ.get(PROFILE_DIR_ENV)
    profiles_dir = Path(override) if override else Path(__file__).resolve().parent

    if not profiles_dir.exists():
        raise FileNotFoundError(f"Profiles directory not found: {profiles_dir}")

    return profiles_dir


def get_profile_hash(profile_path: Path) -> str:
    """
    Calculate SHA256 hash of a profile file.

    Args:
        profile_path: Path to the profile YAML file

    Returns:
        SHA256 hash as hexadecimal string
    """
    sha256_hash = hashlib.sha256()

    with open(profile_path, "rb") as f:
        for byte_block in iter(lambda: f.read(4096), b""):
            sha256_hash.update(byte_block)

    return sha256_hash.hexdigest()


def load_profile(name: str) -> tuple[ReconciliationProfile, str]:
    """
    Load a reconciliation profile from YAML file.

    Args:
        name: Profile name (e.g., "DEFAULT", "INVOICE")

    Returns:
        Tuple of (ReconciliationProfile, profile_hash)

    Raises:
        FileNotFoundError: If profile file not found
        ValueError: If the name is not a plain file stem or the profile YAML is invalid
    """
    if not isinstance(name, str) or not _PROFILE_NAME_PATTERN.fullmatch(name):
        raise ValueError(f"Invalid profile name: {name!r}")

    profile_file = get_profiles_dir() / f"{name}.yaml"

    if not profile_file.exists():
        raise FileNotFoundError(f"Unknown reconciliation profile: {name}")

    profile_hash = get_profile_hash(profile_file)

    try:
        with open(profile_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Failed to parse YAML from {profile_file.name}: {e}")

    if not isinstance(data, dict):
        raise ValueError(f"Profile {profile_file.name} must contain a mapping")

    missing_fields = [f for f in REQUIRED_FIELDS if f not in data]
    if missing_fields:
        raise ValueError(f"Missing required fields in {profile_file.name}: {missing_fields}")

    if data["name"] != name:
        logger.warning(
            f"Profile file {profile_file} declares name '{data['name']}', "
            f"but '{name}' was requested. Using file name."
        )

    try:
        config = ReconciliationConfig.from_dict(data)
    except ConfigurationError as e:
        raise ValueError(f"Invalid configuration in {profile_file.name}: {e}")

    try:
        version = int(data["version"])
    except (TypeError, ValueError):
        raise ValueError(f"Invalid version in {profile_file.name}: {data['version']!r}")

    profile = ReconciliationProfile(
        name=name,
        version=version,
        description=str(data["description"]),
        config=config,
    )

    logger.info(
        f"Loaded reconciliation profile: {name} v{profile.version} "
        f"(keys={list(config.key_columns)}, hash={profile_hash[:8]}...)"
    )

    return profile, profile_hash


@lru_cache(maxsize=32)
def get_profile(name: str) -> tuple[ReconciliationProfile, str]:
    """
    Get a reconciliation profile with caching.

    This is the preferred way to load profiles as it uses LRU caching
    to avoid repeated file I/O and parsing.
    """
    return load_profile(name)


def get_available_profiles() -> list[str]:
    """Return the sorted names of all profiles in the profiles directory."""
    return sorted(f.stem for f in get_profiles_dir().glob("*.yaml"))


def clear_cache():
    """Clear the profile cache. Useful for testing or reloading profiles."""
    get_profile.cache_clear()
    logger.info("Cleared reconciliation profile cache")


__all__ = [
    "PROFILE_DIR_ENV",
    "ReconciliationProfile",
    "get_profiles_dir",
    "load_profile",
    "get_profile",
    "get_profile_hash",
    "get_available_profiles",
    "clear_cache",
]
