"""
Reconciliation profiles.

Named YAML configurations (match keys, tolerance, tolerance mode) with
SHA256 hashing and LRU caching.

Example:
    >>> from ledgerrecon.core.recon.profiles import get_profile
    >>> profile, profile_hash = get_profile("INVOICE")
    >>> profile.config.key_columns
    ('Invoice ID',)
"""

from .registry import (
    PROFILE_DIR_ENV,
    ReconciliationProfile,
    clear_cache,
    get_available_profiles,
    get_profile,
    get_profile_hash,
    get_profiles_dir,
    load_profile,
)

__all__ = [
    "PROFILE_DIR_ENV",
    "ReconciliationProfile",
    "clear_cache",
    "get_available_profiles",
    "get_profile",
    "get_profile_hash",
    "get_profiles_dir",
    "load_profile",
]
