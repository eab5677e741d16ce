"""
Mangrove Watch - Core Utilities
Central configuration, constants, and the exception hierarchy.
"""

from mangrove_watch.core.config import Settings, get_settings, settings
from mangrove_watch.core.constants import (
    INDIA_CENTER,
    DEFAULT_ZOOM,
    MAPBOX_TOKEN_KEY,
    SEVERITY_LEVELS,
)
from mangrove_watch.core.exceptions import (
    MangroveWatchError,
    ValidationError,
    CredentialMissingError,
    StoreError,
    StorageError,
    GeolocationError,
)

__all__ = [
    "Settings",
    "get_settings",
    "settings",
    "INDIA_CENTER",
    "DEFAULT_ZOOM",
    "MAPBOX_TOKEN_KEY",
    "SEVERITY_LEVELS",
    "MangroveWatchError",
    "ValidationError",
    "CredentialMissingError",
    "StoreError",
    "StorageError",
    "GeolocationError",
]
