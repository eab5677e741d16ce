"""
Mangrove Watch - Exception hierarchy
"""


class MangroveWatchError(Exception):
    """Base class for all application errors."""


class ValidationError(MangroveWatchError):
    """User supplied data is incomplete or malformed."""


class CredentialMissingError(MangroveWatchError):
    """A render backend was asked to draw without its access credential."""


class StoreError(MangroveWatchError):
    """The record store failed to read or write."""


class StorageError(MangroveWatchError):
    """The blob store rejected or failed an upload."""


class GeolocationError(MangroveWatchError):
    """The current coordinate could not be determined."""
