"""
Mangrove Watch - Visualization Module
Report maps over interchangeable render backends.
"""

from mangrove_watch.visualization.severity import (
    Severity,
    SeverityPalette,
    DEFAULT_PALETTE,
    get_severity_color,
)
from mangrove_watch.visualization.credentials import (
    CredentialStore,
    InMemoryCredentialStore,
    JsonFileCredentialStore,
)
from mangrove_watch.visualization.backends import (
    MapReport,
    Marker,
    MapSurface,
    RenderBackend,
    LeafletBackend,
    MapboxBackend,
    CredentialState,
)
from mangrove_watch.visualization.map_view import (
    MapProps,
    MapView,
    render_reports_map,
)

__all__ = [
    # Severity
    "Severity",
    "SeverityPalette",
    "DEFAULT_PALETTE",
    "get_severity_color",
    # Credentials
    "CredentialStore",
    "InMemoryCredentialStore",
    "JsonFileCredentialStore",
    # Backends
    "MapReport",
    "Marker",
    "MapSurface",
    "RenderBackend",
    "LeafletBackend",
    "MapboxBackend",
    "CredentialState",
    # Map View
    "MapProps",
    "MapView",
    "render_reports_map",
]
