"""
Mangrove Watch - Constants and Reference Data
Static values used throughout the application.
"""

from typing import Dict, List, Tuple

# =============================================================================
# MAP DEFAULTS
# =============================================================================

# India center coordinates
INDIA_CENTER: Tuple[float, float] = (20.5937, 78.9629)

DEFAULT_ZOOM: int = 5

OSM_TILE_URL = "https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png"
OSM_ATTRIBUTION = '&copy; <a href="https://osm.org/copyright">OpenStreetMap</a>'

MAPBOX_TILE_URL = (
    "https://api.mapbox.com/styles/v1/{style}/tiles/256/{{z}}/{{x}}/{{y}}@2x"
    "?access_token={token}"
)
MAPBOX_ATTRIBUTION = (
    '&copy; <a href="https://www.mapbox.com/about/maps/">Mapbox</a> '
    '&copy; <a href="https://osm.org/copyright">OpenStreetMap</a>'
)

# Local storage key of the Mapbox access token
MAPBOX_TOKEN_KEY = "mapbox_token"

# =============================================================================
# REPORTS
# =============================================================================

SEVERITY_LEVELS: List[str] = ["critical", "high", "medium", "low"]

INCIDENT_TYPES: List[str] = [
    "illegal_cutting",
    "dumping",
    "pollution",
    "land_reclamation",
    "other",
]

USER_ROLES: List[str] = [
    "community_member",
    "fisherman",
    "government_authority",
    "ngo",
    "researcher",
]

PHOTO_KEY_PREFIX = "reports"

RECENT_REPORTS_LIMIT = 5

# =============================================================================
# DASHBOARD BADGES
# =============================================================================

SEVERITY_BADGE_CLASSES: Dict[str, str] = {
    "critical": "bg-destructive text-destructive-foreground",
    "high": "bg-warning text-warning-foreground",
    "medium": "bg-secondary text-secondary-foreground",
    "low": "bg-success text-success-foreground",
}

STATUS_BADGE_CLASSES: Dict[str, str] = {
    "verified": "bg-success text-success-foreground",
    "investigating": "bg-warning text-warning-foreground",
    "resolved": "bg-primary text-primary-foreground",
    "rejected": "bg-destructive text-destructive-foreground",
}

MUTED_BADGE_CLASS = "bg-muted text-muted-foreground"
