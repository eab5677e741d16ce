"""
Severity color palette for report markers.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Mapping, Optional

from mangrove_watch.core.config import Settings


class Severity(str, Enum):
    """Closed set of report severities."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Severity":
        """Map any string onto the closed set, falling back to UNKNOWN."""
        try:
            severity = cls(value)
        except ValueError:
            return cls.UNKNOWN
        return severity


DEFAULT_SEVERITY_COLORS: Dict[str, str] = {
    "critical": "#dc2626",  # red-600
    "high": "#f97316",      # orange-500
    "medium": "#eab308",    # yellow-500
    "low": "#16a34a",       # green-600
}

DEFAULT_NEUTRAL_COLOR = "#6b7280"  # gray-500


@dataclass(frozen=True)
class SeverityPalette:
    """
    Fixed lookup table from severity to marker color.

    Attributes:
        colors: Color per known severity
        default: Color for anything outside the closed set
        marker_radius: Circle marker radius in pixels
    """
    colors: Mapping[str, str] = field(
        default_factory=lambda: dict(DEFAULT_SEVERITY_COLORS)
    )
    default: str = DEFAULT_NEUTRAL_COLOR
    marker_radius: int = 9

    def color_for(self, severity: Optional[str]) -> str:
        """Get marker color based on severity."""
        if Severity.parse(severity) is Severity.UNKNOWN:
            return self.default
        return self.colors.get(severity, self.default)

    @classmethod
    def from_settings(cls, settings: Settings) -> "SeverityPalette":
        return cls(
            colors=dict(settings.severity_colors),
            default=settings.severity_default_color,
            marker_radius=settings.marker_radius,
        )


DEFAULT_PALETTE = SeverityPalette()


def get_severity_color(severity: Optional[str]) -> str:
    """Get marker color for a severity using the default palette."""
    return DEFAULT_PALETTE.color_for(severity)
