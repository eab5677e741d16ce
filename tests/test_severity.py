"""
Tests for the severity color palette
"""
import pytest

from mangrove_watch.core.config import Settings
from mangrove_watch.visualization.severity import (
    DEFAULT_NEUTRAL_COLOR,
    DEFAULT_PALETTE,
    Severity,
    SeverityPalette,
    get_severity_color,
)


class TestSeverityPalette:
    """Test suite for severity colors."""

    @pytest.mark.parametrize("severity", ["critical", "high", "medium", "low"])
    def test_known_severity_is_not_default(self, severity):
        """Each known severity has its own color."""
        assert DEFAULT_PALETTE.color_for(severity) != DEFAULT_PALETTE.default

    def test_known_colors_are_distinct(self):
        """No two severities share a color."""
        colors = [DEFAULT_PALETTE.color_for(s) for s in ["critical", "high", "medium", "low"]]
        assert len(set(colors)) == 4

    @pytest.mark.parametrize("severity", ["", None, "unknown", "CRITICAL", "severe"])
    def test_other_values_use_default(self, severity):
        """Anything outside the closed set is neutral."""
        assert DEFAULT_PALETTE.color_for(severity) == DEFAULT_NEUTRAL_COLOR

    def test_default_palette_values(self):
        """Default table matches the Leaflet palette."""
        assert get_severity_color("critical") == "#dc2626"
        assert get_severity_color("high") == "#f97316"
        assert get_severity_color("medium") == "#eab308"
        assert get_severity_color("low") == "#16a34a"
        assert get_severity_color("whatever") == "#6b7280"

    def test_palette_from_settings(self):
        """Palette can be overridden through settings."""
        settings = Settings(
            severity_colors={"critical": "red", "high": "orange", "medium": "yellow", "low": "green"},
            severity_default_color="gray",
            marker_radius=6,
        )
        palette = SeverityPalette.from_settings(settings)

        assert palette.color_for("critical") == "red"
        assert palette.color_for("bogus") == "gray"
        assert palette.marker_radius == 6

    def test_partial_table_falls_back_to_default(self):
        """A known severity missing from a custom table is neutral."""
        palette = SeverityPalette(colors={"critical": "#000000"}, default="#cccccc")
        assert palette.color_for("critical") == "#000000"
        assert palette.color_for("low") == "#cccccc"


class TestSeverityEnum:
    """Test Severity parsing."""

    def test_parse_known(self):
        assert Severity.parse("high") is Severity.HIGH

    def test_parse_unknown(self):
        assert Severity.parse("catastrophic") is Severity.UNKNOWN
        assert Severity.parse(None) is Severity.UNKNOWN
