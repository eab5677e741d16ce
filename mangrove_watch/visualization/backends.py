"""
Map Render Backends for Mangrove Watch

A render backend draws the live map surface behind a MapView. Two backends
share one contract:

- LeafletBackend: open OpenStreetMap tile layer, always available
- MapboxBackend: commercial Mapbox tiles, gated behind an access token

Maps are built with Folium. Marker clicks stay on the marker (popup) and
never reach the map click handler.
"""

import html
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

import folium
from branca.element import MacroElement
from jinja2 import Template

from mangrove_watch.core.constants import (
    MAPBOX_ATTRIBUTION,
    MAPBOX_TILE_URL,
    MAPBOX_TOKEN_KEY,
    OSM_ATTRIBUTION,
    OSM_TILE_URL,
)
from mangrove_watch.core.exceptions import CredentialMissingError
from mangrove_watch.visualization.credentials import (
    CredentialStore,
    InMemoryCredentialStore,
)
from mangrove_watch.visualization.severity import DEFAULT_PALETTE, SeverityPalette

logger = logging.getLogger(__name__)

ClickHandler = Callable[[float, float], None]


@dataclass(frozen=True)
class MapReport:
    """
    Read-only projection of an incident report, as drawn on the map.

    Coordinates are used exactly as given; nothing is validated here.
    """
    id: str
    latitude: float
    longitude: float
    title: str
    incident_type: str
    severity: Optional[str] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "MapReport":
        """Build from a stored report dictionary."""
        return cls(
            id=str(record["id"]),
            latitude=float(record["latitude"]),
            longitude=float(record["longitude"]),
            title=record.get("title") or "",
            incident_type=record.get("incident_type") or "",
            severity=record.get("severity"),
        )


@dataclass(frozen=True)
class Marker:
    """A colored circle for one report."""
    report_id: str
    latitude: float
    longitude: float
    color: str
    radius: int
    popup_html: str


class ClickForwarder(MacroElement):
    """Posts empty-map clicks back to the service as JSON."""

    _template = Template(u"""
        {% macro script(this, kwargs) %}
            {{ this._parent.get_name() }}.on('click', function(e) {
                fetch({{ this.select_url|tojson }}, {
                    method: 'POST',
                    credentials: 'same-origin',
                    headers: {'Content-Type': 'application/json'},
                    body: JSON.stringify({
                        latitude: e.latlng.lat,
                        longitude: e.latlng.lng
                    })
                });
            });
        {% endmacro %}
    """)

    def __init__(self, select_url: str):
        super().__init__()
        self._name = "ClickForwarder"
        self.select_url = select_url


class MapSurface:
    """
    One live map instance owned by a MapView.

    Holds the Folium map, the markers keyed by report id, and the click
    handlers. Once disposed it ignores every event.
    """

    def __init__(
        self,
        backend_name: str,
        container: str,
        center: Tuple[float, float],
        zoom: int,
        folium_map: folium.Map,
        marker_layer: folium.FeatureGroup,
    ):
        self.backend_name = backend_name
        self.container = container
        self.center = center
        self.zoom = zoom
        self.folium_map: Optional[folium.Map] = folium_map
        self.marker_layer: Optional[folium.FeatureGroup] = marker_layer
        self.markers: Dict[str, Marker] = {}
        self.layers: Dict[str, folium.CircleMarker] = {}
        self.open_popup: Optional[str] = None
        self.disposed = False
        self._click_handlers: List[ClickHandler] = []

    @property
    def marker_count(self) -> int:
        return len(self.markers)

    @property
    def click_handler_count(self) -> int:
        return len(self._click_handlers)

    def add_click_handler(self, handler: ClickHandler) -> None:
        self._click_handlers.append(handler)

    def click(
        self,
        latitude: float,
        longitude: float,
        marker_id: Optional[str] = None,
    ) -> Optional[Marker]:
        """
        Deliver a click to the surface.

        Args:
            latitude: Clicked latitude
            longitude: Clicked longitude
            marker_id: Report id of the marker under the pointer, if any

        Returns:
            The marker whose popup was opened, or None for a map click
        """
        if self.disposed:
            logger.debug(f"Ignoring click on disposed {self.backend_name} surface")
            return None

        if marker_id is not None:
            marker = self.markers.get(marker_id)
            if marker is None:
                logger.debug(f"Ignoring click on unknown marker {marker_id}")
                return None
            self.open_popup = marker_id
            return marker

        self.open_popup = None
        for handler in list(self._click_handlers):
            handler(latitude, longitude)
        return None

    def to_html(self) -> str:
        """Embeddable HTML for the map."""
        if self.disposed or self.folium_map is None:
            return ""
        return self.folium_map._repr_html_()

    def close(self) -> None:
        self._click_handlers.clear()
        self.markers.clear()
        self.layers.clear()
        self.open_popup = None
        self.folium_map = None
        self.marker_layer = None
        self.disposed = True


class RenderBackend(ABC):
    """
    Map drawing engine behind a MapView.

    Subclasses only decide how the base map is created; markers, click
    wiring and disposal are shared.
    """

    name = "base"

    def __init__(
        self,
        palette: Optional[SeverityPalette] = None,
        select_url: Optional[str] = None,
    ):
        """
        Args:
            palette: Severity color table (default palette if None)
            select_url: URL the browser posts empty-map clicks to
        """
        self.palette = palette or DEFAULT_PALETTE
        self.select_url = select_url

    @property
    def is_ready(self) -> bool:
        return True

    @property
    def credential(self) -> Optional[str]:
        return None

    @property
    def style(self) -> Optional[str]:
        return None

    def credential_prompt(self) -> str:
        return ""

    @abstractmethod
    def _create_map(self, center: Tuple[float, float], zoom: int) -> folium.Map:
        """Create the base map with its tile layer."""

    def initialize(
        self,
        container: str,
        center: Tuple[float, float],
        zoom: int,
    ) -> MapSurface:
        """
        Create a new map surface.

        Raises:
            CredentialMissingError: If the backend is not ready
        """
        if not self.is_ready:
            raise CredentialMissingError(f"{self.name} backend has no access credential")

        folium_map = self._create_map(center, zoom)
        marker_layer = folium.FeatureGroup(name="Reports")
        marker_layer.add_to(folium_map)
        folium_map.get_root().html.add_child(folium.Element(self._legend_html()))

        logger.info(f"Initialized {self.name} map in '{container}' at {center} zoom {zoom}")
        return MapSurface(
            backend_name=self.name,
            container=container,
            center=center,
            zoom=zoom,
            folium_map=folium_map,
            marker_layer=marker_layer,
        )

    def build_marker(self, report: MapReport) -> Marker:
        """Create the marker for one report."""
        color = self.palette.color_for(report.severity)
        return Marker(
            report_id=report.id,
            latitude=report.latitude,
            longitude=report.longitude,
            color=color,
            radius=self.palette.marker_radius,
            popup_html=self._popup_html(report, color),
        )

    def add_marker(self, surface: MapSurface, marker: Marker) -> None:
        """Draw a marker, replacing any marker already shown for the same report."""
        previous = surface.layers.pop(marker.report_id, None)
        if previous is not None:
            surface.marker_layer._children.pop(previous.get_name(), None)
            logger.debug(f"Replacing marker for report {marker.report_id}")

        circle = folium.CircleMarker(
            location=[marker.latitude, marker.longitude],
            radius=marker.radius,
            popup=folium.Popup(marker.popup_html, max_width=300),
            color="#ffffff",
            weight=2,
            fill=True,
            fill_color=marker.color,
            fill_opacity=1.0,
            bubbling_mouse_events=False,
        )
        circle.add_to(surface.marker_layer)
        surface.layers[marker.report_id] = circle
        surface.markers[marker.report_id] = marker

    def on_click(self, surface: MapSurface, handler: ClickHandler) -> None:
        surface.add_click_handler(handler)
        if self.select_url:
            ClickForwarder(self.select_url).add_to(surface.folium_map)

    def dispose(self, surface: MapSurface) -> None:
        if surface.disposed:
            return
        surface.close()
        logger.info(f"Disposed {self.name} map in '{surface.container}'")

    def _popup_html(self, report: MapReport, color: str) -> str:
        severity = (report.severity or "unknown").upper()
        return f"""
        <div style="font-family: Arial; min-width: 160px; padding: 4px;">
            <h3 style="margin: 0; font-weight: bold; color: #1f2937;">{html.escape(report.title)}</h3>
            <p style="margin: 2px 0; font-size: 13px; color: #4b5563;">{html.escape(report.incident_type)}</p>
            <span style="display: inline-block; margin-top: 4px; padding: 1px 8px;
                         font-size: 11px; border-radius: 9999px; color: white;
                         background-color: {color};">{html.escape(severity)}</span>
        </div>
        """

    def _legend_html(self) -> str:
        rows = "".join(
            f'<span style="color: {color};">●</span> {html.escape(level.title())}<br>'
            for level, color in self.palette.colors.items()
        )
        return f'''
        <div style="position: fixed;
                    bottom: 30px; right: 30px;
                    background-color: rgba(255,255,255,0.9);
                    padding: 10px;
                    border-radius: 5px;
                    z-index: 9999;
                    font-family: Arial;
                    font-size: 12px;">
            <b>Severity</b><br>
            {rows}
            <span style="color: {self.palette.default};">●</span> Unknown
        </div>
        '''


class LeafletBackend(RenderBackend):
    """Open tile-layer renderer (OpenStreetMap)."""

    name = "leaflet"

    def _create_map(self, center: Tuple[float, float], zoom: int) -> folium.Map:
        leaflet_map = folium.Map(location=center, zoom_start=zoom, tiles=None)
        folium.TileLayer(
            tiles=OSM_TILE_URL,
            attr=OSM_ATTRIBUTION,
            name="OpenStreetMap",
        ).add_to(leaflet_map)
        return leaflet_map


class CredentialState(str, Enum):
    """Mapbox renderer readiness."""
    AWAITING_CREDENTIAL = "awaiting_credential"
    READY = "ready"


class MapboxBackend(RenderBackend):
    """
    Commercial tile renderer (Mapbox).

    Usage:
        backend = MapboxBackend(credential_store=JsonFileCredentialStore(path))
        if backend.state is CredentialState.AWAITING_CREDENTIAL:
            backend.submit_credential(user_input)

    The token is read once at construction: an explicit access_token wins,
    otherwise the store is consulted.
    """

    name = "mapbox"

    def __init__(
        self,
        access_token: Optional[str] = None,
        credential_store: Optional[CredentialStore] = None,
        style: str = "mapbox/streets-v12",
        palette: Optional[SeverityPalette] = None,
        select_url: Optional[str] = None,
        prompt_action: str = "",
    ):
        super().__init__(palette=palette, select_url=select_url)
        self.credential_store = credential_store or InMemoryCredentialStore()
        self._style = style
        self.prompt_action = prompt_action

        token = access_token or self.credential_store.get(MAPBOX_TOKEN_KEY)
        self._token: Optional[str] = token.strip() if token and token.strip() else None

    @property
    def state(self) -> CredentialState:
        if self._token:
            return CredentialState.READY
        return CredentialState.AWAITING_CREDENTIAL

    @property
    def is_ready(self) -> bool:
        return self.state is CredentialState.READY

    @property
    def credential(self) -> Optional[str]:
        return self._token

    @property
    def style(self) -> Optional[str]:
        return self._style

    def submit_credential(self, value: Optional[str]) -> bool:
        """
        Accept a token entered by the user.

        Args:
            value: Raw form input

        Returns:
            True if the token was stored and the backend is now ready
        """
        token = (value or "").strip()
        if not token:
            logger.info("Rejected empty Mapbox access token")
            return False

        self.credential_store.set(MAPBOX_TOKEN_KEY, token)
        self._token = token
        logger.info("Mapbox access token stored, renderer ready")
        return True

    def credential_prompt(self) -> str:
        action = html.escape(self.prompt_action, quote=True)
        return f"""
        <div style="font-family: Arial; max-width: 420px; margin: 40px auto; padding: 20px;
                    border: 1px solid #e5e7eb; border-radius: 8px;">
            <h3 style="margin-top: 0;">Mapbox access token required</h3>
            <p style="font-size: 13px; color: #4b5563;">
                Enter your public Mapbox token to display the map. Get one at
                <a href="https://account.mapbox.com/" target="_blank" rel="noopener">mapbox.com</a>.
            </p>
            <form method="post" action="{action}">
                <input type="text" name="access_token" placeholder="pk.eyJ1Ijo..." required
                       style="width: 100%; padding: 6px; margin-bottom: 10px;">
                <button type="submit">Load Map</button>
            </form>
        </div>
        """

    def _create_map(self, center: Tuple[float, float], zoom: int) -> folium.Map:
        mapbox_map = folium.Map(location=center, zoom_start=zoom, tiles=None)
        folium.TileLayer(
            tiles=MAPBOX_TILE_URL.format(style=self._style, token=self._token),
            attr=MAPBOX_ATTRIBUTION,
            name="Mapbox",
            max_zoom=22,
        ).add_to(mapbox_map)
        return mapbox_map
