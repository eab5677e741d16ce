"""
Map View component for Mangrove Watch

Renders report markers on an interactive map and reports empty-map clicks
to the caller. The drawing engine is a RenderBackend, so the same view works
with OpenStreetMap tiles or Mapbox tiles.
"""

import html
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Tuple, Union

from mangrove_watch.core.constants import DEFAULT_ZOOM, INDIA_CENTER
from mangrove_watch.visualization.backends import (
    ClickHandler,
    LeafletBackend,
    MapReport,
    MapSurface,
    Marker,
    RenderBackend,
)

logger = logging.getLogger(__name__)

DEFAULT_CSS_CLASS = "w-full h-[500px] rounded-lg shadow-md overflow-hidden"


@dataclass(frozen=True)
class MapProps:
    """
    Inputs of a MapView render.

    Attributes:
        reports: Reports to plot, keyed by id
        center: Initial center (lat, lng). View default if None.
        zoom: Initial zoom. View default if None.
        css_class: Sizing class of the container div
        on_location_select: Called with (lat, lng) on empty-map clicks
    """
    reports: Tuple[MapReport, ...] = ()
    center: Optional[Tuple[float, float]] = None
    zoom: Optional[int] = None
    css_class: Optional[str] = None
    on_location_select: Optional[ClickHandler] = None

    def __post_init__(self):
        object.__setattr__(self, "reports", tuple(self.reports))


class MapView:
    """
    Interactive report map.

    The view owns at most one MapSurface. Whenever a render dependency
    changes (credential, center, zoom, style, reports, callback identity)
    the old surface is disposed before the new one is built, so markers are
    always replaced as a whole.

    Usage:
        view = MapView(LeafletBackend())
        view.mount("report-map")
        html = view.render_html(MapProps(reports=reports, on_location_select=cb))
        ...
        view.unmount()
    """

    def __init__(
        self,
        backend: Optional[RenderBackend] = None,
        default_center: Tuple[float, float] = INDIA_CENTER,
        default_zoom: int = DEFAULT_ZOOM,
        default_css_class: str = DEFAULT_CSS_CLASS,
    ):
        self.backend = backend or LeafletBackend()
        self.default_center = default_center
        self.default_zoom = default_zoom
        self.default_css_class = default_css_class

        self.container: Optional[str] = None
        self.surface: Optional[MapSurface] = None
        self._dependency_key: Optional[tuple] = None
        self._callback: Optional[ClickHandler] = None

    @property
    def is_mounted(self) -> bool:
        return self.container is not None

    def mount(self, container: str) -> None:
        """Attach the view to a container element id."""
        self.container = container

    def unmount(self) -> None:
        """Dispose the surface and detach from the container."""
        self._dispose_surface()
        self.container = None

    def update(self, props: MapProps) -> Optional[MapSurface]:
        """
        Bring the surface in line with props.

        Returns:
            The live surface, or None when the view is not mounted or the
            backend lacks its credential
        """
        if self.container is None:
            logger.debug("Map container not mounted, skipping initialization")
            return None
        if not self.backend.is_ready:
            logger.debug(f"{self.backend.name} backend awaiting credential")
            return None

        center = props.center or self.default_center
        zoom = props.zoom if props.zoom is not None else self.default_zoom
        key = (
            self.backend.credential,
            tuple(center),
            zoom,
            self.backend.style,
            props.reports,
        )

        if (
            self.surface is not None
            and key == self._dependency_key
            and props.on_location_select is self._callback
        ):
            return self.surface

        self._dispose_surface()

        surface = self.backend.initialize(self.container, tuple(center), zoom)
        for report in props.reports:
            self.backend.add_marker(surface, self.backend.build_marker(report))
        if props.on_location_select is not None:
            self.backend.on_click(surface, props.on_location_select)

        self.surface = surface
        self._dependency_key = key
        self._callback = props.on_location_select

        logger.info(f"Rendered {surface.marker_count} report markers")
        return surface

    def render_html(self, props: MapProps) -> str:
        """
        Render the view to embeddable HTML.

        Returns the credential prompt when the backend is waiting for one,
        and an empty string when the view is not mounted.
        """
        if not self.backend.is_ready:
            return self.backend.credential_prompt()

        surface = self.update(props)
        if surface is None:
            return ""

        css_class = html.escape(props.css_class or self.default_css_class, quote=True)
        container = html.escape(self.container or "", quote=True)
        return f'<div id="{container}" class="{css_class}">{surface.to_html()}</div>'

    def click(
        self,
        latitude: float,
        longitude: float,
        marker_id: Optional[str] = None,
    ) -> Optional[Marker]:
        """Forward a click to the live surface, if there is one."""
        if self.surface is None:
            return None
        return self.surface.click(latitude, longitude, marker_id=marker_id)

    def _dispose_surface(self) -> None:
        if self.surface is not None:
            self.backend.dispose(self.surface)
        self.surface = None
        self._dependency_key = None
        self._callback = None


def render_reports_map(
    reports: Iterable[MapReport],
    output_path: Union[str, Path] = "mangrove_reports.html",
    backend: Optional[RenderBackend] = None,
    center: Optional[Tuple[float, float]] = None,
    zoom: Optional[int] = None,
) -> Optional[str]:
    """
    Render reports to a standalone HTML file.

    Args:
        reports: Reports to plot
        output_path: Path to save HTML file
        backend: Render backend (OpenStreetMap if None)
        center: Map center (lat, lng)
        zoom: Initial zoom level

    Returns:
        Path to saved file, or None if the backend has no credential
    """
    view = MapView(backend)
    view.mount("report-map")
    try:
        surface = view.update(MapProps(reports=tuple(reports), center=center, zoom=zoom))
        if surface is None:
            logger.warning(f"{view.backend.name} backend not ready, map not saved")
            return None
        surface.folium_map.save(str(output_path))
        logger.info(f"Map saved to {output_path}")
    finally:
        view.unmount()

    return str(output_path)
