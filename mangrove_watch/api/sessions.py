"""
Per-member service state for the API.

Each member gets a report draft, a toast queue, a report submitter and one
MapView per render backend, created on first use.
"""

import logging
import re
from pathlib import Path
from typing import Dict, Optional

from mangrove_watch.core.config import Settings
from mangrove_watch.crowdsource.geolocation import (
    GeolocationProvider,
    IPGeolocationProvider,
    LocationCapture,
)
from mangrove_watch.crowdsource.notifications import ToastQueue
from mangrove_watch.crowdsource.report_handler import ReportDraft, ReportSubmitter, Reporter
from mangrove_watch.dashboard.service import DashboardService
from mangrove_watch.database.connection import DatabaseConnection
from mangrove_watch.database.repository import ProfileRepository, ReportRepository
from mangrove_watch.storage.blob_store import BlobStore, LocalBlobStore
from mangrove_watch.visualization.backends import (
    LeafletBackend,
    MapboxBackend,
    RenderBackend,
)
from mangrove_watch.visualization.credentials import JsonFileCredentialStore
from mangrove_watch.visualization.map_view import MapView
from mangrove_watch.visualization.severity import SeverityPalette

logger = logging.getLogger(__name__)

MAP_SELECT_URL = "/api/v1/map/select"
MAP_CREDENTIAL_URL = "/api/v1/map/credential"


class MemberSession:
    """State held for one member between requests."""

    def __init__(self, reporter: Reporter, services: "AppServices"):
        self.reporter = reporter
        self.services = services
        self.draft = ReportDraft()
        self.notifier = ToastQueue()
        self.submitter = ReportSubmitter(
            reports=services.reports,
            profiles=services.profiles,
            blob_store=services.blob_store,
            notifier=self.notifier,
            points_per_report=services.settings.points_per_report,
        )
        self.dashboard = DashboardService(services.reports, services.profiles, self.notifier)
        self.map_views: Dict[str, MapView] = {}
        # Stored once so the map sees the same callback on every render
        self.on_location_select = self._select_location

    def _select_location(self, latitude: float, longitude: float) -> None:
        self.draft.set_location(latitude, longitude)
        logger.info(f"User {self.reporter.user_id} picked ({latitude}, {longitude}) on the map")

    def location_capture(self, provider: GeolocationProvider) -> LocationCapture:
        return LocationCapture(provider, self.notifier, draft=self.draft)

    def map_view(self, backend_name: str) -> MapView:
        view = self.map_views.get(backend_name)
        if view is None:
            settings = self.services.settings
            view = MapView(
                backend=self.services.create_backend(backend_name, self.reporter),
                default_center=settings.default_center,
                default_zoom=settings.default_zoom,
                default_css_class=settings.map_css_class,
            )
            view.mount(f"report-map-{backend_name}")
            self.map_views[backend_name] = view
        return view

    def close(self) -> None:
        for view in self.map_views.values():
            view.unmount()
        self.map_views.clear()


class AppServices:
    """Shared stores plus the registry of member sessions."""

    def __init__(
        self,
        settings: Settings,
        db: Optional[DatabaseConnection] = None,
        blob_store: Optional[BlobStore] = None,
        geolocation_provider: Optional[GeolocationProvider] = None,
    ):
        self.settings = settings
        self.db = db or DatabaseConnection(settings.database_url, echo=settings.database_echo)
        self.db.create_tables()

        self.reports = ReportRepository(self.db)
        self.profiles = ProfileRepository(self.db)
        self.blob_store = blob_store or LocalBlobStore(
            settings.upload_dir, settings.upload_base_url
        )
        self.geolocation_provider = geolocation_provider or IPGeolocationProvider(
            url=settings.geolocation_url,
            timeout=settings.geolocation_timeout_seconds,
        )
        self.palette = SeverityPalette.from_settings(settings)
        self._sessions: Dict[str, MemberSession] = {}

    def session_for(self, reporter: Reporter) -> MemberSession:
        session = self._sessions.get(reporter.user_id)
        if session is None:
            session = MemberSession(reporter, self)
            self._sessions[reporter.user_id] = session
        return session

    def credential_store_for(self, reporter: Reporter) -> JsonFileCredentialStore:
        safe_id = re.sub(r"[^A-Za-z0-9._-]", "_", reporter.user_id)
        return JsonFileCredentialStore(Path(self.settings.credential_store_dir) / f"{safe_id}.json")

    def create_backend(self, backend_name: str, reporter: Reporter) -> RenderBackend:
        select_url = f"{MAP_SELECT_URL}?backend={backend_name}"
        if backend_name == MapboxBackend.name:
            return MapboxBackend(
                access_token=self.settings.mapbox_access_token,
                credential_store=self.credential_store_for(reporter),
                style=self.settings.mapbox_style,
                palette=self.palette,
                select_url=select_url,
                prompt_action=MAP_CREDENTIAL_URL,
            )
        if backend_name == LeafletBackend.name:
            return LeafletBackend(palette=self.palette, select_url=select_url)
        raise ValueError(f"Unknown map backend: {backend_name}")

    def close(self) -> None:
        for session in self._sessions.values():
            session.close()
        self._sessions.clear()
        self.db.close()
