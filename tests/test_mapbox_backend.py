"""
Tests for the Mapbox render backend and credential stores
"""
import json

import pytest
from unittest.mock import MagicMock

from mangrove_watch.core.constants import MAPBOX_TOKEN_KEY
from mangrove_watch.core.exceptions import CredentialMissingError
from mangrove_watch.visualization import (
    CredentialState,
    InMemoryCredentialStore,
    JsonFileCredentialStore,
    MapboxBackend,
    MapProps,
    MapView,
)


class TestMapboxCredentialFlow:
    """Test the credential state machine."""

    def setup_method(self):
        """Setup test fixtures."""
        self.store = InMemoryCredentialStore()
        self.backend = MapboxBackend(credential_store=self.store, prompt_action="/api/v1/map/credential")
        self.view = MapView(self.backend)
        self.view.mount("mapbox-map")

    def test_no_credential_awaits(self):
        """Without a stored token the backend waits for one."""
        assert self.backend.state is CredentialState.AWAITING_CREDENTIAL
        assert not self.backend.is_ready

    def test_prompt_rendered_instead_of_map(self, sample_reports):
        """Rendering shows the credential form, not a map."""
        html = self.view.render_html(MapProps(reports=sample_reports))

        assert "Mapbox access token required" in html
        assert 'name="access_token"' in html
        assert 'action="/api/v1/map/credential"' in html
        assert self.view.surface is None

    def test_update_without_credential_is_silent(self, sample_reports):
        """No initialization and no error while waiting."""
        assert self.view.update(MapProps(reports=sample_reports)) is None

    def test_initialize_without_credential_raises(self):
        """Direct initialization is a programming error."""
        with pytest.raises(CredentialMissingError):
            self.backend.initialize("mapbox-map", (0.0, 0.0), 3)

    @pytest.mark.parametrize("value", ["", "   ", None])
    def test_blank_credential_rejected(self, value):
        """Blank input keeps the prompt."""
        assert self.backend.submit_credential(value) is False
        assert self.backend.state is CredentialState.AWAITING_CREDENTIAL
        assert self.store.get(MAPBOX_TOKEN_KEY) is None

    def test_submit_credential_persists_and_renders_map(self, sample_reports):
        """A token is trimmed, stored, and the next render shows the map."""
        assert self.backend.submit_credential("  pk.test-token  ") is True

        assert self.backend.state is CredentialState.READY
        assert self.store.get(MAPBOX_TOKEN_KEY) == "pk.test-token"

        html = self.view.render_html(MapProps(reports=sample_reports))
        assert "Mapbox access token required" not in html
        assert self.view.surface.marker_count == 2

    def test_tile_url_uses_token_and_style(self, sample_reports):
        """Tiles come from the configured style with the token."""
        self.backend.submit_credential("pk.abc")
        surface = self.view.update(MapProps(reports=sample_reports))
        rendered = surface.folium_map.get_root().render()

        assert "api.mapbox.com/styles/v1/mapbox/streets-v12/tiles" in rendered
        assert "access_token=pk.abc" in rendered

    def test_credential_change_recreates_surface(self, sample_reports):
        """A new token is a render dependency."""
        self.backend.submit_credential("pk.one")
        first = self.view.update(MapProps(reports=sample_reports))
        self.backend.submit_credential("pk.two")
        second = self.view.update(MapProps(reports=sample_reports))

        assert first.disposed
        assert second is not first

    def test_unmount_stops_callbacks(self, sample_reports):
        """After unmount the surface fires nothing."""
        self.backend.submit_credential("pk.abc")
        callback = MagicMock()
        surface = self.view.update(MapProps(reports=sample_reports, on_location_select=callback))

        self.view.unmount()
        surface.click(3.0, 4.0)

        callback.assert_not_called()
        assert surface.folium_map is None


class TestMapboxCredentialSources:
    """Test where the token comes from."""

    def test_stored_credential_read_at_construction(self):
        """A token already in the store makes the backend ready."""
        store = InMemoryCredentialStore({MAPBOX_TOKEN_KEY: "pk.saved"})
        backend = MapboxBackend(credential_store=store)

        assert backend.is_ready
        assert backend.credential == "pk.saved"

    def test_explicit_token_wins(self):
        """Configured token takes precedence over the store."""
        store = InMemoryCredentialStore({MAPBOX_TOKEN_KEY: "pk.saved"})
        backend = MapboxBackend(access_token="pk.config", credential_store=store)

        assert backend.credential == "pk.config"

    def test_store_read_only_once(self):
        """Later store writes do not change a constructed backend."""
        store = InMemoryCredentialStore()
        backend = MapboxBackend(credential_store=store)
        store.set(MAPBOX_TOKEN_KEY, "pk.late")

        assert not backend.is_ready


class TestJsonFileCredentialStore:
    """Test file-backed credential storage."""

    def test_round_trip_across_instances(self, tmp_path):
        path = tmp_path / "creds" / "user.json"
        JsonFileCredentialStore(path).set(MAPBOX_TOKEN_KEY, "pk.file")

        assert JsonFileCredentialStore(path).get(MAPBOX_TOKEN_KEY) == "pk.file"
        assert json.loads(path.read_text())[MAPBOX_TOKEN_KEY] == "pk.file"

    def test_missing_file(self, tmp_path):
        assert JsonFileCredentialStore(tmp_path / "none.json").get(MAPBOX_TOKEN_KEY) is None

    def test_corrupt_file_ignored(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json")

        assert JsonFileCredentialStore(path).get(MAPBOX_TOKEN_KEY) is None

    def test_new_session_is_ready(self, tmp_path):
        """A token entered once is used by the next backend."""
        path = tmp_path / "user.json"
        MapboxBackend(credential_store=JsonFileCredentialStore(path)).submit_credential("pk.persist")

        assert MapboxBackend(credential_store=JsonFileCredentialStore(path)).is_ready
