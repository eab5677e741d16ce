"""
Tests for the REST API
"""
import pytest
from fastapi.testclient import TestClient

from mangrove_watch.api.main import create_app
from mangrove_watch.api.sessions import AppServices
from mangrove_watch.crowdsource import Coordinate, FixedGeolocationProvider

MEMBER = {"X-User-Id": "user-42", "X-User-Email": "priya@example.org"}


class TestAPI:
    """Test suite for API endpoints."""

    @pytest.fixture(autouse=True)
    def setup(self, test_settings):
        """Setup test fixtures."""
        self.services = AppServices(
            test_settings,
            geolocation_provider=FixedGeolocationProvider(Coordinate(21.6, 88.4)),
        )
        self.client = TestClient(create_app(test_settings, self.services))
        yield
        self.services.close()

    def submit(self, **overrides):
        data = {
            "title": "Mangrove saplings uprooted",
            "description": "Around forty saplings pulled out overnight.",
            "incident_type": "illegal_cutting",
            "severity": "critical",
            "latitude": "21.95",
            "longitude": "89.18",
        }
        data.update(overrides)
        return self.client.post("/api/v1/reports", data=data, headers=MEMBER)

    def test_health(self):
        response = self.client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["database"] is True

    def test_requires_identity(self):
        """Anonymous callers are rejected."""
        assert self.client.get("/api/v1/dashboard").status_code == 401

    def test_cookie_identity(self):
        self.client.cookies.set("mw_user_id", "cookie-user")

        assert self.client.get("/api/v1/draft").status_code == 200

    def test_submit_report(self):
        """Submission stores the report and awards points."""
        response = self.submit()

        assert response.status_code == 200
        body = response.json()
        assert body["report"]["status"] == "pending"
        assert body["points_awarded"] == 10
        assert body["profile"]["points"] == 10
        assert body["profile"]["display_name"] == "priya"

    def test_submit_with_photo(self):
        """Uploaded photo is linked and served."""
        response = self.client.post(
            "/api/v1/reports",
            data={
                "title": "Oil spill",
                "description": "Sheen on the creek",
                "severity": "high",
                "latitude": "21.8",
                "longitude": "88.8",
            },
            files={"photo": ("creek.jpg", b"\xff\xd8creek", "image/jpeg")},
            headers=MEMBER,
        )

        assert response.status_code == 200
        photos = response.json()["report"]["photos"]
        assert len(photos) == 1
        assert photos[0].startswith("/uploads/reports/")
        assert self.client.get(photos[0]).content == b"\xff\xd8creek"

    def test_submit_without_location(self):
        """Missing location is a validation error."""
        response = self.client.post(
            "/api/v1/reports",
            data={"title": "No place", "description": "Somewhere"},
            headers=MEMBER,
        )

        assert response.status_code == 400
        assert "Location is required" in response.json()["detail"]

    def test_blank_title_rejected(self):
        response = self.submit(title="   ")

        assert response.status_code == 400

    def test_invalid_severity_rejected(self):
        assert self.submit(severity="apocalyptic").status_code == 422

    def test_list_and_get_reports(self):
        self.submit(title="First")
        self.submit(title="Second")

        listing = self.client.get("/api/v1/reports", headers=MEMBER).json()
        assert listing["count"] == 2
        assert {r["title"] for r in listing["reports"]} == {"First", "Second"}

        report_id = listing["reports"][0]["id"]
        detail = self.client.get(f"/api/v1/reports/{report_id}", headers=MEMBER)
        assert detail.status_code == 200
        assert detail.json()["id"] == report_id

    def test_list_mine(self):
        self.submit()
        self.client.post(
            "/api/v1/reports",
            data={"title": "Other", "description": "x", "latitude": "1", "longitude": "2"},
            headers={"X-User-Id": "someone-else"},
        )

        mine = self.client.get("/api/v1/reports?mine=true", headers=MEMBER).json()

        assert mine["count"] == 1
        assert mine["reports"][0]["user_id"] == "user-42"

    def test_missing_report(self):
        assert self.client.get("/api/v1/reports/nope", headers=MEMBER).status_code == 404

    def test_set_location(self):
        response = self.client.post(
            "/api/v1/location", json={"latitude": 21.5, "longitude": 88.5}, headers=MEMBER
        )

        assert response.status_code == 200
        draft = self.client.get("/api/v1/draft", headers=MEMBER).json()
        assert draft["location"] == {"latitude": 21.5, "longitude": 88.5}

    def test_capture_location(self):
        response = self.client.post("/api/v1/location/capture", headers=MEMBER)

        assert response.status_code == 200
        assert response.json()["location"] == {"latitude": 21.6, "longitude": 88.4}
        toasts = self.client.get("/api/v1/notifications", headers=MEMBER).json()
        assert toasts[0]["title"] == "Location captured!"

    def test_notifications_drained(self):
        self.submit()

        first = self.client.get("/api/v1/notifications", headers=MEMBER).json()
        second = self.client.get("/api/v1/notifications", headers=MEMBER).json()

        assert [t["title"] for t in first] == ["Report submitted!"]
        assert second == []

    def test_dashboard(self):
        self.submit()

        data = self.client.get("/api/v1/dashboard", headers=MEMBER).json()

        assert data["stats"]["points"] == 10
        assert data["stats"]["community_reports"] == 1
        assert data["recent_reports"][0]["severity_badge"].startswith("bg-destructive")

    def test_dashboard_tab(self):
        self.submit()

        data = self.client.get("/api/v1/dashboard?tab=map", headers=MEMBER).json()

        assert list(data) == ["reports"]
        assert data["reports"][0]["title"] == "Mangrove saplings uprooted"


class TestMapAPI:
    """Test the map endpoints."""

    @pytest.fixture(autouse=True)
    def setup(self, test_settings):
        """Setup test fixtures."""
        self.services = AppServices(test_settings)
        self.client = TestClient(create_app(test_settings, self.services))
        self.services.reports.insert(
            user_id="seed",
            title="Illegal cutting",
            description="Stumps along the bank",
            latitude=21.9497,
            longitude=89.1833,
            incident_type="illegal_cutting",
            severity="critical",
        )
        yield
        self.services.close()

    def test_leaflet_map(self):
        response = self.client.get("/api/v1/map", headers=MEMBER)

        assert response.status_code == 200
        assert 'id="report-map-leaflet"' in response.text

    def test_click_sets_draft_location(self):
        """An empty-map click becomes the draft location."""
        self.client.get("/api/v1/map?backend=leaflet", headers=MEMBER)

        response = self.client.post(
            "/api/v1/map/select?backend=leaflet",
            json={"latitude": 21.7, "longitude": 88.9},
            headers=MEMBER,
        )

        assert response.status_code == 200
        assert response.json()["location"] == {"latitude": 21.7, "longitude": 88.9}
        assert response.json()["popup_opened"] is None

    def test_marker_click_keeps_location(self):
        """Marker clicks open popups and leave the draft alone."""
        self.client.get("/api/v1/map", headers=MEMBER)
        report_id = self.services.reports.list_recent()[0]["id"]

        response = self.client.post(
            "/api/v1/map/select",
            json={"latitude": 21.9497, "longitude": 89.1833, "marker_id": report_id},
            headers=MEMBER,
        )

        assert response.json()["popup_opened"] == report_id
        assert response.json()["location"] is None

    @pytest.mark.parametrize("body", [
        '{"latitude": NaN, "longitude": 1.0}',
        '{"latitude": 1.0, "longitude": Infinity}',
        '{"latitude": 95.0, "longitude": 1.0}',
    ])
    def test_invalid_click_rejected(self, body):
        """Bad coordinates are a client error and leave the draft alone."""
        self.client.get("/api/v1/map", headers=MEMBER)

        response = self.client.post(
            "/api/v1/map/select",
            content=body,
            headers={**MEMBER, "Content-Type": "application/json"},
        )

        assert response.status_code == 422
        draft = self.client.get("/api/v1/draft", headers=MEMBER).json()
        assert draft["location"] is None

    def test_wrapped_longitude_click(self):
        """Clicks on a wrapped world copy are delivered as given."""
        self.client.get("/api/v1/map", headers=MEMBER)

        response = self.client.post(
            "/api/v1/map/select", json={"latitude": 21.7, "longitude": 448.9}, headers=MEMBER
        )

        assert response.status_code == 200
        assert response.json()["location"]["longitude"] == 448.9

    def test_click_before_render(self):
        response = self.client.post(
            "/api/v1/map/select", json={"latitude": 1.0, "longitude": 2.0}, headers=MEMBER
        )

        assert response.status_code == 409

    def test_mapbox_prompts_for_token(self):
        response = self.client.get("/api/v1/map?backend=mapbox", headers=MEMBER)

        assert "Mapbox access token required" in response.text

    def test_mapbox_token_flow(self):
        """Submitting a token redirects to the rendered Mapbox map."""
        self.client.get("/api/v1/map?backend=mapbox", headers=MEMBER)

        response = self.client.post(
            "/api/v1/map/credential",
            data={"access_token": "pk.member"},
            headers=MEMBER,
            follow_redirects=False,
        )

        assert response.status_code == 303
        assert response.headers["location"] == "/api/v1/map?backend=mapbox"

        rendered = self.client.get("/api/v1/map?backend=mapbox", headers=MEMBER)
        assert "Mapbox access token required" not in rendered.text

    def test_blank_token_rejected(self):
        response = self.client.post(
            "/api/v1/map/credential", data={"access_token": "  "}, headers=MEMBER
        )

        assert response.status_code == 400

    def test_unknown_backend(self):
        assert self.client.get("/api/v1/map?backend=gmaps", headers=MEMBER).status_code == 422
