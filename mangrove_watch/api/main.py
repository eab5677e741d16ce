"""
Mangrove Watch - REST API

FastAPI application for community incident reports, the member dashboard,
and interactive report maps.

Run with: uvicorn mangrove_watch.api.main:app --reload
"""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import (
    APIRouter,
    Cookie,
    Depends,
    FastAPI,
    File,
    Form,
    Header,
    HTTPException,
    Query,
    Request,
    UploadFile,
)
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, Field

from mangrove_watch import __version__
from mangrove_watch.core.config import Settings, get_settings
from mangrove_watch.core.exceptions import MangroveWatchError, ValidationError
from mangrove_watch.core.logging import setup_logging
from mangrove_watch.crowdsource.geolocation import Coordinate, FixedGeolocationProvider
from mangrove_watch.crowdsource.report_handler import PhotoUpload, Reporter
from mangrove_watch.api.sessions import AppServices, MemberSession
from mangrove_watch.dashboard.service import DashboardTab
from mangrove_watch.visualization.backends import MapReport
from mangrove_watch.visualization.map_view import MapProps

logger = logging.getLogger(__name__)


# ============================================================================
# Pydantic Models
# ============================================================================

class HealthResponse(BaseModel):
    """API health check response."""
    status: str
    version: str
    timestamp: str
    database: bool


class ReportResponse(BaseModel):
    """Incident report."""
    id: str
    user_id: str
    title: str
    description: str
    incident_type: str
    severity: str
    status: str
    latitude: float
    longitude: float
    photos: List[str]
    created_at: Optional[str]


class ReportListResponse(BaseModel):
    """List of incident reports, newest first."""
    count: int
    reports: List[ReportResponse]


class SubmissionResponse(BaseModel):
    """Result of a report submission."""
    report: ReportResponse
    points_awarded: int
    profile: Optional[dict]


class LocationRequest(BaseModel):
    """Coordinate reported by the browser."""
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class MapClickRequest(BaseModel):
    """Click forwarded from the rendered map. Longitude may wrap past 180."""
    latitude: float = Field(..., ge=-90, le=90, allow_inf_nan=False)
    longitude: float = Field(..., allow_inf_nan=False)
    marker_id: Optional[str] = None


class MapClickResponse(BaseModel):
    """Effect of a map click."""
    popup_opened: Optional[str] = None
    location: Optional[dict] = None


class DraftResponse(BaseModel):
    """Current report draft."""
    title: str
    description: str
    incident_type: str
    severity: str
    location: Optional[dict]
    has_photo: bool
    submission_state: str


class ToastResponse(BaseModel):
    title: str
    message: str
    variant: str
    created_at: str


# ============================================================================
# Dependencies
# ============================================================================

def get_services(request: Request) -> AppServices:
    return request.app.state.services


def get_reporter(
    x_user_id: Optional[str] = Header(None),
    x_user_email: Optional[str] = Header(None),
    mw_user_id: Optional[str] = Cookie(None),
    mw_user_email: Optional[str] = Cookie(None),
) -> Reporter:
    """
    Identify the member from headers (API clients) or cookies (browser).

    Sign-in itself is handled upstream.
    """
    user_id = x_user_id or mw_user_id
    if not user_id:
        raise HTTPException(status_code=401, detail="Not signed in")
    return Reporter(user_id=user_id, email=x_user_email or mw_user_email)


def get_session(
    reporter: Reporter = Depends(get_reporter),
    services: AppServices = Depends(get_services),
) -> MemberSession:
    return services.session_for(reporter)


def raise_for_failure(error: Optional[str], exception: Optional[Exception]) -> None:
    if isinstance(exception, ValidationError):
        raise HTTPException(status_code=400, detail=error)
    if exception is None:
        raise HTTPException(status_code=409, detail=error)
    raise HTTPException(status_code=500, detail=error)


router = APIRouter()


# ============================================================================
# System Routes
# ============================================================================

@router.get("/", response_class=HTMLResponse)
async def root():
    """Welcome page."""
    return """
    <!DOCTYPE html>
    <html>
    <head>
        <title>Mangrove Watch</title>
        <style>
            body { font-family: Arial; max-width: 900px; margin: 50px auto; padding: 20px; background: #f0fdf4; color: #14532d; }
            h1 { color: #15803d; }
            h3 { color: #166534; margin-top: 30px; }
            a { color: #15803d; }
            code { background: #dcfce7; padding: 2px 8px; border-radius: 4px; }
            .endpoint { background: #dcfce7; padding: 10px; margin: 5px 0; border-radius: 4px; border-left: 3px solid #15803d; }
            .tag { display: inline-block; background: #15803d; color: white; padding: 2px 8px; border-radius: 3px; font-size: 12px; margin-right: 5px; }
        </style>
    </head>
    <body>
        <h1>Mangrove Watch</h1>
        <p>Community reporting of threats to mangrove ecosystems.</p>

        <h3>Documentation</h3>
        <ul>
            <li><a href="/docs">Swagger UI - Interactive API Documentation</a></li>
            <li><a href="/health">Health Check</a></li>
        </ul>

        <h3>Reports</h3>
        <div class="endpoint"><span class="tag">POST</span> <code>/api/v1/reports</code> - Submit incident report (+10 points)</div>
        <div class="endpoint"><span class="tag">GET</span> <code>/api/v1/reports</code> - List reports, newest first</div>
        <div class="endpoint"><span class="tag">GET</span> <code>/api/v1/reports/{id}</code> - Get report details</div>
        <div class="endpoint"><span class="tag">POST</span> <code>/api/v1/location</code> - Set draft location</div>
        <div class="endpoint"><span class="tag">POST</span> <code>/api/v1/location/capture</code> - Capture approximate location</div>

        <h3>Dashboard</h3>
        <div class="endpoint"><span class="tag">GET</span> <code>/api/v1/dashboard</code> - Profile, stats and recent reports</div>
        <div class="endpoint"><span class="tag">GET</span> <code>/api/v1/notifications</code> - Pending notifications</div>

        <h3>Maps</h3>
        <div class="endpoint"><span class="tag">GET</span> <code>/api/v1/map?backend=leaflet</code> - OpenStreetMap report map</div>
        <div class="endpoint"><span class="tag">GET</span> <code>/api/v1/map?backend=mapbox</code> - Mapbox report map</div>
    </body>
    </html>
    """


@router.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check(services: AppServices = Depends(get_services)):
    """Check API health status."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        timestamp=datetime.utcnow().isoformat(),
        database=services.db.check_connection(),
    )


# ============================================================================
# Report Routes
# ============================================================================

@router.post("/api/v1/reports", response_model=SubmissionResponse, tags=["Reports"])
async def create_report(
    title: str = Form(...),
    description: str = Form(...),
    incident_type: str = Form("other"),
    severity: str = Form("medium", pattern="^(critical|high|medium|low)$"),
    latitude: Optional[float] = Form(None, ge=-90, le=90),
    longitude: Optional[float] = Form(None, ge=-180, le=180),
    photo: Optional[UploadFile] = File(None),
    session: MemberSession = Depends(get_session),
):
    """
    Submit an incident report.

    The location comes from the form, or from the draft location set by a
    map click or location capture. An attached photo is stored and linked.
    """
    draft = session.draft
    draft.title = title
    draft.description = description
    draft.incident_type = incident_type
    draft.severity = severity

    if latitude is not None and longitude is not None:
        draft.set_location(latitude, longitude)

    if photo is not None and photo.filename:
        draft.photo = PhotoUpload(
            filename=photo.filename,
            data=await photo.read(),
            content_type=photo.content_type,
        )

    result = await session.submitter.submit(session.reporter, draft)
    if not result.ok:
        raise_for_failure(result.error, result.exception)

    try:
        profile = session.services.profiles.get(session.reporter.user_id)
    except MangroveWatchError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return SubmissionResponse(
        report=ReportResponse(**result.value),
        points_awarded=session.submitter.points_per_report,
        profile=profile,
    )


@router.get("/api/v1/reports", response_model=ReportListResponse, tags=["Reports"])
async def list_reports(
    limit: Optional[int] = Query(None, ge=1, le=500),
    mine: bool = Query(False, description="Only the caller's reports"),
    reporter: Reporter = Depends(get_reporter),
    services: AppServices = Depends(get_services),
):
    """List incident reports ordered by creation time, newest first."""
    try:
        if mine:
            reports = services.reports.list_for_user(reporter.user_id)
            if limit is not None:
                reports = reports[:limit]
        else:
            reports = services.reports.list_recent(limit=limit)
    except MangroveWatchError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return ReportListResponse(
        count=len(reports),
        reports=[ReportResponse(**r) for r in reports],
    )


@router.get("/api/v1/reports/{report_id}", response_model=ReportResponse, tags=["Reports"])
async def get_report(
    report_id: str,
    reporter: Reporter = Depends(get_reporter),
    services: AppServices = Depends(get_services),
):
    """Get a single report."""
    try:
        report = services.reports.get(report_id)
    except MangroveWatchError as e:
        raise HTTPException(status_code=500, detail=str(e))

    if report is None:
        raise HTTPException(status_code=404, detail=f"Report {report_id} not found")
    return ReportResponse(**report)


@router.get("/api/v1/draft", response_model=DraftResponse, tags=["Reports"])
async def get_draft(session: MemberSession = Depends(get_session)):
    """Current report draft, including the selected location."""
    draft = session.draft
    return DraftResponse(
        title=draft.title,
        description=draft.description,
        incident_type=draft.incident_type,
        severity=draft.severity,
        location=draft.location.to_dict() if draft.location else None,
        has_photo=draft.photo is not None,
        submission_state=session.submitter.state.value,
    )


@router.post("/api/v1/location", tags=["Reports"])
async def set_location(
    request: LocationRequest,
    session: MemberSession = Depends(get_session),
):
    """Set the draft location from a browser geolocation result."""
    provider = FixedGeolocationProvider(Coordinate(request.latitude, request.longitude))
    result = await session.location_capture(provider).capture()
    if not result.ok:
        raise_for_failure(result.error, result.exception)

    return {"location": result.value.to_dict()}


@router.post("/api/v1/location/capture", tags=["Reports"])
async def capture_location(session: MemberSession = Depends(get_session)):
    """Capture an approximate location from the network."""
    capture = session.location_capture(session.services.geolocation_provider)
    result = await capture.capture()
    if not result.ok:
        raise HTTPException(status_code=502, detail=result.error)

    return {"location": result.value.to_dict()}


# ============================================================================
# Dashboard Routes
# ============================================================================

@router.get("/api/v1/dashboard", tags=["Dashboard"])
async def get_dashboard(
    tab: Optional[DashboardTab] = Query(None, description="Only the data one tab renders"),
    session: MemberSession = Depends(get_session),
):
    """Profile, overview stats, and community reports."""
    state = session.dashboard.load(session.reporter)
    if tab is not None:
        return state.tab(tab)
    return state.to_dict()


@router.get("/api/v1/notifications", response_model=List[ToastResponse], tags=["Dashboard"])
async def get_notifications(session: MemberSession = Depends(get_session)):
    """Return and clear pending notifications."""
    return [ToastResponse(**t.to_dict()) for t in session.notifier.drain()]


# ============================================================================
# Map Routes
# ============================================================================

@router.get("/api/v1/map", response_class=HTMLResponse, tags=["Map"])
async def get_map(
    backend: str = Query("leaflet", pattern="^(leaflet|mapbox)$"),
    center_lat: Optional[float] = Query(None, ge=-90, le=90),
    center_lng: Optional[float] = Query(None, ge=-180, le=180),
    zoom: Optional[int] = Query(None, ge=1, le=22),
    select: bool = Query(True, description="Pick the draft location by clicking"),
    session: MemberSession = Depends(get_session),
):
    """
    Interactive map of all reports.

    Markers are colored by severity. With the Mapbox backend and no stored
    token, a token entry form is returned instead.
    """
    try:
        reports = session.services.reports.list_recent()
    except MangroveWatchError as e:
        raise HTTPException(status_code=500, detail=str(e))

    center = (center_lat, center_lng) if center_lat is not None and center_lng is not None else None
    props = MapProps(
        reports=tuple(MapReport.from_record(r) for r in reports),
        center=center,
        zoom=zoom,
        on_location_select=session.on_location_select if select else None,
    )
    return session.map_view(backend).render_html(props)


@router.post("/api/v1/map/select", response_model=MapClickResponse, tags=["Map"])
async def select_on_map(
    request: MapClickRequest,
    backend: str = Query("leaflet", pattern="^(leaflet|mapbox)$"),
    session: MemberSession = Depends(get_session),
):
    """Deliver a click from the rendered map."""
    view = session.map_view(backend)
    if view.surface is None:
        raise HTTPException(status_code=409, detail="Map has not been rendered")

    try:
        marker = view.click(request.latitude, request.longitude, marker_id=request.marker_id)
    except MangroveWatchError as e:
        raise HTTPException(status_code=400, detail=str(e))

    location = session.draft.location
    return MapClickResponse(
        popup_opened=marker.report_id if marker else None,
        location=location.to_dict() if location else None,
    )


@router.post("/api/v1/map/credential", tags=["Map"])
async def submit_map_credential(
    access_token: str = Form(""),
    session: MemberSession = Depends(get_session),
):
    """Store a Mapbox access token and show the map."""
    backend = session.map_view("mapbox").backend
    if not backend.submit_credential(access_token):
        raise HTTPException(status_code=400, detail="Access token is required")
    return RedirectResponse(url="/api/v1/map?backend=mapbox", status_code=303)


# ============================================================================
# Application
# ============================================================================

def create_app(
    settings: Optional[Settings] = None,
    services: Optional[AppServices] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Settings override (environment if None)
        services: Prebuilt services (built from settings if None)

    Returns:
        FastAPI app
    """
    settings = settings or get_settings()
    services = services or AppServices(settings)

    app = FastAPI(
        title="Mangrove Watch",
        description="Community incident reporting for mangrove conservation",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.services = services
    app.include_router(router)
    app.mount(
        settings.upload_base_url,
        StaticFiles(directory=settings.upload_dir, check_dir=False),
        name="uploads",
    )

    @app.on_event("shutdown")
    def close_services():
        services.close()

    logger.info(f"Mangrove Watch API ready ({settings.app_env})")
    return app


def __getattr__(name: str):
    # Build the default app lazily so importing this module has no side effects
    if name == "app":
        global app
        setup_logging()
        app = create_app()
        return app
    raise AttributeError(name)


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    setup_logging(settings)
    uvicorn.run("mangrove_watch.api.main:app", host=settings.api_host, port=settings.api_port)
