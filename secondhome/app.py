from __future__ import annotations

import logging
import os

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from starlette.middleware.sessions import SessionMiddleware

from .analytics.aggregator import compute_analytics
from .analytics.store import get_events
from .analytics.views import track_property_view
from .auth.dependencies import get_current_user, is_admin, require_admin, require_user
from .auth.models import LoginRequest
from .auth.users import authenticate
from .chatbot.assistant import generate_reply
from .chatbot.models import ChatbotRequest, ChatbotResponse
from .community.models import CommunityReviewRequest, CommunityReviewResponse
from .community.service import get_community_reviews
from .geocoding.geocoder import geocode
from .geocoding.models import GeocodeRequest, GeocodeResult
from .listings.cache import get_cache_stats
from .listings.data_store import approved_properties, get_mess, get_property
from .listings.distances import compute_distances
from .listings.models import (
    Mess,
    Property,
    PropertySearchRequest,
    PropertySearchResponse,
    SiteStats,
)
from .listings.search import search_messes, search_properties
from .listings.stats import compute_site_stats
from .moderation.actions import approve_mess, list_pending_messes, reject_mess
from .moderation.errors import AIReviewFailed, AIServiceUnavailable, MessNotFound
from .moderation.models import (
    AIReviewResponse,
    ModerationResponse,
    RejectRequest,
)
from .moderation.review import run_ai_review
from .news.feed import NewsNotConfigured, NewsPage, NewsProviderError, fetch_news

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="SecondHome Student Housing API", version="1.0.0")
app.add_middleware(
    SessionMiddleware,
    secret_key=os.environ.get("SESSION_SECRET", "secondhome-secret-change-in-production"),
)


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metadata")
def metadata() -> dict:
    properties = approved_properties()
    return {
        "cities": sorted({p.city for p in properties if p.city}),
        "types": sorted({p.type for p in properties}),
        "amenities": sorted({a for p in properties for a in p.amenities}),
    }


@app.get("/stats", response_model=SiteStats)
def stats() -> SiteStats:
    return compute_site_stats()


@app.get("/listings", response_model=PropertySearchResponse)
def listings(
    city: str | None = None,
    type: list[str] | None = Query(default=None),
    gender: str | None = None,
    max_price: float | None = Query(default=None, gt=0),
    min_rating: float = Query(default=0.0, ge=0.0, le=5.0),
    amenity: list[str] | None = Query(default=None),
    limit: int = Query(default=20, ge=1, le=100),
) -> PropertySearchResponse:
    return search_properties(PropertySearchRequest(
        city=city,
        types=type,
        gender=gender,
        max_price=max_price,
        min_rating=min_rating,
        amenities=amenity or [],
        limit=limit,
    ))


@app.get("/listings/{property_id}", response_model=Property)
def listing_detail(property_id: str, request: Request) -> Property:
    prop = get_property(property_id)
    # Unapproved listings are only visible to moderators
    if prop is None or (not prop.is_approved and not is_admin(get_current_user(request))):
        raise HTTPException(status_code=404, detail="Property not found")
    return compute_distances(prop)


@app.get("/messes", response_model=list[Mess])
def messes(
    city: str | None = None,
    diet: str | None = None,
    max_price: float | None = Query(default=None, gt=0),
) -> list[Mess]:
    return search_messes(city=city, diet=diet, max_monthly_price=max_price)


@app.get("/messes/{mess_id}", response_model=Mess)
def mess_detail(mess_id: str, request: Request) -> Mess:
    mess = get_mess(mess_id)
    if mess is None or (not mess.is_approved and not is_admin(get_current_user(request))):
        raise HTTPException(status_code=404, detail="Mess not found")
    return mess


@app.post("/community-reviews", response_model=CommunityReviewResponse)
def community_reviews(body: CommunityReviewRequest) -> CommunityReviewResponse:
    data = get_community_reviews(body.location_name, body.address)
    return CommunityReviewResponse(success=True, data=data)


@app.post("/chatbot", response_model=ChatbotResponse)
def chatbot(body: ChatbotRequest, request: Request) -> ChatbotResponse:
    return generate_reply(body, get_current_user(request))


def _geocode_or_404(params: GeocodeRequest) -> GeocodeResult:
    if not params.address and (params.lat is None or params.lng is None):
        raise HTTPException(status_code=400, detail="Provide an address or both lat and lng")
    result = geocode(params)
    if result is None:
        detail = "Address not found" if params.address else "Location not found"
        raise HTTPException(status_code=404, detail=detail)
    return result


@app.get("/geocode", response_model=GeocodeResult)
def geocode_get(
    address: str | None = None,
    city: str | None = None,
    state: str | None = None,
    pincode: str | None = None,
    lat: float | None = Query(default=None, ge=-90.0, le=90.0),
    lng: float | None = Query(default=None, ge=-180.0, le=180.0),
) -> GeocodeResult:
    return _geocode_or_404(GeocodeRequest(
        address=address, city=city, state=state, pincode=pincode, lat=lat, lng=lng,
    ))


@app.post("/geocode", response_model=GeocodeResult)
def geocode_post(body: GeocodeRequest) -> GeocodeResult:
    return _geocode_or_404(body)


@app.get("/news", response_model=NewsPage)
def news(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=12, ge=1, le=100, alias="pageSize"),
    q: str | None = None,
) -> NewsPage:
    try:
        return fetch_news(page=page, page_size=page_size, query=q)
    except NewsNotConfigured:
        raise HTTPException(
            status_code=503,
            detail="News API key not configured. Set NEWS_API_KEY or GNEWS_API_KEY.",
        )
    except NewsProviderError as exc:
        raise HTTPException(
            status_code=502,
            detail={"error": "Failed to fetch news", "status": exc.status_code, "details": exc.details},
        )


# ── Auth endpoints ───────────────────────────────────────────────────────


@app.post("/auth/login")
def login(body: LoginRequest, request: Request) -> dict:
    user = authenticate(body.username, body.password)
    if not user:
        logger.info("Failed login for %r", body.username)
        raise HTTPException(status_code=401, detail="Invalid credentials")
    request.session["user"] = user
    return {"status": "ok", "user": user}


@app.post("/auth/logout")
def logout(request: Request) -> dict:
    request.session.clear()
    return {"status": "logged_out"}


@app.get("/auth/me")
def auth_me(user: dict = Depends(require_user)) -> dict:
    return user


# ── User endpoints ───────────────────────────────────────────────────────


@app.post("/properties/{property_id}/view")
def property_view(property_id: str, request: Request) -> dict:
    user = get_current_user(request)
    # Views are only tracked for logged-in users
    if not user:
        return {"success": True, "message": "View tracked (anonymous)"}

    if get_property(property_id) is None:
        raise HTTPException(status_code=404, detail="Property not found")

    if not track_property_view(user["username"], property_id):
        return {"success": True, "message": "View already tracked"}
    return {"success": True, "message": "View tracked successfully"}


# ── Admin endpoints ──────────────────────────────────────────────────────


@app.get("/admin/messes/pending", response_model=list[Mess])
def pending_messes(user: dict = Depends(require_admin)) -> list[Mess]:
    return list_pending_messes()


@app.post("/admin/messes/{mess_id}/ai-review", response_model=AIReviewResponse)
def mess_ai_review(mess_id: str, user: dict = Depends(require_admin)) -> AIReviewResponse:
    try:
        result, mess = run_ai_review(mess_id)
    except AIServiceUnavailable:
        raise HTTPException(status_code=503, detail="AI service not configured")
    except MessNotFound:
        raise HTTPException(status_code=404, detail="Mess not found")
    except AIReviewFailed as exc:
        raise HTTPException(status_code=502, detail=f"Failed to perform AI review: {exc}")

    return AIReviewResponse(
        message="AI review completed - awaiting admin decision",
        result=result,
        mess=mess,
    )


@app.post("/admin/messes/{mess_id}/approve", response_model=ModerationResponse)
def mess_approve(mess_id: str, user: dict = Depends(require_admin)) -> ModerationResponse:
    try:
        mess = approve_mess(mess_id, user["username"])
    except MessNotFound:
        raise HTTPException(status_code=404, detail="Mess not found")
    return ModerationResponse(message="Mess approved successfully", mess=mess)


@app.post("/admin/messes/{mess_id}/reject", response_model=ModerationResponse)
def mess_reject(
    mess_id: str,
    body: RejectRequest | None = None,
    user: dict = Depends(require_admin),
) -> ModerationResponse:
    reason = body.reason if body else None
    try:
        mess = reject_mess(mess_id, user["username"], reason)
    except MessNotFound:
        raise HTTPException(status_code=404, detail="Mess not found")
    return ModerationResponse(message="Mess rejected successfully", mess=mess)


@app.get("/analytics")
def analytics(user: dict = Depends(require_admin)) -> dict:
    return compute_analytics(get_events())


@app.get("/cache/stats")
def cache_stats(user: dict = Depends(require_admin)) -> dict:
    return get_cache_stats()
