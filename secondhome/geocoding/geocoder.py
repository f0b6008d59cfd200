from __future__ import annotations

import logging
import math
import re
from typing import Any

import requests

from ..listings.cache import cache_get, cache_set
from .config import DEFAULT_GEOCODING_CONFIG, GeocodingConfig
from .models import GeocodeRequest, GeocodeResult

logger = logging.getLogger(__name__)

_PIN_RE = re.compile(r"^\d{6}$")
_SPACES_RE = re.compile(r"\s+")


def is_likely_india_pin(pincode: str | None) -> bool:
    return bool(pincode) and bool(_PIN_RE.match(pincode.strip()))


def _compact(parts: list[str | None]) -> list[str]:
    return [p.strip() for p in parts if isinstance(p, str) and p.strip()]


def build_query_candidates(
    request: GeocodeRequest,
    config: GeocodingConfig = DEFAULT_GEOCODING_CONFIG,
) -> list[str]:
    """
    Query strings to try in order, starting with the user's raw input and
    widening with city / state / PIN / country context.
    """
    address = (request.address or "").strip()
    city = (request.city or "").strip()
    state = (request.state or "").strip()
    pincode = (request.pincode or "").strip()
    country = (request.country or config.default_country).strip()
    pin = pincode if is_likely_india_pin(pincode) else None

    candidates = [
        address,
        ", ".join(_compact([address, city, state, pin, country])),
    ]
    context_only = ", ".join(_compact([city, state, pin, country]))
    if context_only:
        candidates.append(context_only)

    # Bare POI names usually need the city and state to resolve
    if address and city and state and len(address) < 25:
        candidates.append(f"{address}, {city}, {state}, {country}")

    if address and not re.search(rf"\b{re.escape(country)}\b", address, re.IGNORECASE):
        candidates.append(f"{address}, {country}")

    seen: set[str] = set()
    unique: list[str] = []
    for q in candidates:
        q = _SPACES_RE.sub(" ", q).strip()
        if len(q) < 3 or q.lower() in seen:
            continue
        seen.add(q.lower())
        unique.append(q)
    return unique[:config.max_candidates]


# ---------------------------------------------------------------------------
# Result picking
# ---------------------------------------------------------------------------


def _to_float(value: Any) -> float | None:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def pick_best_nominatim(
    results: list[dict[str, Any]],
    request: GeocodeRequest,
) -> tuple[float, float, str] | None:
    """
    Highest scoring Nominatim hit: +3 city match, +2 state match,
    +3 exact PIN match; ties go to the higher ``importance``.
    """
    if not results:
        return None

    city = (request.city or "").strip().lower()
    state = (request.state or "").strip().lower()
    pincode = (request.pincode or "").strip()

    def _score(result: dict[str, Any]) -> tuple[int, float]:
        addr = result.get("address") or {}
        res_city = str(
            addr.get("city") or addr.get("town") or addr.get("village") or addr.get("county") or ""
        ).lower()
        res_state = str(addr.get("state") or "").lower()
        res_post = str(addr.get("postcode") or "")
        score = 0
        if city and city in res_city:
            score += 3
        if state and state in res_state:
            score += 2
        if pincode and res_post == pincode:
            score += 3
        importance = result.get("importance")
        return score, importance if isinstance(importance, (int, float)) else 0.0

    best = max(results, key=_score)
    lat = _to_float(best.get("lat"))
    lng = _to_float(best.get("lon"))
    if lat is None or lng is None:
        return None
    return lat, lng, best.get("display_name") or ""


def pick_best_photon(features: list[dict[str, Any]]) -> tuple[float, float, str] | None:
    if not features:
        return None
    best = features[0]
    coords = (best.get("geometry") or {}).get("coordinates")
    if not isinstance(coords, list) or len(coords) < 2:
        return None
    lng, lat = _to_float(coords[0]), _to_float(coords[1])
    if lat is None or lng is None:
        return None

    props = best.get("properties") or {}
    if props.get("name"):
        label = ", ".join(_compact([props.get("name"), props.get("city"), props.get("state")]))
    else:
        label = props.get("label") or ""
    return lat, lng, label


# ---------------------------------------------------------------------------
# Providers
# ---------------------------------------------------------------------------


def _get_json(
    url: str,
    params: dict[str, Any],
    config: GeocodingConfig,
    headers: dict[str, str] | None = None,
) -> Any:
    response = requests.get(url, params=params, headers=headers, timeout=config.timeout)
    response.raise_for_status()
    return response.json()


def _google_forward(address: str, config: GeocodingConfig) -> GeocodeResult | None:
    data = _get_json(config.google_url, {"address": address, "key": config.google_api_key}, config)
    if not isinstance(data, dict) or data.get("status") != "OK" or not data.get("results"):
        return None
    result = data["results"][0]
    location = result["geometry"]["location"]
    return GeocodeResult(
        lat=location["lat"],
        lng=location["lng"],
        address=result.get("formatted_address", ""),
        formatted_address=result.get("formatted_address", ""),
        place_id=result.get("place_id"),
        provider="google",
    )


def _nominatim_search(query: str, config: GeocodingConfig) -> list[dict[str, Any]]:
    params = {"format": "json", "addressdetails": 1, "limit": 5, "q": query}
    if config.contact_email:
        params["email"] = config.contact_email
    data = _get_json(f"{config.nominatim_url}/search", params, config, config.headers)
    return data if isinstance(data, list) else []


def _photon_search(query: str, config: GeocodingConfig) -> list[dict[str, Any]]:
    data = _get_json(config.photon_url, {"limit": 5, "lang": "en", "q": query}, config)
    features = data.get("features") if isinstance(data, dict) else None
    return features if isinstance(features, list) else []


def geocode_forward(
    request: GeocodeRequest,
    config: GeocodingConfig = DEFAULT_GEOCODING_CONFIG,
) -> GeocodeResult | None:
    """Google when keyed, then Nominatim over every candidate, then Photon."""
    if not request.address:
        return None

    if config.google_api_key:
        try:
            result = _google_forward(request.address, config)
            if result:
                return result
        except (requests.RequestException, ValueError, KeyError):
            logger.warning("Google geocoding failed for %r", request.address, exc_info=True)

    candidates = build_query_candidates(request, config)

    for query in candidates:
        try:
            picked = pick_best_nominatim(_nominatim_search(query, config), request)
        except (requests.RequestException, ValueError):
            logger.warning("Nominatim search failed: %r", query, exc_info=True)
            continue
        if picked:
            lat, lng, display = picked
            return GeocodeResult(
                lat=lat, lng=lng, address=display, formatted_address=display,
                provider="nominatim", query=query,
            )

    for query in candidates:
        try:
            picked = pick_best_photon(_photon_search(query, config))
        except (requests.RequestException, ValueError):
            logger.warning("Photon search failed: %r", query, exc_info=True)
            continue
        if picked:
            lat, lng, display = picked
            return GeocodeResult(
                lat=lat, lng=lng, address=display, formatted_address=display,
                provider="photon", query=query,
            )

    return None


def _google_reverse(lat: float, lng: float, config: GeocodingConfig) -> GeocodeResult | None:
    data = _get_json(config.google_url, {"latlng": f"{lat},{lng}", "key": config.google_api_key}, config)
    if not isinstance(data, dict) or data.get("status") != "OK" or not data.get("results"):
        return None

    result = data["results"][0]
    parts: dict[str, str] = {}
    for component in result.get("address_components", []):
        types = component.get("types", [])
        if "locality" in types:
            parts["city"] = component.get("long_name", "")
        if "administrative_area_level_1" in types:
            parts["state"] = component.get("long_name", "")
        if "postal_code" in types:
            parts["pincode"] = component.get("long_name", "")
        if "sublocality" in types or "neighborhood" in types:
            parts["locality"] = component.get("long_name", "")

    return GeocodeResult(
        lat=lat,
        lng=lng,
        address=result.get("formatted_address", ""),
        formatted_address=result.get("formatted_address", ""),
        city=parts.get("city", ""),
        state=parts.get("state", ""),
        pincode=parts.get("pincode", ""),
        locality=parts.get("locality", ""),
        place_id=result.get("place_id"),
        provider="google",
    )


def _nominatim_reverse(lat: float, lng: float, config: GeocodingConfig) -> GeocodeResult | None:
    params = {"format": "json", "addressdetails": 1, "lat": lat, "lon": lng}
    data = _get_json(f"{config.nominatim_url}/reverse", params, config, config.headers)
    addr = data.get("address") if isinstance(data, dict) else None
    if not isinstance(addr, dict) or not addr:
        return None

    city = addr.get("city") or addr.get("town") or ""
    parts = _compact([
        addr.get("house_number"), addr.get("road"), addr.get("suburb"),
        city, addr.get("state"), addr.get("postcode"),
    ])
    display = data.get("display_name", "")
    return GeocodeResult(
        lat=lat,
        lng=lng,
        address=display,
        formatted_address=", ".join(parts) or display,
        city=city,
        state=addr.get("state", ""),
        pincode=addr.get("postcode", ""),
        locality=addr.get("suburb") or addr.get("neighbourhood") or "",
        provider="nominatim",
    )


def geocode_reverse(
    lat: float,
    lng: float,
    config: GeocodingConfig = DEFAULT_GEOCODING_CONFIG,
) -> GeocodeResult | None:
    try:
        if config.google_api_key:
            return _google_reverse(lat, lng, config)
        return _nominatim_reverse(lat, lng, config)
    except (requests.RequestException, ValueError, KeyError):
        logger.warning("Reverse geocoding failed for %s,%s", lat, lng, exc_info=True)
        return None


def geocode(
    request: GeocodeRequest,
    config: GeocodingConfig = DEFAULT_GEOCODING_CONFIG,
) -> GeocodeResult | None:
    """Forward geocode when an address is given, otherwise reverse geocode lat/lng."""
    cache_key = request.model_dump()
    cached = cache_get("geocode", cache_key)
    if cached is not None:
        return cached

    if request.address:
        result = geocode_forward(request, config)
    elif request.lat is not None and request.lng is not None:
        result = geocode_reverse(request.lat, request.lng, config)
    else:
        return None

    if result is not None:
        cache_set("geocode", cache_key, result, ttl=config.cache_ttl)
    return result
