from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class GeocodingConfig:
    google_api_key: str = os.getenv("GOOGLE_MAPS_API_KEY", "")
    contact_email: str = os.getenv("CONTACT_EMAIL", "support@secondhome.site")
    site_url: str = os.getenv("SITE_URL", "https://secondhome.site")
    nominatim_url: str = "https://nominatim.openstreetmap.org"
    photon_url: str = "https://photon.komoot.io/api/"
    google_url: str = "https://maps.googleapis.com/maps/api/geocode/json"
    default_country: str = "India"
    max_candidates: int = 6
    timeout: float = 8.0
    cache_ttl: float = 24 * 60 * 60

    @property
    def headers(self) -> dict[str, str]:
        return {
            "User-Agent": f"SecondHome/1.0 ({self.site_url}; contact: {self.contact_email})",
            "Accept-Language": "en",
            "Referer": self.site_url,
        }


DEFAULT_GEOCODING_CONFIG = GeocodingConfig()
