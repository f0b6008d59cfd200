from __future__ import annotations

from pydantic import BaseModel, Field


class GeocodeRequest(BaseModel):
    address: str | None = Field(default=None, max_length=300)
    city: str | None = None
    state: str | None = None
    pincode: str | None = None
    country: str | None = None
    lat: float | None = Field(default=None, ge=-90.0, le=90.0)
    lng: float | None = Field(default=None, ge=-180.0, le=180.0)


class GeocodeResult(BaseModel):
    lat: float
    lng: float
    address: str = ""
    formatted_address: str = ""
    city: str | None = None
    state: str | None = None
    pincode: str | None = None
    locality: str | None = None
    place_id: str | None = None
    provider: str
    query: str | None = None
