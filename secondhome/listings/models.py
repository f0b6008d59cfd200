from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

PROPERTY_TYPES = ("PG", "Flat", "Hostel")
GENDERS = ("Male", "Female", "Unisex")


class NearbyPlace(BaseModel):
    name: str
    distance: float = Field(..., ge=0.0, description="Distance in km")
    type: str | None = None


class NearbyPlaces(BaseModel):
    hospitals: list[NearbyPlace] = Field(default_factory=list)
    transport: list[NearbyPlace] = Field(default_factory=list)


class Distance(BaseModel):
    college: float = 0.0
    hospital: float = 0.0
    bus_stop: float = 0.0
    metro: float = 0.0


class Property(BaseModel):
    id: str
    title: str
    type: str
    gender: str = "Unisex"
    location: str
    address: str = ""
    city: str
    state: str = ""
    price: float = Field(..., ge=0.0, description="Monthly rent in INR")
    amenities: list[str] = Field(default_factory=list)
    rating: float = Field(default=0.0, ge=0.0, le=5.0)
    reviews: int = 0
    images: list[str] = Field(default_factory=list)
    owner_id: str
    nearby_colleges: list[NearbyPlace] = Field(default_factory=list)
    nearby_places: NearbyPlaces = Field(default_factory=NearbyPlaces)
    distance: Distance | None = None
    is_approved: bool = False
    is_rejected: bool = False


class OpeningHours(BaseModel):
    breakfast: str = ""
    lunch: str = ""
    dinner: str = ""


class MenuDay(BaseModel):
    day: str
    breakfast: str = ""
    lunch: str = ""
    dinner: str = ""


class AIReview(BaseModel):
    reviewed: bool = False
    reviewed_at: datetime | None = None
    confidence: int | None = None
    score: int | None = None
    recommendation: str | None = None
    summary: str | None = None
    analysis: dict[str, str] = Field(default_factory=dict)
    red_flags: list[str] = Field(default_factory=list)
    reason: str | None = None


class Mess(BaseModel):
    id: str
    name: str
    description: str
    address: str
    location: str
    city: str
    state: str
    pincode: str
    coordinates: list[float] = Field(default_factory=list, description="[lng, lat]")
    monthly_price: float = Field(..., ge=0.0)
    daily_price: float | None = None
    trial_days: int = 0
    home_delivery_available: bool = False
    delivery_radius: float = 0.0
    delivery_charges: float = 0.0
    packaging_available: bool = False
    packaging_price: float = 0.0
    images: list[str] = Field(default_factory=list)
    meal_types: list[str] = Field(default_factory=list)
    cuisine_types: list[str] = Field(default_factory=list)
    diet_types: list[str] = Field(default_factory=list)
    menu: list[MenuDay] = Field(default_factory=list)
    opening_hours: OpeningHours = Field(default_factory=OpeningHours)
    amenities: list[str] = Field(default_factory=list)
    capacity: int | None = None
    contact_name: str
    contact_phone: str
    contact_email: str
    owner_id: str
    rating: float = 0.0
    reviews: int = 0
    is_approved: bool = False
    is_rejected: bool = False
    approved_at: datetime | None = None
    approved_by: str | None = None
    rejected_at: datetime | None = None
    rejected_by: str | None = None
    rejection_reason: str | None = None
    ai_review: AIReview | None = None
    created_at: datetime | None = None


class Booking(BaseModel):
    id: str
    user: str
    property_id: str
    status: str = "pending"
    payment_status: str = "pending"
    total_amount: float = 0.0
    created_at: datetime


class PropertySearchRequest(BaseModel):
    city: str | None = Field(default=None, description="City or locality name")
    types: list[str] | None = Field(
        default=None, description='Property types to include, e.g. ["PG", "Hostel"]'
    )
    gender: str | None = None
    max_price: float | None = Field(default=None, gt=0.0)
    min_rating: float = Field(default=0.0, ge=0.0, le=5.0)
    amenities: list[str] = Field(default_factory=list)
    limit: int = Field(default=20, ge=1, le=100)


class PropertySearchResponse(BaseModel):
    results: list[Property]
    total_candidates: int


class SiteStats(BaseModel):
    property_owners: int
    property_owners_formatted: str
    student_bookings: int
    student_bookings_formatted: str
    success_rate: int
    success_rate_formatted: str
