from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class ChatTurn(BaseModel):
    role: str = Field(..., pattern="^(user|assistant)$")
    content: str = Field(..., max_length=4000)


class ChatbotRequest(BaseModel):
    message: str = Field(default="", max_length=1000)
    conversation_history: list[ChatTurn] = Field(default_factory=list)
    user_context: str | None = Field(default=None, max_length=2000)


class TopRatedProperty(BaseModel):
    title: str
    location: str
    price: float
    rating: float


class CatalogStats(BaseModel):
    total_properties: int = 0
    total_messes: int = 0
    total_cities: int = 0
    pg_count: int = 0
    flat_count: int = 0
    hostel_count: int = 0
    avg_price: int = 0
    min_price: int = 0
    max_price: int = 0
    budget_ranges: dict[str, int] = Field(default_factory=dict)
    gender_counts: dict[str, int] = Field(default_factory=dict)
    top_rated: list[TopRatedProperty] = Field(default_factory=list)
    cities: list[str] = Field(default_factory=list)
    colleges: list[str] = Field(default_factory=list)


class ViewedProperty(BaseModel):
    id: str
    title: str
    location: str
    city: str
    price: float


class ChatbotResponse(BaseModel):
    response: str
    stats: dict[str, int] | None = None
    wants_executive: bool = False
    recent_properties_viewed: list[ViewedProperty] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=datetime.now)
    error: str | None = None
