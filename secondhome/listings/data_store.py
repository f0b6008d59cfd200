from __future__ import annotations

import json
from pathlib import Path

import pandas as pd

from .models import Booking, Mess, Property

_SEED_JSON = Path(__file__).resolve().parent.parent / "data" / "seed.json"

_properties: dict[str, Property] | None = None
_messes: dict[str, Mess] | None = None
_bookings: list[Booking] | None = None


def _load(path: Path = _SEED_JSON) -> None:
    global _properties, _messes, _bookings
    with path.open(encoding="utf-8") as fh:
        raw = json.load(fh)

    _properties = {p["id"]: Property(**p) for p in raw.get("properties", [])}
    _messes = {m["id"]: Mess(**m) for m in raw.get("messes", [])}
    _bookings = [Booking(**b) for b in raw.get("bookings", [])]


def _ensure_loaded() -> None:
    if _properties is None or _messes is None or _bookings is None:
        _load()


def get_properties() -> dict[str, Property]:
    """Return every property keyed by id, loading the seed on first call."""
    _ensure_loaded()
    return _properties


def get_messes() -> dict[str, Mess]:
    """Return every mess keyed by id, loading the seed on first call."""
    _ensure_loaded()
    return _messes


def get_bookings() -> list[Booking]:
    _ensure_loaded()
    return _bookings


def get_property(property_id: str) -> Property | None:
    return get_properties().get(property_id)


def get_mess(mess_id: str) -> Mess | None:
    return get_messes().get(mess_id)


def approved_properties() -> list[Property]:
    return [p for p in get_properties().values() if p.is_approved and not p.is_rejected]


def approved_messes() -> list[Mess]:
    return [m for m in get_messes().values() if m.is_approved and not m.is_rejected]


def get_property_frame() -> pd.DataFrame:
    """
    Approved properties as a DataFrame with lowercase helper columns
    for case-insensitive filtering.
    """
    rows = [p.model_dump(include={
        "id", "title", "type", "gender", "location", "city",
        "price", "amenities", "rating", "reviews",
    }) for p in approved_properties()]

    df = pd.DataFrame(rows, columns=[
        "id", "title", "type", "gender", "location", "city",
        "price", "amenities", "rating", "reviews",
    ])
    df["city_lower"] = df["city"].fillna("").str.lower()
    df["location_lower"] = df["location"].fillna("").str.lower()
    df["amenities_lower"] = df["amenities"].apply(
        lambda items: {a.strip().lower() for a in items or []}
    )
    return df


def reset_store(path: Path = _SEED_JSON) -> None:
    """Reload the seed data, discarding in-memory changes."""
    _load(path)
