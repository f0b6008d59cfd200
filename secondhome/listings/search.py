from __future__ import annotations

import time

import pandas as pd

from ..analytics.store import record_event
from .data_store import approved_messes, get_properties, get_property_frame
from .models import Mess, PropertySearchRequest, PropertySearchResponse


def search_properties(request: PropertySearchRequest) -> PropertySearchResponse:
    start_time = time.time()
    df = get_property_frame()

    # --- Hard filters ---
    if request.city:
        city_lower = request.city.strip().lower()
        mask = df["city_lower"].str.contains(city_lower, na=False, regex=False) | df[
            "location_lower"
        ].str.contains(city_lower, na=False, regex=False)
    else:
        mask = pd.Series(True, index=df.index)

    if request.types:
        mask = mask & df["type"].isin(request.types)

    if request.gender:
        # Unisex listings accept everyone
        mask = mask & df["gender"].isin([request.gender, "Unisex"])

    if request.max_price is not None:
        mask = mask & (df["price"] <= request.max_price)

    if request.min_rating > 0:
        mask = mask & (df["rating"] >= request.min_rating)

    if request.amenities:
        wanted = {a.strip().lower() for a in request.amenities}
        mask = mask & df["amenities_lower"].apply(lambda have: wanted <= have)

    candidates = df.loc[mask]
    total_candidates = len(candidates)

    # Best rated first, cheaper first among equals
    top = candidates.sort_values(
        ["rating", "price"], ascending=[False, True]
    ).head(request.limit)

    properties = get_properties()
    results = [properties[pid] for pid in top["id"]]

    elapsed_ms = round((time.time() - start_time) * 1000, 1)
    record_event("search", {
        "city": request.city,
        "types": request.types,
        "gender": request.gender,
        "max_price": request.max_price,
        "min_rating": request.min_rating,
        "amenities": request.amenities,
        "total_candidates": total_candidates,
        "results_returned": len(results),
        "response_time_ms": elapsed_ms,
    })

    return PropertySearchResponse(results=results, total_candidates=total_candidates)


def search_messes(
    city: str | None = None,
    diet: str | None = None,
    max_monthly_price: float | None = None,
) -> list[Mess]:
    """Approved messes matching the optional filters, best rated first."""
    results: list[Mess] = []
    for mess in approved_messes():
        if city:
            needle = city.strip().lower()
            if needle not in mess.city.lower() and needle not in mess.location.lower():
                continue
        if diet and diet.lower() not in {d.lower() for d in mess.diet_types}:
            continue
        if max_monthly_price is not None and mess.monthly_price > max_monthly_price:
            continue
        results.append(mess)
    return sorted(results, key=lambda m: (-m.rating, m.monthly_price))
