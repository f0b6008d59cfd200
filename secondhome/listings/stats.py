from __future__ import annotations

from datetime import datetime, timedelta

from ..auth.users import count_users
from .data_store import get_bookings, get_properties
from .distances import round_half_up
from .models import SiteStats


def format_number(num: int) -> str:
    """Compact display form: ``1500 -> "1.5K"``, ``2300000 -> "2.3M"``."""
    if num >= 1_000_000:
        return f"{num / 1_000_000:.1f}M"
    if num >= 1_000:
        return f"{num / 1_000:.1f}K"
    return str(num)


def compute_site_stats(now: datetime | None = None) -> SiteStats:
    now = now or datetime.now()
    owners = count_users("owner")

    bookings = get_bookings()
    one_year_ago = now - timedelta(days=365)
    annual = sum(1 for b in bookings if b.created_at >= one_year_ago)
    # Annual count when there is one, lifetime count otherwise
    booking_count = annual or len(bookings)

    properties = list(get_properties().values())
    approved = sum(1 for p in properties if p.is_approved and not p.is_rejected)
    success_rate = int(round_half_up(approved / len(properties) * 100)) if properties else 0

    return SiteStats(
        property_owners=owners,
        property_owners_formatted=format_number(owners),
        student_bookings=booking_count,
        student_bookings_formatted=format_number(booking_count),
        success_rate=success_rate,
        success_rate_formatted=f"{success_rate}%",
    )
