from __future__ import annotations

import time
from collections import deque
from typing import Any

_DEDUPE_WINDOW = 60 * 60  # 1 hour
_RECENT_WINDOW = 24 * 60 * 60  # 1 day

MAX_VIEWS = 10_000

_views: deque[dict[str, Any]] = deque(maxlen=MAX_VIEWS)


def track_property_view(
    username: str,
    property_id: str,
    now: float | None = None,
) -> bool:
    """
    Record that *username* viewed *property_id*.

    Returns ``False`` when the same user already viewed the same property
    within the last hour; no new view is stored in that case.
    """
    now = time.time() if now is None else now
    # Views are appended in time order, so stop at the first one outside the window
    for view in reversed(_views):
        if now - view["timestamp"] >= _DEDUPE_WINDOW:
            break
        if view["username"] == username and view["property_id"] == property_id:
            return False

    _views.append({"username": username, "property_id": property_id, "timestamp": now})
    return True


def recent_views(
    username: str,
    limit: int = 10,
    now: float | None = None,
) -> list[str]:
    """Property ids *username* viewed in the last day, newest first, without repeats."""
    now = time.time() if now is None else now
    ids: list[str] = []
    for view in sorted(_views, key=lambda v: v["timestamp"], reverse=True):
        if view["username"] != username or now - view["timestamp"] >= _RECENT_WINDOW:
            continue
        if view["property_id"] not in ids:
            ids.append(view["property_id"])
        if len(ids) >= limit:
            break
    return ids


def get_views() -> list[dict[str, Any]]:
    return list(_views)


def clear_views() -> None:
    _views.clear()
