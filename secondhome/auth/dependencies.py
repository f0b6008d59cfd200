from __future__ import annotations

from fastapi import HTTPException, Request


def get_current_user(request: Request) -> dict | None:
    """Session user ``{username, role, name}``, or ``None`` for guests."""
    return request.session.get("user")


def is_admin(user: dict | None) -> bool:
    return bool(user) and user.get("role") == "admin"


def require_user(request: Request) -> dict:
    user = get_current_user(request)
    if not user:
        raise HTTPException(status_code=401, detail="Please log in to continue")
    return user


def require_admin(request: Request) -> dict:
    """Moderator-only routes: 401 for guests, 403 for students and owners."""
    user = require_user(request)
    if not is_admin(user):
        raise HTTPException(status_code=403, detail="Admin access required")
    return user
