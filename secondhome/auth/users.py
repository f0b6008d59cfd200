from __future__ import annotations

from typing import Any

import bcrypt

ROLES = ("student", "owner", "admin")

_users: dict[str, dict[str, Any]] = {}


def _hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt()).decode()


def _verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode(), hashed.encode())


def _seed_users() -> None:
    """Pre-seed demo users on import."""
    _users["student"] = {
        "password_hash": _hash_password("student123"),
        "role": "student",
        "name": "Demo Student",
    }
    _users["owner"] = {
        "password_hash": _hash_password("owner123"),
        "role": "owner",
        "name": "Demo Owner",
    }
    _users["admin"] = {
        "password_hash": _hash_password("admin123"),
        "role": "admin",
        "name": "Moderator",
    }


def authenticate(username: str, password: str) -> dict[str, Any] | None:
    """Verify credentials. Returns ``{username, role, name}`` or ``None``."""
    record = _users.get(username)
    if record and _verify_password(password, record["password_hash"]):
        return {"username": username, "role": record["role"], "name": record["name"]}
    return None


def count_users(role: str) -> int:
    return sum(1 for u in _users.values() if u["role"] == role)


_seed_users()
