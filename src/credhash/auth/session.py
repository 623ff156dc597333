# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from itsdangerous import BadSignature, BadTimeSignature, URLSafeTimedSerializer

from credhash.config import get_settings

COOKIE_NAME = "credhash_session"
SESSION_SALT = "credhash.session.v1"


def _serializer() -> URLSafeTimedSerializer:
    secret = get_settings().secret_key
    if not secret:
        raise RuntimeError("Missing SECRET_KEY (or CREDHASH_SECRET_KEY) in environment")
    return URLSafeTimedSerializer(secret_key=secret, salt=SESSION_SALT)


@dataclass(frozen=True)
class SessionData:
    username: str


def sign_session(username: str) -> str:
    return _serializer().dumps({"u": username})


def verify_session(token: str, *, max_age: Optional[int] = None) -> Optional[SessionData]:
    if not token:
        return None
    if max_age is None:
        max_age = get_settings().session_max_age
    try:
        data = _serializer().loads(token, max_age=max_age)
    except (BadSignature, BadTimeSignature):
        return None
    u = str((data or {}).get("u") or "").strip()
    if not u:
        return None
    return SessionData(username=u)
