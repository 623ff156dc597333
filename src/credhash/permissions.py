# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from fastapi import HTTPException, Request

from credhash.auth.session import COOKIE_NAME, verify_session
from credhash.auth.users import get_user


@dataclass(frozen=True)
class CurrentUser:
    username: str
    role: str


def load_user_from_request(request: Request) -> Optional[CurrentUser]:
    sess = verify_session(request.cookies.get(COOKIE_NAME, ""))
    if not sess:
        return None
    u = get_user(sess.username)
    if not u or not u.active:
        return None
    return CurrentUser(username=u.username, role=u.role)


def current_user_optional(request: Request) -> Optional[CurrentUser]:
    u = getattr(request.state, "user", None)
    if u is not None:
        return u
    return load_user_from_request(request)


def require_user(request: Request) -> CurrentUser:
    u = current_user_optional(request)
    if u:
        return u
    raise HTTPException(status_code=401, detail="Not authenticated")


def cookie_settings() -> dict:
    secure = os.getenv("CREDHASH_COOKIE_SECURE", "false").lower() in {"1", "true", "yes", "y"}
    return {"httponly": True, "samesite": "lax", "secure": secure}
