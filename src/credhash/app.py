# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from argon2.low_level import ARGON2_VERSION
from fastapi import Depends, FastAPI, Form, Request
from fastapi.responses import JSONResponse

from credhash.auth.encoding import ALGORITHM
from credhash.auth.errors import HashTimeoutError, RandomGenerationError
from credhash.auth.passwords import get_hasher
from credhash.auth.pool import HashingPool
from credhash.auth.session import COOKIE_NAME, sign_session
from credhash.auth.users import UserExistsError, authenticate, register_user
from credhash.config import get_settings
from credhash.logging_config import configure_logging
from credhash.permissions import CurrentUser, cookie_settings, current_user_optional, require_user

logger = structlog.get_logger(__name__)

_settings = get_settings()
configure_logging(_settings.log_level, _settings.log_format)

_POOL: Optional[HashingPool] = None


def get_pool() -> HashingPool:
    """Shared pool bounding concurrent Argon2 calls for all requests."""
    global _POOL
    if _POOL is None:
        _POOL = HashingPool(get_hasher(), max_workers=get_settings().max_hash_workers)
    return _POOL


def reset_pool() -> None:
    global _POOL
    if _POOL is not None:
        _POOL.close(wait=False)
    _POOL = None


@asynccontextmanager
async def _lifespan(_app: FastAPI):
    yield
    reset_pool()


app = FastAPI(title="credhash", lifespan=_lifespan)


@app.middleware("http")
async def _auth_middleware(request: Request, call_next):
    request.state.user = current_user_optional(request)
    return await call_next(request)


def _invalid_credentials() -> JSONResponse:
    return JSONResponse({"detail": "Invalid credentials"}, status_code=401)


# ------------------ Routes ------------------


@app.get("/health")
def health():
    return {"status": "ok", "algorithm": ALGORITHM, "version": ARGON2_VERSION}


@app.post("/register")
def register_post(
    username: str = Form(...),
    password: str = Form(...),
    role: str = Form("viewer"),
):
    timeout = get_settings().hash_timeout_seconds
    try:
        u = get_pool().run(register_user, username, password, role=role, hasher=get_hasher(), timeout=timeout)
    except UserExistsError as e:
        return JSONResponse({"detail": str(e)}, status_code=409)
    except ValueError as e:
        return JSONResponse({"detail": str(e)}, status_code=400)
    except RandomGenerationError:
        logger.error("register_failed", reason="random_generation", exc_info=True)
        return JSONResponse({"detail": "Internal server error"}, status_code=500)
    except HashTimeoutError:
        return JSONResponse({"detail": "Service busy, try again later"}, status_code=503)
    return JSONResponse({"username": u.username, "role": u.role}, status_code=201)


@app.post("/login")
def login_post(
    username: str = Form(...),
    password: str = Form(...),
):
    timeout = get_settings().hash_timeout_seconds
    try:
        u = get_pool().run(authenticate, username, password, hasher=get_hasher(), timeout=timeout)
    except HashTimeoutError:
        return JSONResponse({"detail": "Service busy, try again later"}, status_code=503)
    if not u:
        return _invalid_credentials()

    resp = JSONResponse({"username": u.username, "role": u.role})
    resp.set_cookie(
        COOKIE_NAME,
        sign_session(u.username),
        max_age=get_settings().session_max_age,
        **cookie_settings(),
    )
    return resp


@app.post("/logout")
def logout_post():
    resp = JSONResponse({"status": "ok"})
    resp.delete_cookie(COOKIE_NAME)
    return resp


@app.get("/me")
def me(user: CurrentUser = Depends(require_user)):
    return {"username": user.username, "role": user.role}
