# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""YAML-backed user store: registration and login.

Stored ``password_hash`` values are opaque ``$argon2id$...`` strings. Login
gives the same answer (``None``) for an unknown user, an inactive user, a
wrong password and an unreadable hash, so callers cannot learn which one it was.
"""

from __future__ import annotations

import os
import secrets
import tempfile
import threading
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import structlog
import yaml

from credhash.auth.params import ParameterSet
from credhash.auth.passwords import Hasher, Password, get_hasher
from credhash.config import get_settings

logger = structlog.get_logger(__name__)

ROLES = ("viewer", "editor", "admin")


class UserExistsError(ValueError):
    pass


@dataclass(frozen=True)
class UserRecord:
    username: str
    role: str
    active: bool
    password_hash: str


_CACHE: Tuple[Optional[Path], float, Dict[str, UserRecord]] = (None, 0.0, {})

# Serialises read-modify-write of the users file across pool workers.
_WRITE_LOCK = threading.Lock()

# One throwaway hash per parameter set, verified against when there is no
# usable stored hash so every failed login pays for a KDF call.
_DUMMY_HASHES: Dict[ParameterSet, str] = {}


def default_users_path() -> Path:
    return get_settings().users_path


def _read_raw(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {"version": 1, "users": {}}
    raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raw = {}
    if not isinstance(raw.get("users"), dict):
        raw["users"] = {}
    return raw


def _load_users_file(path: Path) -> Dict[str, UserRecord]:
    out: Dict[str, UserRecord] = {}
    for uname, udata in _read_raw(path)["users"].items():
        if not isinstance(udata, dict):
            continue
        username = str(uname).strip()
        if not username:
            continue
        out[username] = UserRecord(
            username=username,
            role=str(udata.get("role") or "viewer").strip().lower(),
            active=bool(udata.get("active", True)),
            password_hash=str(udata.get("password_hash") or "").strip(),
        )
    return out


def _save_raw(path: Path, raw: Dict[str, Any]) -> None:
    # Caller holds _WRITE_LOCK.
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        "w",
        encoding="utf-8",
        dir=str(path.parent),
        prefix=path.name + ".",
        suffix=".tmp",
        delete=False,
    ) as fh:
        yaml.safe_dump(raw, fh, sort_keys=False, allow_unicode=True)
        tmp = Path(fh.name)
    try:
        os.replace(tmp, path)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise
    clear_cache()


def _user_entry(record: UserRecord) -> Dict[str, Any]:
    return {
        "role": record.role,
        "active": record.active,
        "password_hash": record.password_hash,
    }


def clear_cache() -> None:
    global _CACHE
    _CACHE = (None, 0.0, {})


def get_users(*, path: Optional[Path] = None) -> Dict[str, UserRecord]:
    global _CACHE
    path = path or default_users_path()
    try:
        mtime = path.stat().st_mtime if path.exists() else 0.0
    except OSError:
        mtime = 0.0

    cached_path, cached_mtime, cached_users = _CACHE
    if cached_path == path and mtime and mtime == cached_mtime:
        return cached_users

    users = _load_users_file(path)
    _CACHE = (path, mtime, users)
    return users


def get_user(username: str, *, path: Optional[Path] = None) -> Optional[UserRecord]:
    u = (username or "").strip()
    if not u:
        return None
    return get_users(path=path).get(u)


def _dummy_hash(hasher: Hasher) -> str:
    h = _DUMMY_HASHES.get(hasher.params)
    if h is None:
        h = _DUMMY_HASHES.setdefault(hasher.params, hasher.hash(secrets.token_bytes(16)))
    return h


def register_user(
    username: str,
    password: Password,
    *,
    role: str = "viewer",
    path: Optional[Path] = None,
    hasher: Optional[Hasher] = None,
) -> UserRecord:
    """Create a user with a freshly hashed password.

    Hashing runs outside the write lock; the duplicate check is repeated
    under the lock against the file itself before writing.
    Hashing failures (e.g. ``RandomGenerationError``) propagate unchanged.
    """
    path = path or default_users_path()
    u = (username or "").strip()
    if not u:
        raise ValueError("Username must not be empty")
    r = (role or "viewer").strip().lower()
    if r not in ROLES:
        raise ValueError(f"Unknown role '{role}'")
    if get_user(u, path=path) is not None:
        raise UserExistsError(f"User '{u}' already exists")

    record = UserRecord(
        username=u,
        role=r,
        active=True,
        password_hash=(hasher or get_hasher()).hash(password),
    )
    with _WRITE_LOCK:
        raw = _read_raw(path)
        if u in raw["users"]:
            raise UserExistsError(f"User '{u}' already exists")
        raw["users"][u] = _user_entry(record)
        _save_raw(path, raw)
    logger.info("user_registered", username=u, role=r)
    return record


def _store_rehash(path: Path, old: UserRecord, new_hash: str) -> bool:
    """Replace ``old``'s hash unless the stored entry changed meanwhile."""
    with _WRITE_LOCK:
        raw = _read_raw(path)
        entry = raw["users"].get(old.username)
        if not isinstance(entry, dict) or str(entry.get("password_hash") or "").strip() != old.password_hash:
            return False
        entry["password_hash"] = new_hash
        _save_raw(path, raw)
    return True


def authenticate(
    username: str,
    password: Password,
    *,
    path: Optional[Path] = None,
    hasher: Optional[Hasher] = None,
) -> Optional[UserRecord]:
    path = path or default_users_path()
    hasher = hasher or get_hasher()
    u = get_user(username, path=path)
    if not u or not u.active or not u.password_hash:
        hasher.verify(password, _dummy_hash(hasher))
        logger.info("login_failed", username=(username or "").strip())
        return None

    matched, err = hasher.verify(password, u.password_hash)
    if err is not None:
        # Undecodable stored hash: spend the same KDF time as a real mismatch.
        hasher.verify(password, _dummy_hash(hasher))
    if not matched:
        logger.info("login_failed", username=u.username)
        return None

    if hasher.needs_rehash(u.password_hash):
        new_hash = hasher.hash(password)
        if _store_rehash(path, u, new_hash):
            u = replace(u, password_hash=new_hash)
            logger.info("password_rehashed", username=u.username)
    return u
