# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Process settings.

Argon2 parameters are resolved in layers: profile (by environment), then the
``argon2id`` section of an optional YAML file, then ``CREDHASH_ARGON2_*``
environment variables. Anything invalid raises :class:`ConfigurationError`
while loading, so a bad deployment fails at startup.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from credhash.auth.errors import ConfigurationError
from credhash.auth.params import ParameterSet

# Anchor defaults to the project root, not the current working directory.
BASE_DIR = Path(__file__).resolve().parents[2]

# yaml key / env suffix -> ParameterSet field
PARAM_KEYS = {
    "memory": "memory_cost_kb",
    "iterations": "iterations",
    "parallelism": "parallelism",
    "salt_length": "salt_length",
    "key_length": "key_length",
}


@dataclass(frozen=True)
class Settings:
    env: str
    params: ParameterSet
    users_path: Path
    secret_key: str = ""
    session_max_age: int = 28800  # 8 hours
    max_hash_workers: Optional[int] = None
    hash_timeout_seconds: Optional[float] = None
    log_level: str = "info"
    log_format: str = "console"

    @property
    def is_production(self) -> bool:
        return self.env == "production"


def _as_int(name: str, raw: Any) -> int:
    if isinstance(raw, bool):
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")
    try:
        return int(str(raw).strip())
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


def _read_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigurationError(f"Config file not found: {path}")
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")
    return raw


def resolve_params(env_name: str, file_section: Mapping[str, Any], env: Mapping[str, str]) -> ParameterSet:
    profile = env.get("CREDHASH_ARGON2_PROFILE") or ("production" if env_name == "production" else "development")
    params = ParameterSet.for_profile(profile)

    changes: Dict[str, int] = {}
    for key, field in PARAM_KEYS.items():
        if key in file_section:
            changes[field] = _as_int(f"argon2id.{key}", file_section[key])
    for key, field in PARAM_KEYS.items():
        var = f"CREDHASH_ARGON2_{key.upper()}"
        if env.get(var, "").strip():
            changes[field] = _as_int(var, env[var])

    return params.replace(**changes) if changes else params


def load_settings(path: Optional[Path] = None, env: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if env is None else env

    cfg_path = path or (Path(env["CREDHASH_CONFIG"]) if env.get("CREDHASH_CONFIG") else None)
    raw = _read_yaml(Path(cfg_path)) if cfg_path else {}

    env_name = str(env.get("CREDHASH_ENV") or raw.get("env") or "development").strip().lower()

    section = raw.get("argon2id") or {}
    if not isinstance(section, dict):
        raise ConfigurationError("argon2id section must be a mapping")
    params = resolve_params(env_name, section, env)

    users_path = Path(
        env.get("CREDHASH_USERS_PATH") or raw.get("users_path") or str(BASE_DIR / "data" / "users.yml")
    ).resolve()

    workers = env.get("CREDHASH_MAX_HASH_WORKERS") or raw.get("max_hash_workers")
    timeout = env.get("CREDHASH_HASH_TIMEOUT") or raw.get("hash_timeout_seconds")
    try:
        timeout_val = float(timeout) if timeout not in (None, "") else None
    except ValueError:
        raise ConfigurationError(f"hash timeout must be a number, got {timeout!r}") from None

    return Settings(
        env=env_name,
        params=params,
        users_path=users_path,
        secret_key=env.get("SECRET_KEY") or env.get("CREDHASH_SECRET_KEY") or "",
        session_max_age=_as_int("CREDHASH_SESSION_MAX_AGE", env.get("CREDHASH_SESSION_MAX_AGE") or raw.get("session_max_age") or 28800),
        max_hash_workers=_as_int("max_hash_workers", workers) if workers not in (None, "") else None,
        hash_timeout_seconds=timeout_val,
        log_level=str(env.get("CREDHASH_LOG_LEVEL") or raw.get("log_level") or "info"),
        log_format=str(env.get("CREDHASH_LOG_FORMAT") or raw.get("log_format") or "console"),
    )


_SETTINGS: Optional[Settings] = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = load_settings()
    return _SETTINGS


def reset_settings() -> None:
    global _SETTINGS
    _SETTINGS = None
