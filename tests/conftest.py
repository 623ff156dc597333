import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

from pathlib import Path

import pytest

from credhash.auth.params import ParameterSet
from credhash.auth.passwords import Hasher, reset_hasher
from credhash.auth.users import clear_cache
from credhash.config import reset_settings

# Small cost so the suite stays quick; correctness does not depend on cost.
FAST_PARAMS = ParameterSet(memory_cost_kb=1024, iterations=1, parallelism=1, salt_length=16, key_length=32)


@pytest.fixture()
def fast_params() -> ParameterSet:
    return FAST_PARAMS


@pytest.fixture()
def hasher(fast_params) -> Hasher:
    return Hasher(fast_params)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    """Drop any CREDHASH_* settings from the outer environment and reset caches."""
    import os

    for var in list(os.environ):
        if var.startswith("CREDHASH_") or var in ("SECRET_KEY",):
            monkeypatch.delenv(var, raising=False)
    reset_settings()
    reset_hasher()
    clear_cache()
    yield
    reset_settings()
    reset_hasher()
    clear_cache()


@pytest.fixture()
def users_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "users.yml"


@pytest.fixture()
def app_env(monkeypatch, users_path):
    """Environment for the HTTP app: temp user store, fast params, session secret."""
    monkeypatch.setenv("CREDHASH_USERS_PATH", str(users_path))
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("CREDHASH_ARGON2_MEMORY", str(FAST_PARAMS.memory_cost_kb))
    monkeypatch.setenv("CREDHASH_ARGON2_ITERATIONS", str(FAST_PARAMS.iterations))
    monkeypatch.setenv("CREDHASH_ARGON2_PARALLELISM", str(FAST_PARAMS.parallelism))
    monkeypatch.setenv("CREDHASH_MAX_HASH_WORKERS", "2")
    reset_settings()
    reset_hasher()
    return users_path
