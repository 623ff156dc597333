# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Argon2id password hashing and verification.

A :class:`Hasher` holds only its immutable :class:`ParameterSet`, so one
instance can serve any number of threads. Each KDF call allocates the full
``memory_cost_kb`` for its duration; bounding concurrent calls is the
caller's job (see :mod:`credhash.auth.pool`).
"""

from __future__ import annotations

import secrets
from typing import NamedTuple, Optional, Union

import structlog
from argon2.exceptions import HashingError
from argon2.low_level import ARGON2_VERSION, Type, hash_secret_raw

from credhash.auth.compare import constant_time_equal
from credhash.auth.encoding import ALGORITHM, decode, encode
from credhash.auth.errors import HashError, InvalidParameterError, RandomGenerationError
from credhash.auth.params import MIN_KEY_LENGTH, MIN_SALT_LENGTH, ParameterSet

logger = structlog.get_logger(__name__)

Password = Union[bytes, bytearray, str]


class VerifyResult(NamedTuple):
    matched: bool
    error: Optional[HashError] = None


def _to_bytes(password: Password) -> bytes:
    if isinstance(password, str):
        return password.encode("utf-8")
    if isinstance(password, (bytes, bytearray)):
        return bytes(password)
    raise TypeError(f"password must be bytes or str, got {type(password).__name__}")


def _derive(secret: bytes, salt: bytes, *, memory_cost_kb: int, iterations: int, parallelism: int, key_length: int) -> bytes:
    return hash_secret_raw(
        secret=secret,
        salt=salt,
        time_cost=iterations,
        memory_cost=memory_cost_kb,
        parallelism=parallelism,
        hash_len=key_length,
        type=Type.ID,
        version=ARGON2_VERSION,
    )


class Hasher:
    def __init__(self, params: Optional[ParameterSet] = None) -> None:
        self._params = params if params is not None else ParameterSet()

    @property
    def params(self) -> ParameterSet:
        return self._params

    def __repr__(self) -> str:
        return f"Hasher({self._params!r})"

    def _salt(self) -> bytes:
        try:
            return secrets.token_bytes(self._params.salt_length)
        except (OSError, NotImplementedError) as e:
            raise RandomGenerationError("failed to generate salt") from e

    def hash(self, password: Password) -> str:
        """Hash ``password`` with a fresh random salt.

        Returns the self-describing ``$argon2id$...`` string. Raises
        :class:`RandomGenerationError` if the OS entropy source fails.
        """
        p = self._params
        salt = self._salt()
        key = _derive(
            _to_bytes(password),
            salt,
            memory_cost_kb=p.memory_cost_kb,
            iterations=p.iterations,
            parallelism=p.parallelism,
            key_length=p.key_length,
        )
        logger.debug("password_hashed", m=p.memory_cost_kb, t=p.iterations, p=p.parallelism)
        return encode(ALGORITHM, ARGON2_VERSION, p.memory_cost_kb, p.iterations, p.parallelism, salt, key)

    def verify(self, password: Password, encoded: str) -> VerifyResult:
        """Check ``password`` against a stored hash.

        Never raises for bad input: decode failures come back as
        ``(False, error)``. The key is re-derived with the parameters and key
        length stored in ``encoded``, not this hasher's own configuration.
        """
        try:
            decoded = decode(encoded)
        except HashError as e:
            logger.info("password_verify_rejected", reason=type(e).__name__)
            return VerifyResult(False, e)

        # The Argon2 reference implementation refuses these; report them as
        # bad parameters instead of letting HashingError escape.
        if len(decoded.salt) < MIN_SALT_LENGTH or len(decoded.key) < MIN_KEY_LENGTH:
            err = InvalidParameterError("stored salt or key is too short")
            logger.info("password_verify_rejected", reason=type(err).__name__)
            return VerifyResult(False, err)

        try:
            candidate = _derive(
                _to_bytes(password),
                decoded.salt,
                memory_cost_kb=decoded.memory_cost_kb,
                iterations=decoded.iterations,
                parallelism=decoded.parallelism,
                key_length=len(decoded.key),
            )
        except (HashingError, OverflowError) as e:
            err = InvalidParameterError(f"stored parameters rejected by argon2: {e}")
            logger.info("password_verify_rejected", reason=type(err).__name__)
            return VerifyResult(False, err)

        return VerifyResult(constant_time_equal(candidate, decoded.key), None)

    def needs_rehash(self, encoded: str) -> bool:
        """True if ``encoded`` was not produced with this hasher's parameters."""
        try:
            decoded = decode(encoded)
        except HashError:
            return True
        p = self._params
        return (
            decoded.memory_cost_kb != p.memory_cost_kb
            or decoded.iterations != p.iterations
            or decoded.parallelism != p.parallelism
            or len(decoded.salt) != p.salt_length
            or len(decoded.key) != p.key_length
        )


_HASHER: Optional[Hasher] = None


def get_hasher() -> Hasher:
    global _HASHER
    if _HASHER is None:
        from credhash.config import get_settings

        _HASHER = Hasher(get_settings().params)
    return _HASHER


def reset_hasher() -> None:
    global _HASHER
    _HASHER = None


def hash_password(plain: Password) -> str:
    return get_hasher().hash(plain)


def verify_password(hash_value: str, plain: Password) -> bool:
    if not hash_value:
        return False
    matched, _ = get_hasher().verify(plain, hash_value)
    return matched
