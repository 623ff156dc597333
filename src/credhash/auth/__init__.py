# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Credential helpers.

This package provides:
- Argon2id password hashing/verification with self-describing hash strings
- Bounded execution of hashing calls
- User store loading from data/users.yml
- Signed session cookies (itsdangerous)
"""

from credhash.auth.errors import (
    ConfigurationError,
    HashError,
    HashTimeoutError,
    InvalidEncodingError,
    InvalidParameterError,
    MalformedHashError,
    RandomGenerationError,
    UnsupportedAlgorithmError,
    UnsupportedVersionError,
)
from credhash.auth.params import ParameterSet
from credhash.auth.passwords import Hasher, VerifyResult, hash_password, verify_password

__all__ = [
    "ConfigurationError",
    "HashError",
    "HashTimeoutError",
    "Hasher",
    "InvalidEncodingError",
    "InvalidParameterError",
    "MalformedHashError",
    "ParameterSet",
    "RandomGenerationError",
    "UnsupportedAlgorithmError",
    "UnsupportedVersionError",
    "VerifyResult",
    "hash_password",
    "verify_password",
]
