# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Self-describing hash string (PHC style).

Layout::

    $argon2id$v=19$m=<memory>,t=<iterations>,p=<parallelism>$<salt>$<key>

Salt and key are standard-alphabet base64 without padding. The parameters in
the string are the ones used when the hash was created, which lets verification
ignore whatever the current configuration says.
"""

from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass

from argon2.low_level import ARGON2_VERSION

from credhash.auth.errors import (
    InvalidEncodingError,
    InvalidParameterError,
    MalformedHashError,
    UnsupportedAlgorithmError,
    UnsupportedVersionError,
)

ALGORITHM = "argon2id"
SEGMENTS = 6

_VERSION_RE = re.compile(r"v=([0-9]+)")
_PARAMS_RE = re.compile(r"m=([0-9]+),t=([0-9]+),p=([0-9]+)")
_B64_RE = re.compile(r"[A-Za-z0-9+/]+")


@dataclass(frozen=True)
class EncodedHash:
    algorithm: str
    version: int
    memory_cost_kb: int
    iterations: int
    parallelism: int
    salt: bytes
    key: bytes


def b64encode_unpadded(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii").rstrip("=")


def b64decode_unpadded(text: str) -> bytes:
    """Decode unpadded standard base64, rejecting padding and foreign characters."""
    if not text or not _B64_RE.fullmatch(text) or len(text) % 4 == 1:
        raise InvalidEncodingError("invalid base64 segment")
    padding = "=" * (-len(text) % 4)
    try:
        raw = base64.b64decode(text + padding, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidEncodingError("invalid base64 segment") from e
    # Reject non-canonical trailing bits so each hash has a single spelling.
    if b64encode_unpadded(raw) != text:
        raise InvalidEncodingError("non-canonical base64 segment")
    return raw


def encode(
    algorithm: str,
    version: int,
    memory_cost_kb: int,
    iterations: int,
    parallelism: int,
    salt: bytes,
    key: bytes,
) -> str:
    return (
        f"${algorithm}$v={version}"
        f"$m={memory_cost_kb},t={iterations},p={parallelism}"
        f"${b64encode_unpadded(salt)}${b64encode_unpadded(key)}"
    )


def decode(s: str) -> EncodedHash:
    """Parse a stored hash string.

    Checks run in a fixed order (shape, algorithm, version, parameters,
    base64) and the first failure raises the matching ``HashError`` subclass.
    """
    if not isinstance(s, str):
        raise MalformedHashError("encoded hash must be a string")

    parts = s.split("$")
    if len(parts) != SEGMENTS or parts[0] != "":
        raise MalformedHashError("invalid hash format")

    _, algorithm, version_part, params_part, salt_part, key_part = parts

    if algorithm != ALGORITHM:
        raise UnsupportedAlgorithmError(f"unsupported algorithm: {algorithm!r}")

    m = _VERSION_RE.fullmatch(version_part)
    if not m:
        raise InvalidParameterError("invalid version segment")
    version = int(m.group(1))
    if version != ARGON2_VERSION:
        raise UnsupportedVersionError(f"incompatible version: {version}")

    m = _PARAMS_RE.fullmatch(params_part)
    if not m:
        raise InvalidParameterError("invalid parameters segment")
    memory_cost_kb, iterations, parallelism = (int(g) for g in m.groups())
    if not (memory_cost_kb and iterations and parallelism):
        raise InvalidParameterError("cost parameters must be > 0")

    salt = b64decode_unpadded(salt_part)
    key = b64decode_unpadded(key_part)

    return EncodedHash(
        algorithm=algorithm,
        version=version,
        memory_cost_kb=memory_cost_kb,
        iterations=iterations,
        parallelism=parallelism,
        salt=salt,
        key=key,
    )
