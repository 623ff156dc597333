# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Argon2id cost parameters.

A :class:`ParameterSet` is chosen once at startup and never mutated. Invalid
values fail here, at construction, so a misconfigured process does not boot.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace as _dc_replace
from typing import Dict

from credhash.auth.errors import ConfigurationError

# Lower bounds enforced by the reference Argon2 implementation.
MIN_SALT_LENGTH = 8
MIN_KEY_LENGTH = 4


@dataclass(frozen=True)
class ParameterSet:
    memory_cost_kb: int = 19456
    iterations: int = 2
    parallelism: int = 1
    salt_length: int = 16
    key_length: int = 32

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(f"{f.name} must be an integer, got {value!r}")
            if value <= 0:
                raise ConfigurationError(f"{f.name} must be > 0, got {value}")
        if self.salt_length < MIN_SALT_LENGTH:
            raise ConfigurationError(f"salt_length must be >= {MIN_SALT_LENGTH}, got {self.salt_length}")
        if self.key_length < MIN_KEY_LENGTH:
            raise ConfigurationError(f"key_length must be >= {MIN_KEY_LENGTH}, got {self.key_length}")
        if self.memory_cost_kb < 8 * self.parallelism:
            raise ConfigurationError(
                f"memory_cost_kb must be >= 8 * parallelism ({8 * self.parallelism}), got {self.memory_cost_kb}"
            )

    @classmethod
    def for_profile(cls, name: str) -> "ParameterSet":
        key = str(name or "").strip().lower()
        try:
            return PROFILES[key]
        except KeyError:
            known = ", ".join(sorted(PROFILES))
            raise ConfigurationError(f"Unknown Argon2 profile '{name}' (expected one of: {known})") from None

    def replace(self, **changes: int) -> "ParameterSet":
        return _dc_replace(self, **changes)


PROFILES: Dict[str, ParameterSet] = {
    # OWASP password storage cheat sheet minimum for Argon2id
    "owasp": ParameterSet(memory_cost_kb=19456, iterations=2, parallelism=1),
    "production": ParameterSet(memory_cost_kb=64 * 1024, iterations=3, parallelism=4),
    "development": ParameterSet(memory_cost_kb=16 * 1024, iterations=3, parallelism=4),
}
