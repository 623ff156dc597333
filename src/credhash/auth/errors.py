# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy for password hashing.

Everything raised while decoding or verifying a stored hash derives from
:class:`HashError`, so callers that must not distinguish failure reasons
(login) can catch one class.
"""

from __future__ import annotations


class HashError(Exception):
    """Base class for hashing/verification failures."""


class RandomGenerationError(HashError):
    """The OS secure random source failed while generating a salt."""


class MalformedHashError(HashError):
    """Stored string does not split into exactly six ``$`` segments."""


class UnsupportedAlgorithmError(HashError):
    pass


class UnsupportedVersionError(HashError):
    pass


class InvalidParameterError(HashError):
    """Cost parameters or version segment could not be parsed or used."""


class InvalidEncodingError(HashError):
    """Salt or key segment is not unpadded standard base64."""


class ConfigurationError(ValueError):
    """Invalid cost parameters or settings, raised at startup."""


class HashTimeoutError(TimeoutError):
    """A bounded hashing call did not finish before its deadline."""
